"""
Crypto Wallet Addresses

Saved receiving addresses per exchange and cryptocurrency. At most one address
per (exchange, cryptocurrency) is the default: other defaults are unset before
a new one is written.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Any
import logging

from .backend import BackendClient, NotFoundError, Query
from .cache import QueryCache

logger = logging.getLogger("bank_portal.wallets")

EDITABLE_FIELDS = ("exchange_name", "cryptocurrency", "wallet_address", "address_label", "is_default")


@dataclass
class WalletAddress:
    id: str
    user_id: str
    exchange_name: str
    cryptocurrency: str
    wallet_address: str
    address_label: Optional[str] = None
    is_default: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'WalletAddress':
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            exchange_name=row["exchange_name"],
            cryptocurrency=row["cryptocurrency"],
            wallet_address=row["wallet_address"],
            address_label=row.get("address_label"),
            is_default=bool(row.get("is_default")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "exchange_name": self.exchange_name,
            "cryptocurrency": self.cryptocurrency,
            "wallet_address": self.wallet_address,
            "address_label": self.address_label,
            "is_default": self.is_default,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class WalletAddressManager:
    """Cached wallet address book"""

    def __init__(self, backend: BackendClient, cache: QueryCache):
        self.backend = backend
        self.cache = cache
        self.table_name = "crypto_wallet_addresses"

    def list(self, user_id: str) -> List[WalletAddress]:
        rows = self.cache.get_or_fetch(
            (self.table_name, user_id),
            lambda: self.backend.select(
                Query(self.table_name).eq("user_id", user_id).order("created_at", descending=True)
            )
        )
        return [WalletAddress.from_row(row) for row in rows]

    def get(self, user_id: str, address_id: str) -> WalletAddress:
        for address in self.list(user_id):
            if address.id == address_id:
                return address
        raise NotFoundError("Wallet address not found")

    def for_exchange(self, user_id: str, exchange_name: str, cryptocurrency: str) -> List[WalletAddress]:
        return [
            a for a in self.list(user_id)
            if a.exchange_name == exchange_name and a.cryptocurrency == cryptocurrency
        ]

    def default_address(self, user_id: str, exchange_name: str, cryptocurrency: str) -> Optional[WalletAddress]:
        for address in self.for_exchange(user_id, exchange_name, cryptocurrency):
            if address.is_default:
                return address
        return None

    def _unset_defaults(self, user_id: str, exchange_name: str, cryptocurrency: str,
                        except_id: Optional[str] = None) -> None:
        query = (Query(self.table_name).eq("user_id", user_id)
                 .eq("exchange_name", exchange_name).eq("cryptocurrency", cryptocurrency)
                 .eq("is_default", True))
        if except_id:
            query.neq("id", except_id)
        self.backend.update(query, {"is_default": False})

    def add(
        self,
        user_id: str,
        exchange_name: str,
        cryptocurrency: str,
        wallet_address: str,
        address_label: Optional[str] = None,
        is_default: bool = False
    ) -> WalletAddress:
        if is_default:
            self._unset_defaults(user_id, exchange_name, cryptocurrency)

        created = self.backend.insert(self.table_name, {
            "user_id": user_id,
            "exchange_name": exchange_name,
            "cryptocurrency": cryptocurrency,
            "wallet_address": wallet_address,
            "address_label": address_label,
            "is_default": is_default,
        })
        self.cache.invalidate(self.table_name, user_id)
        logger.info(f"Added {cryptocurrency} address for {exchange_name}")
        return WalletAddress.from_row(created[0])

    def update(self, user_id: str, address_id: str, changes: Dict[str, Any]) -> WalletAddress:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        current = self.get(user_id, address_id)
        if changes.get("is_default"):
            self._unset_defaults(
                user_id,
                changes.get("exchange_name", current.exchange_name),
                changes.get("cryptocurrency", current.cryptocurrency),
                except_id=address_id,
            )

        updated = self.backend.update(
            Query(self.table_name).eq("id", address_id).eq("user_id", user_id), changes
        )
        if not updated:
            raise NotFoundError("Wallet address not found")
        self.cache.invalidate(self.table_name, user_id)
        return WalletAddress.from_row(updated[0])

    def delete(self, user_id: str, address_id: str) -> None:
        removed = self.backend.delete(
            Query(self.table_name).eq("id", address_id).eq("user_id", user_id)
        )
        if removed == 0:
            raise NotFoundError("Wallet address not found")
        self.cache.invalidate(self.table_name, user_id)
