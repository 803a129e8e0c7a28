"""
Block Explorer Client Module

Looks up on-chain transactions for the crypto pages. Ethereum lookups try
blockchain.info first and fall back to the Etherscan proxy API; bitcoin
lookups use blockchain.info only. The Etherscan key comes from configuration.
"""

import httpx
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

logger = logging.getLogger("bank_portal.explorer")

WEI_PER_ETH = Decimal(10) ** 18
SATOSHI_PER_BTC = Decimal(10) ** 8


@dataclass
class ExplorerTransaction:
    """Normalized on-chain transaction"""
    tx_hash: str
    network: str
    from_address: str
    to_address: str
    amount: Decimal
    fee: Decimal
    confirmations: int
    status: str  # confirmed or pending
    timestamp: str
    explorer_url: str
    source: str  # blockchain.info or etherscan

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "network": self.network,
            "from": self.from_address,
            "to": self.to_address,
            "amount": str(self.amount),
            "fee": str(self.fee),
            "confirmations": self.confirmations,
            "status": self.status,
            "timestamp": self.timestamp,
            "explorer_url": self.explorer_url,
            "source": self.source,
        }


def _timestamp(seconds: Any) -> str:
    if seconds:
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc).isoformat()
    return datetime.now(timezone.utc).isoformat()


def _hex_to_decimal(value: Optional[str]) -> Decimal:
    if not value:
        return Decimal('0')
    return Decimal(int(value, 16))


class BlockExplorerClient:
    """REST client for public block explorers"""

    def __init__(
        self,
        blockchain_info_url: str = "https://blockchain.info",
        etherscan_url: str = "https://api.etherscan.io/api",
        etherscan_api_key: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.blockchain_info_url = blockchain_info_url.rstrip("/")
        self.etherscan_url = etherscan_url
        self.etherscan_api_key = etherscan_api_key
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def lookup(self, tx_hash: str, network: str = "ethereum") -> Optional[ExplorerTransaction]:
        """
        Fetch a transaction by hash.

        Args:
            tx_hash: Transaction hash
            network: ethereum/eth or bitcoin/btc

        Returns:
            ExplorerTransaction, or None when no explorer knows the hash

        Raises:
            ValueError: For an unsupported network
        """
        network = network.lower()
        if network in ("ethereum", "eth"):
            return self._lookup_ethereum(tx_hash)
        if network in ("bitcoin", "btc"):
            return self._lookup_bitcoin(tx_hash)
        raise ValueError(f"Unsupported network: {network}")

    def _raw_tx(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        try:
            response = self._client.get(
                f"{self.blockchain_info_url}/rawtx/{tx_hash}", params={"cors": "true"}
            )
        except httpx.HTTPError as e:
            logger.warning(f"blockchain.info lookup for {tx_hash} failed: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"blockchain.info returned {response.status_code} for {tx_hash}")
            return None
        return response.json()

    def _lookup_ethereum(self, tx_hash: str) -> Optional[ExplorerTransaction]:
        data = self._raw_tx(tx_hash)
        if data is not None:
            confirmations = int(data.get("confirmations") or 0)
            return ExplorerTransaction(
                tx_hash=tx_hash,
                network="ethereum",
                from_address=data.get("from") or "Unknown",
                to_address=data.get("to") or "Unknown",
                amount=Decimal(int(data.get("value") or 0)) / WEI_PER_ETH,
                fee=Decimal(int(data.get("gas") or 0)) / WEI_PER_ETH,
                confirmations=confirmations,
                status="confirmed" if confirmations > 0 else "pending",
                timestamp=_timestamp(data.get("time")),
                explorer_url=f"https://www.blockchain.com/eth/tx/{tx_hash}",
                source="blockchain.info",
            )

        if not self.etherscan_api_key:
            logger.info(f"No Etherscan API key configured, cannot resolve {tx_hash}")
            return None

        try:
            response = self._client.get(self.etherscan_url, params={
                "module": "proxy",
                "action": "eth_getTransactionByHash",
                "txhash": tx_hash,
                "apikey": self.etherscan_api_key,
            })
            result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Etherscan lookup for {tx_hash} failed: {e}")
            return None

        if not isinstance(result, dict):
            return None

        mined = bool(result.get("blockNumber"))
        return ExplorerTransaction(
            tx_hash=tx_hash,
            network="ethereum",
            from_address=result.get("from") or "Unknown",
            to_address=result.get("to") or "Unknown",
            amount=_hex_to_decimal(result.get("value")) / WEI_PER_ETH,
            fee=_hex_to_decimal(result.get("gas")) / WEI_PER_ETH,
            confirmations=1 if mined else 0,
            status="confirmed" if mined else "pending",
            timestamp=_timestamp(None),
            explorer_url=f"https://etherscan.io/tx/{tx_hash}",
            source="etherscan",
        )

    def _lookup_bitcoin(self, tx_hash: str) -> Optional[ExplorerTransaction]:
        data = self._raw_tx(tx_hash)
        if data is None:
            return None

        inputs = data.get("inputs") or []
        outputs = data.get("out") or []
        total_in = sum(int((i.get("prev_out") or {}).get("value") or 0) for i in inputs)
        total_out = sum(int(o.get("value") or 0) for o in outputs)
        mined = bool(data.get("block_height"))

        return ExplorerTransaction(
            tx_hash=tx_hash,
            network="bitcoin",
            from_address=(inputs[0].get("prev_out") or {}).get("addr", "Unknown") if inputs else "Unknown",
            to_address=outputs[0].get("addr", "Unknown") if outputs else "Unknown",
            amount=Decimal(total_out) / SATOSHI_PER_BTC,
            fee=Decimal(total_in - total_out) / SATOSHI_PER_BTC,
            confirmations=1 if mined else 0,
            status="confirmed" if mined else "pending",
            timestamp=_timestamp(data.get("time")),
            explorer_url=f"https://www.blockchain.com/btc/tx/{tx_hash}",
            source="blockchain.info",
        )

    def close(self):
        """Close the HTTP client"""
        self._client.close()
