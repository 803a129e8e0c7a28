"""
Transaction Module

Read access to the transactions table scoped to the user's accounts, plus
recording of new transactions. Transactions are immutable once created.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Tuple
import calendar
import logging

from .backend import BackendClient, NotFoundError, Query
from .cache import QueryCache
from .currency import to_decimal
from .accounts import Account, AccountManager, AccountType

logger = logging.getLogger("bank_portal.transactions")

DEFAULT_ICON = "💸"
CRYPTO_CATEGORY = "crypto"


@dataclass
class Transaction:
    """Transaction row as stored by the backend"""
    id: str
    account_id: str
    name: str
    amount: Decimal
    category: Optional[str] = None
    icon: Optional[str] = None
    transaction_date: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_bank_name: Optional[str] = None
    recipient_account_number: Optional[str] = None
    recipient_swift_code: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=row["id"],
            account_id=row["account_id"],
            name=row["name"],
            amount=to_decimal(row.get("amount")),
            category=row.get("category"),
            icon=row.get("icon"),
            transaction_date=row.get("transaction_date"),
            recipient_name=row.get("recipient_name"),
            recipient_bank_name=row.get("recipient_bank_name"),
            recipient_account_number=row.get("recipient_account_number"),
            recipient_swift_code=row.get("recipient_swift_code"),
        )

    @property
    def is_deposit(self) -> bool:
        return self.amount > 0

    @property
    def occurred_at(self) -> Optional[datetime]:
        if not self.transaction_date:
            return None
        return datetime.fromisoformat(self.transaction_date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "name": self.name,
            "amount": str(self.amount),
            "category": self.category or "",
            "icon": self.icon or DEFAULT_ICON,
            "transaction_date": self.transaction_date,
            "recipient_name": self.recipient_name,
            "recipient_bank_name": self.recipient_bank_name,
            "recipient_account_number": self.recipient_account_number,
            "recipient_swift_code": self.recipient_swift_code,
        }


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """First and last instant of now's calendar month"""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_day = calendar.monthrange(now.year, now.month)[1]
    end = now.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` calendar months before now (clamped to month end)"""
    year, month = now.year, now.month - months
    while month <= 0:
        month += 12
        year -= 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


class TransactionManager:
    """
    Cached access to the transactions of a user's accounts
    """

    def __init__(self, backend: BackendClient, cache: QueryCache, accounts: AccountManager):
        self.backend = backend
        self.cache = cache
        self.accounts = accounts
        self.table_name = "transactions"

    def _account_ids(self, user_id: str) -> List[str]:
        return [a.id for a in self.accounts.list_accounts(user_id, seed=False)]

    def recent(self, user_id: str, limit: int = 5) -> List[Transaction]:
        """Most recent transactions across the user's accounts, newest first"""

        def fetch():
            account_ids = self._account_ids(user_id)
            if not account_ids:
                return []
            return self.backend.select(
                Query(self.table_name).in_("account_id", account_ids)
                .order("transaction_date", descending=True).limit(limit)
            )

        rows = self.cache.get_or_fetch((self.table_name, user_id, limit), fetch)
        return [Transaction.from_row(row) for row in rows]

    def for_account(self, account_id: str, since: Optional[datetime] = None) -> List[Transaction]:
        """Transactions on one account since a point in time, newest first"""
        query = Query(self.table_name).eq("account_id", account_id)
        if since is not None:
            query.gte("transaction_date", since)
        rows = self.backend.select(query.order("transaction_date", descending=True))
        return [Transaction.from_row(row) for row in rows]

    def crypto_history(self, user_id: str, symbol: Optional[str] = None) -> List[Transaction]:
        """
        Crypto purchases and sales on the main account, newest first.

        ``symbol`` keeps only transactions whose name contains it, ignoring case.
        """
        main = next(
            (a for a in self.accounts.list_accounts(user_id, seed=False) if a.account_type == AccountType.MAIN),
            None
        )
        if main is None:
            return []

        rows = self.backend.select(
            Query(self.table_name).eq("account_id", main.id).eq("category", CRYPTO_CATEGORY)
            .order("transaction_date", descending=True)
        )
        transactions = [Transaction.from_row(row) for row in rows]
        if symbol:
            transactions = [t for t in transactions if symbol.lower() in t.name.lower()]
        return transactions

    def get_with_account(self, user_id: str, transaction_id: str) -> Tuple[Transaction, Account]:
        """
        Fetch a transaction together with the account it belongs to.

        Raises:
            NotFoundError: If the transaction does not exist or is on another user's account
        """
        row = self.backend.select_one(Query(self.table_name).eq("id", transaction_id))
        if row is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        transaction = Transaction.from_row(row)
        try:
            account = self.accounts.get_account(user_id, transaction.account_id)
        except NotFoundError:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction, account

    def record(
        self,
        user_id: str,
        account_id: str,
        name: str,
        amount: Decimal,
        category: Optional[str] = None,
        icon: Optional[str] = None,
        recipient_name: Optional[str] = None,
        recipient_bank_name: Optional[str] = None,
        recipient_account_number: Optional[str] = None,
        recipient_swift_code: Optional[str] = None,
        transaction_date: Optional[datetime] = None
    ) -> Transaction:
        """Insert a transaction on one of the user's accounts"""
        row = {
            "account_id": account_id,
            "name": name,
            "amount": amount,
            "category": category,
            "icon": icon,
            "recipient_name": recipient_name,
            "recipient_bank_name": recipient_bank_name,
            "recipient_account_number": recipient_account_number,
            "recipient_swift_code": recipient_swift_code,
        }
        if transaction_date is not None:
            row["transaction_date"] = transaction_date

        created = self.backend.insert(self.table_name, row)
        self.cache.invalidate(self.table_name, user_id)
        self.cache.invalidate("monthly_spending", user_id)
        logger.info(f"Recorded transaction '{name}' of {amount} on account {account_id}")
        return Transaction.from_row(created[0])

    def monthly_spending(self, user_id: str, now: Optional[datetime] = None) -> Decimal:
        """Total outgoing amount (as a positive number) in the current calendar month"""
        now = now or datetime.now(timezone.utc)
        start, end = month_bounds(now)

        def fetch():
            account_ids = self._account_ids(user_id)
            if not account_ids:
                return "0"
            rows = self.backend.select(
                Query(self.table_name).in_("account_id", account_ids)
                .gte("transaction_date", start).lte("transaction_date", end).lt("amount", 0)
            )
            return str(sum((abs(to_decimal(r.get("amount"))) for r in rows), Decimal('0')))

        return to_decimal(self.cache.get_or_fetch(("monthly_spending", user_id, start.date().isoformat()), fetch))

    def statement_window(self, now: Optional[datetime] = None, months: int = 3) -> Tuple[datetime, datetime]:
        """Start and end of a statement period covering the last ``months`` months"""
        now = now or datetime.now(timezone.utc)
        return months_ago(now, months), now
