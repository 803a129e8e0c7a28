"""
Account Management Module

Reads and mutates the user's accounts table. A user with no accounts is seeded
on first read with the four starter accounts and a few sample spend
transactions on the main account.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from enum import Enum
import logging

from .backend import BackendClient, BackendError, NotFoundError, Query
from .cache import QueryCache
from .currency import to_decimal
from .logging_config import log_action

logger = logging.getLogger("bank_portal.accounts")


class AccountType(Enum):
    """Account types"""
    MAIN = "main"
    SAVINGS = "savings"
    CREDIT = "credit"
    LOAN = "loan"


@dataclass
class Account:
    """Account row as stored by the backend"""
    id: str
    user_id: str
    account_type: AccountType
    account_name: str
    account_number: Optional[str]
    balance: Decimal
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Account':
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            account_type=AccountType(row["account_type"]),
            account_name=row["account_name"],
            account_number=row.get("account_number"),
            balance=to_decimal(row.get("balance")),
            created_at=row.get("created_at"),
        )

    @property
    def masked_number(self) -> str:
        """Card-style number showing only the last four digits"""
        number = self.account_number or ""
        return f"**** **** **** {number[-4:]}" if number else ""

    @property
    def is_liability(self) -> bool:
        return self.account_type in (AccountType.CREDIT, AccountType.LOAN)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "account_type": self.account_type.value,
            "account_name": self.account_name,
            "account_number": self.account_number,
            "balance": str(self.balance),
            "created_at": self.created_at,
        }


STARTER_ACCOUNTS: List[Dict[str, Any]] = [
    {"account_type": "main", "account_name": "Main Account",
     "balance": Decimal('125750.00'), "account_number": "1234567890123456"},
    {"account_type": "savings", "account_name": "Savings Account",
     "balance": Decimal('32450.00'), "account_number": "9876543210987654"},
    {"account_type": "credit", "account_name": "Credit Card",
     "balance": Decimal('-2430.50'), "account_number": "5555666677778888"},
    {"account_type": "loan", "account_name": "Business Loan",
     "balance": Decimal('-185000.00'), "account_number": "4321876543210987"},
]

SAMPLE_SPEND_TRANSACTIONS: List[Dict[str, Any]] = [
    {"name": "Online Shopping", "amount": Decimal('-1200.50'), "category": "Shopping", "icon": "🛍️"},
    {"name": "Groceries", "amount": Decimal('-850.75'), "category": "Food", "icon": "🛒"},
    {"name": "Monthly Subscription", "amount": Decimal('-99.99'), "category": "Bills", "icon": "🧾"},
    {"name": "Dinner with Friends", "amount": Decimal('-600.00'), "category": "Entertainment", "icon": "🍽️"},
]

HOME_LOAN_ACCOUNT: Dict[str, Any] = {
    "account_type": "loan",
    "account_name": "Home Loan",
    "balance": Decimal('-20000000.00'),
    "account_number": "1122334455667788",
}


class AccountManager:
    """
    Cached access to the accounts table for one backend
    """

    def __init__(self, backend: BackendClient, cache: QueryCache):
        self.backend = backend
        self.cache = cache
        self.table_name = "accounts"

    def list_accounts(self, user_id: str, seed: bool = True) -> List[Account]:
        """
        List the user's accounts, seeding the starter set when there are none.

        Args:
            user_id: Owner of the accounts
            seed: Create the starter accounts if the user has none

        Returns:
            List of Account objects
        """
        rows = self.cache.get_or_fetch(
            (self.table_name, user_id),
            lambda: self.backend.select(Query(self.table_name).eq("user_id", user_id))
        )
        if not rows and seed:
            return self.initialize_accounts(user_id)
        return [Account.from_row(row) for row in rows]

    def initialize_accounts(self, user_id: str) -> List[Account]:
        """Create the starter accounts and sample spend history for a new user"""
        rows = [dict(account, user_id=user_id) for account in STARTER_ACCOUNTS]
        try:
            created = self.backend.insert(self.table_name, rows)
        except BackendError:
            logger.error(f"Failed to create initial accounts for user {user_id}")
            raise

        accounts = [Account.from_row(row) for row in created]
        main = next((a for a in accounts if a.account_type == AccountType.MAIN), None)
        if main is not None:
            samples = [dict(tx, account_id=main.id) for tx in SAMPLE_SPEND_TRANSACTIONS]
            self.backend.insert("transactions", samples)

        self._invalidate(user_id)
        log_action(
            logger, "info", "Initialized starter accounts",
            user_id=user_id, action="initialize_accounts", resource=self.table_name,
            extra={"accounts": len(accounts)}
        )
        return accounts

    def get_account(self, user_id: str, account_id: str) -> Account:
        """Get one of the user's accounts by ID"""
        for account in self.list_accounts(user_id, seed=False):
            if account.id == account_id:
                return account
        raise NotFoundError(f"Account {account_id} not found")

    def get_by_type(self, user_id: str, account_type: AccountType) -> Optional[Account]:
        """First account of the given type, or None"""
        for account in self.list_accounts(user_id):
            if account.account_type == account_type:
                return account
        return None

    def add_home_loan_account(self, user_id: str) -> Account:
        """Add the on-demand Home Loan account"""
        try:
            created = self.backend.insert(self.table_name, dict(HOME_LOAN_ACCOUNT, user_id=user_id))
        except BackendError:
            logger.error(f"Failed to create home loan account for user {user_id}")
            raise

        self.cache.invalidate(self.table_name, user_id)
        log_action(
            logger, "info", "Home loan account created",
            user_id=user_id, action="add_home_loan", resource=self.table_name
        )
        return Account.from_row(created[0])

    def create_account(self, user_id: str, account_type: AccountType, account_name: str,
                       account_number: str, balance: Decimal = Decimal('0')) -> Account:
        """Insert an arbitrary account for the user"""
        created = self.backend.insert(self.table_name, {
            "user_id": user_id,
            "account_type": account_type.value,
            "account_name": account_name,
            "account_number": account_number,
            "balance": balance,
        })
        self.cache.invalidate(self.table_name, user_id)
        return Account.from_row(created[0])

    def update_balance(self, user_id: str, account_id: str, new_balance: Decimal) -> Account:
        """Overwrite an account balance"""
        updated = self.backend.update(
            Query(self.table_name).eq("id", account_id).eq("user_id", user_id),
            {"balance": new_balance}
        )
        if not updated:
            raise NotFoundError(f"Account {account_id} not found")

        self.cache.invalidate(self.table_name, user_id)
        return Account.from_row(updated[0])

    def balances_by_type(self, user_id: str) -> Dict[str, Decimal]:
        """Sum of balances per account type"""
        totals: Dict[str, Decimal] = {t.value: Decimal('0') for t in AccountType}
        for account in self.list_accounts(user_id):
            totals[account.account_type.value] += account.balance
        return totals

    def _invalidate(self, user_id: str) -> None:
        self.cache.invalidate(self.table_name, user_id)
        self.cache.invalidate("transactions", user_id)
        self.cache.invalidate("monthly_spending", user_id)
