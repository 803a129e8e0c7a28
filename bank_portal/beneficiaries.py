"""
Beneficiary Management Module

Saved payment recipients for a user, and the simulated transfer to a saved
beneficiary.

Two demo behaviours that are not real banking logic:
    - every new beneficiary is stored with kyc_verified = True
    - a transfer to a beneficiary fails at random (30% by default) with a
      fabricated recipient-bank error code
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
import logging
import random

from .backend import BackendClient, BackendError, NotFoundError, Query
from .cache import QueryCache
from .currency import to_decimal
from .logging_config import log_action

logger = logging.getLogger("bank_portal.beneficiaries")

TRANSFER_ERROR_CODES = ["INSUF_FUNDS", "ACCT_CLOSED", "INVALID_SWIFT", "DAILY_LIMIT"]

FIX_PROVISIONS: Dict[str, str] = {
    "INSUF_FUNDS": "Contact recipient to confirm account details and ensure account is active",
    "ACCT_CLOSED": "Obtain new account details from beneficiary or use alternative payment method",
    "INVALID_SWIFT": "Verify SWIFT code with beneficiary bank and update beneficiary details",
    "DAILY_LIMIT": "Transfer amount exceeds daily limit. Split transfer or try again tomorrow",
}
DEFAULT_FIX_PROVISION = "Contact recipient bank for more information"

NOTIFICATION_PHONE = "+27123456789"

EDITABLE_FIELDS = ("beneficiary_name", "bank_name", "account_number",
                   "swift_code", "branch_code", "beneficiary_email")


def fix_provision(error_code: str) -> str:
    """Suggested remedy for a recipient-bank error code"""
    return FIX_PROVISIONS.get(error_code, DEFAULT_FIX_PROVISION)


class TransferFailedError(Exception):
    """The recipient bank rejected a simulated beneficiary transfer"""

    def __init__(self, error_code: str, fix: str, error_id: Optional[str] = None):
        super().__init__(f"Transfer failed: {error_code}")
        self.error_code = error_code
        self.fix_provisions = fix
        self.error_id = error_id


@dataclass
class Beneficiary:
    id: str
    user_id: str
    beneficiary_name: str
    bank_name: str
    account_number: str
    swift_code: Optional[str] = None
    branch_code: Optional[str] = None
    beneficiary_email: Optional[str] = None
    kyc_verified: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Beneficiary':
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            beneficiary_name=row["beneficiary_name"],
            bank_name=row["bank_name"],
            account_number=row["account_number"],
            swift_code=row.get("swift_code"),
            branch_code=row.get("branch_code"),
            beneficiary_email=row.get("beneficiary_email"),
            kyc_verified=bool(row.get("kyc_verified")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "beneficiary_name": self.beneficiary_name,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "swift_code": self.swift_code,
            "branch_code": self.branch_code,
            "beneficiary_email": self.beneficiary_email,
            "kyc_verified": self.kyc_verified,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class TransferError:
    """Recorded recipient-bank failure"""
    id: str
    user_id: str
    beneficiary_id: Optional[str]
    transfer_amount: Decimal
    error_code: str
    error_message: str
    error_source: str
    fix_provisions: Optional[str]
    occurred_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'TransferError':
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            beneficiary_id=row.get("beneficiary_id"),
            transfer_amount=to_decimal(row.get("transfer_amount")),
            error_code=row["error_code"],
            error_message=row["error_message"],
            error_source=row.get("error_source", "recipient_bank"),
            fix_provisions=row.get("fix_provisions"),
            occurred_at=row.get("occurred_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "beneficiary_id": self.beneficiary_id,
            "transfer_amount": str(self.transfer_amount),
            "error_code": self.error_code,
            "error_message": self.error_message,
            "error_source": self.error_source,
            "fix_provisions": self.fix_provisions,
            "occurred_at": self.occurred_at,
        }


@dataclass
class TransferResult:
    success: bool
    amount: Decimal
    beneficiary: str


class BeneficiaryManager:
    """
    Cached beneficiary list with invalidating mutations
    """

    def __init__(self, backend: BackendClient, cache: QueryCache,
                 failure_rate: float = 0.3, rng: Optional[random.Random] = None):
        self.backend = backend
        self.cache = cache
        self.failure_rate = failure_rate
        self.rng = rng or random.Random()
        self.table_name = "beneficiaries"
        self.errors_table = "bank_transfer_errors"

    def list(self, user_id: str) -> List[Beneficiary]:
        """User's beneficiaries, newest first"""
        rows = self.cache.get_or_fetch(
            (self.table_name, user_id),
            lambda: self.backend.select(
                Query(self.table_name).eq("user_id", user_id).order("created_at", descending=True)
            )
        )
        return [Beneficiary.from_row(row) for row in rows]

    def get(self, user_id: str, beneficiary_id: str) -> Beneficiary:
        for beneficiary in self.list(user_id):
            if beneficiary.id == beneficiary_id:
                return beneficiary
        raise NotFoundError("Beneficiary not found")

    def create(
        self,
        user_id: str,
        beneficiary_name: str,
        bank_name: str,
        account_number: str,
        swift_code: Optional[str] = None,
        branch_code: Optional[str] = None,
        beneficiary_email: Optional[str] = None
    ) -> Beneficiary:
        """
        Save a new beneficiary.

        kyc_verified is always stored as True; no verification is performed.
        """
        row = {
            "user_id": user_id,
            "beneficiary_name": beneficiary_name,
            "bank_name": bank_name,
            "account_number": account_number,
            "swift_code": swift_code or None,
            "branch_code": branch_code or None,
            "beneficiary_email": beneficiary_email or None,
            "kyc_verified": True,
        }
        try:
            created = self.backend.insert(self.table_name, row)
        except BackendError:
            logger.error(f"Failed to add beneficiary for user {user_id}")
            raise

        self.cache.invalidate(self.table_name, user_id)
        log_action(
            logger, "info", "Beneficiary added",
            user_id=user_id, action="create_beneficiary", resource=self.table_name,
            extra={"bank_name": bank_name}
        )
        return Beneficiary.from_row(created[0])

    def update(self, user_id: str, beneficiary_id: str, changes: Dict[str, Any]) -> Beneficiary:
        """Update the editable fields of a beneficiary"""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        updated = self.backend.update(
            Query(self.table_name).eq("id", beneficiary_id).eq("user_id", user_id),
            changes
        )
        if not updated:
            raise NotFoundError("Beneficiary not found")

        self.cache.invalidate(self.table_name, user_id)
        return Beneficiary.from_row(updated[0])

    def delete(self, user_id: str, beneficiary_id: str) -> None:
        removed = self.backend.delete(
            Query(self.table_name).eq("id", beneficiary_id).eq("user_id", user_id)
        )
        if removed == 0:
            raise NotFoundError("Beneficiary not found")

        self.cache.invalidate(self.table_name, user_id)
        logger.info(f"Deleted beneficiary {beneficiary_id} for user {user_id}")

    def transfer_to_beneficiary(self, user_id: str, beneficiary_id: str, amount: Decimal,
                                user_email: Optional[str] = None) -> TransferResult:
        """
        Simulate a transfer to a saved beneficiary.

        With probability ``failure_rate`` the recipient bank "rejects" the
        transfer: an error row is recorded, the error notification function is
        invoked and TransferFailedError is raised.

        Raises:
            NotFoundError: If the beneficiary does not belong to the user
            TransferFailedError: On a simulated recipient-bank failure
        """
        beneficiary = self.get(user_id, beneficiary_id)
        amount = to_decimal(amount)

        if self.rng.random() < self.failure_rate:
            error_code = self.rng.choice(TRANSFER_ERROR_CODES)
            fix = fix_provision(error_code)
            message = f"Transfer failed due to {error_code}"

            created = self.backend.insert(self.errors_table, {
                "user_id": user_id,
                "beneficiary_id": beneficiary_id,
                "transfer_amount": amount,
                "error_code": error_code,
                "error_message": message,
                "error_source": "recipient_bank",
                "fix_provisions": fix,
            })
            self.cache.invalidate(self.errors_table, user_id)

            self.backend.invoke("send-bank-error-notification", {
                "userEmail": user_email,
                "userPhone": NOTIFICATION_PHONE,
                "errorCode": error_code,
                "errorMessage": message,
                "transferAmount": amount,
                "beneficiaryName": beneficiary.beneficiary_name,
                "bankName": beneficiary.bank_name,
                "fixProvisions": fix,
            })

            log_action(
                logger, "warning", message,
                user_id=user_id, action="beneficiary_transfer", resource=self.errors_table,
                extra={"beneficiary_id": beneficiary_id, "amount": str(amount)}
            )
            raise TransferFailedError(error_code, fix, error_id=created[0]["id"] if created else None)

        self.cache.invalidate("transactions", user_id)
        log_action(
            logger, "info", f"Transferred {amount} to {beneficiary.beneficiary_name}",
            user_id=user_id, action="beneficiary_transfer", resource=self.table_name
        )
        return TransferResult(success=True, amount=amount, beneficiary=beneficiary.beneficiary_name)

    def list_transfer_errors(self, user_id: str) -> List[TransferError]:
        """Recorded transfer failures, newest first"""
        rows = self.cache.get_or_fetch(
            (self.errors_table, user_id),
            lambda: self.backend.select(
                Query(self.errors_table).eq("user_id", user_id).order("occurred_at", descending=True)
            )
        )
        return [TransferError.from_row(row) for row in rows]
