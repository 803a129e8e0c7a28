"""
Form schemas

Pydantic models for the user-submitted forms. A ValidationError raised here is
the inline form error; FastAPI returns it as a 422 with field details.
"""

from decimal import Decimal
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
SWIFT_PATTERN = re.compile(r'^[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}([A-Z0-9]{3})?$')
MAX_SEND_AMOUNT = Decimal('1000000')


def _check_email(value: str) -> str:
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email.")
    return value


class SendMoneyForm(BaseModel):
    """International payment to a recipient bank account"""
    recipient_name: str = Field(..., min_length=2)
    recipient_email: str
    bank_name: str = Field(..., min_length=2)
    account_number: str
    branch_code: Optional[str] = ""
    swift_code: Optional[str] = ""
    currency: str = Field(..., min_length=3)
    amount: Decimal

    @field_validator("recipient_email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("account_number")
    @classmethod
    def validate_account_number(cls, v):
        if len(v) < 10:
            raise ValueError("Account number must be at least 10 digits.")
        if len(v) > 16:
            raise ValueError("Account number cannot exceed 16 digits.")
        if not v.isdigit():
            raise ValueError("Account number must contain only digits.")
        return v

    @field_validator("branch_code")
    @classmethod
    def validate_branch_code(cls, v):
        if not v:
            return ""
        if len(v) != 6 or not v.isdigit():
            raise ValueError("Branch code must be 6 digits.")
        return v

    @field_validator("swift_code")
    @classmethod
    def validate_swift_code(cls, v):
        if not v:
            return ""
        if not SWIFT_PATTERN.match(v):
            raise ValueError("Please enter a valid SWIFT/BIC code.")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Amount must be positive.")
        if v > MAX_SEND_AMOUNT:
            raise ValueError("Transaction amount cannot exceed 1,000,000.")
        if -v.as_tuple().exponent > 2:
            raise ValueError("Amount can have at most 2 decimal places.")
        return v


class LocalTransferForm(BaseModel):
    """Domestic transfer from the main account"""
    account_holder_name: str = Field(..., min_length=2)
    bank_name: str = Field(..., min_length=2)
    account_number: str = Field(..., min_length=8, max_length=20)
    amount: Decimal = Field(..., gt=0)
    swift_code: Optional[str] = None


class BeneficiaryForm(BaseModel):
    beneficiary_name: str = Field(..., min_length=1)
    bank_name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    swift_code: Optional[str] = None
    branch_code: Optional[str] = None
    beneficiary_email: Optional[str] = None

    @field_validator("beneficiary_email")
    @classmethod
    def validate_email(cls, v):
        if not v:
            return None
        return _check_email(v)


class BeneficiaryUpdateForm(BaseModel):
    beneficiary_name: Optional[str] = Field(None, min_length=1)
    bank_name: Optional[str] = Field(None, min_length=1)
    account_number: Optional[str] = Field(None, min_length=1)
    swift_code: Optional[str] = None
    branch_code: Optional[str] = None
    beneficiary_email: Optional[str] = None

    @field_validator("beneficiary_email")
    @classmethod
    def validate_email(cls, v):
        if not v:
            return v
        return _check_email(v)
