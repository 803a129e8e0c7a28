"""
Pydantic schemas for API requests and response helpers
"""

from decimal import Decimal
from datetime import date
from typing import List, Optional
import logging

from fastapi import HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..backend import BackendError, NotFoundError
from ..beneficiaries import TransferFailedError
from ..reports import DocumentGenerationError, GeneratedDocument

logger = logging.getLogger("bank_portal.api")


# Beneficiary schemas
class BeneficiaryTransferRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)


# Treasury schemas
class TreasuryTransactionRequest(BaseModel):
    from_currency: str = Field(..., min_length=3, max_length=3)
    to_currency: str = Field(..., min_length=3, max_length=3)
    amount: Decimal = Field(..., gt=0)
    transaction_type: str = Field("conversion", description="conversion, injection, withdrawal or adjustment")
    reason: Optional[str] = None


class LiquidityRequest(BaseModel):
    liquidity_ratio: Optional[Decimal] = None
    direction: Optional[str] = Field(None, description="increase or decrease by one step")


class ReserveRequest(BaseModel):
    reserve_ratio: Decimal


# Job schemas
class DualSalaryRequest(BaseModel):
    job_id: str
    annual_salary: Decimal = Field(..., gt=0)
    fnb_account_holder: str
    fnb_account_number: str
    fnb_branch_code: str
    display_currency: str = "ZAR"


# Document schemas
class CreateDocumentRequest(BaseModel):
    document_type: str = Field(..., min_length=1)
    document_number: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2)
    issue_date: date
    expiry_date: date
    description: Optional[str] = None
    file_name: Optional[str] = None


class DocumentStatusRequest(BaseModel):
    status: str = Field(..., description="active, expired or pending")


# Crypto schemas
class WalletAddressRequest(BaseModel):
    exchange_name: str = Field(..., min_length=1)
    cryptocurrency: str = Field(..., min_length=1)
    wallet_address: str = Field(..., min_length=1)
    address_label: Optional[str] = None
    is_default: bool = False


class UpdateWalletAddressRequest(BaseModel):
    exchange_name: Optional[str] = None
    cryptocurrency: Optional[str] = None
    wallet_address: Optional[str] = None
    address_label: Optional[str] = None
    is_default: Optional[bool] = None


# Report schemas
class SalarySlipRequest(BaseModel):
    setup_id: str
    kind: str = Field("fnb", description="fnb or mock")
    currency: str = "ZAR"


class ComplianceLetterRequest(BaseModel):
    errors: List[str] = Field(..., min_length=1, description="Error ids or codes")
    reference: Optional[str] = None


def http_error(e: Exception, action: str) -> HTTPException:
    """Translate a domain exception into the HTTP error shown to the user"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e) or "Not found")
    if isinstance(e, TransferFailedError):
        return HTTPException(status_code=409, detail={
            "message": str(e),
            "error_code": e.error_code,
            "fix_provisions": e.fix_provisions,
        })
    if isinstance(e, BackendError):
        return HTTPException(status_code=502, detail=f"Failed to {action}: {e}")
    if isinstance(e, DocumentGenerationError):
        return HTTPException(status_code=500, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    logger.exception(f"Unexpected error while trying to {action}")
    return HTTPException(status_code=500, detail=f"Failed to {action}")


def download(document: GeneratedDocument) -> Response:
    """Stream a generated document as an attachment"""
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
