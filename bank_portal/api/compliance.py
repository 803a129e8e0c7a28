"""
Compliance endpoints: error catalogue and review letter download
"""

from fastapi import APIRouter, Depends

from .auth import CurrentUser, get_current_user
from .schemas import ComplianceLetterRequest, download, http_error
from ..reports import COMPLIANCE_ERRORS, find_errors, generate_compliance_letter
from ..reports.compliance import total_affected_transfers


router = APIRouter()


@router.get("/errors")
def list_compliance_errors(user: CurrentUser = Depends(get_current_user)):
    """Known bulk-transfer error codes that can be cited in a letter"""
    return {
        "errors": [error.to_dict() for error in COMPLIANCE_ERRORS],
        "total_affected_transfers": total_affected_transfers(COMPLIANCE_ERRORS),
    }


@router.post("/letter")
def download_compliance_letter(
    request: ComplianceLetterRequest,
    user: CurrentUser = Depends(get_current_user)
):
    try:
        errors = find_errors(request.errors)
        document = generate_compliance_letter(errors, reference=request.reference)
    except Exception as e:
        raise http_error(e, "generate compliance letter")

    return download(document)
