"""
Tax estimate endpoint
"""

from fastapi import APIRouter, Depends

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import http_error
from ..tax import INCOME_TAX_BRACKETS, monthly_tax_deduction


router = APIRouter()


@router.get("")
def get_tax_summary(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Tax estimate from the user's balances, with the per-category breakdown"""
    try:
        summary = system.jobs.tax_for_user(user.id)
    except Exception as e:
        raise http_error(e, "calculate taxes")

    return {
        **summary.to_dict(),
        "monthly_deduction": str(monthly_tax_deduction(summary)),
    }


@router.get("/brackets")
def get_brackets(user: CurrentUser = Depends(get_current_user)):
    return {
        "brackets": [
            {"from": str(lower), "to": str(upper) if upper is not None else None, "rate": str(rate)}
            for lower, upper, rate in INCOME_TAX_BRACKETS
        ]
    }
