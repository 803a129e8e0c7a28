"""
Transaction endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import http_error
from ..currency import format_zar


router = APIRouter()


@router.get("")
def recent_transactions(
    limit: Optional[int] = None,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Most recent transactions across the user's accounts"""
    try:
        transactions = system.transactions.recent(
            user.id, limit or system.config.recent_transactions_limit
        )
    except Exception as e:
        raise http_error(e, "load transactions")

    return {"transactions": [t.to_dict() for t in transactions]}


@router.get("/monthly-spending")
def monthly_spending(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Outgoing total for the current calendar month"""
    try:
        total = system.transactions.monthly_spending(user.id)
    except Exception as e:
        raise http_error(e, "load monthly spending")

    return {"monthly_spending": str(total), "display": format_zar(total)}


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Transaction detail with the account it was posted to"""
    try:
        transaction, account = system.transactions.get_with_account(user.id, transaction_id)
    except Exception as e:
        raise http_error(e, "load transaction")

    return {
        **transaction.to_dict(),
        "account": {
            "account_name": account.account_name,
            "account_number": account.account_number,
            "account_type": account.account_type.value,
        },
        "amount_display": format_zar(abs(transaction.amount)),
    }
