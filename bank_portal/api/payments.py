"""
Payment endpoints: local transfers and international send-money
"""

from fastapi import APIRouter, Depends, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import http_error
from ..schemas import LocalTransferForm, SendMoneyForm


router = APIRouter()


@router.post("/local-transfer", status_code=status.HTTP_201_CREATED)
def local_transfer(
    form: LocalTransferForm,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        receipt = system.transfers.local_transfer(user.id, form)
    except Exception as e:
        raise http_error(e, "complete transfer")

    return {**receipt.to_dict(), "message": "Transfer successful"}


@router.post("/send-money", status_code=status.HTTP_201_CREATED)
def send_money(
    form: SendMoneyForm,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Send money abroad; the main account is debited the rand equivalent"""
    try:
        receipt = system.transfers.send_money(user.id, form, user_email=user.email)
    except Exception as e:
        raise http_error(e, "send money")

    return {**receipt.to_dict(), "message": f"Sent {form.amount} {form.currency.upper()} to {form.recipient_name}"}
