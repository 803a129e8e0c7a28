"""
Account endpoints: dashboard accounts, cards and loans
"""

from fastapi import APIRouter, Depends, HTTPException, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import http_error
from ..accounts import AccountType
from ..currency import format_zar


router = APIRouter()


@router.get("")
def list_accounts(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """List the user's accounts, creating the starter set on first visit"""
    try:
        accounts = system.accounts.list_accounts(user.id)
    except Exception as e:
        raise http_error(e, "load accounts")

    return {
        "accounts": [a.to_dict() for a in accounts],
        "total_balance": str(sum(a.balance for a in accounts if not a.is_liability)),
    }


@router.get("/cards")
def list_cards(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Card view of the main and credit accounts"""
    try:
        accounts = system.accounts.list_accounts(user.id)
    except Exception as e:
        raise http_error(e, "load cards")

    cards = []
    for account in accounts:
        if account.account_type not in (AccountType.MAIN, AccountType.CREDIT):
            continue
        cards.append({
            "account_id": account.id,
            "card_name": account.account_name,
            "card_type": "credit" if account.account_type == AccountType.CREDIT else "debit",
            "masked_number": account.masked_number,
            "balance": str(account.balance),
            "balance_display": format_zar(account.balance),
        })
    return {"cards": cards}


@router.get("/loans")
def list_loans(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        accounts = system.accounts.list_accounts(user.id)
    except Exception as e:
        raise http_error(e, "load loans")

    loans = [a for a in accounts if a.account_type == AccountType.LOAN]
    return {
        "loans": [a.to_dict() for a in loans],
        "total_outstanding": str(sum(-a.balance for a in loans)),
    }


@router.get("/loans/{account_id}")
def get_loan(
    account_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Loan account with its transaction history"""
    try:
        account = system.accounts.get_account(user.id, account_id)
        if account.account_type != AccountType.LOAN:
            raise HTTPException(status_code=404, detail="Loan not found")
        transactions = system.transactions.for_account(account.id)
    except Exception as e:
        raise http_error(e, "load loan")

    return {
        "loan": account.to_dict(),
        "outstanding": str(-account.balance),
        "transactions": [t.to_dict() for t in transactions],
    }


@router.post("/home-loan", status_code=status.HTTP_201_CREATED)
def add_home_loan(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Add the Home Loan account"""
    try:
        account = system.accounts.add_home_loan_account(user.id)
    except Exception as e:
        raise http_error(e, "add home loan account")

    return {"account": account.to_dict(), "message": "Home loan account added"}


@router.get("/{account_id}")
def get_account(
    account_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        account = system.accounts.get_account(user.id, account_id)
    except Exception as e:
        raise http_error(e, "load account")

    return {**account.to_dict(), "masked_number": account.masked_number}
