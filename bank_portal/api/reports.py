"""
Document download endpoints
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import SalarySlipRequest, download, http_error
from ..accounts import AccountType
from ..currency import to_decimal
from ..jobs import FNB_BANK_NAME
from ..reports import (
    SlipAccount, generate_account_confirmation, generate_balance_sheet, generate_cashflow_forecast,
    generate_proof_of_payment, generate_salary_slip, generate_statement, generate_treasury_reserves,
    split_accounts
)
from ..tax import DASHBOARD_ACCOUNT_TYPES

MOCK_BANK_NAME = "Mock Banking System"

router = APIRouter()


def _holder_name(system: PortalSystem, user: CurrentUser) -> str:
    profile = system.profiles.ensure(user.id, user.full_name)
    return profile.full_name or user.email or "User"


@router.get("/statement")
def download_statement(
    account_id: Optional[str] = None,
    months: Optional[int] = Query(None, ge=1, le=24),
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Statement of the main account (or account_id) for the last months (12 for the annual statement)"""
    months = months or system.config.statement_months
    try:
        if account_id:
            account = system.accounts.get_account(user.id, account_id)
        else:
            account = system.accounts.get_by_type(user.id, AccountType.MAIN)
            if account is None:
                raise HTTPException(status_code=404, detail="Main account not found.")

        start, end = system.transactions.statement_window(datetime.now(timezone.utc), months)
        transactions = system.transactions.for_account(account.id, since=start)
        if not transactions:
            raise HTTPException(
                status_code=404, detail=f"No transactions found for the last {months} months."
            )

        document = generate_statement(_holder_name(system, user), account, transactions, start, end)
    except Exception as e:
        raise http_error(e, "generate statement")

    return download(document)


@router.get("/proof-of-payment/{transaction_id}")
def download_proof_of_payment(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        transaction, account = system.transactions.get_with_account(user.id, transaction_id)
        document = generate_proof_of_payment(_holder_name(system, user), transaction, account)
    except Exception as e:
        raise http_error(e, "generate proof of payment")

    return download(document)


@router.post("/salary-slip")
def download_salary_slip(
    request: SalarySlipRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Salary slip for the FNB or the salary-account half of a dual-salary setup"""
    try:
        setup = next(
            (s for s in system.jobs.salary_setups(user.id, active_only=False) if s.id == request.setup_id),
            None
        )
        if setup is None:
            raise HTTPException(status_code=404, detail="Salary setup not found")

        if request.kind == "fnb":
            slip_account = SlipAccount(
                account_holder=setup.fnb_account_holder,
                account_number=setup.fnb_account_number,
                bank_name=FNB_BANK_NAME,
                branch_code=setup.fnb_branch_code,
            )
        else:
            salary_account = system.accounts.get_account(user.id, setup.mock_account_id)
            slip_account = SlipAccount(
                account_holder=_holder_name(system, user),
                account_number=salary_account.account_number or "",
                bank_name=MOCK_BANK_NAME,
            )

        document = generate_salary_slip(
            request.kind,
            setup.job_title,
            setup.monthly_gross / 2,
            request.currency.upper(),
            slip_account,
            system.jobs.tax_for_user(user.id, all_accounts=True).breakdown,
            company_name=system.config.company_name,
            company_address=system.config.company_address,
        )
    except Exception as e:
        raise http_error(e, "generate salary slip")

    return download(document)


@router.get("/treasury-reserves")
def download_treasury_reserves(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        document = generate_treasury_reserves(system.treasury.holdings())
    except Exception as e:
        raise http_error(e, "generate treasury reserves report")

    return download(document)


@router.get("/balance-sheet")
def download_balance_sheet(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Assets, liabilities and net worth across every account"""
    try:
        assets, liabilities = split_accounts(system.accounts.list_accounts(user.id))
        document = generate_balance_sheet(_holder_name(system, user), assets, liabilities)
    except Exception as e:
        raise http_error(e, "generate balance sheet")

    return download(document)


@router.get("/account-confirmation")
def download_account_confirmation(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Confirmation letter for the main account"""
    try:
        account = system.accounts.get_by_type(user.id, AccountType.MAIN)
        if account is None:
            raise HTTPException(status_code=404, detail="Main account not found.")
        document = generate_account_confirmation(
            _holder_name(system, user), account, system.config.bank_name, system.config.bank_address
        )
    except Exception as e:
        raise http_error(e, "generate account confirmation letter")

    return download(document)


@router.get("/cashflow-forecast")
def download_cashflow_forecast(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Forecast starting from the dashboard total balance"""
    try:
        balances = system.accounts.balances_by_type(user.id)
        starting_balance = sum((balances[t] for t in DASHBOARD_ACCOUNT_TYPES), Decimal('0'))
        document = generate_cashflow_forecast(
            _holder_name(system, user),
            starting_balance,
            months=system.config.forecast_months,
            monthly_deposit=to_decimal(system.config.forecast_monthly_deposit),
        )
    except Exception as e:
        raise http_error(e, "generate cashflow forecast")

    return download(document)
