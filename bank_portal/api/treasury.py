"""
Treasury endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import LiquidityRequest, ReserveRequest, TreasuryTransactionRequest, http_error
from ..currency import usd_value
from ..treasury import TreasuryTransactionType


router = APIRouter()


@router.get("/holdings")
def list_holdings(
    currency: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Treasury holdings, optionally for one currency"""
    try:
        holdings = system.treasury.holdings(currency.upper() if currency else None)
    except Exception as e:
        raise http_error(e, "load treasury holdings")

    result = []
    for holding in holdings:
        data = holding.to_dict()
        try:
            data["usd_value"] = str(usd_value(holding.amount, holding.currency_code))
        except ValueError:
            data["usd_value"] = None
        result.append(data)
    return {"holdings": result}


@router.get("/transactions")
def list_transactions(
    currency: Optional[str] = None,
    limit: int = 10,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        transactions = system.treasury.transactions(currency.upper() if currency else None, limit)
    except Exception as e:
        raise http_error(e, "load treasury transactions")

    return {"transactions": [t.to_dict() for t in transactions]}


@router.post("/transactions", status_code=status.HTTP_201_CREATED)
def execute_transaction(
    request: TreasuryTransactionRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Execute a treasury transaction at the static cross rate"""
    try:
        transaction_type = TreasuryTransactionType(request.transaction_type)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid transaction type: {request.transaction_type}")

    try:
        transaction = system.treasury.execute_transaction(
            user.id,
            request.from_currency.upper(),
            request.to_currency.upper(),
            request.amount,
            transaction_type,
            request.reason,
        )
    except Exception as e:
        raise http_error(e, "execute treasury transaction")

    return {"transaction": transaction.to_dict(), "message": "Treasury transaction executed successfully"}


@router.put("/holdings/{holding_id}/liquidity")
def adjust_liquidity(
    holding_id: str,
    request: LiquidityRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Set the liquidity ratio, or step it by 5% with direction=increase|decrease"""
    try:
        if request.liquidity_ratio is not None:
            holding = system.treasury.adjust_liquidity(user.id, holding_id, request.liquidity_ratio)
        elif request.direction in ("increase", "decrease"):
            holding = system.treasury.step_liquidity(user.id, holding_id, request.direction == "increase")
        else:
            raise HTTPException(status_code=400, detail="Provide liquidity_ratio or direction")
    except Exception as e:
        raise http_error(e, "adjust liquidity")

    return {"holding": holding.to_dict(), "message": f"Liquidity ratio updated for {holding.currency_code}"}


@router.put("/holdings/{holding_id}/reserve")
def adjust_reserve(
    holding_id: str,
    request: ReserveRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        holding = system.treasury.adjust_reserve(user.id, holding_id, request.reserve_ratio)
    except Exception as e:
        raise http_error(e, "adjust reserve ratio")

    return {"holding": holding.to_dict(), "message": f"Reserve ratio updated for {holding.currency_code}"}


@router.get("/metrics")
def get_metrics(
    currency: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Total value, risk-weighted assets, capital adequacy and liquidity"""
    try:
        metrics = system.treasury.metrics(currency.upper() if currency else None)
    except Exception as e:
        raise http_error(e, "calculate treasury metrics")

    return metrics.to_dict()
