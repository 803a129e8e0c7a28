"""
Foreign exchange endpoints
"""

from decimal import Decimal, ROUND_HALF_UP
from fastapi import APIRouter, Depends, HTTPException, Query

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import http_error
from ..currency import (
    LOCATIONS, ZAR_QUOTES, Currency, convert_amount, format_for_location, supported_currencies
)


router = APIRouter()


@router.get("/rates")
def get_rates(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Cross-rate matrix and the rand quotes of the exchange desk"""
    return {
        "base": "USD",
        "currencies": supported_currencies(),
        "rates": system.converter.rate_matrix(),
        "zar_quotes": [
            {"code": q.code, "current_rate": str(q.current_rate), "change_24h": str(q.change_24h)}
            for q in ZAR_QUOTES.values()
        ],
    }


@router.get("/convert")
def convert(
    amount: Decimal = Query(..., ge=0),
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    user: CurrentUser = Depends(get_current_user)
):
    try:
        converted = convert_amount(amount, from_currency.upper(), to_currency.upper())
    except Exception as e:
        raise http_error(e, "convert amount")

    return {
        "amount": str(amount),
        "from": from_currency.upper(),
        "to": to_currency.upper(),
        "converted": str(converted.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)),
    }


@router.get("/locations")
def list_locations(user: CurrentUser = Depends(get_current_user)):
    return {
        "locations": [
            {
                "location": key,
                "name": loc.name,
                "currency": loc.code,
                "symbol": loc.symbol,
                "locale": loc.locale,
                "exchange_rate": str(loc.exchange_rate),
            }
            for key, loc in LOCATIONS.items()
        ]
    }


@router.get("/format")
def format_amount(
    amount: Decimal,
    location: str = "ZA",
    user: CurrentUser = Depends(get_current_user)
):
    """Rand amount rendered in the selected location's currency"""
    try:
        formatted = format_for_location(amount, location)
    except Exception as e:
        raise http_error(e, "format amount")

    return {"amount_zar": str(amount), "location": location.upper(), "formatted": formatted}


@router.get("/{currency_code}")
def currency_detail(
    currency_code: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Rates of one currency against every other supported currency"""
    code = currency_code.upper()
    if code not in supported_currencies():
        raise HTTPException(status_code=404, detail=f"Currency {code} not found")

    currency = Currency.from_code(code)
    quote = ZAR_QUOTES.get(code)
    return {
        "code": code,
        "name": currency.display_name,
        "symbol": currency.symbol,
        "rates": system.converter.rate_matrix()[code],
        "zar_quote": {
            "current_rate": str(quote.current_rate),
            "change_24h": str(quote.change_24h),
        } if quote else None,
    }
