"""
Multi-Currency Support Module

Static exchange-rate tables, currency conversion, and display formatting.
All amounts are Decimal; floats coming from the backend are converted through
their string form before any arithmetic.

Two tables are kept, mirroring the dashboard:
    RATES_PER_USD  units of each currency bought by one US dollar, used for
                   conversion between any two supported currencies
    LOCATIONS      ZAR-anchored display rates for the location selector
"""

from decimal import Decimal, ROUND_HALF_UP, getcontext
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from enum import Enum

# Set global decimal context for financial precision
getcontext().prec = 28


class UnsupportedCurrencyError(ValueError):
    """Raised when a currency code is not in the rate table"""

    def __init__(self, code: str):
        super().__init__(f"Unsupported currency: {code}")
        self.code = code


class Currency(Enum):
    """ISO 4217 currency codes with precision, symbol and display name"""
    USD = ("USD", 2, "$", "US Dollar")
    EUR = ("EUR", 2, "€", "Euro")
    GBP = ("GBP", 2, "£", "British Pound")
    CAD = ("CAD", 2, "C$", "Canadian Dollar")
    AUD = ("AUD", 2, "A$", "Australian Dollar")
    ZAR = ("ZAR", 2, "R", "South African Rand")
    JPY = ("JPY", 0, "¥", "Japanese Yen")
    CHF = ("CHF", 2, "CHF", "Swiss Franc")
    CNY = ("CNY", 2, "¥", "Chinese Yuan")
    INR = ("INR", 2, "₹", "Indian Rupee")

    def __init__(self, code: str, precision: int, symbol: str, display_name: str):
        self.code = code
        self.precision = precision
        self.symbol = symbol
        self.display_name = display_name

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        try:
            return cls[code.upper()]
        except (KeyError, AttributeError):
            raise UnsupportedCurrencyError(str(code))


def to_decimal(value: Any) -> Decimal:
    """Convert a backend value (str, int, float, None) to Decimal"""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# Units of currency per 1 USD
RATES_PER_USD: Dict[str, Decimal] = {
    "USD": Decimal('1.0'),
    "EUR": Decimal('0.85'),
    "GBP": Decimal('0.73'),
    "CAD": Decimal('1.25'),
    "AUD": Decimal('1.35'),
    "ZAR": Decimal('18.5'),
    "JPY": Decimal('110'),
    "CHF": Decimal('0.92'),
    "CNY": Decimal('7.14'),
    "INR": Decimal('83.33'),
}


def supported_currencies() -> List[str]:
    return list(RATES_PER_USD.keys())


def convert_amount(
    amount: Any,
    from_code: str,
    to_code: str,
    rates: Mapping[str, Decimal] = RATES_PER_USD
) -> Decimal:
    """
    Re-express an amount in another currency through the USD-anchored table.

    The result is not rounded; callers quantize for display.

    Raises:
        UnsupportedCurrencyError: If either code is missing from the table
    """
    amount = to_decimal(amount)
    if from_code == to_code:
        return amount

    if from_code not in rates:
        raise UnsupportedCurrencyError(from_code)
    if to_code not in rates:
        raise UnsupportedCurrencyError(to_code)

    usd_amount = amount / rates[from_code]
    return usd_amount * rates[to_code]


def usd_value(amount: Any, code: str, rates: Mapping[str, Decimal] = RATES_PER_USD) -> Decimal:
    """USD equivalent of an amount held in code"""
    return convert_amount(amount, code, "USD", rates)


class CurrencyConverter:
    """Cross rates between currencies from a static rate table"""

    def __init__(self, rates: Optional[Mapping[str, Decimal]] = None):
        self._rates: Dict[str, Decimal] = dict(rates or RATES_PER_USD)

    def get_rate(self, from_code: str, to_code: str) -> Decimal:
        """Units of to_code per one unit of from_code"""
        return convert_amount(Decimal('1'), from_code, to_code, self._rates)

    def rate_matrix(self) -> Dict[str, Dict[str, str]]:
        """Cross rates for every supported pair, rounded to 6 places for display"""
        quantum = Decimal('0.000001')
        return {
            src: {
                dst: str(self.get_rate(src, dst).quantize(quantum, rounding=ROUND_HALF_UP))
                for dst in self._rates
            }
            for src in self._rates
        }


@dataclass(frozen=True)
class ZarQuote:
    """Foreign-exchange desk quote: rand price of one unit and its 24h move"""
    code: str
    current_rate: Decimal
    change_24h: Decimal


# Rand per unit of foreign currency, as shown on the foreign exchange desk
ZAR_QUOTES: Dict[str, ZarQuote] = {
    "USD": ZarQuote("USD", Decimal('18.50'), Decimal('0.27')),
    "EUR": ZarQuote("EUR", Decimal('20.00'), Decimal('-0.15')),
    "GBP": ZarQuote("GBP", Decimal('23.50'), Decimal('0.42')),
    "JPY": ZarQuote("JPY", Decimal('0.12'), Decimal('-0.003')),
    "CAD": ZarQuote("CAD", Decimal('13.50'), Decimal('0.18')),
    "AUD": ZarQuote("AUD", Decimal('12.20'), Decimal('-0.08')),
    "CHF": ZarQuote("CHF", Decimal('20.50'), Decimal('0.35')),
    "CNY": ZarQuote("CNY", Decimal('2.55'), Decimal('-0.02')),
}


@dataclass(frozen=True)
class LocationCurrency:
    """Display currency for a user-selected location"""
    code: str
    name: str
    symbol: str
    locale: str
    exchange_rate: Decimal  # Multiplier from ZAR


LOCATIONS: Dict[str, LocationCurrency] = {
    "ZA": LocationCurrency("ZAR", "South Africa", "R", "en-ZA", Decimal('1')),
    "GB": LocationCurrency("GBP", "United Kingdom", "£", "en-GB", Decimal('0.053')),
    "US": LocationCurrency("USD", "United States", "$", "en-US", Decimal('0.055')),
    "DE": LocationCurrency("EUR", "Germany", "€", "de-DE", Decimal('0.050')),
    "JP": LocationCurrency("JPY", "Japan", "¥", "ja-JP", Decimal('7.45')),
    "AU": LocationCurrency("AUD", "Australia", "A$", "en-AU", Decimal('0.082')),
    "CA": LocationCurrency("CAD", "Canada", "C$", "en-CA", Decimal('0.074')),
    "CH": LocationCurrency("CHF", "Switzerland", "CHF", "de-CH", Decimal('0.049')),
}


def get_location(location_code: str) -> LocationCurrency:
    try:
        return LOCATIONS[location_code.upper()]
    except KeyError:
        raise ValueError(f"Unknown location: {location_code}")


def convert_for_location(amount_zar: Any, location_code: str) -> Decimal:
    return to_decimal(amount_zar) * get_location(location_code).exchange_rate


def format_for_location(amount_zar: Any, location_code: str = "ZA") -> str:
    """
    Format a rand amount in the currency of the selected location.

    JPY shows no decimals; the euro symbol is a suffix, every other symbol a
    prefix.
    """
    location = get_location(location_code)
    converted = convert_for_location(amount_zar, location_code)
    places = 0 if location.code == "JPY" else 2
    quantized = converted.quantize(Decimal('0.1') ** places, rounding=ROUND_HALF_UP)
    formatted = f"{quantized:,.{places}f}"

    if location.code == "EUR":
        return f"{formatted} {location.symbol}"
    return f"{location.symbol}{formatted}"


def format_salary(amount: Any, code: str) -> str:
    """Symbol followed by the amount rounded to whole units, e.g. ``R45,000``"""
    try:
        symbol = Currency.from_code(code).symbol
    except UnsupportedCurrencyError:
        symbol = code
    rounded = to_decimal(amount).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return f"{symbol}{rounded:,.0f}"


def format_zar(amount: Any) -> str:
    """Statement-style rand formatting, e.g. ``R -1,200.50``"""
    value = to_decimal(amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return f"R {value:,.2f}"
