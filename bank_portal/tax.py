"""
Tax Estimation Module

Estimates a user's tax position from account balances bucketed by type.
This is a fixed-formula illustration over static South African brackets:
nothing is persisted and no history is kept.

Every breakdown row has a non-negative taxable amount, and the summary's
total liability is exactly the sum of the rows' tax due.
"""

from decimal import Decimal
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .currency import to_decimal

ZERO = Decimal('0')

# (lower bound, upper bound or None for the top bracket, marginal rate)
INCOME_TAX_BRACKETS: List[Tuple[Decimal, Optional[Decimal], Decimal]] = [
    (Decimal('0'), Decimal('237100'), Decimal('0.18')),
    (Decimal('237100'), Decimal('370500'), Decimal('0.26')),
    (Decimal('370500'), Decimal('512800'), Decimal('0.31')),
    (Decimal('512800'), Decimal('673000'), Decimal('0.36')),
    (Decimal('673000'), Decimal('857900'), Decimal('0.39')),
    (Decimal('857900'), Decimal('1817000'), Decimal('0.41')),
    (Decimal('1817000'), None, Decimal('0.45')),
]

CGT_INCLUSION_RATE = Decimal('0.4')
CGT_ANNUAL_EXCLUSION = Decimal('40000')
TOP_MARGINAL_RATE = Decimal('0.45')
SAVINGS_GAIN_RATE = Decimal('0.05')
CRYPTO_GAIN_RATE = Decimal('0.25')
DIVIDEND_YIELD = Decimal('0.02')
DIVIDEND_WITHHOLDING_RATE = Decimal('0.20')
INTEREST_YIELD = Decimal('0.06')
INTEREST_MARGINAL_RATE = Decimal('0.31')
DEFAULT_CRYPTO_PORTFOLIO_VALUE = Decimal('1250000000')

# Account types summed into the dashboard total balance
DASHBOARD_ACCOUNT_TYPES = ("main", "savings")


class TaxStatus(Enum):
    OUTSTANDING = "Outstanding"
    ESTIMATED = "Estimated"


@dataclass
class TaxInputs:
    """Balances bucketed by account type"""
    total_balance: Decimal = ZERO
    main_account_balance: Decimal = ZERO
    savings_balance: Decimal = ZERO
    credit_card_balance: Decimal = ZERO

    @classmethod
    def from_balances(cls, balances: Dict[str, Any], all_accounts: bool = False) -> 'TaxInputs':
        """
        Build inputs from a ``{account_type: balance}`` mapping.

        The dashboard total is main plus savings. The dual-salary flow passes
        all_accounts=True to total every account, loans and credit included.
        """
        values = {k: to_decimal(v) for k, v in balances.items()}
        if all_accounts:
            total = sum(values.values(), ZERO)
        else:
            total = sum((values.get(t, ZERO) for t in DASHBOARD_ACCOUNT_TYPES), ZERO)
        return cls(
            total_balance=total,
            main_account_balance=values.get("main", ZERO),
            savings_balance=values.get("savings", ZERO),
            credit_card_balance=values.get("credit", ZERO),
        )


@dataclass
class TaxBreakdownItem:
    category: str
    taxable_amount: Decimal
    rate: str
    tax_due: Decimal
    status: TaxStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "taxable_amount": str(self.taxable_amount),
            "rate": self.rate,
            "tax_due": str(self.tax_due),
            "status": self.status.value,
        }


@dataclass
class TaxSummary:
    total_taxable_income: Decimal
    income_tax: Decimal
    capital_gains_tax: Decimal
    crypto_tax_liability: Decimal
    breakdown: List[TaxBreakdownItem] = field(default_factory=list)

    @property
    def total_tax_liability(self) -> Decimal:
        return sum((item.tax_due for item in self.breakdown), ZERO)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_taxable_income": str(self.total_taxable_income),
            "income_tax": str(self.income_tax),
            "capital_gains_tax": str(self.capital_gains_tax),
            "crypto_tax_liability": str(self.crypto_tax_liability),
            "total_tax_liability": str(self.total_tax_liability),
            "breakdown": [item.to_dict() for item in self.breakdown],
        }


def progressive_income_tax(annual_income: Decimal,
                           brackets: Iterable[Tuple[Decimal, Optional[Decimal], Decimal]] = INCOME_TAX_BRACKETS
                           ) -> Decimal:
    """Tax due on annual_income across progressive brackets"""
    remaining = max(ZERO, annual_income)
    tax = ZERO
    for lower, upper, rate in brackets:
        if remaining <= 0:
            break
        width = remaining if upper is None else min(remaining, upper - lower)
        tax += width * rate
        remaining -= width
    return tax


def capital_gains_tax(gains: Decimal) -> Decimal:
    """CGT on gains above the annual exclusion at the top marginal rate"""
    return max(ZERO, gains - CGT_ANNUAL_EXCLUSION) * CGT_INCLUSION_RATE * TOP_MARGINAL_RATE


def calculate_taxes(inputs: TaxInputs,
                    crypto_portfolio_value: Decimal = DEFAULT_CRYPTO_PORTFOLIO_VALUE) -> TaxSummary:
    """
    Estimate taxes for the given balances.

    Args:
        inputs: Balances bucketed by account type
        crypto_portfolio_value: Simulated crypto holdings in rand

    Returns:
        TaxSummary with one row per tax category
    """
    annual_income = max(ZERO, inputs.total_balance * 12)
    income_tax = progressive_income_tax(annual_income)

    savings = max(ZERO, inputs.savings_balance)
    main = max(ZERO, inputs.main_account_balance)

    savings_gains = max(ZERO, savings * SAVINGS_GAIN_RATE - CGT_ANNUAL_EXCLUSION)
    savings_cgt = savings_gains * CGT_INCLUSION_RATE * TOP_MARGINAL_RATE

    crypto_gains = max(ZERO, to_decimal(crypto_portfolio_value) * CRYPTO_GAIN_RATE)
    crypto_tax = capital_gains_tax(crypto_gains)

    dividend_base = main * DIVIDEND_YIELD
    interest_base = savings * INTEREST_YIELD

    breakdown = [
        TaxBreakdownItem(
            category="Personal Income Tax",
            taxable_amount=annual_income,
            rate="Progressive (18%-45%)",
            tax_due=income_tax,
            status=TaxStatus.OUTSTANDING,
        ),
        TaxBreakdownItem(
            category="Capital Gains Tax - Savings",
            taxable_amount=savings_gains + CGT_ANNUAL_EXCLUSION,
            rate="18% (40% inclusion)",
            tax_due=savings_cgt,
            status=TaxStatus.ESTIMATED,
        ),
        TaxBreakdownItem(
            category="Capital Gains Tax - Crypto",
            taxable_amount=crypto_gains,
            rate="18% (40% inclusion)",
            tax_due=crypto_tax,
            status=TaxStatus.OUTSTANDING,
        ),
        TaxBreakdownItem(
            category="Dividend Withholding Tax",
            taxable_amount=dividend_base,
            rate="20%",
            tax_due=dividend_base * DIVIDEND_WITHHOLDING_RATE,
            status=TaxStatus.ESTIMATED,
        ),
        TaxBreakdownItem(
            category="Interest Income Tax",
            taxable_amount=interest_base,
            rate="Marginal Rate",
            tax_due=interest_base * INTEREST_MARGINAL_RATE,
            status=TaxStatus.OUTSTANDING,
        ),
    ]

    return TaxSummary(
        total_taxable_income=annual_income,
        income_tax=income_tax,
        capital_gains_tax=savings_cgt,
        crypto_tax_liability=crypto_tax,
        breakdown=breakdown,
    )


def monthly_tax_deduction(summary: TaxSummary, share: Decimal = Decimal('1')) -> Decimal:
    """Monthly slice of the total liability, optionally split across salary accounts"""
    return summary.total_tax_liability / 12 * share
