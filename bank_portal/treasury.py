"""
Treasury Module

Currency reserve holdings and the treasury transaction log, with the Basel III
style metrics shown on the treasury dashboard: USD valuation, risk-weighted
assets, capital adequacy ratio and average liquidity ratio.
"""

from decimal import Decimal
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any
from enum import Enum
import logging

from .backend import BackendClient, NotFoundError, Query
from .cache import QueryCache
from .currency import CurrencyConverter, to_decimal, usd_value
from .logging_config import log_action

logger = logging.getLogger("bank_portal.treasury")

MIN_CAPITAL_ADEQUACY = Decimal('8')
MIN_LIQUIDITY_RATIO = Decimal('0.1')
MAX_LIQUIDITY_RATIO = Decimal('1.0')
LIQUIDITY_STEP = Decimal('0.05')


class TreasuryTransactionType(Enum):
    CONVERSION = "conversion"
    INJECTION = "injection"
    WITHDRAWAL = "withdrawal"
    ADJUSTMENT = "adjustment"


@dataclass
class TreasuryHolding:
    id: str
    currency_code: str
    currency_name: str
    amount: Decimal
    reserve_ratio: Decimal
    liquidity_ratio: Decimal
    risk_weight: Decimal
    last_updated: Optional[str] = None
    updated_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'TreasuryHolding':
        return cls(
            id=row["id"],
            currency_code=row["currency_code"],
            currency_name=row.get("currency_name") or row["currency_code"],
            amount=to_decimal(row.get("amount")),
            reserve_ratio=to_decimal(row.get("reserve_ratio")),
            liquidity_ratio=to_decimal(row.get("liquidity_ratio")),
            risk_weight=to_decimal(row.get("risk_weight")),
            last_updated=row.get("last_updated"),
            updated_by=row.get("updated_by"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "currency_code": self.currency_code,
            "currency_name": self.currency_name,
            "amount": str(self.amount),
            "reserve_ratio": str(self.reserve_ratio),
            "liquidity_ratio": str(self.liquidity_ratio),
            "risk_weight": str(self.risk_weight),
            "last_updated": self.last_updated,
            "updated_by": self.updated_by,
        }


@dataclass
class TreasuryTransaction:
    id: str
    from_currency: Optional[str]
    to_currency: Optional[str]
    amount: Decimal
    exchange_rate: Decimal
    transaction_type: TreasuryTransactionType
    reason: Optional[str] = None
    executed_by: Optional[str] = None
    executed_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'TreasuryTransaction':
        return cls(
            id=row["id"],
            from_currency=row.get("from_currency"),
            to_currency=row.get("to_currency"),
            amount=to_decimal(row.get("amount")),
            exchange_rate=to_decimal(row.get("exchange_rate") or 1),
            transaction_type=TreasuryTransactionType(row["transaction_type"]),
            reason=row.get("reason"),
            executed_by=row.get("executed_by"),
            executed_at=row.get("executed_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_currency": self.from_currency,
            "to_currency": self.to_currency,
            "amount": str(self.amount),
            "exchange_rate": str(self.exchange_rate),
            "transaction_type": self.transaction_type.value,
            "reason": self.reason,
            "executed_by": self.executed_by,
            "executed_at": self.executed_at,
        }


@dataclass
class TreasuryMetrics:
    total_value_usd: Decimal
    risk_weighted_assets: Decimal
    capital_adequacy_ratio: Decimal
    average_liquidity_ratio: Decimal

    @property
    def meets_capital_requirement(self) -> bool:
        return self.capital_adequacy_ratio >= MIN_CAPITAL_ADEQUACY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_value_usd": str(self.total_value_usd),
            "risk_weighted_assets": str(self.risk_weighted_assets),
            "capital_adequacy_ratio": str(self.capital_adequacy_ratio),
            "average_liquidity_ratio": str(self.average_liquidity_ratio),
            "meets_capital_requirement": self.meets_capital_requirement,
        }


def total_value_usd(holdings: List[TreasuryHolding]) -> Decimal:
    """Sum of holdings valued in US dollars"""
    return sum((usd_value(h.amount, h.currency_code) for h in holdings), Decimal('0'))


def risk_weighted_assets(holdings: List[TreasuryHolding]) -> Decimal:
    return sum((h.amount * h.risk_weight for h in holdings), Decimal('0'))


def capital_adequacy_ratio(holdings: List[TreasuryHolding]) -> Decimal:
    """Total USD value over risk-weighted assets, as a percentage (0 when RWA is 0)"""
    rwa = risk_weighted_assets(holdings)
    if rwa <= 0:
        return Decimal('0')
    return total_value_usd(holdings) / rwa * 100


def average_liquidity_ratio(holdings: List[TreasuryHolding]) -> Decimal:
    if not holdings:
        return Decimal('0')
    return sum((h.liquidity_ratio for h in holdings), Decimal('0')) / len(holdings)


class TreasuryManager:
    """
    Treasury holdings and transactions, optionally scoped to one currency
    """

    def __init__(self, backend: BackendClient, cache: QueryCache,
                 converter: Optional[CurrencyConverter] = None):
        self.backend = backend
        self.cache = cache
        self.converter = converter or CurrencyConverter()
        self.holdings_table = "treasury_holdings"
        self.transactions_table = "treasury_transactions"

    def holdings(self, currency: Optional[str] = None) -> List[TreasuryHolding]:
        """Holdings, most recently updated first"""

        def fetch():
            query = Query(self.holdings_table)
            if currency:
                query.eq("currency_code", currency)
            return self.backend.select(query.order("last_updated", descending=True))

        rows = self.cache.get_or_fetch((self.holdings_table, currency), fetch)
        return [TreasuryHolding.from_row(row) for row in rows]

    def get_holding(self, holding_id: str) -> TreasuryHolding:
        row = self.backend.select_one(Query(self.holdings_table).eq("id", holding_id))
        if row is None:
            raise NotFoundError(f"Treasury holding {holding_id} not found")
        return TreasuryHolding.from_row(row)

    def transactions(self, currency: Optional[str] = None, limit: int = 10) -> List[TreasuryTransaction]:
        """Latest treasury transactions touching currency on either side"""

        def fetch():
            if not currency:
                return self.backend.select(
                    Query(self.transactions_table).order("executed_at", descending=True).limit(limit)
                )
            merged = {}
            for column in ("from_currency", "to_currency"):
                rows = self.backend.select(
                    Query(self.transactions_table).eq(column, currency)
                    .order("executed_at", descending=True).limit(limit)
                )
                for row in rows:
                    merged[row["id"]] = row
            ordered = sorted(merged.values(), key=lambda r: r.get("executed_at") or "", reverse=True)
            return ordered[:limit]

        rows = self.cache.get_or_fetch((self.transactions_table, currency, limit), fetch)
        return [TreasuryTransaction.from_row(row) for row in rows]

    def execute_transaction(
        self,
        user_id: str,
        from_currency: str,
        to_currency: str,
        amount: Decimal,
        transaction_type: TreasuryTransactionType = TreasuryTransactionType.CONVERSION,
        reason: Optional[str] = None
    ) -> TreasuryTransaction:
        """
        Record a treasury transaction at the static cross rate.

        Raises:
            UnsupportedCurrencyError: If either currency has no rate
            ValueError: If the amount is not positive
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValueError("Amount must be positive")
        rate = self.converter.get_rate(from_currency, to_currency)

        created = self.backend.insert(self.transactions_table, {
            "from_currency": from_currency,
            "to_currency": to_currency,
            "amount": amount,
            "exchange_rate": rate,
            "transaction_type": transaction_type.value,
            "reason": reason,
            "executed_by": user_id,
        })
        self.cache.invalidate(self.transactions_table)
        log_action(
            logger, "info", "Treasury transaction executed",
            user_id=user_id, action="treasury_transaction", resource=self.transactions_table,
            extra={"from": from_currency, "to": to_currency, "amount": str(amount),
                   "type": transaction_type.value}
        )
        return TreasuryTransaction.from_row(created[0])

    def _update_holding(self, user_id: str, holding_id: str, changes: Dict[str, Any]) -> TreasuryHolding:
        changes = dict(changes, last_updated=datetime.now(timezone.utc), updated_by=user_id)
        updated = self.backend.update(Query(self.holdings_table).eq("id", holding_id), changes)
        if not updated:
            raise NotFoundError(f"Treasury holding {holding_id} not found")
        self.cache.invalidate(self.holdings_table)
        return TreasuryHolding.from_row(updated[0])

    def adjust_liquidity(self, user_id: str, holding_id: str, new_ratio: Decimal) -> TreasuryHolding:
        """Set a holding's liquidity ratio, clamped to 10%..100%"""
        ratio = min(MAX_LIQUIDITY_RATIO, max(MIN_LIQUIDITY_RATIO, to_decimal(new_ratio)))
        holding = self._update_holding(user_id, holding_id, {"liquidity_ratio": ratio})
        logger.info(f"Liquidity ratio for {holding.currency_code} set to {ratio}")
        return holding

    def step_liquidity(self, user_id: str, holding_id: str, increase: bool) -> TreasuryHolding:
        """Move the liquidity ratio up or down by one 5% step"""
        holding = self.get_holding(holding_id)
        delta = LIQUIDITY_STEP if increase else -LIQUIDITY_STEP
        return self.adjust_liquidity(user_id, holding_id, holding.liquidity_ratio + delta)

    def adjust_reserve(self, user_id: str, holding_id: str, new_ratio: Decimal) -> TreasuryHolding:
        """Set a holding's reserve ratio (0..1)"""
        ratio = to_decimal(new_ratio)
        if ratio < 0 or ratio > 1:
            raise ValueError("Reserve ratio must be between 0 and 1")
        return self._update_holding(user_id, holding_id, {"reserve_ratio": ratio})

    def metrics(self, currency: Optional[str] = None) -> TreasuryMetrics:
        holdings = self.holdings(currency)
        return TreasuryMetrics(
            total_value_usd=total_value_usd(holdings),
            risk_weighted_assets=risk_weighted_assets(holdings),
            capital_adequacy_ratio=capital_adequacy_ratio(holdings),
            average_liquidity_ratio=average_liquidity_ratio(holdings),
        )
