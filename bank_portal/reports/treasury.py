"""
Treasury reserves summary
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from ..treasury import TreasuryHolding
from .base import (
    DARK, SLATE, WARNING_RED, FONT, PDFDocument, GeneratedDocument, iso_day, render
)

WARNING_BANNER = "UNREALISED DATA - For demonstration purposes only"


def treasury_reserves_filename(day: Optional[date] = None) -> str:
    return f"treasury-reserves-summary-{iso_day(day)}.pdf"


def _percent(ratio: Decimal) -> str:
    return f"{ratio * 100:.1f}%"


def _updated_day(value: Optional[str]) -> str:
    if not value:
        return ""
    return datetime.fromisoformat(value).strftime("%Y-%m-%d")


def generate_treasury_reserves(
    holdings: List[TreasuryHolding],
    day: Optional[date] = None,
    generated_at: Optional[datetime] = None
) -> GeneratedDocument:
    """
    Holdings table sorted by currency code followed by summary statistics.
    """

    def build() -> GeneratedDocument:
        pdf = PDFDocument("Treasury Reserves Summary")
        pdf.title("Treasury Reserves Summary", size=18)
        pdf.line(f"Generated: {(generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M')}",
                 size=11, color=SLATE)
        pdf.line(WARNING_BANNER, size=10, color=WARNING_RED, leading=20)

        if not holdings:
            pdf.line("No treasury holdings found.", color=SLATE)
            return pdf.finish(treasury_reserves_filename(day))

        ordered = sorted(holdings, key=lambda h: h.currency_code)
        pdf.table(
            ["Currency", "Name", "Amount", "Reserve %", "Liquidity %", "Risk Weight", "Last Updated"],
            [
                [
                    h.currency_code,
                    h.currency_name,
                    f"{h.amount:,.2f}",
                    _percent(h.reserve_ratio),
                    _percent(h.liquidity_ratio),
                    f"{h.risk_weight:.2f}",
                    _updated_day(h.last_updated),
                ]
                for h in ordered
            ],
            widths=[55, 105, 95, 60, 65, 65, 70],
            header_fill=DARK,
            align=['left', 'left', 'right', 'right', 'right', 'right', 'left'],
            striped=True,
        )

        count = len(ordered)
        avg_reserve = sum((h.reserve_ratio for h in ordered), Decimal('0')) / count
        avg_liquidity = sum((h.liquidity_ratio for h in ordered), Decimal('0')) / count

        pdf.spacer(8)
        pdf.heading("Summary Statistics", size=12)
        pdf.line(f"Total Holdings: {count} currencies", font=FONT, color=SLATE)
        pdf.line(f"Average Reserve Ratio: {_percent(avg_reserve)}", color=SLATE)
        pdf.line(f"Average Liquidity Ratio: {_percent(avg_liquidity)}", color=SLATE)

        return pdf.finish(treasury_reserves_filename(day))

    return render("treasury reserves report", build)
