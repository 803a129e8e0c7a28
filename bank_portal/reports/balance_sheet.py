"""
Personal balance sheet
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from ..accounts import Account
from ..currency import format_zar
from .base import GREEN, WARNING_RED, SLATE, PDFDocument, GeneratedDocument, iso_day, render

ZERO = Decimal('0')


@dataclass
class BalanceLine:
    """One named balance on the sheet; liabilities carry negative balances"""
    name: str
    balance: Decimal


def balance_sheet_filename(day: Optional[date] = None) -> str:
    return f"personal-balance-sheet-{iso_day(day)}.pdf"


def split_accounts(accounts: Sequence[Account]) -> Tuple[List[BalanceLine], List[BalanceLine]]:
    """Assets (main, savings) and liabilities (credit, loans) in account order"""
    assets = [BalanceLine(a.account_name, a.balance) for a in accounts if not a.is_liability]
    liabilities = [BalanceLine(a.account_name, a.balance) for a in accounts if a.is_liability]
    return assets, liabilities


def net_worth(assets: Sequence[BalanceLine], liabilities: Sequence[BalanceLine]) -> Decimal:
    return sum((line.balance for line in assets), ZERO) + sum((line.balance for line in liabilities), ZERO)


def generate_balance_sheet(
    holder_name: str,
    assets: Sequence[BalanceLine],
    liabilities: Sequence[BalanceLine],
    formatter: Callable[[Decimal], str] = format_zar,
    day: Optional[date] = None
) -> GeneratedDocument:
    """
    Assets and liabilities tables with their totals, followed by net worth.
    """

    def section(pdf: PDFDocument, title: str, lines: Sequence[BalanceLine], fill, total_label: str):
        total = sum((line.balance for line in lines), ZERO)
        pdf.table(
            [title, "Amount"],
            [[line.name, formatter(line.balance)] for line in lines],
            widths=[335, 180],
            header_fill=fill,
            size=10,
            align=['left', 'right'],
            foot=[total_label, formatter(total)],
        )
        pdf.spacer(6)

    def build() -> GeneratedDocument:
        pdf = PDFDocument("Personal Balance Sheet")
        pdf.title("Personal Balance Sheet")
        pdf.line(f"Client: {holder_name}", color=SLATE)
        pdf.line(f"Date Generated: {iso_day(day)}", color=SLATE, leading=24)

        section(pdf, "Assets", assets, GREEN, "Total Assets")
        section(pdf, "Liabilities", liabilities, WARNING_RED, "Total Liabilities")

        pdf.heading(f"Net Worth: {formatter(net_worth(assets, liabilities))}", size=14)
        return pdf.finish(balance_sheet_filename(day))

    return render("balance sheet", build)
