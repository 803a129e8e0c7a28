"""
Bank statement
"""

from datetime import date, datetime
from typing import Callable, List, Optional

from ..accounts import Account
from ..currency import format_zar
from ..transactions import Transaction
from .base import GREEN, PDFDocument, GeneratedDocument, iso_day, render, slugify


def statement_filename(account_name: str, day: Optional[date] = None) -> str:
    return f"statement-{slugify(account_name)}-{iso_day(day)}.pdf"


def _display_date(value: Optional[str]) -> str:
    if not value:
        return ""
    return datetime.fromisoformat(value).strftime("%Y/%m/%d")


def generate_statement(
    holder_name: str,
    account: Account,
    transactions: List[Transaction],
    period_start: datetime,
    period_end: datetime,
    formatter: Callable = format_zar,
    day: Optional[date] = None
) -> GeneratedDocument:
    """
    Statement for one account over a period, newest transactions first.

    An empty transaction list renders a "No transactions found" line.
    """

    def build() -> GeneratedDocument:
        pdf = PDFDocument("Bank Statement")
        pdf.title("Bank Statement", size=22)
        pdf.line(f"Account Holder: {holder_name or ''}", size=12, leading=17)
        pdf.line(f"Account Name: {account.account_name}", size=12, leading=17)
        pdf.line(f"Account Number: {account.account_number or ''}", size=12, leading=17)
        pdf.spacer(6)
        pdf.line(
            f"Statement Period: {period_start.strftime('%Y/%m/%d')} - {period_end.strftime('%Y/%m/%d')}",
            size=12, leading=22
        )

        if not transactions:
            pdf.line("No transactions found for this period.")
        else:
            pdf.table(
                ["Date", "Description", "Amount (R)"],
                [[_display_date(tx.transaction_date), tx.name, formatter(tx.amount)] for tx in transactions],
                widths=[100, 280, 135],
                header_fill=GREEN,
                align=['left', 'left', 'right'],
            )

        return pdf.finish(statement_filename(account.account_name, day))

    return render("statement", build)
