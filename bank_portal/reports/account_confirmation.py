"""
Account confirmation letter
"""

import re
from datetime import date, datetime
from typing import Optional

from ..accounts import Account
from ..currency import format_zar
from .base import SLATE, PDFDocument, GeneratedDocument, iso_day, render


def _account_digits(account: Account) -> str:
    return re.sub(r'[^A-Za-z0-9]', '', account.account_number or "")


def account_confirmation_filename(account: Account, day: Optional[date] = None) -> str:
    return f"account-confirmation-{_account_digits(account) or 'account'}-{iso_day(day)}.pdf"


def _opened_day(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    return datetime.fromisoformat(value).strftime("%Y-%m-%d")


def generate_account_confirmation(
    holder_name: str,
    account: Account,
    bank_name: str,
    bank_address: str,
    day: Optional[date] = None
) -> GeneratedDocument:
    """
    Letter confirming that the holder keeps ``account`` in good standing.
    """

    def build() -> GeneratedDocument:
        pdf = PDFDocument("Account Confirmation Letter")
        pdf.title("Account Confirmation Letter")
        pdf.line(bank_name, color=SLATE)
        pdf.line(bank_address, color=SLATE)
        pdf.line(f"Date: {iso_day(day)}", color=SLATE, leading=28)

        pdf.line("To whom it may concern,", leading=20)
        pdf.paragraph(
            f"This letter is to confirm that {holder_name or 'the client'} holds an account with "
            f"{bank_name}. The details of the account are as follows:"
        )
        pdf.spacer(8)
        pdf.key_value_table([
            ("Account Holder", holder_name or "N/A"),
            ("Account Name", account.account_name),
            ("Account Number", _account_digits(account) or "N/A"),
            ("Account Type", account.account_type.value.title()),
            ("Current Balance", format_zar(account.balance)),
            ("Account Opened", _opened_day(account.created_at)),
        ])
        pdf.spacer(8)
        pdf.paragraph("This account is active and in good standing as of the date of this letter.")
        pdf.spacer(16)
        pdf.line("Sincerely,", leading=28)
        pdf.line(f"{bank_name} Management")

        return pdf.finish(account_confirmation_filename(account, day))

    return render("account confirmation letter", build)
