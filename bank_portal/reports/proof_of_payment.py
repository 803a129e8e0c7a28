"""
Proof of payment for a single transaction
"""

from datetime import date, datetime
from typing import Callable, List, Optional

from ..accounts import Account
from ..currency import format_zar
from ..transactions import Transaction
from .base import SLATE, PDFDocument, GeneratedDocument, iso_day, render

PLACEHOLDER_SENDER = "External Employer Co."
PLACEHOLDER_BANK = "Other Bank Inc."
PLACEHOLDER_ACCOUNT = "**** **** **** 3456"


def proof_of_payment_filename(transaction_id: str, day: Optional[date] = None) -> str:
    return f"proof-of-payment-{transaction_id}-{iso_day(day)}.pdf"


def counterparty_rows(transaction: Transaction) -> List[List[str]]:
    """Name/bank/account rows for the other side of the transaction"""
    if transaction.recipient_bank_name:
        rows = [
            ["Name", transaction.recipient_name or ""],
            ["Bank", transaction.recipient_bank_name],
            ["Account Number", transaction.recipient_account_number or ""],
        ]
        if transaction.recipient_swift_code:
            rows.append(["SWIFT Code", transaction.recipient_swift_code])
        return rows

    if transaction.is_deposit:
        name = PLACEHOLDER_SENDER
    else:
        name = transaction.name.replace("Transfer to ", "")
    return [
        ["Name", name],
        ["Bank", PLACEHOLDER_BANK],
        ["Account Number", PLACEHOLDER_ACCOUNT],
    ]


def generate_proof_of_payment(
    holder_name: str,
    transaction: Transaction,
    account: Account,
    formatter: Callable = format_zar,
    day: Optional[date] = None,
    generated_at: Optional[datetime] = None
) -> GeneratedDocument:
    def build() -> GeneratedDocument:
        occurred = transaction.occurred_at
        stamp = (generated_at or datetime.now()).strftime("%Y/%m/%d %H:%M:%S")

        pdf = PDFDocument("Proof of Payment")
        pdf.title("Proof of Payment", size=22)
        pdf.rule(width=1)
        pdf.spacer(4)

        pdf.heading("My Details", size=14)
        pdf.key_value_table([
            ["Account Holder", holder_name or ""],
            ["Account Name", account.account_name],
            ["Account Number", account.account_number or ""],
        ])

        pdf.heading("Sender Details" if transaction.is_deposit else "Recipient Details", size=14)
        pdf.key_value_table(counterparty_rows(transaction))

        pdf.heading("Transaction Details", size=14)
        pdf.key_value_table([
            ["Transaction ID", transaction.id],
            ["Description", transaction.name],
            ["Date", occurred.strftime("%Y/%m/%d %H:%M:%S") if occurred else ""],
            ["Category", transaction.category or "Uncategorized"],
            ["Amount", formatter(abs(transaction.amount))],
            ["Status", "Completed"],
        ])

        pdf.spacer(10)
        pdf.paragraph(
            f"Generated on {stamp}. This is a computer-generated document and does not require a signature.",
            size=8, color=SLATE, leading=11
        )

        return pdf.finish(proof_of_payment_filename(transaction.id, day))

    return render("proof of payment", build)
