"""
Salary slip for one half of a dual-salary setup
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional

from ..currency import format_salary
from ..tax import TaxBreakdownItem
from .base import MARGIN, FONT_BOLD, SLATE, PDFDocument, GeneratedDocument, iso_day, render

SLIP_KINDS = ("fnb", "mock")


@dataclass
class SlipAccount:
    """Account receiving this half of the salary"""
    account_holder: str
    account_number: str
    bank_name: str
    branch_code: Optional[str] = None


def salary_slip_filename(kind: str, job_title: str, day: Optional[date] = None) -> str:
    return f"salary_slip_{kind}_{'_'.join(job_title.split())}_{iso_day(day)}.pdf"


def generate_salary_slip(
    kind: str,
    job_title: str,
    gross_salary: Decimal,
    currency: str,
    account: SlipAccount,
    tax_breakdown: List[TaxBreakdownItem],
    company_name: str,
    company_address: str,
    location: str = "Durban, ZA",
    formatter: Callable[[Decimal, str], str] = format_salary,
    day: Optional[date] = None
) -> GeneratedDocument:
    """
    Args:
        kind: "fnb" or "mock", the account this slip pays into
        gross_salary: Monthly amount paid into this account (half the salary)
        tax_breakdown: Rows from the tax estimate; each is shown as its
            monthly share for this account
    """
    if kind not in SLIP_KINDS:
        raise ValueError(f"Unknown salary slip kind: {kind}")

    def build() -> GeneratedDocument:
        today = day or date.today()
        total_tax = sum((item.tax_due for item in tax_breakdown), Decimal('0'))
        half_monthly_tax = total_tax / 12 / 2

        pdf = PDFDocument("Salary Slip")
        pdf.title("SALARY SLIP", size=20, align='center')
        pdf.line(company_name, size=12, align='center')
        pdf.line(company_address, size=12, align='center', leading=26)

        pdf.heading("Employee Details:")
        pdf.line(f"Name: {account.account_holder}")
        pdf.line(f"Position: {job_title}")
        pdf.line(f"Pay Period: {today.strftime('%Y/%m/%d')}")
        pdf.line(f"Location: {location}", leading=22)

        pdf.heading("Payment Details:")
        pdf.line(f"Bank: {account.bank_name}")
        pdf.line(f"Account Number: {account.account_number}")
        if kind == "fnb" and account.branch_code:
            pdf.line(f"Branch Code: {account.branch_code}")
        pdf.spacer(8)

        # Breakdown on the left, per-category tax on the right
        top = pdf.y
        pdf.heading("Salary Breakdown:")
        pdf.line(f"Annual Salary: {formatter(gross_salary * 24, currency)}")
        pdf.line(f"Monthly Gross (50%): {formatter(gross_salary, currency)}")
        pdf.line(f"Tax Deduction: {formatter(half_monthly_tax, currency)}")
        pdf.line(f"Net Payment: {formatter(gross_salary, currency)}")
        left_bottom = pdf.y

        y = top - 4
        pdf.draw_text("Tax Breakdown:", MARGIN + 280, y, FONT_BOLD, 13)
        y -= 19
        for item in tax_breakdown:
            share = item.tax_due / 12 / 2
            pdf.draw_text(f"{item.category}: {formatter(share, currency)}", MARGIN + 280, y, size=8)
            y -= 12
        pdf.y = min(left_bottom, y) - 20

        pdf.line("This is a system-generated salary slip for regulatory compliance purposes.",
                 size=8, color=SLATE, align='center', leading=12)
        pdf.line(f"Generated on: {today.strftime('%Y/%m/%d')}", size=8, color=SLATE, align='center')

        return pdf.finish(salary_slip_filename(kind, job_title, day))

    return render("salary slip", build)
