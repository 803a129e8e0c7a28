"""
Twelve-month cashflow forecast
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional

from ..currency import format_zar
from .base import DARK, SLATE, PDFDocument, GeneratedDocument, iso_day, render


@dataclass
class ForecastMonth:
    label: str
    inflow: Decimal
    outflow: Decimal
    closing_balance: Decimal


def cashflow_forecast_filename(day: Optional[date] = None) -> str:
    return f"cashflow-forecast-{iso_day(day)}.pdf"


def forecast_months(starting_balance: Decimal, first_month: date, months: int = 12,
                    monthly_deposit: Decimal = Decimal('1000000')) -> List[ForecastMonth]:
    """One salary deposit per month starting with first_month; nothing flows out"""
    rows = []
    balance = starting_balance
    for offset in range(months):
        year, month = divmod(first_month.month - 1 + offset, 12)
        balance += monthly_deposit
        rows.append(ForecastMonth(
            label=date(first_month.year + year, month + 1, 1).strftime("%B %Y"),
            inflow=monthly_deposit,
            outflow=Decimal('0'),
            closing_balance=balance,
        ))
    return rows


def generate_cashflow_forecast(
    holder_name: str,
    starting_balance: Decimal,
    months: int = 12,
    monthly_deposit: Decimal = Decimal('1000000'),
    formatter: Callable[[Decimal], str] = format_zar,
    day: Optional[date] = None
) -> GeneratedDocument:
    """
    Month-by-month projection of the balance under a fixed salary deposit.
    """

    def build() -> GeneratedDocument:
        today = day or date.today()
        pdf = PDFDocument("Cashflow Forecast")
        pdf.title("Cashflow Forecast")
        pdf.line(f"Client: {holder_name}", color=SLATE)
        pdf.line(f"Date Generated: {iso_day(today)}", color=SLATE)
        pdf.line(f"Starting Balance: {formatter(starting_balance)}", color=SLATE, leading=24)

        rows = forecast_months(starting_balance, today, months, monthly_deposit)
        if not rows:
            pdf.line("No forecast months requested.", color=SLATE)
            return pdf.finish(cashflow_forecast_filename(today))

        pdf.table(
            ["Month", "Description", "Inflow", "Outflow", "Closing Balance"],
            [
                [row.label, "Salary Deposit", formatter(row.inflow), formatter(row.outflow),
                 formatter(row.closing_balance)]
                for row in rows
            ],
            widths=[100, 115, 100, 80, 120],
            header_fill=DARK,
            align=['left', 'left', 'right', 'right', 'right'],
            striped=True,
        )
        return pdf.finish(cashflow_forecast_filename(today))

    return render("cashflow forecast", build)
