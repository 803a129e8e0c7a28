"""
Tests for PDF document generation
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from bank_portal.accounts import Account, AccountType
from bank_portal.currency import format_salary
from bank_portal.tax import TaxInputs, calculate_taxes
from bank_portal.transactions import Transaction
from bank_portal.treasury import TreasuryHolding
from bank_portal.reports import (
    COMPLIANCE_ERRORS, DocumentGenerationError, PDFDocument, SlipAccount, find_errors,
    generate_compliance_letter, generate_proof_of_payment, generate_salary_slip,
    generate_statement, generate_treasury_reserves, BalanceLine, generate_account_confirmation,
    generate_balance_sheet, generate_cashflow_forecast, split_accounts,
)
from bank_portal.reports.balance_sheet import net_worth
from bank_portal.reports.cashflow import forecast_months
from bank_portal.reports.base import encodable, render, slugify
from bank_portal.reports.compliance import total_affected_transfers
from bank_portal.reports.proof_of_payment import counterparty_rows
from bank_portal.reports.salary_slip import salary_slip_filename

DAY = date(2024, 5, 1)
START = datetime(2024, 2, 1, tzinfo=timezone.utc)
END = datetime(2024, 5, 1, tzinfo=timezone.utc)


def main_account():
    return Account(
        id="acc-1", user_id="user-1", account_type=AccountType.MAIN,
        account_name="Main Account", account_number="1234567890123456",
        balance=Decimal('125750.00'),
    )


def transaction(name="Groceries", amount="-850.75", index=0, **extra):
    return Transaction(
        id=f"tx-{index}", account_id="acc-1", name=name, amount=Decimal(amount),
        category="Food", transaction_date=f"2024-04-{(index % 28) + 1:02d}T10:00:00+00:00",
        **extra
    )


def assert_pdf(document):
    assert document.content.startswith(b"%PDF")
    assert document.media_type == "application/pdf"
    assert document.page_count >= 1


class TestPrimitives:
    """Test the PDF helpers"""

    def test_slugify(self):
        assert slugify("Main Account") == "main-account"
        assert slugify("  ") == "document"

    def test_encodable_replaces_unsupported_glyphs(self):
        assert encodable("₹100") == "?100"
        assert encodable("R1,000 €") == "R1,000 €"

    def test_wrap(self):
        pdf = PDFDocument("Test")
        lines = pdf.wrap("word " * 200, 200)
        assert len(lines) > 1
        assert pdf.wrap("", 200) == [""]

    def test_render_wraps_failures(self):
        def broken():
            raise RuntimeError("canvas exploded")

        with pytest.raises(DocumentGenerationError) as excinfo:
            render("bank statement", broken)
        assert str(excinfo.value) == "Failed to generate bank statement. Please try again."


class TestStatement:
    """Test account statements"""

    def test_statement(self):
        doc = generate_statement("Test User", main_account(),
                                 [transaction(index=i) for i in range(3)], START, END, day=DAY)
        assert_pdf(doc)
        assert doc.filename == "statement-main-account-2024-05-01.pdf"
        assert doc.page_count == 1

    def test_empty_statement_still_renders(self):
        doc = generate_statement("Test User", main_account(), [], START, END, day=DAY)
        assert_pdf(doc)

    def test_long_statement_spans_pages(self):
        many = [transaction(index=i) for i in range(120)]
        doc = generate_statement("Test User", main_account(), many, START, END, day=DAY)
        assert doc.page_count > 1


class TestProofOfPayment:
    """Test proof of payment documents"""

    def test_generate(self):
        tx = transaction("Transfer to Jane Smith", "-1000.00", recipient_name="Jane Smith",
                         recipient_bank_name="Standard Bank", recipient_account_number="12345678")
        doc = generate_proof_of_payment("Test User", tx, main_account(), day=DAY,
                                        generated_at=datetime(2024, 5, 1, 9, 30))
        assert_pdf(doc)
        assert doc.filename == "proof-of-payment-tx-0-2024-05-01.pdf"

    def test_recipient_rows(self):
        tx = transaction("Transfer to Jane", "-10", recipient_name="Jane",
                         recipient_bank_name="Chase Bank", recipient_account_number="1234567890",
                         recipient_swift_code="CHASUS33")
        assert counterparty_rows(tx) == [
            ["Name", "Jane"],
            ["Bank", "Chase Bank"],
            ["Account Number", "1234567890"],
            ["SWIFT Code", "CHASUS33"],
        ]

    def test_placeholder_rows(self):
        deposit = transaction("Salary", "5000")
        assert counterparty_rows(deposit)[0] == ["Name", "External Employer Co."]

        withdrawal = transaction("Transfer to Jane", "-10")
        rows = counterparty_rows(withdrawal)
        assert rows[0] == ["Name", "Jane"]
        assert rows[1] == ["Bank", "Other Bank Inc."]
        assert rows[2] == ["Account Number", "**** **** **** 3456"]


class TestSalarySlip:
    """Test salary slips"""

    def _breakdown(self):
        return calculate_taxes(TaxInputs(main_account_balance=Decimal('50000'),
                                         savings_balance=Decimal('20000'),
                                         total_balance=Decimal('70000'))).breakdown

    def test_fnb_slip(self):
        account = SlipAccount("Test User", "62123456789", "FNB", branch_code="250655")
        doc = generate_salary_slip("fnb", "Senior Data Analyst", Decimal('10000'), "ZAR", account,
                                   self._breakdown(), "Acme Analytics", "1 Main Road", day=DAY)
        assert_pdf(doc)
        assert doc.filename == "salary_slip_fnb_Senior_Data_Analyst_2024-05-01.pdf"

    def test_mock_slip_in_other_currency(self):
        account = SlipAccount("Test User", "MOCK12345678", "Mock Banking System")
        doc = generate_salary_slip("mock", "Engineer", Decimal('10000'), "INR", account,
                                   self._breakdown(), "Acme", "Durban", formatter=format_salary, day=DAY)
        assert_pdf(doc)

    def test_unknown_kind(self):
        account = SlipAccount("Test User", "1", "FNB")
        with pytest.raises(ValueError):
            generate_salary_slip("payroll", "Engineer", Decimal('1'), "ZAR", account, [], "Acme", "Durban")

    def test_filename(self):
        assert salary_slip_filename("mock", "Data  Engineer", DAY) == "salary_slip_mock_Data_Engineer_2024-05-01.pdf"


class TestComplianceLetter:
    """Test the compliance review letter"""

    def test_catalogue(self):
        assert [e.id for e in COMPLIANCE_ERRORS] == ["1", "2", "3", "4", "5", "6"]
        assert total_affected_transfers(COMPLIANCE_ERRORS) == 210

    def test_find_by_id_or_code_keeps_catalogue_order(self):
        code = COMPLIANCE_ERRORS[0].error_code
        found = find_errors(["4", code])
        assert [e.id for e in found] == ["1", "4"]

    def test_find_unknown(self):
        with pytest.raises(ValueError):
            find_errors(["99"])

    def test_letter(self):
        doc = generate_compliance_letter(list(COMPLIANCE_ERRORS), day=DAY, reference="BULK-TRANSFER-1")
        assert_pdf(doc)
        assert doc.filename == "compliance-letter-2024-05-01.pdf"
        assert doc.page_count >= 2

    def test_letter_requires_errors(self):
        with pytest.raises(ValueError):
            generate_compliance_letter([])


class TestTreasuryReserves:
    """Test the treasury reserves summary"""

    def _holding(self, code, amount):
        return TreasuryHolding(
            id=f"h-{code}", currency_code=code, currency_name=code, amount=Decimal(amount),
            reserve_ratio=Decimal('0.1'), liquidity_ratio=Decimal('0.3'), risk_weight=Decimal('1'),
            last_updated="2024-04-30T12:00:00+00:00",
        )

    def test_summary(self):
        doc = generate_treasury_reserves(
            [self._holding("ZAR", "18500000"), self._holding("USD", "1000000")], day=DAY
        )
        assert_pdf(doc)
        assert doc.filename == "treasury-reserves-summary-2024-05-01.pdf"

    def test_empty_summary(self):
        assert_pdf(generate_treasury_reserves([], day=DAY))


class TestBalanceSheet:
    """Test the personal balance sheet"""

    def _accounts(self):
        def account(kind, name, balance):
            return Account(id=f"acc-{kind}", user_id="user-1", account_type=kind, account_name=name,
                           account_number=None, balance=Decimal(balance))

        return [
            account(AccountType.MAIN, "Main Account", "125750.00"),
            account(AccountType.SAVINGS, "Savings Account", "32450.00"),
            account(AccountType.CREDIT, "Credit Card", "-2430.50"),
            account(AccountType.LOAN, "Business Loan", "-185000.00"),
        ]

    def test_split_and_net_worth(self):
        assets, liabilities = split_accounts(self._accounts())

        assert [line.name for line in assets] == ["Main Account", "Savings Account"]
        assert [line.name for line in liabilities] == ["Credit Card", "Business Loan"]
        assert net_worth(assets, liabilities) == Decimal('-29230.50')

    def test_generate(self):
        assets, liabilities = split_accounts(self._accounts())
        doc = generate_balance_sheet("Demo User", assets, liabilities, day=DAY)
        assert_pdf(doc)
        assert doc.filename == "personal-balance-sheet-2024-05-01.pdf"

    def test_empty_sheet(self):
        assert net_worth([], []) == Decimal('0')
        assert_pdf(generate_balance_sheet("Demo User", [], [], day=DAY))

    def test_single_asset(self):
        assert net_worth([BalanceLine("Main Account", Decimal('10'))], []) == Decimal('10')


class TestAccountConfirmation:
    """Test the account confirmation letter"""

    def test_letter(self):
        account = main_account()
        account.created_at = "2023-01-15T09:30:00+00:00"
        doc = generate_account_confirmation("Demo User", account, "Lovable Bank Inc.",
                                            "123 Finance Street, Money City, 12345", day=DAY)
        assert_pdf(doc)
        assert doc.filename == "account-confirmation-1234567890123456-2024-05-01.pdf"

    def test_number_is_stripped_to_alphanumerics(self):
        account = main_account()
        account.account_number = "1234-5678 90"
        doc = generate_account_confirmation("", account, "Bank", "Street", day=DAY)
        assert doc.filename == "account-confirmation-1234567890-2024-05-01.pdf"

    def test_zero_balance_without_number(self):
        account = main_account()
        account.account_number = None
        account.balance = Decimal('0')
        doc = generate_account_confirmation("Demo User", account, "Bank", "Street", day=DAY)
        assert_pdf(doc)
        assert doc.filename == "account-confirmation-account-2024-05-01.pdf"


class TestCashflowForecast:
    """Test the twelve-month cashflow forecast"""

    def test_months_roll_over_the_year(self):
        rows = forecast_months(Decimal('158200'), date(2024, 11, 20), months=3)

        assert [r.label for r in rows] == ["November 2024", "December 2024", "January 2025"]
        assert rows[0].closing_balance == Decimal('1158200')
        assert rows[-1].closing_balance == Decimal('3158200')
        assert all(r.outflow == Decimal('0') for r in rows)

    def test_generate(self):
        doc = generate_cashflow_forecast("Demo User", Decimal('158200'), day=DAY)
        assert_pdf(doc)
        assert doc.filename == "cashflow-forecast-2024-05-01.pdf"

    def test_zero_balance_and_no_months(self):
        assert forecast_months(Decimal('0'), DAY, months=0) == []
        assert_pdf(generate_cashflow_forecast("Demo User", Decimal('0'), months=0, day=DAY))
