"""
Tests for form validation
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError

from bank_portal.schemas import BeneficiaryForm, LocalTransferForm, SendMoneyForm


def send_money(**overrides):
    data = {
        "recipient_name": "John Doe",
        "recipient_email": "john@example.com",
        "bank_name": "Chase Bank",
        "account_number": "1234567890",
        "currency": "USD",
        "amount": "100.00",
    }
    data.update(overrides)
    return SendMoneyForm(**data)


class TestSendMoneyForm:
    """Test send-money field rules"""

    def test_valid_form(self):
        form = send_money(swift_code="ABSAZAJJ", branch_code="250655")
        assert form.amount == Decimal('100.00')
        assert form.swift_code == "ABSAZAJJ"

    def test_optional_codes_default_to_empty(self):
        form = send_money()
        assert form.swift_code == ""
        assert form.branch_code == ""

    @pytest.mark.parametrize("account_number", ["123456789", "12345678901234567", "12345abcde"])
    def test_account_number_rules(self, account_number):
        with pytest.raises(ValidationError):
            send_money(account_number=account_number)

    def test_branch_code_must_be_six_digits(self):
        with pytest.raises(ValidationError):
            send_money(branch_code="12345")

    def test_swift_code_format(self):
        with pytest.raises(ValidationError):
            send_money(swift_code="BAD")
        assert send_money(swift_code="DEUTDEFF500").swift_code == "DEUTDEFF500"

    def test_email_format(self):
        with pytest.raises(ValidationError) as excinfo:
            send_money(recipient_email="not-an-email")
        assert "Please enter a valid email." in str(excinfo.value)

    @pytest.mark.parametrize("amount", ["0", "-5", "1000000.01", "10.001"])
    def test_amount_rules(self, amount):
        with pytest.raises(ValidationError):
            send_money(amount=amount)

    def test_amount_ceiling_is_inclusive(self):
        assert send_money(amount="1000000").amount == Decimal('1000000')


class TestOtherForms:
    """Test local transfer and beneficiary forms"""

    def test_local_transfer_requires_positive_amount(self):
        with pytest.raises(ValidationError):
            LocalTransferForm(account_holder_name="Jane", bank_name="FNB",
                              account_number="12345678", amount="0")

    def test_local_transfer_account_length(self):
        with pytest.raises(ValidationError):
            LocalTransferForm(account_holder_name="Jane", bank_name="FNB",
                              account_number="1234", amount="10")

    def test_local_transfer_is_rand_only(self):
        form = LocalTransferForm(account_holder_name="Jane", bank_name="FNB", account_number="12345678",
                                 amount="10", currency="USD", recipient_email="jane@example.com")

        assert "currency" not in LocalTransferForm.model_fields
        assert "recipient_email" not in LocalTransferForm.model_fields
        assert form.amount == Decimal('10')

    def test_beneficiary_blank_email_is_none(self):
        form = BeneficiaryForm(beneficiary_name="John", bank_name="FNB",
                               account_number="1", beneficiary_email="")
        assert form.beneficiary_email is None

    def test_beneficiary_bad_email(self):
        with pytest.raises(ValidationError):
            BeneficiaryForm(beneficiary_name="John", bank_name="FNB",
                            account_number="1", beneficiary_email="nope")
