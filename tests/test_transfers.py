"""
Tests for local transfers and international send-money payments
"""

import pytest
from decimal import Decimal

from bank_portal.accounts import AccountType
from bank_portal.currency import UnsupportedCurrencyError
from bank_portal.schemas import LocalTransferForm, SendMoneyForm
from bank_portal.transfers import InsufficientFundsError, TransferService

from conftest import USER_ID


@pytest.fixture
def service(backend, cache, accounts, transactions):
    return TransferService(backend, cache, accounts, transactions)


def local_form(amount="1000"):
    return LocalTransferForm(
        account_holder_name="Jane Smith",
        bank_name="Standard Bank",
        account_number="12345678",
        amount=Decimal(amount),
    )


def send_form(amount="100", currency="USD"):
    return SendMoneyForm(
        recipient_name="John Doe",
        recipient_email="john@example.com",
        bank_name="Chase Bank",
        account_number="1234567890",
        swift_code="CHASUS33",
        currency=currency,
        amount=Decimal(amount),
    )


class TestLocalTransfer:
    """Test domestic transfers from the main account"""

    def test_debits_main_account(self, service, accounts):
        receipt = service.local_transfer(USER_ID, local_form())

        assert receipt.amount_zar == Decimal('1000')
        assert receipt.account.balance == Decimal('124750.00')
        assert accounts.get_by_type(USER_ID, AccountType.MAIN).balance == Decimal('124750.00')

    def test_records_outgoing_transaction(self, service, transactions):
        receipt = service.local_transfer(USER_ID, local_form("250.25"))

        tx = receipt.transaction
        assert tx.name == "Transfer to Jane Smith"
        assert tx.amount == Decimal('-250.25')
        assert tx.category == "Transfer"
        assert tx.recipient_bank_name == "Standard Bank"
        assert tx.id in {t.id for t in transactions.recent(USER_ID, limit=10)}

    def test_insufficient_funds(self, service, accounts, backend):
        with pytest.raises(InsufficientFundsError):
            service.local_transfer(USER_ID, local_form("200000"))

        assert accounts.get_by_type(USER_ID, AccountType.MAIN).balance == Decimal('125750.00')
        assert backend.count("transactions") == 4

    def test_exact_balance_is_allowed(self, service):
        receipt = service.local_transfer(USER_ID, local_form("125750.00"))
        assert receipt.account.balance == Decimal('0')

    def test_does_not_notify(self, service, backend):
        service.local_transfer(USER_ID, local_form())
        assert backend.invocations == []


class TestSendMoney:
    """Test international payments"""

    def test_debits_rand_equivalent(self, service, accounts):
        receipt = service.send_money(USER_ID, send_form("100", "USD"))

        assert receipt.amount_zar == Decimal('1850.00')
        assert receipt.transaction.amount == Decimal('-1850.00')
        assert receipt.transaction.recipient_swift_code == "CHASUS33"
        assert accounts.get_by_type(USER_ID, AccountType.MAIN).balance == Decimal('123900.00')

    def test_invokes_email_function(self, service, backend):
        receipt = service.send_money(USER_ID, send_form(), user_email="me@example.com")

        name, payload = backend.invocations[0]
        assert name == "send-transaction-email"
        assert payload["recipientEmail"] == "john@example.com"
        assert payload["senderEmail"] == "me@example.com"
        assert payload["currency"] == "USD"
        assert payload["transactionId"] == receipt.transaction.id

    def test_rand_payment_is_not_converted(self, service):
        receipt = service.send_money(USER_ID, send_form("500", "ZAR"))
        assert receipt.amount_zar == Decimal('500.00')

    def test_unsupported_currency_leaves_balance(self, service, accounts, backend):
        with pytest.raises(UnsupportedCurrencyError):
            service.send_money(USER_ID, send_form("100", "XYZ"))

        assert accounts.get_by_type(USER_ID, AccountType.MAIN).balance == Decimal('125750.00')
        assert backend.invocations == []

    def test_insufficient_funds_after_conversion(self, service, backend):
        # 10,000 GBP is well over R125,750
        with pytest.raises(InsufficientFundsError):
            service.send_money(USER_ID, send_form("10000", "GBP"))
        assert backend.invocations == []
