"""
Transfer Module

Outgoing payments from the user's main account: the local (domestic) transfer
and the send-money (international) payment. Each transfer is two independent
backend writes, a debit transaction followed by a balance update, with no
atomicity between them.
"""

from decimal import Decimal, ROUND_HALF_UP
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .backend import BackendClient, NotFoundError
from .cache import QueryCache
from .currency import convert_amount
from .accounts import Account, AccountManager, AccountType
from .transactions import Transaction, TransactionManager
from .schemas import LocalTransferForm, SendMoneyForm
from .logging_config import log_action

logger = logging.getLogger("bank_portal.transfers")

TRANSFER_CATEGORY = "Transfer"
TRANSFER_ICON = "💸"


class InsufficientFundsError(ValueError):
    """The main account balance does not cover the transfer"""

    def __init__(self, balance: Decimal, amount: Decimal):
        super().__init__("Insufficient funds.")
        self.balance = balance
        self.amount = amount


@dataclass
class TransferReceipt:
    transaction: Transaction
    account: Account
    amount_zar: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transaction": self.transaction.to_dict(),
            "account": self.account.to_dict(),
            "amount_zar": str(self.amount_zar),
        }


class TransferService:
    """
    Debits the main account and records the outgoing transaction
    """

    def __init__(self, backend: BackendClient, cache: QueryCache,
                 accounts: AccountManager, transactions: TransactionManager):
        self.backend = backend
        self.cache = cache
        self.accounts = accounts
        self.transactions = transactions

    def _main_account(self, user_id: str) -> Account:
        main = self.accounts.get_by_type(user_id, AccountType.MAIN)
        if main is None:
            raise NotFoundError("Main account not found.")
        return main

    def _debit(self, user_id: str, amount: Decimal, recipient_name: str,
               recipient_bank_name: str, recipient_account_number: str,
               recipient_swift_code: Optional[str]) -> TransferReceipt:
        main = self._main_account(user_id)
        if main.balance < amount:
            raise InsufficientFundsError(main.balance, amount)

        transaction = self.transactions.record(
            user_id,
            main.id,
            name=f"Transfer to {recipient_name}",
            amount=-amount,
            category=TRANSFER_CATEGORY,
            icon=TRANSFER_ICON,
            recipient_name=recipient_name,
            recipient_bank_name=recipient_bank_name,
            recipient_account_number=recipient_account_number,
            recipient_swift_code=recipient_swift_code or None,
        )
        account = self.accounts.update_balance(user_id, main.id, main.balance - amount)

        self.cache.invalidate("accounts", user_id)
        self.cache.invalidate("transactions", user_id)
        self.cache.invalidate("monthly_spending", user_id)
        return TransferReceipt(transaction=transaction, account=account, amount_zar=amount)

    def local_transfer(self, user_id: str, form: LocalTransferForm) -> TransferReceipt:
        """
        Domestic transfer in rand from the main account.

        Raises:
            NotFoundError: If the user has no main account
            InsufficientFundsError: If the main balance is below the amount
        """
        receipt = self._debit(
            user_id, form.amount, form.account_holder_name, form.bank_name,
            form.account_number, form.swift_code
        )
        log_action(
            logger, "info", f"Local transfer to {form.account_holder_name}",
            user_id=user_id, action="local_transfer", resource="transactions",
            extra={"amount": str(form.amount)}
        )
        return receipt

    def send_money(self, user_id: str, form: SendMoneyForm,
                   user_email: Optional[str] = None) -> TransferReceipt:
        """
        International payment; the main account is debited the rand equivalent.

        Raises:
            UnsupportedCurrencyError: If the form currency has no rate
            NotFoundError: If the user has no main account
            InsufficientFundsError: If the main balance is below the rand amount
        """
        amount_zar = convert_amount(form.amount, form.currency.upper(), "ZAR").quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )
        receipt = self._debit(
            user_id, amount_zar, form.recipient_name, form.bank_name,
            form.account_number, form.swift_code
        )

        self.backend.invoke("send-transaction-email", {
            "recipientEmail": form.recipient_email,
            "recipientName": form.recipient_name,
            "senderEmail": user_email,
            "amount": form.amount,
            "currency": form.currency.upper(),
            "transactionId": receipt.transaction.id,
        })
        log_action(
            logger, "info", f"Sent money to {form.recipient_name}",
            user_id=user_id, action="send_money", resource="transactions",
            extra={"amount": str(form.amount), "currency": form.currency.upper()}
        )
        return receipt
