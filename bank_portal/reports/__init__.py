"""
Downloadable PDF documents
"""

from .base import DocumentGenerationError, GeneratedDocument, PDFDocument
from .account_confirmation import generate_account_confirmation
from .balance_sheet import BalanceLine, generate_balance_sheet, split_accounts
from .cashflow import generate_cashflow_forecast
from .compliance import COMPLIANCE_ERRORS, ComplianceError, find_errors, generate_compliance_letter
from .proof_of_payment import generate_proof_of_payment
from .salary_slip import SlipAccount, generate_salary_slip
from .statement import generate_statement
from .treasury import generate_treasury_reserves

__all__ = [
    "DocumentGenerationError",
    "GeneratedDocument",
    "PDFDocument",
    "generate_account_confirmation",
    "BalanceLine",
    "generate_balance_sheet",
    "split_accounts",
    "generate_cashflow_forecast",
    "COMPLIANCE_ERRORS",
    "ComplianceError",
    "find_errors",
    "generate_compliance_letter",
    "generate_proof_of_payment",
    "SlipAccount",
    "generate_salary_slip",
    "generate_statement",
    "generate_treasury_reserves",
]
