"""
Compliance & technical review letter

Built from a selection of the known bulk-transfer error codes. The letter
lists each selected error with its resolution and the information requested
from the receiving bank.
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Any

from .base import FONT_BOLD, PDFDocument, GeneratedDocument, iso_day, render


@dataclass(frozen=True)
class ComplianceError:
    """A bulk-transfer error code with its remediation"""
    id: str
    error_code: str
    error_message: str
    severity: str  # critical, high, medium, low
    category: str  # database, compliance, api, regulatory
    description: str
    resolution: str
    baas_request: Optional[str]
    status_code: int
    affected_transfers: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "resolution": self.resolution,
            "baas_request": self.baas_request,
            "status_code": self.status_code,
            "affected_transfers": self.affected_transfers,
        }


COMPLIANCE_ERRORS: List[ComplianceError] = [
    ComplianceError(
        id="1",
        error_code="ERR_DB_CONN_TIMEOUT",
        error_message="Timeout connecting to receiver bank database",
        severity="critical",
        category="database",
        description="Connection timeout occurred when attempting to establish database connection "
                    "with receiving bank system",
        resolution="Request primary database connection parameters and timeout configurations "
                   "from receiving bank technical team",
        baas_request="REQUEST: Primary database endpoint, connection pool settings, timeout thresholds, "
                     "and failover configurations",
        status_code=504,
        affected_transfers=23,
    ),
    ComplianceError(
        id="2",
        error_code="ERR_INVALID_ACCOUNT_REF",
        error_message="Destination account reference not found in contra tables",
        severity="high",
        category="database",
        description="Beneficiary account reference cannot be located in receiving bank contra/lookup tables",
        resolution="Request foreign key mappings and account reference validation schemas from receiving bank",
        baas_request="REQUEST: Account reference table schema, foreign key constraints, "
                     "and account validation procedures",
        status_code=422,
        affected_transfers=47,
    ),
    ComplianceError(
        id="3",
        error_code="ERR_BAL_UPDATE_FAIL",
        error_message="Conflict on balance update query, possibly due to pending compliance flag",
        severity="high",
        category="compliance",
        description="Balance update operation conflicts with existing compliance review processes",
        resolution="Request compliance workflow status and balance update trigger specifications",
        baas_request="REQUEST: Compliance flag management procedures, balance update triggers, "
                     "and conflict resolution protocols",
        status_code=409,
        affected_transfers=12,
    ),
    ComplianceError(
        id="4",
        error_code="ERR_API_AUTH_DENIED",
        error_message="API request rejected due to missing/invalid credentials",
        severity="critical",
        category="api",
        description="Authentication credentials insufficient or expired for BaaS API access",
        resolution="Request updated API credentials and authentication token refresh procedures",
        baas_request="REQUEST: Updated API credentials, token refresh endpoints, "
                     "and authentication scope configurations",
        status_code=401,
        affected_transfers=89,
    ),
    ComplianceError(
        id="5",
        error_code="ERR_REGULATORY_REVIEW_PENDING",
        error_message="Transaction pending regulatory compliance review",
        severity="medium",
        category="regulatory",
        description="Transfer requires additional regulatory documentation before processing",
        resolution="Submit NCR number, FSP license, and banking license documentation",
        baas_request="REQUEST: Regulatory compliance workflow status and required documentation specifications",
        status_code=423,
        affected_transfers=5,
    ),
    ComplianceError(
        id="6",
        error_code="ERR_RETRY_LIMIT_EXCEEDED",
        error_message="Maximum retry attempts exceeded for transfer processing",
        severity="high",
        category="database",
        description="Transfer has exceeded maximum retry attempts due to persistent technical issues",
        resolution="Manual intervention required - escalate to bank technical operations team",
        baas_request="REQUEST: Retry configuration parameters, exponential backoff settings, "
                     "and manual override procedures",
        status_code=429,
        affected_transfers=34,
    ),
]

_BY_ID = {error.id: error for error in COMPLIANCE_ERRORS}
_BY_CODE = {error.error_code: error for error in COMPLIANCE_ERRORS}


def find_errors(keys: Iterable[str]) -> List[ComplianceError]:
    """
    Resolve ids or error codes against the catalogue, keeping catalogue order.

    Raises:
        ValueError: If any key is unknown
    """
    wanted = set()
    for key in keys:
        error = _BY_ID.get(key) or _BY_CODE.get(key)
        if error is None:
            raise ValueError(f"Unknown compliance error: {key}")
        wanted.add(error.id)
    return [error for error in COMPLIANCE_ERRORS if error.id in wanted]


def total_affected_transfers(errors: Iterable[ComplianceError]) -> int:
    return sum(error.affected_transfers for error in errors)


LEGAL_TEXT = [
    "The following identifiers may be required to complete compliance review:",
    "- NCR Number: [Pending Bank Confirmation]",
    "- FSP Number: [Pending Bank Confirmation]",
    "- Banking Licence Number: [Pending Bank Confirmation]",
    "",
    "Kindly confirm if any of these identifiers are mandatory and advise",
    "the procedure to register or provide them.",
]

BAAS_REQUESTS = [
    "We request your technical team provide the following for system integration:",
    "",
    "PRIMARY & FOREIGN KEY INFORMATION:",
    "- Account table primary key specifications",
    "- Foreign key constraints between transaction and account tables",
    "- Database schema for contra table mappings",
    "- Index configurations for performance optimization",
    "",
    "API CONFIGURATION DETAILS:",
    "- Authentication endpoints and token refresh procedures",
    "- Rate limiting configurations and retry policies",
    "- Webhook specifications for real-time status updates",
    "- API versioning and compatibility documentation",
]

SERVICE_LEVEL = [
    "We request acknowledgement of this letter within 3 business days,",
    "and a proposed resolution or interim workaround within 14 days.",
]

ESCALATION = [
    "If blockers cannot be resolved internally, this matter may be escalated",
    "to the South African Reserve Bank (SARB) for regulatory review.",
]


def compliance_letter_filename(day: Optional[date] = None) -> str:
    return f"compliance-letter-{iso_day(day)}.pdf"


def generate_compliance_letter(
    errors: List[ComplianceError],
    day: Optional[date] = None,
    reference: Optional[str] = None
) -> GeneratedDocument:
    """
    Args:
        errors: Selected errors; at least one is required
        reference: Letter reference, BULK-TRANSFER-<epoch ms> when omitted

    Raises:
        ValueError: If no errors were selected
    """
    if not errors:
        raise ValueError("Select at least one error to include in the letter")

    def build() -> GeneratedDocument:
        today = day or date.today()
        ref = reference or f"BULK-TRANSFER-{int(time.time() * 1000)}"

        pdf = PDFDocument("Compliance & Technical Review Letter")
        pdf.title("COMPLIANCE & TECHNICAL REVIEW LETTER", size=17, align='center')
        pdf.spacer(6)
        pdf.line(f"Date: {today.strftime('%Y/%m/%d')}", size=12, leading=16)
        pdf.line(f"Reference: {ref}", size=12, leading=26)

        pdf.line("To: Receiving Bank - Compliance & Technical Operations Team", font=FONT_BOLD, size=12, leading=16)
        pdf.line("Subject: Compliance & Technical Review - Bulk Transfer Operations", size=12, leading=26)

        pdf.heading("1. LEGAL AND REGULATORY DOCUMENTATION", size=12)
        for text in LEGAL_TEXT:
            pdf.line(text)
        pdf.spacer(10)

        pdf.heading("2. COMPLIANCE REVIEW BLOCKER", size=12)
        pdf.line("Bulk transfers are pending full acceptance on your systems. Until compliance")
        pdf.line("checks are confirmed, beneficiary balances cannot be updated.")
        pdf.line(f"Total affected transfers: {total_affected_transfers(errors)}")
        pdf.spacer(10)

        pdf.heading("3. TECHNICAL DATABASE ERRORS", size=12)
        pdf.line("During processing, the following error codes were raised:", leading=20)
        for error in errors:
            pdf.ensure_space(80)
            pdf.line(f"{error.error_code} ({error.status_code}):", font=FONT_BOLD)
            pdf.paragraph(error.error_message, indent=10)
            pdf.paragraph(f"Resolution: {error.resolution}", indent=10)
            if error.baas_request:
                pdf.paragraph(f"BaaS Request: {error.baas_request}", indent=10)
            pdf.line(f"Affected Transfers: {error.affected_transfers}", indent=10, leading=20)

        pdf.ensure_space(120)
        pdf.heading("4. BAAS ARBITRAGE INFORMATION REQUESTS", size=12)
        for text in BAAS_REQUESTS:
            pdf.line(text)
        pdf.spacer(10)

        pdf.heading("5. SERVICE-LEVEL EXPECTATION", size=12)
        for text in SERVICE_LEVEL:
            pdf.line(text)
        pdf.spacer(10)

        pdf.heading("6. ESCALATION PATH", size=12)
        for text in ESCALATION:
            pdf.line(text)
        pdf.spacer(20)

        pdf.ensure_space(110)
        pdf.line("Attachments:", font=FONT_BOLD)
        pdf.line("- Proof of Payment Documents (separate)")
        pdf.line("- System Error Logs (available on request)", leading=28)

        pdf.line("Signed,", leading=20)
        pdf.line("[Your Full Name]")
        pdf.line("[Your Contact Details]")

        return pdf.finish(compliance_letter_filename(day))

    return render("compliance letter", build)
