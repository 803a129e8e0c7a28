"""
Job Portal Module

Job listings and categories, listing filters (search, category, experience,
remote, region), salary conversion and the dual-salary setup that routes a
job's salary into two accounts: a generated salary account and an FNB
beneficiary.
"""

from decimal import Decimal
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any
import logging

from .backend import BackendClient, BackendError, NotFoundError, Query
from .cache import QueryCache
from .currency import convert_amount, format_salary, to_decimal
from .accounts import Account, AccountManager, AccountType
from .beneficiaries import Beneficiary, BeneficiaryManager
from .tax import TaxInputs, TaxSummary, calculate_taxes, DEFAULT_CRYPTO_PORTFOLIO_VALUE
from .logging_config import log_action

logger = logging.getLogger("bank_portal.jobs")

EXPERIENCE_LEVELS = ["entry", "mid", "senior", "executive"]

# Substring keywords checked in order; first region with a match wins
REGION_KEYWORDS: List[tuple] = [
    ("EMEA", ["europe", "uk", "london", "paris", "berlin", "madrid", "africa", "dubai",
              "middle east", "south africa", "egypt", "israel"]),
    ("NA", ["usa", "united states", "canada", "new york", "san francisco", "toronto",
            "north america", "chicago", "boston"]),
    ("LATAM", ["latin america", "brazil", "mexico", "argentina", "chile", "colombia",
               "peru", "venezuela"]),
    ("APAC", ["asia", "pacific", "china", "japan", "singapore", "australia", "india",
              "hong kong", "tokyo", "sydney", "mumbai", "beijing"]),
]
OTHER_REGION = "Other"

FNB_BANK_NAME = "FNB"


def region_for(location: str) -> str:
    """Map a free-text job location to EMEA, NA, LATAM, APAC or Other"""
    lowered = (location or "").lower()
    for region, keywords in REGION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return region
    return OTHER_REGION


def first_of_next_month(now: datetime) -> datetime:
    if now.month == 12:
        return now.replace(year=now.year + 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(month=now.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


@dataclass
class JobCategory:
    id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'JobCategory':
        return cls(id=row["id"], name=row["name"], description=row.get("description"))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}


@dataclass
class JobListing:
    id: str
    title: str
    category_id: Optional[str]
    description: str
    requirements: List[str]
    expected_salary_min: Decimal
    expected_salary_max: Decimal
    currency: str
    experience_level: str
    location: str
    remote_available: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'JobListing':
        requirements = row.get("requirements") or []
        if isinstance(requirements, str):
            requirements = [requirements]
        return cls(
            id=row["id"],
            title=row["title"],
            category_id=row.get("category_id"),
            description=row.get("description") or "",
            requirements=list(requirements),
            expected_salary_min=to_decimal(row.get("expected_salary_min")),
            expected_salary_max=to_decimal(row.get("expected_salary_max")),
            currency=row.get("currency") or "USD",
            experience_level=row.get("experience_level") or "entry",
            location=row.get("location") or "",
            remote_available=bool(row.get("remote_available")),
            created_at=row.get("created_at"),
        )

    @property
    def region(self) -> str:
        return region_for(self.location)

    def to_dict(self, display_currency: Optional[str] = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "category_id": self.category_id,
            "description": self.description,
            "requirements": self.requirements,
            "expected_salary_min": str(self.expected_salary_min),
            "expected_salary_max": str(self.expected_salary_max),
            "currency": self.currency,
            "experience_level": self.experience_level,
            "location": self.location,
            "remote_available": self.remote_available,
            "region": self.region,
            "created_at": self.created_at,
        }
        if display_currency:
            low = convert_amount(self.expected_salary_min, self.currency, display_currency)
            high = convert_amount(self.expected_salary_max, self.currency, display_currency)
            data["salary_range"] = f"{format_salary(low, display_currency)} - {format_salary(high, display_currency)}"
        return data


@dataclass
class JobFilters:
    """Listing filters; None or "all" disables a filter"""
    search: str = ""
    category_id: Optional[str] = None
    experience_level: Optional[str] = None
    remote_only: bool = False
    region: Optional[str] = None

    def matches(self, job: JobListing) -> bool:
        term = self.search.lower()
        if term and not (term in job.title.lower() or term in job.description.lower()
                         or term in job.location.lower()):
            return False
        if self.category_id not in (None, "all") and job.category_id != self.category_id:
            return False
        if self.experience_level not in (None, "all") and job.experience_level != self.experience_level:
            return False
        if self.remote_only and not job.remote_available:
            return False
        if self.region not in (None, "all") and job.region != self.region:
            return False
        return True


@dataclass
class SalarySetup:
    id: str
    user_id: str
    job_id: str
    job_title: str
    annual_salary: Decimal
    monthly_gross: Decimal
    monthly_net: Decimal
    fnb_account_holder: str
    fnb_account_number: str
    fnb_branch_code: str
    mock_account_id: Optional[str]
    next_payment_date: Optional[str]
    is_active: bool = True
    auto_email_enabled: bool = True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'SalarySetup':
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            job_id=row["job_id"],
            job_title=row["job_title"],
            annual_salary=to_decimal(row.get("annual_salary")),
            monthly_gross=to_decimal(row.get("monthly_gross")),
            monthly_net=to_decimal(row.get("monthly_net")),
            fnb_account_holder=row.get("fnb_account_holder") or "",
            fnb_account_number=row.get("fnb_account_number") or "",
            fnb_branch_code=row.get("fnb_branch_code") or "",
            mock_account_id=row.get("mock_account_id"),
            next_payment_date=row.get("next_payment_date"),
            is_active=bool(row.get("is_active", True)),
            auto_email_enabled=bool(row.get("auto_email_enabled", True)),
        )

    @property
    def net_per_account(self) -> Decimal:
        return self.monthly_net / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "job_id": self.job_id,
            "job_title": self.job_title,
            "annual_salary": str(self.annual_salary),
            "monthly_gross": str(self.monthly_gross),
            "monthly_net": str(self.monthly_net),
            "net_per_account": str(self.net_per_account),
            "fnb_account_holder": self.fnb_account_holder,
            "fnb_account_number": self.fnb_account_number,
            "fnb_branch_code": self.fnb_branch_code,
            "mock_account_id": self.mock_account_id,
            "next_payment_date": self.next_payment_date,
            "is_active": self.is_active,
            "auto_email_enabled": self.auto_email_enabled,
        }


@dataclass
class DualSalaryResult:
    setup: SalarySetup
    salary_account: Account
    beneficiary: Beneficiary
    tax: TaxSummary
    notified: bool = True
    warnings: List[str] = field(default_factory=list)


class JobPortal:
    """
    Job listings, salary setups and the dual-salary flow
    """

    def __init__(
        self,
        backend: BackendClient,
        cache: QueryCache,
        accounts: AccountManager,
        beneficiaries: BeneficiaryManager,
        crypto_portfolio_value: Decimal = DEFAULT_CRYPTO_PORTFOLIO_VALUE
    ):
        self.backend = backend
        self.cache = cache
        self.accounts = accounts
        self.beneficiaries = beneficiaries
        self.crypto_portfolio_value = crypto_portfolio_value

    def all_listings(self) -> List[JobListing]:
        rows = self.cache.get_or_fetch(
            ("job_listings",),
            lambda: self.backend.select(Query("job_listings").order("created_at", descending=True))
        )
        return [JobListing.from_row(row) for row in rows]

    def listings(self, filters: Optional[JobFilters] = None) -> List[JobListing]:
        """Listings newest first, narrowed by filters"""
        filters = filters or JobFilters()
        return [job for job in self.all_listings() if filters.matches(job)]

    def get_listing(self, job_id: str) -> JobListing:
        for job in self.all_listings():
            if job.id == job_id:
                return job
        raise NotFoundError(f"Job {job_id} not found")

    def categories(self) -> List[JobCategory]:
        rows = self.cache.get_or_fetch(
            ("job_categories",),
            lambda: self.backend.select(Query("job_categories").order("name"))
        )
        return [JobCategory.from_row(row) for row in rows]

    def convert_salary(self, amount: Any, from_code: str, to_code: str) -> Decimal:
        return convert_amount(amount, from_code, to_code)

    def category_stats(self, display_currency: str = "USD") -> List[Dict[str, Any]]:
        """Job count and average maximum salary per category"""
        jobs = self.all_listings()
        stats = []
        for category in self.categories():
            matching = [j for j in jobs if j.category_id == category.id]
            average = Decimal('0')
            if matching:
                average = sum((j.expected_salary_max for j in matching), Decimal('0')) / len(matching)
            stats.append({
                "category": category.to_dict(),
                "jobs": len(matching),
                "average_salary": format_salary(convert_amount(average, "USD", display_currency), display_currency),
            })
        return stats

    def experience_stats(self, display_currency: str = "USD") -> List[Dict[str, Any]]:
        """Average salary band per experience level"""
        jobs = self.all_listings()
        stats = []
        for level in EXPERIENCE_LEVELS:
            matching = [j for j in jobs if j.experience_level == level]
            avg_min = avg_max = Decimal('0')
            if matching:
                avg_min = sum((j.expected_salary_min for j in matching), Decimal('0')) / len(matching)
                avg_max = sum((j.expected_salary_max for j in matching), Decimal('0')) / len(matching)
            spread = None
            if avg_max > 0:
                spread = format_salary(convert_amount(avg_max - avg_min, "USD", display_currency), display_currency)
            stats.append({
                "level": level,
                "jobs": len(matching),
                "average_min": format_salary(convert_amount(avg_min, "USD", display_currency), display_currency),
                "average_max": format_salary(convert_amount(avg_max, "USD", display_currency), display_currency),
                "spread": spread or "N/A",
            })
        return stats

    def salary_setups(self, user_id: str, active_only: bool = True) -> List[SalarySetup]:
        def fetch():
            query = Query("job_salary_setups").eq("user_id", user_id)
            if active_only:
                query.eq("is_active", True)
            return self.backend.select(query.order("created_at", descending=True))

        rows = self.cache.get_or_fetch(("job_salary_setups", user_id, active_only), fetch)
        return [SalarySetup.from_row(row) for row in rows]

    def tax_for_user(self, user_id: str, all_accounts: bool = False) -> TaxSummary:
        """Tax estimate on the dashboard total, or on every account for salary flows"""
        return calculate_taxes(
            TaxInputs.from_balances(self.accounts.balances_by_type(user_id), all_accounts=all_accounts),
            self.crypto_portfolio_value
        )

    def setup_dual_salary(
        self,
        user_id: str,
        job_id: str,
        annual_salary: Decimal,
        fnb_account_holder: str,
        fnb_account_number: str,
        fnb_branch_code: str,
        user_email: Optional[str] = None,
        display_currency: str = "ZAR",
        now: Optional[datetime] = None
    ) -> DualSalaryResult:
        """
        Route a job's salary into a new salary account and an FNB beneficiary.

        Steps run as independent backend writes: salary account, FNB
        beneficiary (stored KYC-verified), salary setup row, then the salary
        notification function.

        Raises:
            ValueError: If any FNB detail is missing
            NotFoundError: If the job does not exist
            BackendError: If any write fails
        """
        if not (fnb_account_holder and fnb_account_number and fnb_branch_code):
            raise ValueError("Please fill in all FNB account details")

        job = self.get_listing(job_id)
        now = now or datetime.now(timezone.utc)
        annual_salary = to_decimal(annual_salary)

        # Starter accounts must exist before the salary account is added
        self.accounts.list_accounts(user_id)

        mock_number = f"MOCK{str(int(now.timestamp() * 1000))[-8:]}"
        salary_account = self.accounts.create_account(
            user_id,
            AccountType.SAVINGS,
            f"{job.title} Salary Account",
            mock_number,
            Decimal('0'),
        )

        beneficiary = self.beneficiaries.create(
            user_id,
            beneficiary_name=fnb_account_holder,
            bank_name=FNB_BANK_NAME,
            account_number=fnb_account_number,
            branch_code=fnb_branch_code,
            beneficiary_email=user_email or None,
        )

        tax = self.tax_for_user(user_id, all_accounts=True)
        monthly_gross = annual_salary / 12
        monthly_net = monthly_gross - tax.total_tax_liability / 12

        created = self.backend.insert("job_salary_setups", {
            "user_id": user_id,
            "job_id": job.id,
            "job_title": job.title,
            "annual_salary": annual_salary,
            "monthly_gross": monthly_gross,
            "monthly_net": monthly_net,
            "fnb_account_holder": fnb_account_holder,
            "fnb_account_number": fnb_account_number,
            "fnb_branch_code": fnb_branch_code,
            "mock_account_id": salary_account.id,
            "next_payment_date": first_of_next_month(now),
            "is_active": True,
            "auto_email_enabled": True,
        })
        self.cache.invalidate("job_salary_setups", user_id)
        setup = SalarySetup.from_row(created[0])

        result = DualSalaryResult(setup=setup, salary_account=salary_account,
                                  beneficiary=beneficiary, tax=tax)
        try:
            self.backend.invoke("send-salary-notification", {
                "userEmail": user_email,
                "jobTitle": job.title,
                "monthlySalary": format_salary(setup.net_per_account, display_currency),
                "setupComplete": True,
            })
        except BackendError as e:
            logger.warning(f"Salary notification for {job.title} failed: {e}")
            result.notified = False
            result.warnings.append("Salary notification could not be sent")

        log_action(
            logger, "info", f"Dual salary set up for {job.title}",
            user_id=user_id, action="setup_dual_salary", resource="job_salary_setups",
            extra={"job_id": job.id, "annual_salary": str(annual_salary)}
        )
        return result
