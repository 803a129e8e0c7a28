"""
Tests for the job portal: listings, filters, statistics and dual salary setup
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from bank_portal.accounts import AccountManager, AccountType
from bank_portal.backend import BackendError, InMemoryBackend, NotFoundError, Query
from bank_portal.beneficiaries import BeneficiaryManager
from bank_portal.jobs import JobFilters, JobPortal, first_of_next_month, region_for

from conftest import USER_ID, add_job


@pytest.fixture
def beneficiaries(backend, cache):
    return BeneficiaryManager(backend, cache, failure_rate=0.0)


@pytest.fixture
def portal(backend, cache, accounts, beneficiaries):
    return JobPortal(backend, cache, accounts, beneficiaries)


@pytest.fixture
def categories(backend):
    return {
        "data": backend.insert("job_categories", {"name": "Data", "description": "Analytics roles"})[0],
        "eng": backend.insert("job_categories", {"name": "Engineering"})[0],
    }


@pytest.fixture
def jobs(backend, categories):
    return [
        add_job(backend, "Senior Data Analyst", "Cape Town, South Africa",
                category_id=categories["data"]["id"], experience_level="senior"),
        add_job(backend, "Backend Engineer", "Toronto, Canada", category_id=categories["eng"]["id"],
                experience_level="mid", remote_available=True, salary_min="80000", salary_max="120000"),
        add_job(backend, "Platform Engineer", "Sydney, Australia", category_id=categories["eng"]["id"],
                experience_level="senior", salary_min="90000", salary_max="130000"),
    ]


class TestRegions:
    """Test free-text location to region mapping"""

    @pytest.mark.parametrize("location,region", [
        ("Cape Town, South Africa", "EMEA"),
        ("London, UK", "EMEA"),
        ("Toronto, Canada", "NA"),
        ("São Paulo, Brazil", "LATAM"),
        ("Sydney, Australia", "APAC"),
        ("Remote", "Other"),
        ("", "Other"),
    ])
    def test_region_for(self, location, region):
        assert region_for(location) == region

    def test_first_of_next_month(self):
        assert first_of_next_month(datetime(2024, 12, 15, 9, 30)) == datetime(2025, 1, 1)
        assert first_of_next_month(datetime(2024, 5, 31)) == datetime(2024, 6, 1)


class TestListings:
    """Test listing reads and filters"""

    def test_all_listings(self, portal, jobs):
        assert len(portal.listings()) == 3

    def test_search_matches_title_or_location(self, portal, jobs):
        assert [j.title for j in portal.listings(JobFilters(search="analyst"))] == ["Senior Data Analyst"]
        assert [j.title for j in portal.listings(JobFilters(search="toronto"))] == ["Backend Engineer"]

    def test_category_filter(self, portal, jobs, categories):
        engineering = portal.listings(JobFilters(category_id=categories["eng"]["id"]))
        assert len(engineering) == 2
        assert len(portal.listings(JobFilters(category_id="all"))) == 3

    def test_experience_and_remote_filters(self, portal, jobs):
        assert len(portal.listings(JobFilters(experience_level="senior"))) == 2
        assert [j.title for j in portal.listings(JobFilters(remote_only=True))] == ["Backend Engineer"]

    def test_region_filter(self, portal, jobs):
        assert [j.title for j in portal.listings(JobFilters(region="APAC"))] == ["Platform Engineer"]

    def test_get_listing(self, portal, jobs):
        assert portal.get_listing(jobs[0]["id"]).title == "Senior Data Analyst"
        with pytest.raises(NotFoundError):
            portal.get_listing("missing")

    def test_salary_range_in_display_currency(self, portal, jobs):
        data = portal.get_listing(jobs[0]["id"]).to_dict(display_currency="ZAR")
        assert data["salary_range"] == "R1,110,000 - R1,665,000"
        assert data["region"] == "EMEA"

    def test_categories_sorted_by_name(self, portal, categories):
        assert [c.name for c in portal.categories()] == ["Data", "Engineering"]


class TestStats:
    """Test category and experience statistics"""

    def test_category_stats(self, portal, jobs):
        stats = {s["category"]["name"]: s for s in portal.category_stats()}
        assert stats["Data"]["jobs"] == 1
        assert stats["Data"]["average_salary"] == "$90,000"
        assert stats["Engineering"]["jobs"] == 2
        assert stats["Engineering"]["average_salary"] == "$125,000"

    def test_experience_stats(self, portal, jobs):
        stats = {s["level"]: s for s in portal.experience_stats()}
        assert stats["senior"]["jobs"] == 2
        assert stats["senior"]["average_min"] == "$75,000"
        assert stats["senior"]["spread"] == "$35,000"
        assert stats["entry"]["jobs"] == 0
        assert stats["entry"]["spread"] == "N/A"


class TestDualSalary:
    """Test the dual salary setup flow"""

    NOW = datetime(2024, 5, 20, 10, 0, tzinfo=timezone.utc)

    def _setup(self, portal, job_id, **overrides):
        kwargs = dict(
            annual_salary=Decimal('240000'),
            fnb_account_holder="Test User",
            fnb_account_number="62123456789",
            fnb_branch_code="250655",
            user_email="test@example.com",
            now=self.NOW,
        )
        kwargs.update(overrides)
        return portal.setup_dual_salary(USER_ID, job_id, **kwargs)

    def test_creates_account_beneficiary_and_setup(self, portal, jobs, accounts, beneficiaries):
        result = self._setup(portal, jobs[0]["id"])

        assert result.salary_account.account_name == "Senior Data Analyst Salary Account"
        assert result.salary_account.account_number.startswith("MOCK")
        assert len(result.salary_account.account_number) == 12
        assert result.salary_account.balance == Decimal('0')

        assert result.beneficiary.bank_name == "FNB"
        assert result.beneficiary.kyc_verified is True
        assert result.beneficiary.branch_code == "250655"
        assert [b.id for b in beneficiaries.list(USER_ID)] == [result.beneficiary.id]

        setup = result.setup
        assert setup.monthly_gross == Decimal('20000')
        assert setup.mock_account_id == result.salary_account.id
        assert setup.next_payment_date.startswith("2024-06-01T00:00:00")
        assert setup.is_active

    def test_starter_accounts_are_kept(self, portal, jobs, accounts):
        self._setup(portal, jobs[0]["id"])
        names = {a.account_name for a in accounts.list_accounts(USER_ID)}
        assert "Main Account" in names
        assert "Senior Data Analyst Salary Account" in names

    def test_net_reflects_tax(self, portal, jobs):
        result = self._setup(portal, jobs[0]["id"])
        expected = Decimal('20000') - result.tax.total_tax_liability / 12
        assert abs(result.setup.monthly_net - expected) < Decimal('0.0001')
        assert result.setup.net_per_account == result.setup.monthly_net / 2

    def test_sends_notification(self, portal, jobs, backend):
        result = self._setup(portal, jobs[0]["id"])

        assert result.notified
        name, payload = backend.invocations[-1]
        assert name == "send-salary-notification"
        assert payload["jobTitle"] == "Senior Data Analyst"
        assert payload["setupComplete"] is True

    def test_notification_failure_is_a_warning(self, cache):
        class FailingNotifications(InMemoryBackend):
            def invoke(self, function_name, payload):
                raise BackendError("function unavailable")

        failing = FailingNotifications()
        add_job(failing, "Senior Data Analyst")
        accounts = AccountManager(failing, cache)
        portal = JobPortal(failing, cache, accounts, BeneficiaryManager(failing, cache))
        job = portal.listings()[0]

        result = self._setup(portal, job.id)

        assert result.notified is False
        assert result.warnings == ["Salary notification could not be sent"]
        assert len(portal.salary_setups(USER_ID)) == 1

    @pytest.mark.parametrize("field", ["fnb_account_holder", "fnb_account_number", "fnb_branch_code"])
    def test_requires_fnb_details(self, portal, jobs, backend, field):
        with pytest.raises(ValueError, match="Please fill in all FNB account details"):
            self._setup(portal, jobs[0]["id"], **{field: ""})
        assert backend.count("job_salary_setups") == 0

    def test_unknown_job(self, portal):
        with pytest.raises(NotFoundError):
            self._setup(portal, "missing")

    def test_salary_setups_listing(self, portal, jobs, backend):
        result = self._setup(portal, jobs[0]["id"])
        assert [s.id for s in portal.salary_setups(USER_ID)] == [result.setup.id]

        backend.update(
            Query("job_salary_setups").eq("id", result.setup.id),
            {"is_active": False},
        )
        portal.cache.invalidate("job_salary_setups")
        assert portal.salary_setups(USER_ID) == []
        assert len(portal.salary_setups(USER_ID, active_only=False)) == 1

    def test_account_type_of_salary_account(self, portal, jobs):
        result = self._setup(portal, jobs[0]["id"])
        assert result.salary_account.account_type is AccountType.SAVINGS
