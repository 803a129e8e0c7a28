"""
Shared fixtures: an in-memory backend, a query cache and a wired portal system
"""

import pytest
from decimal import Decimal

from bank_portal.backend import InMemoryBackend
from bank_portal.cache import QueryCache
from bank_portal.config import PortalConfig
from bank_portal.accounts import AccountManager
from bank_portal.transactions import TransactionManager
from bank_portal.api.auth import PortalSystem

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def accounts(backend, cache):
    return AccountManager(backend, cache)


@pytest.fixture
def transactions(backend, cache, accounts):
    return TransactionManager(backend, cache, accounts)


@pytest.fixture
def settings():
    return PortalConfig(auth_enabled=False, transfer_failure_rate=0.0, backend="memory")


@pytest.fixture
def system(backend, settings):
    portal = PortalSystem(backend=backend, settings=settings)
    yield portal
    portal.explorer.close()


def add_holding(backend, currency_code, amount, reserve_ratio="0.1", liquidity_ratio="0.3",
                risk_weight="1.0", currency_name=None):
    """Insert a treasury holding row directly into the backend"""
    return backend.insert("treasury_holdings", {
        "currency_code": currency_code,
        "currency_name": currency_name or currency_code,
        "amount": Decimal(str(amount)),
        "reserve_ratio": Decimal(reserve_ratio),
        "liquidity_ratio": Decimal(liquidity_ratio),
        "risk_weight": Decimal(risk_weight),
    })[0]


def add_job(backend, title="Senior Data Analyst", location="Cape Town, South Africa",
            category_id=None, experience_level="senior", remote_available=False,
            salary_min="60000", salary_max="90000", currency="USD"):
    """Insert a job listing row directly into the backend"""
    return backend.insert("job_listings", {
        "title": title,
        "category_id": category_id,
        "description": f"{title} role",
        "requirements": ["SQL", "Python"],
        "expected_salary_min": Decimal(salary_min),
        "expected_salary_max": Decimal(salary_max),
        "currency": currency,
        "experience_level": experience_level,
        "location": location,
        "remote_available": remote_available,
    })[0]
