"""
Tests for identity document records, crypto wallet addresses and profiles
"""

import pytest
from datetime import date

from bank_portal.backend import NotFoundError
from bank_portal.documents import DocumentManager, DocumentStatus
from bank_portal.profiles import ProfileManager
from bank_portal.wallets import WalletAddressManager

from conftest import OTHER_USER_ID, USER_ID


@pytest.fixture
def documents(backend, cache):
    return DocumentManager(backend, cache)


@pytest.fixture
def wallets(backend, cache):
    return WalletAddressManager(backend, cache)


@pytest.fixture
def profiles(backend, cache):
    return ProfileManager(backend, cache)


class TestDocuments:
    """Test identity document records"""

    def _passport(self, documents, **overrides):
        kwargs = dict(
            document_type="passport",
            document_number="A1234567",
            country="ZA",
            issue_date=date(2020, 1, 1),
            expiry_date=date(2030, 1, 1),
        )
        kwargs.update(overrides)
        return documents.create(USER_ID, **kwargs)

    def test_create_defaults_to_pending(self, documents):
        doc = self._passport(documents)

        assert doc.status is DocumentStatus.PENDING
        assert doc.issue_date == "2020-01-01"
        assert doc.expiry_date == "2030-01-01"
        assert [d.id for d in documents.list(USER_ID)] == [doc.id]

    def test_expiry_before_issue(self, documents, backend):
        with pytest.raises(ValueError):
            self._passport(documents, expiry_date=date(2019, 12, 31))
        assert backend.count("documents") == 0

    def test_is_expired(self, documents):
        doc = self._passport(documents)
        assert not doc.is_expired(date(2029, 12, 31))
        assert doc.is_expired(date(2030, 1, 2))

    def test_update_status(self, documents):
        doc = self._passport(documents)
        documents.list(USER_ID)

        updated = documents.update_status(USER_ID, doc.id, DocumentStatus.ACTIVE)

        assert updated.status is DocumentStatus.ACTIVE
        assert documents.list(USER_ID)[0].status is DocumentStatus.ACTIVE

    def test_update_other_users_document(self, documents):
        doc = self._passport(documents)
        with pytest.raises(NotFoundError):
            documents.update_status(OTHER_USER_ID, doc.id, DocumentStatus.ACTIVE)

    def test_delete(self, documents):
        doc = self._passport(documents)
        documents.list(USER_ID)
        documents.delete(USER_ID, doc.id)

        assert documents.list(USER_ID) == []
        with pytest.raises(NotFoundError):
            documents.delete(USER_ID, doc.id)


class TestWalletAddresses:
    """Test the wallet address book"""

    def test_add_and_list(self, wallets):
        address = wallets.add(USER_ID, "Binance", "BTC", "bc1qxyz", address_label="Cold")

        assert address.address_label == "Cold"
        assert address.is_default is False
        assert [a.id for a in wallets.list(USER_ID)] == [address.id]

    def test_single_default_per_exchange_and_coin(self, wallets):
        first = wallets.add(USER_ID, "Binance", "BTC", "bc1qfirst", is_default=True)
        second = wallets.add(USER_ID, "Binance", "BTC", "bc1qsecond", is_default=True)
        other_coin = wallets.add(USER_ID, "Binance", "ETH", "0xabc", is_default=True)

        assert wallets.default_address(USER_ID, "Binance", "BTC").id == second.id
        assert wallets.get(USER_ID, first.id).is_default is False
        assert wallets.default_address(USER_ID, "Binance", "ETH").id == other_coin.id

    def test_update_to_default_unsets_others(self, wallets):
        first = wallets.add(USER_ID, "Luno", "BTC", "bc1qfirst", is_default=True)
        second = wallets.add(USER_ID, "Luno", "BTC", "bc1qsecond")

        wallets.update(USER_ID, second.id, {"is_default": True})

        assert wallets.get(USER_ID, first.id).is_default is False
        assert wallets.get(USER_ID, second.id).is_default is True

    def test_update_rejects_unknown_fields(self, wallets):
        address = wallets.add(USER_ID, "Luno", "BTC", "bc1q")
        with pytest.raises(ValueError):
            wallets.update(USER_ID, address.id, {"user_id": OTHER_USER_ID})

    def test_for_exchange(self, wallets):
        wallets.add(USER_ID, "Luno", "BTC", "bc1q1")
        wallets.add(USER_ID, "Luno", "ETH", "0x1")
        wallets.add(USER_ID, "Binance", "BTC", "bc1q2")

        assert len(wallets.for_exchange(USER_ID, "Luno", "BTC")) == 1
        assert wallets.default_address(USER_ID, "Luno", "BTC") is None

    def test_delete(self, wallets):
        address = wallets.add(USER_ID, "Luno", "BTC", "bc1q")
        wallets.delete(USER_ID, address.id)

        assert wallets.list(USER_ID) == []
        with pytest.raises(NotFoundError):
            wallets.get(USER_ID, address.id)


class TestProfiles:
    """Test first-visit profile creation"""

    def test_missing_profile(self, profiles):
        assert profiles.get(USER_ID) is None

    def test_ensure_creates_once(self, profiles, backend):
        created = profiles.ensure(USER_ID, "Test User")
        again = profiles.ensure(USER_ID, "Someone Else")

        assert created.id == USER_ID
        assert again.full_name == "Test User"
        assert backend.count("profiles") == 1
