"""
Tests for the backend clients: in-memory store and the hosted REST client
"""

import json
import pytest
import httpx
from datetime import datetime, timezone
from decimal import Decimal

from bank_portal.backend import (
    BackendError, HTTPBackend, InMemoryBackend, Query, create_backend,
)


class TestInMemoryBackend:
    """Test the in-memory backend"""

    def setup_method(self):
        self.backend = InMemoryBackend()
        self.backend.insert("transactions", [
            {"account_id": "a1", "amount": Decimal('-100.00'), "transaction_date": "2024-01-05T10:00:00+00:00"},
            {"account_id": "a1", "amount": Decimal('250.00'), "transaction_date": "2024-02-05T10:00:00+00:00"},
            {"account_id": "a2", "amount": Decimal('-75.50'), "transaction_date": "2024-03-05T10:00:00+00:00"},
        ])

    def test_insert_assigns_id_and_defaults(self):
        row = self.backend.insert("accounts", {"user_id": "u1", "balance": Decimal('10.50')})[0]

        assert row["id"]
        assert row["balance"] == "10.50"
        assert row["created_at"]

    def test_eq_filter(self):
        rows = self.backend.select(Query("transactions").eq("account_id", "a1"))
        assert len(rows) == 2

    def test_numeric_filters(self):
        debits = self.backend.select(Query("transactions").lt("amount", 0))
        assert len(debits) == 2
        assert all(Decimal(r["amount"]) < 0 for r in debits)

    def test_timestamp_filter(self):
        since = datetime(2024, 2, 1, tzinfo=timezone.utc)
        rows = self.backend.select(Query("transactions").gte("transaction_date", since))
        assert len(rows) == 2

    def test_in_filter(self):
        rows = self.backend.select(Query("transactions").in_("account_id", ["a2", "a9"]))
        assert len(rows) == 1
        assert rows[0]["account_id"] == "a2"

    def test_order_and_limit(self):
        rows = self.backend.select(
            Query("transactions").order("transaction_date", descending=True).limit(2)
        )
        assert [r["transaction_date"][:7] for r in rows] == ["2024-03", "2024-02"]

    def test_select_one(self):
        assert self.backend.select_one(Query("transactions").eq("account_id", "a2")) is not None
        assert self.backend.select_one(Query("transactions").eq("account_id", "zz")) is None

    def test_update(self):
        updated = self.backend.update(
            Query("transactions").eq("account_id", "a2"), {"amount": Decimal('-80.00')}
        )
        assert len(updated) == 1
        assert updated[0]["amount"] == "-80.00"

    def test_delete(self):
        assert self.backend.delete(Query("transactions").eq("account_id", "a1")) == 2
        assert self.backend.count("transactions") == 1

    def test_selected_rows_are_copies(self):
        row = self.backend.select(Query("transactions").eq("account_id", "a2"))[0]
        row["amount"] = "0"
        assert self.backend.select(Query("transactions").eq("account_id", "a2"))[0]["amount"] == "-75.50"

    def test_invoke_records_call(self):
        result = self.backend.invoke("send-transaction-email", {"amount": Decimal('5')})
        assert result == {"success": True}
        assert self.backend.invocations == [("send-transaction-email", {"amount": "5"})]


class TestHTTPBackend:
    """Test the REST client against a mock transport"""

    def setup_method(self):
        self.requests = []

    def _backend(self, handler):
        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)
        return HTTPBackend("https://project.example.co", "anon-key", transport=httpx.MockTransport(record))

    def test_select_builds_query_string(self):
        backend = self._backend(lambda r: httpx.Response(200, json=[{"id": "1"}]))

        rows = backend.select(
            Query("accounts").eq("user_id", "u1").in_("account_type", ["main", "loan"])
            .order("created_at", descending=True).limit(5)
        )

        assert rows == [{"id": "1"}]
        request = self.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/accounts"
        params = request.url.params
        assert params["select"] == "*"
        assert params["user_id"] == "eq.u1"
        assert params["account_type"] == "in.(main,loan)"
        assert params["order"] == "created_at.desc"
        assert params["limit"] == "5"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"

    def test_boolean_and_null_filters(self):
        backend = self._backend(lambda r: httpx.Response(200, json=[]))
        backend.select(Query("job_salary_setups").eq("is_active", True).eq("deleted_at", None))

        params = self.requests[0].url.params
        assert params["is_active"] == "eq.true"
        assert params["deleted_at"] == "is.null"

    def test_insert_posts_json(self):
        backend = self._backend(lambda r: httpx.Response(201, json=json.loads(r.content)))

        rows = backend.insert("beneficiaries", {"beneficiary_name": "John Doe", "amount": Decimal('1.50')})

        request = self.requests[0]
        assert request.method == "POST"
        assert request.headers["Prefer"] == "return=representation"
        assert rows == [{"beneficiary_name": "John Doe", "amount": "1.50"}]

    def test_update_drops_order_and_limit(self):
        backend = self._backend(lambda r: httpx.Response(200, json=[{"id": "1"}]))
        backend.update(Query("accounts").eq("id", "1").order("created_at").limit(1), {"balance": "5"})

        params = self.requests[0].url.params
        assert self.requests[0].method == "PATCH"
        assert "order" not in params
        assert "limit" not in params

    def test_delete_counts_rows(self):
        backend = self._backend(lambda r: httpx.Response(200, json=[{"id": "1"}, {"id": "2"}]))
        assert backend.delete(Query("documents").eq("user_id", "u1")) == 2

    def test_invoke_function(self):
        backend = self._backend(lambda r: httpx.Response(200, json={"sent": True}))

        assert backend.invoke("send-salary-notification", {"userId": "u1"}) == {"sent": True}
        assert self.requests[0].url.path == "/functions/v1/send-salary-notification"

    def test_error_status_raises_backend_error(self):
        backend = self._backend(lambda r: httpx.Response(400, json={"message": "violates check constraint"}))

        with pytest.raises(BackendError) as excinfo:
            backend.select(Query("accounts"))

        assert str(excinfo.value) == "violates check constraint"
        assert excinfo.value.table == "accounts"
        assert excinfo.value.operation == "select"

    def test_network_failure_raises_backend_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend = self._backend(handler)
        with pytest.raises(BackendError):
            backend.insert("accounts", {"user_id": "u1"})

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            HTTPBackend("", "key")


class TestCreateBackend:
    """Test the backend factory"""

    def test_memory(self):
        assert isinstance(create_backend("memory"), InMemoryBackend)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_backend("mainframe")
