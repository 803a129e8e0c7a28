"""
Backend Client Module

Generic client for the hosted backend-as-a-service: table select/insert/
update/delete with equality and range filters, ordering and limits, plus
remote function invocation. Two implementations are provided: an in-memory
backend for tests and demos, and an HTTP backend speaking the PostgREST and
edge-function dialect of the hosted service.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Tuple, Union
from decimal import Decimal
from datetime import datetime, date, timezone
import json
import logging
import threading
import uuid

import httpx

logger = logging.getLogger("bank_portal.backend")


class BackendError(Exception):
    """A backend call failed (network, HTTP status, or rejected by the service)"""

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.table = table
        self.operation = operation


class NotFoundError(Exception):
    """A requested record does not exist or is not visible to the user"""


# Columns the hosted schema fills with now() when a row is inserted without them
TIMESTAMP_DEFAULTS: Dict[str, List[str]] = {
    "accounts": ["created_at"],
    "transactions": ["transaction_date"],
    "beneficiaries": ["created_at", "updated_at"],
    "bank_transfer_errors": ["occurred_at"],
    "treasury_holdings": ["last_updated"],
    "treasury_transactions": ["executed_at"],
    "job_listings": ["created_at"],
    "job_salary_setups": ["created_at"],
    "documents": ["created_at", "updated_at"],
    "crypto_wallet_addresses": ["created_at", "updated_at"],
}


def _encode_value(value: Any) -> Any:
    """Normalize a Python value to what the backend stores and returns"""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


class Query:
    """
    Filter/order/limit description for one table.

    Built fluently, the way the hosted client library reads:

        Query("transactions").eq("account_id", acc_id).gte("transaction_date", since).order(
            "transaction_date", descending=True).limit(10)
    """

    def __init__(self, table: str):
        self.table = table
        self.filters: List[Tuple[str, str, Any]] = []
        self.order_by: Optional[str] = None
        self.descending = False
        self.limit_count: Optional[int] = None

    def _add(self, column: str, op: str, value: Any) -> 'Query':
        self.filters.append((column, op, _encode_value(value)))
        return self

    def eq(self, column: str, value: Any) -> 'Query':
        return self._add(column, "eq", value)

    def neq(self, column: str, value: Any) -> 'Query':
        return self._add(column, "neq", value)

    def gt(self, column: str, value: Any) -> 'Query':
        return self._add(column, "gt", value)

    def gte(self, column: str, value: Any) -> 'Query':
        return self._add(column, "gte", value)

    def lt(self, column: str, value: Any) -> 'Query':
        return self._add(column, "lt", value)

    def lte(self, column: str, value: Any) -> 'Query':
        return self._add(column, "lte", value)

    def in_(self, column: str, values: List[Any]) -> 'Query':
        self.filters.append((column, "in", [_encode_value(v) for v in values]))
        return self

    def order(self, column: str, descending: bool = False) -> 'Query':
        self.order_by = column
        self.descending = descending
        return self

    def limit(self, count: int) -> 'Query':
        self.limit_count = count
        return self

    def matches(self, record: Dict[str, Any]) -> bool:
        """Check a stored record against every filter"""
        for column, op, value in self.filters:
            if not _compare(record.get(column), op, value):
                return False
        return True

    def __repr__(self) -> str:
        return f"Query({self.table!r}, filters={self.filters!r}, order_by={self.order_by!r})"


def _as_number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return None


def _compare(actual: Any, op: str, expected: Any) -> bool:
    if op == "eq":
        if isinstance(expected, (int, float)) and not isinstance(expected, bool):
            return _as_number(actual) == _as_number(expected)
        return actual == expected
    if op == "neq":
        return actual != expected
    if op == "in":
        return actual in expected
    if actual is None:
        return False

    # Numeric filters compare as Decimal, everything else (ISO timestamps) as strings
    if isinstance(expected, (int, float)) and not isinstance(expected, bool):
        left, right = _as_number(actual), _as_number(expected)
        if left is None or right is None:
            return False
    else:
        left, right = str(actual), str(expected)

    if op == "gt":
        return left > right
    if op == "gte":
        return left >= right
    if op == "lt":
        return left < right
    if op == "lte":
        return left <= right
    raise ValueError(f"Unsupported filter operator: {op}")


class BackendClient(ABC):
    """Abstract interface to the hosted backend"""

    @abstractmethod
    def select(self, query: Query) -> List[Dict[str, Any]]:
        """Return rows matching the query"""
        pass

    @abstractmethod
    def insert(self, table: str, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Insert one or more rows and return them as stored"""
        pass

    @abstractmethod
    def update(self, query: Query, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Apply changes to every row matching the query and return the updated rows"""
        pass

    @abstractmethod
    def delete(self, query: Query) -> int:
        """Delete rows matching the query, returning how many were removed"""
        pass

    @abstractmethod
    def invoke(self, function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Invoke a named remote function with a JSON payload"""
        pass

    def close(self) -> None:
        """Release client resources (default no-op)"""
        pass

    def select_one(self, query: Query) -> Optional[Dict[str, Any]]:
        """Return the first matching row or None"""
        rows = self.select(query.limit(1))
        return rows[0] if rows else None


class InMemoryBackend(BackendClient):
    """In-memory backend implementation for tests and local demos"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self.invocations: List[Tuple[str, Dict[str, Any]]] = []

    def _ensure_table(self, table: str) -> None:
        if table not in self._data:
            self._data[table] = {}

    @staticmethod
    def _copy(record: Dict[str, Any]) -> Dict[str, Any]:
        # Round-trip through JSON so callers never share state with the store
        return json.loads(json.dumps(record, default=_encode_value))

    def select(self, query: Query) -> List[Dict[str, Any]]:
        with self._lock:
            self._ensure_table(query.table)
            rows = [self._copy(r) for r in self._data[query.table].values() if query.matches(r)]

        if query.order_by:
            column = query.order_by
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: _sort_key(r[column]), reverse=query.descending)
            rows = present + missing
        if query.limit_count is not None:
            rows = rows[:query.limit_count]
        return rows

    def insert(self, table: str, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        if isinstance(rows, dict):
            rows = [rows]

        now = datetime.now(timezone.utc).isoformat()
        stored = []
        with self._lock:
            self._ensure_table(table)
            for row in rows:
                record = self._copy(row)
                record.setdefault("id", str(uuid.uuid4()))
                for column in TIMESTAMP_DEFAULTS.get(table, []):
                    if record.get(column) is None:
                        record[column] = now
                self._data[table][record["id"]] = record
                stored.append(self._copy(record))
        logger.debug(f"Inserted {len(stored)} row(s) into {table}")
        return stored

    def update(self, query: Query, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        encoded = self._copy(changes)
        updated = []
        with self._lock:
            self._ensure_table(query.table)
            for record in self._data[query.table].values():
                if query.matches(record):
                    record.update(encoded)
                    updated.append(self._copy(record))
        return updated

    def delete(self, query: Query) -> int:
        with self._lock:
            self._ensure_table(query.table)
            doomed = [rid for rid, r in self._data[query.table].items() if query.matches(r)]
            for rid in doomed:
                del self._data[query.table][rid]
        return len(doomed)

    def invoke(self, function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self.invocations.append((function_name, self._copy(payload)))
        logger.info(f"Invoked remote function {function_name}")
        return {"success": True}

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._data[table] = {}


def _sort_key(value: Any):
    number = _as_number(value) if not isinstance(value, str) else None
    if number is not None:
        return (0, number, "")
    return (1, Decimal(0), str(value))


class HTTPBackend(BackendClient):
    """
    Backend client for the hosted service's REST interface.

    Tables are served at ``/rest/v1/{table}`` with PostgREST query strings
    (``col=eq.value``, ``order=col.desc``); remote functions at
    ``/functions/v1/{name}``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        if not base_url:
            raise ValueError("Backend URL is required for the HTTP backend")
        self.base_url = base_url.rstrip("/")
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
        }
        self._client = httpx.Client(
            base_url=self.base_url, headers=headers, timeout=timeout, transport=transport
        )

    @staticmethod
    def _params(query: Query) -> List[Tuple[str, str]]:
        params = [("select", "*")]
        for column, op, value in query.filters:
            if op == "in":
                params.append((column, "in.(" + ",".join(str(v) for v in value) + ")"))
            elif value is None:
                params.append((column, "is.null"))
            elif isinstance(value, bool):
                params.append((column, f"{op}.{str(value).lower()}"))
            else:
                params.append((column, f"{op}.{value}"))
        if query.order_by:
            direction = "desc" if query.descending else "asc"
            params.append(("order", f"{query.order_by}.{direction}"))
        if query.limit_count is not None:
            params.append(("limit", str(query.limit_count)))
        return params

    def _request(self, method: str, path: str, table: Optional[str], operation: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Backend {operation} on {table or path} failed: {e}")
            raise BackendError(f"Backend request failed: {e}", table=table, operation=operation) from e

        if response.status_code >= 400:
            message = response.text
            try:
                body = response.json()
                message = body.get("message") or body.get("error") or message
            except ValueError:
                pass
            logger.warning(f"Backend {operation} on {table or path} returned {response.status_code}: {message}")
            raise BackendError(message, table=table, operation=operation)

        if not response.content:
            return None
        return response.json()

    def select(self, query: Query) -> List[Dict[str, Any]]:
        return self._request(
            "GET", f"/rest/v1/{query.table}", query.table, "select", params=self._params(query)
        ) or []

    def insert(self, table: str, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        if isinstance(rows, dict):
            rows = [rows]
        return self._request(
            "POST", f"/rest/v1/{table}", table, "insert",
            content=json.dumps(rows, default=_encode_value),
            headers={"Prefer": "return=representation"}
        ) or []

    def update(self, query: Query, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        params = [p for p in self._params(query) if p[0] not in ("order", "limit")]
        return self._request(
            "PATCH", f"/rest/v1/{query.table}", query.table, "update",
            params=params,
            content=json.dumps(changes, default=_encode_value),
            headers={"Prefer": "return=representation"}
        ) or []

    def delete(self, query: Query) -> int:
        params = [p for p in self._params(query) if p[0] not in ("order", "limit")]
        deleted = self._request(
            "DELETE", f"/rest/v1/{query.table}", query.table, "delete",
            params=params, headers={"Prefer": "return=representation"}
        )
        return len(deleted or [])

    def invoke(self, function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = self._request(
            "POST", f"/functions/v1/{function_name}", None, f"invoke:{function_name}",
            content=json.dumps(payload, default=_encode_value)
        )
        return result if isinstance(result, dict) else {"success": True}

    def close(self) -> None:
        self._client.close()


def create_backend(backend_type: str = "memory", **kwargs) -> BackendClient:
    """Factory function to create a backend client"""
    if backend_type == "memory":
        return InMemoryBackend()
    if backend_type == "http":
        return HTTPBackend(**kwargs)
    raise ValueError(f"Unknown backend type: {backend_type}")
