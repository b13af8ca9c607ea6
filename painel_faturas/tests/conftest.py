"""Shared fixtures: an in-memory stand-in for the Supabase client.

Only the PostgREST builder calls and storage bucket calls used by the
repositories and the storage client are implemented.
"""

import copy
import itertools
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from painel_faturas.infrastructure.database import (
    DispatchRepository,
    PdfRepository,
    SupabaseClient,
)
from painel_faturas.infrastructure.storage import ObjectStoreClient

SUPABASE_URL = "https://proj.supabase.co"
SERVICE_KEY = "service-role-key"
BUCKET = "celesc-faturas"


def _sort_key(value: Any):
    if isinstance(value, str):
        try:
            return (1, datetime.fromisoformat(value))
        except ValueError:
            return (1, value)
    if value is None:
        return (0, 0)
    return (1, value)


class FakeResult:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Chainable query mimicking postgrest's request builder."""

    def __init__(self, table: "FakeTable"):
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None

    def select(self, columns: str = "*"):
        self._op = "select"
        self._columns = columns
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column: str, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def lte(self, column: str, value):
        self._filters.append(
            lambda row: row.get(column) is not None and _sort_key(row[column]) <= _sort_key(value)
        )
        return self

    def order(self, column: str, desc: bool = False):
        self._order = (column, desc)
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self._filters)

    def execute(self) -> FakeResult:
        table = self._table
        if table.fail_with is not None:
            raise table.fail_with

        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            created = []
            for item in payload:
                row = {"id": next(table.ids), "created_at": datetime.now(timezone.utc).isoformat()}
                row.update(table.defaults)
                row.update(copy.deepcopy(item))
                table.rows.append(row)
                created.append(copy.deepcopy(row))
            return FakeResult(created)

        matched = [row for row in table.rows if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return FakeResult(copy.deepcopy(matched))

        if self._op == "delete":
            table.rows = [row for row in table.rows if not self._matches(row)]
            return FakeResult(copy.deepcopy(matched))

        if self._order is not None:
            column, desc = self._order
            matched = sorted(matched, key=lambda row: _sort_key(row.get(column)), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]

        if self._columns.strip() == "*":
            return FakeResult(copy.deepcopy(matched))
        columns = [c.strip() for c in self._columns.split(",")]
        return FakeResult([{c: row.get(c) for c in columns} for row in matched])


class FakeTable:
    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        self.rows: List[Dict[str, Any]] = []
        self.ids = itertools.count(1)
        self.defaults = defaults or {}
        self.fail_with: Optional[Exception] = None


class FakeBucket:
    def __init__(self, name: str):
        self.name = name
        self.folders: Dict[str, List[Dict[str, Any]]] = {}
        self.failing_folders = set()
        self.sign_error: Optional[Exception] = None
        self.signed_prefix = f"{SUPABASE_URL}/storage/v1/object/sign/{name}"
        self.list_calls: List[tuple] = []

    def add(self, folder: str, name: str, size: Optional[int] = 1024):
        metadata = {"size": size, "mimetype": "application/pdf"} if size is not None else None
        self.folders.setdefault(folder, []).append({"name": name, "id": name, "metadata": metadata})

    def list(self, path: Optional[str] = None, options: Optional[Dict[str, Any]] = None):
        self.list_calls.append((path, options))
        if path in self.failing_folders:
            raise RuntimeError(f"listing {path} failed")
        return copy.deepcopy(self.folders.get(path, []))

    def create_signed_url(self, path: str, expires_in: int):
        if self.sign_error is not None:
            raise self.sign_error
        return {"signedURL": f"{self.signed_prefix}/{path}?token=signed"}


class FakeStorage:
    def __init__(self):
        self.buckets: Dict[str, FakeBucket] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return self.buckets.setdefault(bucket, FakeBucket(bucket))


class FakeSupabase:
    """Minimal stand-in for supabase.Client."""

    def __init__(self):
        self.tables: Dict[str, FakeTable] = {
            "scheduled_dispatches": FakeTable(defaults={"last_executed": None, "is_active": True}),
            "generated_pdfs": FakeTable(),
        }
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables.setdefault(name, FakeTable()))


def pdf_transport(body: bytes = b"%PDF-1.4 fake", head_size: Optional[int] = 2048) -> httpx.MockTransport:
    """Transport answering HEAD requests and GET downloads."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "HEAD":
            if head_size is None:
                return httpx.Response(404)
            return httpx.Response(200, headers={"content-length": str(head_size)})
        return httpx.Response(200, content=body, headers={"content-type": "application/pdf"})

    return httpx.MockTransport(handler)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def supabase(fake_supabase) -> SupabaseClient:
    return SupabaseClient(url=SUPABASE_URL, key=SERVICE_KEY, client=fake_supabase)


@pytest.fixture
def unconfigured_supabase() -> SupabaseClient:
    return SupabaseClient(url=None, key=None)


@pytest.fixture
def dispatch_repo(supabase) -> DispatchRepository:
    return DispatchRepository(supabase)


@pytest.fixture
def pdf_repo(supabase) -> PdfRepository:
    return PdfRepository(supabase)


@pytest.fixture
def bucket(fake_supabase) -> FakeBucket:
    return fake_supabase.storage.from_(BUCKET)


@pytest.fixture
def object_store(supabase) -> ObjectStoreClient:
    return ObjectStoreClient(supabase, bucket=BUCKET, signed_url_ttl=60, transport=pdf_transport())


@pytest.fixture
def store_factory(supabase) -> Callable[..., ObjectStoreClient]:
    """Build an ObjectStoreClient over a custom mock transport."""

    def build(transport: Optional[httpx.AsyncBaseTransport] = None, **transport_options) -> ObjectStoreClient:
        return ObjectStoreClient(
            supabase,
            bucket=BUCKET,
            signed_url_ttl=60,
            transport=transport or pdf_transport(**transport_options),
        )

    return build
