"""Root test configuration for DetectSecure.

Provides an in-memory stand-in for the async Supabase client covering the
query-builder calls the gateways make (``table().select().eq().limit()``,
``table().insert()``, ``.execute()``), plus fixtures wiring it into a
StoreGate, the two services and an app instance without running the lifespan.

Store credentials are stripped from the environment for every test so a
developer's shell never leaks into the suite.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Any, Optional

import pytest
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

import detectsecure.main  # noqa: F401  (runs configure_logging before the override below)
from detectsecure.notify import NullOwnerNotifier
from detectsecure.services.report import ReportService
from detectsecure.services.verification import VerificationService
from detectsecure.store.admin import AdminGateway
from detectsecure.store.gate import StoreGate
from detectsecure.store.query import QueryGateway

# Module-level loggers must stay uncached so structlog.testing.capture_logs
# sees their events in every test.
structlog.configure(cache_logger_on_first_use=False)

_STORE_ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_KEY",
    "PORT",
    "DETECTSECURE_PORT",
    "DETECTSECURE_HOST",
    "DETECTSECURE_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_store_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in _STORE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


# ─── In-memory Supabase client ────────────────────────────────────────────────


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data
        self.count = None


class FakeQuery:
    """Fluent query builder recording one call against a FakeSupabase table."""

    def __init__(self, store: "FakeSupabase", table: str) -> None:
        self._store = store
        self._table = table
        self._columns = "*"
        self._filters: list[tuple[str, Any]] = []
        self._limit: Optional[int] = None
        self._insert: Optional[dict[str, Any]] = None

    def select(self, columns: str = "*", **_: Any) -> "FakeQuery":
        self._columns = columns
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def insert(self, payload: dict[str, Any]) -> "FakeQuery":
        self._insert = dict(payload)
        return self

    async def execute(self) -> FakeResponse:
        operation = "insert" if self._insert is not None else "select"
        self._store.calls.append((self._table, operation, list(self._filters)))

        failure = self._store.failures.get((self._table, operation))
        if failure is not None:
            raise failure

        rows = self._store.tables.setdefault(self._table, [])
        if self._insert is not None:
            row = dict(self._insert)
            row["id"] = next(self._store.ids)
            row["created_at"] = datetime.now(timezone.utc).isoformat()
            rows.append(row)
            return FakeResponse([dict(row)])

        matched = [r for r in rows if all(r.get(c) == v for c, v in self._filters)]
        if self._limit is not None:
            matched = matched[: self._limit]
        if self._columns != "*":
            wanted = [c.strip() for c in self._columns.split(",")]
            matched = [{c: r.get(c) for c in wanted} for r in matched]
        return FakeResponse(matched)


class FakeSupabase:
    """Minimal async Supabase client backed by dicts.

    ``failures[(table, "select" | "insert")] = exc`` makes that call raise.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            "detectors": [],
            "found_reports": [],
        }
        self.failures: dict[tuple[str, str], BaseException] = {}
        self.calls: list[tuple[str, str, list[tuple[str, Any]]]] = []
        self.ids = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_detector(self, detector_id: str, email: Optional[str]) -> None:
        self.tables["detectors"].append({"id": detector_id, "email": email, "name": "Owner"})

    @property
    def reports(self) -> list[dict[str, Any]]:
        return self.tables["found_reports"]


# ─── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_store() -> FakeSupabase:
    store = FakeSupabase()
    store.add_detector("DS-10482", "owner@example.com")
    return store


@pytest.fixture
def store_gate(fake_store: FakeSupabase) -> StoreGate:
    return StoreGate(
        read_capable=True,
        write_capable=True,
        query=QueryGateway(fake_store),
        admin=AdminGateway(fake_store),
    )


@pytest.fixture
def read_only_gate(fake_store: FakeSupabase) -> StoreGate:
    return StoreGate(
        read_capable=True,
        write_capable=False,
        query=QueryGateway(fake_store),
        admin=AdminGateway(None),
    )


def attach_gate(application: FastAPI, gate: StoreGate) -> FastAPI:
    """Wire a gate into app.state the way the lifespan does."""
    application.state.store = gate
    application.state.verification_service = VerificationService(gate.query)
    application.state.report_service = ReportService(gate.admin, notifier=NullOwnerNotifier())
    return application


@pytest.fixture
def make_app():
    """Factory: a fresh app (no lifespan) wired to the given gate."""
    from detectsecure.main import create_app

    def _make(gate: StoreGate) -> FastAPI:
        return attach_gate(create_app(), gate)

    return _make


@pytest.fixture
def api_app(make_app, store_gate: StoreGate) -> FastAPI:
    return make_app(store_gate)


@pytest.fixture
async def client(api_app: FastAPI):
    transport = ASGITransport(app=api_app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
