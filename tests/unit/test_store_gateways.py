"""Unit tests for QueryGateway and AdminGateway.

Uses unittest.mock to simulate the supabase AsyncClient query builder, the
same way the gateways see it: ``client.table(...).select(...).eq(...)
.limit(...).execute()`` with ``execute`` awaited.

Key behaviours:
  - No client → ConfigurationError, no call attempted
  - Empty result → NOT_FOUND / None, not an error
  - APIError / httpx errors → store message passed through unmodified
  - Malformed rows never leak out untyped
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from detectsecure.errors import ConfigurationError, UpstreamError
from detectsecure.models import FoundReportInput, LookupStatus
from detectsecure.store.admin import AdminGateway
from detectsecure.store.query import QueryGateway

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _make_execute(data: list[Any] | None = None) -> AsyncMock:
    response = MagicMock()
    response.data = data if data is not None else []
    return AsyncMock(return_value=response)


def _build_query_chain(execute_mock: AsyncMock) -> MagicMock:
    """Build a fluent mock query chain ending in .execute() AsyncMock."""
    chain = MagicMock()
    chain.select.return_value = chain
    chain.insert.return_value = chain
    chain.eq.return_value = chain
    chain.limit.return_value = chain
    chain.execute = execute_mock
    return chain


def _client(execute_mock: AsyncMock) -> tuple[MagicMock, MagicMock]:
    chain = _build_query_chain(execute_mock)
    client = MagicMock()
    client.table.return_value = chain
    return client, chain


def _api_error(message: str) -> APIError:
    return APIError({"message": message, "code": "42P01", "hint": None, "details": None})


def _stored_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 41,
        "detector_id": "DS-10482",
        "finder_name": None,
        "finder_email": "finder@example.com",
        "message": None,
        "owner_email": "owner@example.com",
        "created_at": "2026-10-18T09:15:00+00:00",
    }
    row.update(overrides)
    return row


# ─── Availability ─────────────────────────────────────────────────────────────


class TestNoClient:
    async def test_query_find_raises_configuration_error(self) -> None:
        gateway = QueryGateway(None)
        assert gateway.available is False
        with pytest.raises(ConfigurationError):
            await gateway.find_detector("DS-10482")

    async def test_query_lookup_raises_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            await QueryGateway(None).lookup_detector("DS-10482")

    async def test_query_probe_raises_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            await QueryGateway(None).probe()

    async def test_admin_insert_raises_configuration_error(self) -> None:
        gateway = AdminGateway(None)
        record = FoundReportInput(detector_id="DS-1", finder_email="f@example.com")
        with pytest.raises(ConfigurationError) as exc_info:
            await gateway.insert_report(record)
        assert "SERVICE_ROLE_KEY" in exc_info.value.message

    async def test_admin_find_raises_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            await AdminGateway(None).find_detector("DS-1")


# ─── Detector lookup ──────────────────────────────────────────────────────────


class TestDetectorLookup:
    async def test_found(self) -> None:
        client, chain = _client(_make_execute([{"id": "DS-10482", "email": "owner@example.com"}]))
        lookup = await QueryGateway(client).lookup_detector("DS-10482")

        assert lookup.status is LookupStatus.FOUND
        assert lookup.detector is not None
        assert lookup.detector.owner_email == "owner@example.com"
        client.table.assert_called_once_with("detectors")
        chain.eq.assert_called_once_with("id", "DS-10482")
        chain.limit.assert_called_once_with(1)

    async def test_id_used_verbatim(self) -> None:
        client, chain = _client(_make_execute([]))
        await QueryGateway(client).lookup_detector(" ds-1 ")
        chain.eq.assert_called_once_with("id", " ds-1 ")

    async def test_not_found(self) -> None:
        client, _ = _client(_make_execute([]))
        gateway = QueryGateway(client)
        lookup = await gateway.lookup_detector("DS-404")
        assert lookup.status is LookupStatus.NOT_FOUND
        assert await gateway.find_detector("DS-404") is None

    async def test_none_data_is_not_found(self) -> None:
        response = MagicMock()
        response.data = None
        client, _ = _client(AsyncMock(return_value=response))
        lookup = await QueryGateway(client).lookup_detector("DS-404")
        assert lookup.status is LookupStatus.NOT_FOUND

    async def test_api_error_is_error_outcome(self) -> None:
        client, _ = _client(AsyncMock(side_effect=_api_error('relation "detectors" does not exist')))
        lookup = await QueryGateway(client).lookup_detector("DS-1")
        assert lookup.status is LookupStatus.ERROR
        assert lookup.error == 'relation "detectors" does not exist'

    async def test_find_raises_upstream_with_store_message(self) -> None:
        client, _ = _client(AsyncMock(side_effect=_api_error("permission denied for table detectors")))
        with pytest.raises(UpstreamError) as exc_info:
            await QueryGateway(client).find_detector("DS-1")
        assert exc_info.value.message == "permission denied for table detectors"

    async def test_transport_error_is_upstream(self) -> None:
        client, _ = _client(AsyncMock(side_effect=httpx.ConnectError("connection refused")))
        with pytest.raises(UpstreamError) as exc_info:
            await AdminGateway(client).find_detector("DS-1")
        assert exc_info.value.message == "connection refused"

    async def test_malformed_row_is_error_outcome(self) -> None:
        client, _ = _client(_make_execute([{"email": "owner@example.com"}]))
        lookup = await QueryGateway(client).lookup_detector("DS-1")
        assert lookup.status is LookupStatus.ERROR
        assert "DS-1" in (lookup.error or "")

    async def test_unexpected_exception_propagates(self) -> None:
        client, _ = _client(AsyncMock(side_effect=RuntimeError("bug")))
        with pytest.raises(RuntimeError):
            await QueryGateway(client).lookup_detector("DS-1")

    async def test_admin_uses_configured_table(self) -> None:
        client, _ = _client(_make_execute([]))
        await AdminGateway(client, detectors_table="tags").lookup_detector("DS-1")
        client.table.assert_called_once_with("tags")


# ─── Probe ────────────────────────────────────────────────────────────────────


class TestProbe:
    async def test_returns_ids(self) -> None:
        client, chain = _client(_make_execute([{"id": "DS-10482"}]))
        assert await QueryGateway(client).probe() == ["DS-10482"]
        chain.select.assert_called_once_with("id")
        chain.limit.assert_called_once_with(1)

    async def test_empty_table(self) -> None:
        client, _ = _client(_make_execute([]))
        assert await QueryGateway(client).probe() == []

    async def test_store_error(self) -> None:
        client, _ = _client(AsyncMock(side_effect=_api_error("JWT expired")))
        with pytest.raises(UpstreamError) as exc_info:
            await QueryGateway(client).probe()
        assert exc_info.value.message == "JWT expired"


# ─── Report insert ────────────────────────────────────────────────────────────


class TestInsertReport:
    async def test_returns_stored_row(self) -> None:
        client, chain = _client(_make_execute([_stored_row()]))
        record = FoundReportInput(
            detector_id="DS-10482",
            finder_email="finder@example.com",
            owner_email="owner@example.com",
        )
        report = await AdminGateway(client).insert_report(record)

        assert report.id == 41
        assert report.owner_email == "owner@example.com"
        assert report.created_at.year == 2026
        client.table.assert_called_once_with("found_reports")
        chain.insert.assert_called_once_with(record.to_row())

    async def test_single_insert_call(self) -> None:
        execute = _make_execute([_stored_row()])
        client, _ = _client(execute)
        await AdminGateway(client).insert_report(
            FoundReportInput(detector_id="DS-10482", finder_email="finder@example.com")
        )
        assert execute.await_count == 1

    async def test_store_error_passed_through(self) -> None:
        message = 'new row violates row-level security policy for table "found_reports"'
        client, _ = _client(AsyncMock(side_effect=_api_error(message)))
        with pytest.raises(UpstreamError) as exc_info:
            await AdminGateway(client).insert_report(
                FoundReportInput(detector_id="DS-1", finder_email="f@example.com")
            )
        assert exc_info.value.message == message

    async def test_empty_representation(self) -> None:
        client, _ = _client(_make_execute([]))
        with pytest.raises(UpstreamError):
            await AdminGateway(client).insert_report(
                FoundReportInput(detector_id="DS-1", finder_email="f@example.com")
            )

    async def test_malformed_row(self) -> None:
        client, _ = _client(_make_execute([{"detector_id": "DS-1"}]))
        with pytest.raises(UpstreamError) as exc_info:
            await AdminGateway(client).insert_report(
                FoundReportInput(detector_id="DS-1", finder_email="f@example.com")
            )
        assert "malformed" in exc_info.value.message
