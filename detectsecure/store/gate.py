"""StoreGate — startup evaluation of store credentials.

Built once in the FastAPI lifespan and kept on ``app.state.store``:

  - ``read_capable``  — SUPABASE_URL + SUPABASE_ANON_KEY both non-empty
  - ``write_capable`` — SUPABASE_URL + SUPABASE_SERVICE_ROLE_KEY both non-empty

For each capable pair one async Supabase client is created and wrapped in its
gateway. ``create_store_gate`` never raises: a missing pair only disables the
dependent gateway, and a client that fails to build (malformed URL or key) is
logged and leaves its gateway without a client. The flags keep reporting
credential presence either way.

The gate and its gateways are never mutated after construction, so request
handlers share them without locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from supabase import create_async_client

from detectsecure.config import StoreConfig
from detectsecure.store.admin import AdminGateway
from detectsecure.store.query import QueryGateway
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoreGate:
    read_capable: bool
    write_capable: bool
    query: QueryGateway
    admin: AdminGateway


async def create_store_gate(config: StoreConfig) -> StoreGate:
    """Evaluate credentials and build both gateways. Never raises."""
    read_capable = config.has_read_credentials
    write_capable = config.has_write_credentials

    read_client: Optional[Any] = None
    if read_capable:
        read_client = await _create_client(config.url, config.anon_key, capability="read")

    admin_client: Optional[Any] = None
    if write_capable:
        admin_client = await _create_client(
            config.url, config.service_role_key, capability="admin"
        )

    gate = StoreGate(
        read_capable=read_capable,
        write_capable=write_capable,
        query=QueryGateway(read_client, detectors_table=config.detectors_table),
        admin=AdminGateway(
            admin_client,
            detectors_table=config.detectors_table,
            reports_table=config.reports_table,
        ),
    )

    if not read_capable:
        logger.warning("store_read_disabled", reason="SUPABASE_URL or SUPABASE_ANON_KEY missing")
    if not write_capable:
        logger.warning(
            "store_write_disabled",
            reason="SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY missing",
        )
    logger.info(
        "store_gate_ready",
        read_capable=read_capable,
        write_capable=write_capable,
        read_client=gate.query.available,
        admin_client=gate.admin.available,
        store_host=_store_host(config.url),
    )
    return gate


async def _create_client(url: str, key: str, capability: str) -> Optional[Any]:
    """Create one async Supabase client; log and return None on failure."""
    try:
        return await create_async_client(url, key)
    except Exception as exc:
        logger.error(
            "store_client_init_failed",
            capability=capability,
            store_host=_store_host(url),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return None


def _store_host(url: str) -> str:
    # Never log keys; the project ref is enough to tell deployments apart.
    if "//" not in url:
        return "unknown"
    return url.split("//")[-1].split(".")[0] or "unknown"
