"""QueryGateway — read-only access to the detector table (anon key)."""

from __future__ import annotations

from detectsecure.constants import MSG_READ_NOT_CONFIGURED
from detectsecure.errors import UpstreamError
from detectsecure.store.base import StoreFailure, StoreGateway, store_error_message
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)


class QueryGateway(StoreGateway):
    """Read-only detector lookups through the publishable (anon) key.

    Subject to whatever row-level security the store applies to anonymous
    reads, which is why owner resolution goes through ``AdminGateway``.
    """

    capability = "read"
    unavailable_message = MSG_READ_NOT_CONFIGURED

    async def probe(self) -> list[str]:
        """Select at most one detector id to prove the store is reachable.

        Raises:
            ConfigurationError: No read client.
            UpstreamError: The store call failed.
        """
        client = self._require_client()
        try:
            response = await (
                client.table(self._detectors_table).select("id").limit(1).execute()
            )
        except StoreFailure as exc:
            message = store_error_message(exc)
            logger.error("store_probe_failed", error=message, error_type=type(exc).__name__)
            raise UpstreamError(message) from exc

        return [str(row["id"]) for row in (response.data or []) if "id" in row]
