"""Common detector lookup shared by the read-only and privileged gateways.

Both gateways wrap one async Supabase client (or none, when the credential
pair is absent or the client could not be built). The lookup contract is
identical for both; only the key behind the client differs.

Store failures are translated here and nowhere else:
  - postgrest ``APIError`` and transport ``httpx.HTTPError`` → the store's own
    message, unmodified
  - a row that does not fit ``Detector`` → an error naming the bad row
Anything else propagates untouched to the request handler.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import pydantic
from postgrest.exceptions import APIError

from detectsecure.constants import DETECTOR_COLUMNS, DETECTORS_TABLE
from detectsecure.errors import ConfigurationError
from detectsecure.models import Detector, DetectorLookup
from detectsecure.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)

StoreFailure = (APIError, httpx.HTTPError)
"""Exception types that mean "the store call failed" rather than a bug."""


def store_error_message(exc: BaseException) -> str:
    """Return the store's own message for a failed call."""
    if isinstance(exc, APIError):
        return exc.message or str(exc)
    return str(exc) or type(exc).__name__


class StoreGateway:
    """Base for gateways over one Supabase client.

    Subclasses set ``capability`` (used in log events) and the message raised
    when the client is missing.
    """

    capability: str = "store"
    unavailable_message: str = "Store access is not configured on the server."

    def __init__(
        self,
        client: Optional[Any],
        detectors_table: str = DETECTORS_TABLE,
    ) -> None:
        self._client = client
        self._detectors_table = detectors_table

    @property
    def available(self) -> bool:
        return self._client is not None

    def _require_client(self) -> Any:
        if self._client is None:
            raise ConfigurationError(self.unavailable_message)
        return self._client

    async def lookup_detector(self, detector_id: str) -> DetectorLookup:
        """Fetch one detector by canonical id as a three-way outcome.

        The id is used as given; callers canonicalize first.

        Raises:
            ConfigurationError: The gateway has no client. No call is attempted.
        """
        client = self._require_client()

        try:
            with PerformanceLogger(f"{self.capability}_detector_lookup", logger):
                response = await (
                    client.table(self._detectors_table)
                    .select(DETECTOR_COLUMNS)
                    .eq("id", detector_id)
                    .limit(1)
                    .execute()
                )
        except StoreFailure as exc:
            return DetectorLookup.failed(store_error_message(exc))

        rows = response.data or []
        if not rows:
            return DetectorLookup.not_found()

        try:
            detector = Detector.model_validate(rows[0])
        except pydantic.ValidationError as exc:
            logger.error(
                "detector_row_invalid",
                capability=self.capability,
                detector_id=detector_id,
                error_count=exc.error_count(),
            )
            return DetectorLookup.failed(f"malformed detector row for '{detector_id}'")

        return DetectorLookup.found(detector)

    async def find_detector(self, detector_id: str) -> Optional[Detector]:
        """Fetch one detector by canonical id; ``None`` when no row matches.

        Raises:
            ConfigurationError: The gateway has no client.
            UpstreamError: The store call failed (store message passed through).
        """
        lookup = await self.lookup_detector(detector_id)
        return lookup.unwrap()
