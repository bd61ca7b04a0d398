"""VerificationService — "is this code registered?"."""

from __future__ import annotations

from typing import Any

from detectsecure.constants import MSG_MISSING_ID
from detectsecure.errors import ConfigurationError, ValidationError
from detectsecure.models import VerificationResult
from detectsecure.store.query import QueryGateway
from detectsecure.utils.ids import canonicalize_id
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)


class VerificationService:
    def __init__(self, query: QueryGateway) -> None:
        self._query = query

    async def verify(self, raw_id: Any) -> VerificationResult:
        """Canonicalize ``raw_id`` and look it up through the read-only gateway.

        Raises:
            ValidationError: The canonical id is empty.
            ConfigurationError: No read-capable gateway.
            UpstreamError: The store lookup failed (propagated unchanged).
        """
        detector_id = canonicalize_id(raw_id)
        if not detector_id:
            raise ValidationError(MSG_MISSING_ID)

        if not self._query.available:
            raise ConfigurationError(self._query.unavailable_message)

        detector = await self._query.find_detector(detector_id)
        registered = detector is not None

        logger.info("detector_verified", detector_id=detector_id, registered=registered)
        return VerificationResult(registered=registered, id=detector_id)
