"""AdminGateway — privileged detector reads and report inserts (service-role key)."""

from __future__ import annotations

from typing import Any, Optional

import pydantic

from detectsecure.constants import DETECTORS_TABLE, FOUND_REPORTS_TABLE, MSG_WRITE_NOT_CONFIGURED
from detectsecure.errors import UpstreamError
from detectsecure.models import FoundReport, FoundReportInput
from detectsecure.store.base import StoreFailure, StoreGateway, store_error_message
from detectsecure.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)


class AdminGateway(StoreGateway):
    """Service-role access: owner resolution that bypasses read restrictions,
    and the single insert that persists a found report.
    """

    capability = "admin"
    unavailable_message = MSG_WRITE_NOT_CONFIGURED

    def __init__(
        self,
        client: Optional[Any],
        detectors_table: str = DETECTORS_TABLE,
        reports_table: str = FOUND_REPORTS_TABLE,
    ) -> None:
        super().__init__(client, detectors_table=detectors_table)
        self._reports_table = reports_table

    async def insert_report(self, record: FoundReportInput) -> FoundReport:
        """Insert one report row and return it as stored.

        One insert call; the store either writes the whole row or nothing.

        Raises:
            ConfigurationError: No service-role client.
            UpstreamError: The insert failed, or the store returned no usable row.
        """
        client = self._require_client()

        try:
            with PerformanceLogger("report_insert", logger):
                response = await (
                    client.table(self._reports_table).insert(record.to_row()).execute()
                )
        except StoreFailure as exc:
            raise UpstreamError(store_error_message(exc)) from exc

        rows = response.data or []
        if not rows:
            raise UpstreamError("store returned no row for the inserted report")

        try:
            return FoundReport.model_validate(rows[0])
        except pydantic.ValidationError as exc:
            logger.error(
                "report_row_invalid",
                detector_id=record.detector_id,
                error_count=exc.error_count(),
            )
            raise UpstreamError("store returned a malformed report row") from exc
