"""ReportService — persist a finder's report against a detector code.

Submission flow:
  1. canonicalize the id, trim the finder's email and optional fields
  2. reject a missing id or finder_email (ValidationError)
  3. require privileged access (ConfigurationError) — the insert is mandatory
  4. resolve the owner through AdminGateway:
       FOUND     → snapshot the owner's email
       NOT_FOUND → owner_email = None, carry on
       ERROR     → UpstreamError, nothing is inserted
  5. insert the report (one store call)
  6. return the stored row, then hand it to the owner notifier

Steps 4 and 5 are separate store calls with no transaction around them: the
owner snapshot may already be stale when the row lands, and two identical
submissions always produce two rows.
"""

from __future__ import annotations

from typing import Optional

from detectsecure.constants import MSG_MISSING_REPORT_FIELDS
from detectsecure.errors import ConfigurationError, UpstreamError, ValidationError
from detectsecure.models import FoundReport, FoundReportInput, LookupStatus, ReportSubmission
from detectsecure.notify import NullOwnerNotifier, OwnerNotifier
from detectsecure.store.admin import AdminGateway
from detectsecure.utils.ids import canonicalize_id, clean_optional, clean_required
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)


class ReportService:
    def __init__(
        self,
        admin: AdminGateway,
        notifier: Optional[OwnerNotifier] = None,
    ) -> None:
        self._admin = admin
        self._notifier: OwnerNotifier = notifier or NullOwnerNotifier()

    async def submit_report(self, submission: ReportSubmission) -> FoundReport:
        """Store a finder's report and return the persisted record.

        The detector does not need to exist; an unknown id is stored with
        ``owner_email=None``.

        Raises:
            ValidationError: Canonical id or trimmed finder_email is empty.
            ConfigurationError: No privileged (service-role) access.
            UpstreamError: Owner lookup or insert failed at the store.
        """
        detector_id = canonicalize_id(submission.id)
        finder_email = clean_required(submission.finder_email)
        if not detector_id or not finder_email:
            raise ValidationError(MSG_MISSING_REPORT_FIELDS)

        if not self._admin.available:
            raise ConfigurationError(self._admin.unavailable_message)

        owner_email = await self._resolve_owner(detector_id)

        record = FoundReportInput(
            detector_id=detector_id,
            finder_name=clean_optional(submission.finder_name),
            finder_email=finder_email,
            message=clean_optional(submission.message),
            owner_email=owner_email,
        )
        report = await self._admin.insert_report(record)

        logger.info(
            "found_report_stored",
            report_id=report.id,
            detector_id=detector_id,
            owner_resolved=owner_email is not None,
        )

        if report.owner_email:
            await self._notify(report)
        return report

    async def _resolve_owner(self, detector_id: str) -> Optional[str]:
        lookup = await self._admin.lookup_detector(detector_id)

        if lookup.status is LookupStatus.ERROR:
            logger.error(
                "owner_lookup_failed",
                detector_id=detector_id,
                error=lookup.error,
            )
            raise UpstreamError(lookup.error or "owner lookup failed")

        if lookup.status is LookupStatus.NOT_FOUND or lookup.detector is None:
            logger.info("owner_not_found", detector_id=detector_id)
            return None

        # An empty email column means no owner contact; never store "".
        return lookup.detector.owner_email or None

    async def _notify(self, report: FoundReport) -> None:
        try:
            await self._notifier.notify(report)
        except Exception as exc:
            # Best-effort: the report is already stored.
            logger.error(
                "owner_notice_failed",
                report_id=report.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
