"""Owner notices for found reports.

Delivery is not part of this service: ``LogOwnerNotifier`` composes the
notice the owner would receive and writes it to the log. The report service
calls the notifier after the report is stored and only when an owner was
resolved; a notifier failure never fails the submission.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from detectsecure.models import FoundReport
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)


def compose_owner_notice(report: FoundReport) -> str:
    """Render the plain-text notice for the owner of ``report.detector_id``."""
    return (
        "Good news — your DetectSecure item has been found!\n"
        "\n"
        f"ID: {report.detector_id}\n"
        "\n"
        "Finder details:\n"
        f"Name: {report.finder_name or 'Not provided'}\n"
        f"Email: {report.finder_email}\n"
        "\n"
        "Message:\n"
        f"{report.message or 'No message left'}\n"
        "\n"
        "Reply to the finder to arrange return."
    )


@runtime_checkable
class OwnerNotifier(Protocol):
    async def notify(self, report: FoundReport) -> None:
        """Tell the owner about ``report``. ``report.owner_email`` is set."""
        ...


class LogOwnerNotifier:
    """Logs the composed notice instead of sending it."""

    async def notify(self, report: FoundReport) -> None:
        logger.info(
            "owner_notice_composed",
            report_id=report.id,
            detector_id=report.detector_id,
            owner_email=report.owner_email,
            notice=compose_owner_notice(report),
        )


class NullOwnerNotifier:
    """Discards notices."""

    async def notify(self, report: FoundReport) -> None:
        return None
