"""Typed records for detectors, found reports and lookup outcomes.

Store rows are validated into these models at the gateway boundary
(``Detector.model_validate(row)``); nothing downstream touches raw dicts.

Column mapping (PostgREST):
    detectors      id, email → Detector.id, Detector.owner_email
    found_reports  id, detector_id, finder_name, finder_email, message,
                   owner_email, created_at → FoundReport
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from detectsecure.errors import UpstreamError

# ─── Store records ────────────────────────────────────────────────────────────


class Detector(BaseModel):
    """A registered tag. Created and mutated outside this service."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    owner_email: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("email", "owner_email"),
    )


class FoundReportInput(BaseModel):
    """Fields the service writes for a finder's submission.

    ``finder_name``, ``message`` and ``owner_email`` are ``None`` when absent;
    an empty string is never stored.
    """

    model_config = ConfigDict(extra="ignore")

    detector_id: str
    finder_name: Optional[str] = None
    finder_email: str
    message: Optional[str] = None
    owner_email: Optional[str] = None

    def to_row(self) -> dict[str, Any]:
        return self.model_dump()


class FoundReport(FoundReportInput):
    """A stored report row, including the store-assigned ``id`` and ``created_at``."""

    id: Union[int, str]
    created_at: datetime


# ─── Lookup outcome ───────────────────────────────────────────────────────────


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class DetectorLookup:
    """Three-way result of a detector lookup.

    Keeps "no such detector" (a normal business outcome) apart from "the
    lookup itself broke" so owner resolution can proceed on the first and
    abort on the second.
    """

    status: LookupStatus
    detector: Optional[Detector] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, detector: Detector) -> "DetectorLookup":
        return cls(status=LookupStatus.FOUND, detector=detector)

    @classmethod
    def not_found(cls) -> "DetectorLookup":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "DetectorLookup":
        return cls(status=LookupStatus.ERROR, error=error)

    def unwrap(self) -> Optional[Detector]:
        """Return the detector (``None`` when not found); raise UpstreamError on ERROR."""
        if self.status is LookupStatus.ERROR:
            raise UpstreamError(self.error or "store lookup failed")
        return self.detector


# ─── Service inputs / outputs ─────────────────────────────────────────────────


@dataclass(frozen=True)
class VerificationResult:
    registered: bool
    id: str


@dataclass(frozen=True)
class ReportSubmission:
    """Raw finder input as received; the report service canonicalizes it."""

    id: Optional[str]
    finder_email: Optional[str]
    finder_name: Optional[str] = None
    message: Optional[str] = None
