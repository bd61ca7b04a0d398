"""Finder report endpoints.

Provides:
  POST /api/report — store a finder's report; returns the stored row
  GET  /api/report — 405 with a plain-text hint (browsers hitting the URL)

Request body (JSON object)::

    {"id": "DS-10482", "finder_name": "Sam", "finder_email": "sam@example.com",
     "message": "Left it at the front desk"}

``name`` / ``email`` are accepted for ``finder_name`` / ``finder_email`` so
older form embeds keep working. Only ``id`` and ``finder_email`` are
required; the service enforces that so a missing field yields the regular
400 envelope.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from detectsecure.api.deps import get_report_service
from detectsecure.api.responses import guarded
from detectsecure.constants import MSG_REPORT_GET
from detectsecure.models import ReportSubmission
from detectsecure.services.report import ReportService

router = APIRouter(prefix="/api", tags=["report"])


class ReportRequest(BaseModel):
    """Body for POST /api/report. Numeric values are accepted as strings."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    id: Optional[str] = None
    finder_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("finder_name", "name")
    )
    finder_email: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("finder_email", "email")
    )
    message: Optional[str] = None

    def to_submission(self) -> ReportSubmission:
        return ReportSubmission(
            id=self.id,
            finder_email=self.finder_email,
            finder_name=self.finder_name,
            message=self.message,
        )


@router.post("/report")
async def submit_report(
    body: Optional[ReportRequest] = None,
    service: ReportService = Depends(get_report_service),
) -> dict:
    """Store a found report. The detector does not have to be registered."""
    submission = body.to_submission() if body is not None else ReportSubmission(
        id=None, finder_email=None
    )
    report = await guarded("report", service.submit_report(submission))
    return {"success": True, "inserted": report.model_dump(mode="json")}


@router.get("/report", response_class=PlainTextResponse)
async def report_method_hint() -> PlainTextResponse:
    return PlainTextResponse(MSG_REPORT_GET, status_code=405)
