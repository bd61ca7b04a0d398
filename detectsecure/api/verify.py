"""GET /api/verify — registration check for a scanned or typed code.

    /api/verify?id=ds-10482
      200 {"success": true, "registered": true, "id": "DS-10482"}
      400 {"success": false, "error": "missing id"}
      500 {"success": false, "error": "<configuration or store message>"}
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from detectsecure.api.deps import get_verification_service
from detectsecure.api.responses import guarded
from detectsecure.services.verification import VerificationService

router = APIRouter(prefix="/api", tags=["verify"])


@router.get("/verify")
async def verify_detector(
    detector_id: Optional[str] = Query(default=None, alias="id"),
    service: VerificationService = Depends(get_verification_service),
) -> dict:
    result = await guarded("verify", service.verify(detector_id))
    return {
        "success": True,
        "registered": result.registered,
        "id": result.id,
    }
