"""Service root, health and store diagnostics.

Implements:
  GET /          — plain-text banner
  GET /health    — configuration presence only; always 200, never touches the store
  GET /api/test  — one-row read through the query gateway to prove reachability

/health is safe for container probes: it answers before startup finishes
(both flags false) and does not depend on the store being up. Use /api/test
to check the store itself.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from detectsecure.api.deps import get_store_gate
from detectsecure.api.responses import guarded
from detectsecure.constants import ROOT_BANNER
from detectsecure.store.gate import StoreGate

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return ROOT_BANNER


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Report which store capabilities are configured.

    Response body (200):
        {"ok": true, "hasReadAccess": bool, "hasWriteAccess": bool}
    """
    gate = getattr(request.app.state, "store", None)
    return {
        "ok": True,
        "hasReadAccess": bool(gate is not None and gate.read_capable),
        "hasWriteAccess": bool(gate is not None and gate.write_capable),
    }


@router.get("/api/test")
async def store_probe(gate: StoreGate = Depends(get_store_gate)) -> dict[str, Any]:
    ids = await guarded("store_probe", gate.query.probe())
    return {"success": True, "data": [{"id": detector_id} for detector_id in ids]}
