"""FastAPI dependencies resolving the startup-built store gate and services.

Everything here is read from ``app.state`` as set by the lifespan; tests
either set the same attributes on a bare app or use ``dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Request

from detectsecure.errors import ConfigurationError
from detectsecure.services.report import ReportService
from detectsecure.services.verification import VerificationService
from detectsecure.store.gate import StoreGate

_NOT_STARTED = "Store gateways are not initialised (service still starting)."


def get_store_gate(request: Request) -> StoreGate:
    gate = getattr(request.app.state, "store", None)
    if gate is None:
        raise ConfigurationError(_NOT_STARTED)
    return gate


def get_verification_service(request: Request) -> VerificationService:
    service = getattr(request.app.state, "verification_service", None)
    if service is None:
        raise ConfigurationError(_NOT_STARTED)
    return service


def get_report_service(request: Request) -> ReportService:
    service = getattr(request.app.state, "report_service", None)
    if service is None:
        raise ConfigurationError(_NOT_STARTED)
    return service
