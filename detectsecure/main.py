"""DetectSecure FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()          → app.state.config (unless create_app() got one)
  2. create_store_gate()    → app.state.store (capability flags + both gateways)
  3. services               → app.state.verification_service, app.state.report_service

Nothing in startup fails on missing credentials: the gate simply reports the
capability as absent and the dependent endpoints answer 500 with a
configuration error. Only an invalid config file stops the process.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from detectsecure.api.middleware import RequestIdMiddleware
from detectsecure.api.report import router as report_router
from detectsecure.api.responses import install_error_handlers
from detectsecure.api.verify import router as verify_router
from detectsecure.config import Config, load_config
from detectsecure.constants import DEFAULT_CORS_ORIGINS
from detectsecure.health import router as health_router
from detectsecure.notify import LogOwnerNotifier
from detectsecure.services.report import ReportService
from detectsecure.services.verification import VerificationService
from detectsecure.store.gate import StoreGate, create_store_gate
from detectsecure.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the process-wide store gate and services once, before serving."""
    logger.info("DetectSecure starting up...")

    # A config passed to create_app() is reused; otherwise load it here.
    # load_config() raises SystemExit on an invalid file; missing file = defaults.
    config: Config = app.state.config or load_config()
    app.state.config = config

    store: StoreGate = await create_store_gate(config.store)
    app.state.store = store

    app.state.verification_service = VerificationService(store.query)
    app.state.report_service = ReportService(store.admin, notifier=LogOwnerNotifier())

    logger.info(
        "DetectSecure ready",
        read_capable=store.read_capable,
        write_capable=store.write_capable,
    )

    yield

    logger.info("DetectSecure shutting down...")
    app.state.verification_service = None
    app.state.report_service = None
    logger.info("DetectSecure shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the DetectSecure FastAPI application.

    Call this directly in tests to get an isolated app instance. No config I/O
    happens here: CORS origins come from ``config`` when given (run.py passes
    the one it loaded) and default otherwise. Everything that touches the
    store is built later, in the lifespan.
    """
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="DetectSecure API",
        description="Registry and verification service for DetectSecure anti-theft tags",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    application.state.config = config
    application.state.store = None

    cors_origins = config.cors.allow_origins if config else list(DEFAULT_CORS_ORIGINS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    # Added last so it is outermost: every log line, including CORS
    # rejections, carries the request id.
    application.add_middleware(RequestIdMiddleware)

    application.include_router(health_router)
    application.include_router(verify_router)
    application.include_router(report_router)

    install_error_handlers(application)

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────
#   uvicorn detectsecure.main:app --host 0.0.0.0 --port 3000

app = create_app()
