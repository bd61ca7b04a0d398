"""structlog setup for DetectSecure.

JSON lines by default; ``detectsecure.main`` reconfigures from LOG_LEVEL,
DEBUG and JSON_LOGS. Each line carries the bound request_id, and any field
named like a store credential is masked before rendering.
"""

import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Field names whose values are Supabase keys or auth headers.
CREDENTIAL_FIELDS: frozenset[str] = frozenset(
    {"anon_key", "service_role_key", "supabase_key", "apikey", "api_key", "authorization"}
)
REDACTED = "[redacted]"


def add_request_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def redact_credentials(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    for field_name in event_dict:
        if field_name.lower() in CREDENTIAL_FIELDS and event_dict[field_name]:
            event_dict[field_name] = REDACTED
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """(Re)configure structlog.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL; unknown names fall back to INFO.
        json_output: JSON lines when True, coloured console output otherwise.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        redact_credentials,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "detectsecure") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class PerformanceLogger:
    """Times one store call.

    ``<operation> completed`` goes out at DEBUG, or WARNING past ``slow_ms``;
    ``<operation> failed`` at ERROR when the block raises (never suppressed).
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
        slow_ms: float = 1000.0,
    ):
        self.operation = operation
        self.logger = logger or get_logger()
        self.slow_ms = slow_ms
        self._started: float = 0.0
        self._elapsed_ms: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._elapsed_ms = (time.perf_counter() - self._started) * 1000
        fields = {"operation": self.operation, "duration_ms": round(self._elapsed_ms, 2)}

        if exc_type is not None:
            self.logger.error(f"{self.operation} failed", error=str(exc_val), **fields)
        elif self._elapsed_ms > self.slow_ms:
            self.logger.warning(f"{self.operation} slow", slow_ms=self.slow_ms, **fields)
        else:
            self.logger.debug(f"{self.operation} completed", **fields)

    @property
    def duration_ms(self) -> float:
        if self._elapsed_ms is None:
            return (time.perf_counter() - self._started) * 1000
        return self._elapsed_ms


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def clear_request_id() -> None:
    request_id_var.set(None)


configure_logging()
