"""Error taxonomy for the verification and reporting workflow.

Every failure the core surfaces is a ``DetectSecureError`` carrying the HTTP
status the API layer answers with:

    ValidationError     400  caller input missing or malformed; never retried
    ConfigurationError  500  store credentials absent; fixed by an operator
    UpstreamError       500  the store call failed; safe for the caller to retry
    InternalError       500  unexpected exception inside a handler

A detector that does not exist is not an error (see ``DetectorLookup``).
"""

from __future__ import annotations


class DetectSecureError(Exception):
    """Base class for errors rendered as ``{"success": false, "error": ...}``."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DetectSecureError):
    status_code = 400


class ConfigurationError(DetectSecureError):
    status_code = 500


class UpstreamError(DetectSecureError):
    """The store rejected or failed a call. ``message`` is the store's own text."""

    status_code = 500


class InternalError(DetectSecureError):
    status_code = 500
