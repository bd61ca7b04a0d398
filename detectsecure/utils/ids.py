"""Input canonicalization helpers shared by the verify and report paths."""

from __future__ import annotations

from typing import Any, Optional


def canonicalize_id(raw: Any) -> str:
    """Return the canonical detector id: trimmed and upper-cased.

    ``None`` canonicalizes to the empty string. Idempotent, so ids that are
    already canonical pass through unchanged.
    """
    if raw is None:
        return ""
    return str(raw).strip().upper()


def clean_required(raw: Any) -> str:
    """Trim a required free-text field; ``None`` becomes ``""``."""
    if raw is None:
        return ""
    return str(raw).strip()


def clean_optional(raw: Any) -> Optional[str]:
    """Trim an optional free-text field. Blank values become ``None``, never ``""``."""
    cleaned = clean_required(raw)
    return cleaned or None
