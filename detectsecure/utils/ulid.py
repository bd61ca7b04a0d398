"""Request identifiers.

Every request gets a ULID (python-ulid) that is bound to the log context and
echoed back in the ``X-Request-ID`` header, so a finder's report can be traced
from the response to the log lines for its lookup and insert.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Return a new 26-character ULID string (Crockford Base32)."""
    return str(ULID())
