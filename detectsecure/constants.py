"""Shared constants for DetectSecure.

Store table/column names, default bindings and user-facing messages live
here so the gateways, services and routes agree on them.
"""

# ─── Store layout ─────────────────────────────────────────────────────────────

DETECTORS_TABLE: str = "detectors"
FOUND_REPORTS_TABLE: str = "found_reports"

# Columns read for owner resolution. The store keys detectors by ``id`` and
# keeps the owner contact in ``email``.
DETECTOR_COLUMNS: str = "id,email"

# ─── Server defaults ──────────────────────────────────────────────────────────

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 3000

DEFAULT_CORS_ORIGINS: tuple[str, ...] = (
    "https://detectsecureid.com",
    "https://www.detectsecureid.com",
)

# ─── Messages ─────────────────────────────────────────────────────────────────

MSG_MISSING_ID: str = "missing id"
MSG_MISSING_REPORT_FIELDS: str = "missing id or finder_email"
MSG_READ_NOT_CONFIGURED: str = (
    "Store read access is not configured on the server (SUPABASE_URL / SUPABASE_ANON_KEY)."
)
MSG_WRITE_NOT_CONFIGURED: str = (
    "Store write access is not configured on the server "
    "(SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)."
)
MSG_REPORT_GET: str = (
    "Use POST /api/report (this endpoint expects a form submit / fetch POST)."
)
ROOT_BANNER: str = "DetectSecure API running"
