"""DetectSecure — registry and verification API for coded anti-theft tags."""

__version__ = "1.0.0"
