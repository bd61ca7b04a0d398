"""Verification and reporting services built on the store gateways."""

from detectsecure.services.report import ReportService
from detectsecure.services.verification import VerificationService

__all__ = ["ReportService", "VerificationService"]
