"""
Error taxonomy for the metafield auditor.

Every failure raised while scanning derives from :class:`AuditError` so the
HTTP layer and the scheduler can report it without knowing the details.
"""


class AuditError(Exception):
    """Base class for all auditor failures."""


class ConfigError(AuditError):
    """Required configuration is missing or invalid."""


class TransportError(AuditError):
    """Network or HTTP-layer failure talking to the Shopify Admin API."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class APIError(AuditError):
    """The Admin API answered with application-level errors."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class ReportError(AuditError):
    """The spreadsheet report could not be written."""


class NotifyError(AuditError):
    """The report email could not be sent."""
