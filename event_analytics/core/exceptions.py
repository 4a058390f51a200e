"""Error taxonomy for the analytics service.

Each error carries the HTTP status it maps to; the web app renders all of them
as ``{"error": <message>}``.
"""


class AnalyticsError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(AnalyticsError):
    """Missing or malformed required input."""

    status_code = 400


class AuthTokenInvalid(AnalyticsError):
    """A federated identity token failed verification."""

    status_code = 400


class Unauthorized(AnalyticsError):
    """No credential was presented."""

    status_code = 401


class Forbidden(AnalyticsError):
    """Credential present but unknown, revoked or expired."""

    status_code = 403


class NotFound(AnalyticsError):
    """Referenced resource does not exist."""

    status_code = 404


class LookupKeyMissing(NotFound):
    """A lookup was attempted without any lookup key; reported as bad input."""

    status_code = 400


class StoreError(AnalyticsError):
    """The persistent store failed. Never carries internal detail to callers."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class CacheUnavailable(Exception):
    """The cache backend could not be reached. Never leaves the cache layer."""
