"""Domain exceptions for request validation and upstream failures."""

from typing import Iterable


class ValidationError(Exception):
    """Client input problem. Never reaches the upstream API."""

    code = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class MissingParameter(ValidationError):
    code = "missing_parameter"

    def __init__(self, field: str):
        super().__init__(field, f"Parameter '{field}' is required")


class InvalidParameter(ValidationError):
    code = "invalid_parameter"

    def __init__(self, field: str, reason: str = "is invalid"):
        super().__init__(field, f"Parameter '{field}' {reason}")


class InvalidEnum(ValidationError):
    code = "invalid_enum"

    def __init__(self, field: str, allowed: Iterable[str]):
        self.allowed = tuple(allowed)
        choices = ", ".join(f'"{a}"' for a in self.allowed)
        super().__init__(field, f"Parameter '{field}' must be one of {choices}")


class UpstreamError(Exception):
    """Base class for failures talking to TMDB."""

    code = "upstream_error"

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class UpstreamAuthError(UpstreamError):
    """No TMDB credential configured."""

    code = "upstream_auth_error"


class UpstreamHTTPError(UpstreamError):
    """TMDB answered with a non-2xx status."""

    code = "upstream_http_error"

    def __init__(self, status: int, endpoint: str):
        super().__init__(f"TMDB returned HTTP {status} for {endpoint}")
        self.status = status
        self.endpoint = endpoint


class UpstreamTransportError(UpstreamError):
    """Network level failure (timeout, DNS, connection reset) or bad body."""

    code = "upstream_transport_error"
