"""Error types raised by s3compat.

Every failure a caller can observe is one of the classes below. They all
derive from S3CompatError so callers can catch the whole family at once,
while still being able to tell a broken wire format (WireFormatError) apart
from a server that rejected the request and said why (RemoteError).
"""

from typing import Optional


class S3CompatError(Exception):
    """Base class for all s3compat errors."""

    code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class InvalidConfiguration(S3CompatError):
    """Raised when a provider or connection is misconfigured.

    Covers unknown or missing regions on strict providers, a missing
    account id, unresolved endpoint placeholders and bad config files.
    """

    code = "invalid_configuration"


class InvalidParameters(S3CompatError):
    """Raised when a call is made with unusable arguments."""

    code = "invalid_parameters"


class UnsupportedOperation(S3CompatError):
    """Raised when a provider does not offer a capability."""

    code = "unsupported_operation"


class TransportFailure(S3CompatError):
    """Raised when the HTTP transport could not complete a request."""

    code = "transport_failure"


class WireFormatError(S3CompatError):
    """Raised when a response body is not well-formed XML.

    Attributes:
        fragment: The first part of the offending body, for diagnostics
    """

    code = "wire_format_error"

    def __init__(self, message: str, fragment: str = ""):
        super().__init__(message)
        self.fragment = fragment


class RemoteError(S3CompatError):
    """Raised when the server answers with a non-2xx status.

    Attributes:
        code: Vendor error code (e.g. NoSuchBucket), or request_failed
        status: HTTP status code
        request_id: Request id reported by the server, if any
    """

    code = "request_failed"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: int = 0,
        request_id: str = "",
    ):
        super().__init__(message, code)
        self.status = status
        self.request_id = request_id

    def __str__(self) -> str:
        return f"{self.code} (HTTP {self.status}): {self.message}"
