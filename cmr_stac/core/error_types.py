"""Error type enumeration for CMR-STAC.

Provides type-safe error categorization for error responses and logs.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type categories used in the ``error.type`` field of responses."""

    # Client errors
    NOT_FOUND = "not_found"  # Collection or provider absent
    BAD_REQUEST = "bad_request"  # Malformed request parameters

    # Contract violations in our own output
    VALIDATION_FAILURE = "validation_failure"

    # Upstream (CMR) errors
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_HTTP_ERROR = "upstream_http_error"
    UPSTREAM_ERROR = "upstream_error"

    # Catch-all
    UNEXPECTED_ERROR = "unexpected_error"
