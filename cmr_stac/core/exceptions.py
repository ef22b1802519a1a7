"""Exception hierarchy for CMR-STAC.

All exceptions raised by this package derive from CmrStacError and carry the
ErrorType used when the HTTP boundary renders them.
"""

from __future__ import annotations

from typing import Any

from cmr_stac.core.error_types import ErrorType


class CmrStacError(Exception):
    """Base exception for CMR-STAC errors."""

    error_type: ErrorType = ErrorType.UNEXPECTED_ERROR
    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ItemNotFound(CmrStacError):
    """Requested collection or item does not exist."""

    error_type = ErrorType.NOT_FOUND
    status_code = 404


class ProviderNotFound(ItemNotFound):
    """Requested provider is not in the current provider list."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Provider [{provider_id}] not found")


class InvalidParameter(CmrStacError):
    """A request parameter could not be interpreted."""

    error_type = ErrorType.BAD_REQUEST
    status_code = 400

    def __init__(self, name: str, reason: str, value: Any | None = None) -> None:
        self.name = name
        self.reason = reason
        self.value = value
        message = f"Invalid parameter '{name}': {reason}"
        if value is not None:
            message += f" (got: {value!r})"
        super().__init__(message)


class ValidationFailure(CmrStacError):
    """A generated STAC document does not conform to its schema.

    Attributes:
        schema_name: Name of the schema the document was checked against
        errors: Validator messages, one per violation
    """

    error_type = ErrorType.VALIDATION_FAILURE
    status_code = 500

    def __init__(self, schema_name: str, errors: list[str]) -> None:
        self.schema_name = schema_name
        self.errors = errors
        super().__init__(f"Generated document failed '{schema_name}' schema validation")


class CmrError(CmrStacError):
    """CMR answered with an error or could not be reached.

    Attributes:
        cmr_status: HTTP status returned by CMR (0 for network errors)
        url: Request URL
        errors: Error messages reported by CMR
    """

    error_type = ErrorType.UPSTREAM_HTTP_ERROR
    status_code = 502

    def __init__(self, cmr_status: int, url: str, errors: list[str] | None = None) -> None:
        self.cmr_status = cmr_status
        self.url = url
        self.errors = errors or []
        detail = "; ".join(self.errors) if self.errors else "no error details"
        super().__init__(f"CMR request to {url} failed with status {cmr_status}: {detail}")
