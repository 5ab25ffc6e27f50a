"""
Unified error schema for API responses.

Defines the closed set of error kinds, their registry of defaults, and the
ApiError exception hierarchy that every incoming failure is classified into.
The client-facing body never includes the original cause.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Sequence


class ErrorKind(str, Enum):
    """Closed set of API error categories."""

    # Required kinds
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    VALIDATION_FAILED = "validation_failed"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    NOT_FOUND = "not_found"
    INTERNAL_SERVER_ERROR = "internal_server_error"

    # Additional client/server kinds
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    TOO_MANY_REQUESTS = "too_many_requests"
    SERVICE_UNAVAILABLE = "service_unavailable"


@dataclass(frozen=True)
class KindSpec:
    """
    Registry entry for an error kind.

    Attributes:
        status_code: Canonical HTTP status for the kind
        message: Default human-readable message
        headers: Headers every response of this kind carries
        retryable: Whether the client may retry the request
    """

    status_code: int
    message: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    retryable: bool = False


_REGISTRY: Mapping[ErrorKind, KindSpec] = MappingProxyType(
    {
        ErrorKind.FORBIDDEN: KindSpec(403, "Forbidden"),
        ErrorKind.UNAUTHORIZED: KindSpec(401, "Unauthorized"),
        ErrorKind.VALIDATION_FAILED: KindSpec(422, "Validation failed"),
        ErrorKind.METHOD_NOT_ALLOWED: KindSpec(405, "Method not allowed"),
        ErrorKind.NOT_FOUND: KindSpec(404, "Not found"),
        ErrorKind.INTERNAL_SERVER_ERROR: KindSpec(
            500, "Internal server error", retryable=True
        ),
        ErrorKind.BAD_REQUEST: KindSpec(400, "Bad request"),
        ErrorKind.CONFLICT: KindSpec(409, "Conflict"),
        ErrorKind.TOO_MANY_REQUESTS: KindSpec(
            429, "Too many requests", retryable=True
        ),
        ErrorKind.SERVICE_UNAVAILABLE: KindSpec(
            503, "Service unavailable", retryable=True
        ),
    }
)

_KIND_BY_STATUS: Mapping[int, ErrorKind] = MappingProxyType(
    {spec.status_code: kind for kind, spec in _REGISTRY.items()}
)


def kind_spec(kind: ErrorKind) -> KindSpec:
    """Return the registry entry for an error kind."""
    return _REGISTRY[kind]


def kind_for_status(status_code: int) -> ErrorKind | None:
    """Return the kind registered for a status code, if any."""
    return _KIND_BY_STATUS.get(status_code)


class ApiError(Exception):
    """
    Classified, request-scoped API error.

    Subclasses fix exactly one kind. The status code defaults to the kind's
    registry entry and may be overridden at construction.

    Attributes:
        status_code: HTTP status in [100, 599]
        headers: Response headers, in insertion order
        message: Human-readable message, may be empty
        cause: The original error, if one was wrapped
    """

    _kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "",
        cause: BaseException | None = None,
        *,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        spec = kind_spec(self._kind)
        status = spec.status_code if status_code is None else status_code
        if not 100 <= status <= 599:
            raise ValueError(f"Invalid HTTP status code: {status}")

        super().__init__(message or spec.message)
        self.message = message
        self.cause = cause
        self.status_code = status
        self.headers: dict[str, str] = {**spec.headers, **(headers or {})}

    @property
    def kind(self) -> ErrorKind:
        """The error's category."""
        return self._kind

    @property
    def display_message(self) -> str:
        """Message shown to clients, falling back to the kind's default."""
        return self.message or kind_spec(self._kind).message

    @property
    def retryable(self) -> bool:
        return kind_spec(self._kind).retryable

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """
        Convert error to dictionary format for JSON responses.

        Returns:
            Dictionary with 'error' key containing error details
        """
        return {
            "error": {
                "id": self._kind.value,
                "status": self.status_code,
                "message": self.display_message,
                "retryable": self.retryable,
            }
        }

    def to_report(self) -> BaseException:
        """Return the error that should be handed to reporters."""
        return self.cause if self.cause is not None else self

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self._kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


class ForbiddenApiError(ApiError):
    """Caller is authenticated but not permitted to perform the action."""

    _kind = ErrorKind.FORBIDDEN


class UnauthorizedApiError(ApiError):
    """Credentials are missing or invalid."""

    _kind = ErrorKind.UNAUTHORIZED


class MethodNotAllowedApiError(ApiError):
    """The route exists but does not support the request method."""

    _kind = ErrorKind.METHOD_NOT_ALLOWED


class NotFoundApiError(ApiError):
    """Requested resource does not exist."""

    _kind = ErrorKind.NOT_FOUND


class InternalServerErrorApiError(ApiError):
    """Unexpected failure; the catch-all kind."""

    _kind = ErrorKind.INTERNAL_SERVER_ERROR


class BadRequestApiError(ApiError):
    _kind = ErrorKind.BAD_REQUEST


class ConflictApiError(ApiError):
    _kind = ErrorKind.CONFLICT


class TooManyRequestsApiError(ApiError):
    _kind = ErrorKind.TOO_MANY_REQUESTS


class ServiceUnavailableApiError(ApiError):
    _kind = ErrorKind.SERVICE_UNAVAILABLE


class ValidationFailedApiError(ApiError):
    """
    Request input failed validation.

    Attributes:
        field_errors: Field name mapped to its ordered validation messages
        old_input: Submitted values, used to pre-fill a re-rendered form
    """

    _kind = ErrorKind.VALIDATION_FAILED

    def __init__(
        self,
        field_errors: Mapping[str, Sequence[str]],
        message: str = "",
        cause: BaseException | None = None,
        *,
        old_input: Mapping[str, Any] | None = None,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        # Fields without messages carry no error
        errors = {
            str(name): list(messages)
            for name, messages in field_errors.items()
            if messages
        }
        if not errors:
            raise ValueError("Validation errors require at least one field message")

        super().__init__(
            message, cause, status_code=status_code, headers=headers
        )
        self.field_errors: dict[str, list[str]] = errors
        self.old_input: dict[str, Any] = dict(old_input or {})

    def to_dict(self) -> dict[str, dict[str, Any]]:
        result = super().to_dict()
        result["error"]["errors"] = {
            name: list(messages) for name, messages in self.field_errors.items()
        }
        return result


# Kind -> concrete class, used when classifying by status code
ERROR_CLASSES: Mapping[ErrorKind, type[ApiError]] = MappingProxyType(
    {
        ErrorKind.FORBIDDEN: ForbiddenApiError,
        ErrorKind.UNAUTHORIZED: UnauthorizedApiError,
        ErrorKind.VALIDATION_FAILED: ValidationFailedApiError,
        ErrorKind.METHOD_NOT_ALLOWED: MethodNotAllowedApiError,
        ErrorKind.NOT_FOUND: NotFoundApiError,
        ErrorKind.INTERNAL_SERVER_ERROR: InternalServerErrorApiError,
        ErrorKind.BAD_REQUEST: BadRequestApiError,
        ErrorKind.CONFLICT: ConflictApiError,
        ErrorKind.TOO_MANY_REQUESTS: TooManyRequestsApiError,
        ErrorKind.SERVICE_UNAVAILABLE: ServiceUnavailableApiError,
    }
)
