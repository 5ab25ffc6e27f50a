"""
Classification of arbitrary exceptions into ApiError kinds.

Rules are evaluated in order and the first match wins. The final fallback
wraps anything unrecognized as an internal server error, so classification
always produces a value.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_exceptions.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    FormValidationError,
    RecordNotFoundError,
)
from api_exceptions.models.errors import (
    ERROR_CLASSES,
    ApiError,
    ForbiddenApiError,
    InternalServerErrorApiError,
    MethodNotAllowedApiError,
    NotFoundApiError,
    UnauthorizedApiError,
    ValidationFailedApiError,
    kind_for_status,
    kind_spec,
)

Predicate = Callable[[BaseException], bool]
Constructor = Callable[[BaseException], ApiError]

# Leading location segments FastAPI adds to validation error locations
_REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


def message_bag(errors: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """
    Group pydantic-style error dicts into field -> messages.

    Args:
        errors: Error dicts with ``loc`` and ``msg`` keys

    Returns:
        Mapping from dotted field name to messages, in first-seen order
    """
    bag: dict[str, list[str]] = {}
    for error in errors:
        if not isinstance(error, Mapping):
            continue
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        name = ".".join(loc) or "__root__"
        bag.setdefault(name, []).append(str(error.get("msg", "")))
    return bag


def scalar_input(values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Keep only session-serializable submitted values.

    Uploads, dates and other objects are dropped so the input can be
    flashed through a JSON-encoded session.

    Args:
        values: Submitted form, query or body values

    Returns:
        The str, int, float and bool values, in original order
    """
    return {
        str(key): value
        for key, value in values.items()
        if isinstance(value, (str, int, float, bool))
    }


def _field_errors(error: BaseException) -> dict[str, list[str]]:
    if isinstance(error, FormValidationError):
        bag = error.errors
    elif isinstance(error, (RequestValidationError, PydanticValidationError)):
        bag = message_bag(error.errors())
    else:
        return {}
    return {name: messages for name, messages in bag.items() if messages}


def _submitted_input(error: BaseException) -> dict[str, Any]:
    if isinstance(error, FormValidationError):
        return scalar_input(error.input)
    body = getattr(error, "body", None)
    if isinstance(body, Mapping):
        return scalar_input(body)
    return {}


def _http_status(error: BaseException) -> int | None:
    if isinstance(error, StarletteHTTPException):
        return error.status_code
    return None


def _is_validation_failure(error: BaseException) -> bool:
    return bool(_field_errors(error))


def _is_not_found(error: BaseException) -> bool:
    return isinstance(error, RecordNotFoundError) or _http_status(error) == 404


def _is_registered_http_error(error: BaseException) -> bool:
    status = _http_status(error)
    return status is not None and kind_for_status(status) is not None


def _unauthorized(error: BaseException) -> ApiError:
    scheme = getattr(error, "scheme", None)
    headers = {"WWW-Authenticate": scheme} if scheme else None
    return UnauthorizedApiError(cause=error, headers=headers)


def _validation_failed(error: BaseException) -> ApiError:
    return ValidationFailedApiError(
        _field_errors(error), cause=error, old_input=_submitted_input(error)
    )


def _method_not_allowed(error: BaseException) -> ApiError:
    headers = getattr(error, "headers", None) or {}
    allow = {k: v for k, v in headers.items() if k.lower() == "allow"}
    return MethodNotAllowedApiError(cause=error, headers=allow)


def _from_http_status(error: BaseException) -> ApiError:
    status = _http_status(error)
    kind = kind_for_status(status) if status is not None else None
    if kind is None:
        return InternalServerErrorApiError(cause=error)

    detail = getattr(error, "detail", None)
    detail = detail if isinstance(detail, str) else ""
    # Starlette fills detail with the status phrase when none is given
    if detail and detail.lower() == kind_spec(kind).message.lower():
        detail = ""
    error_class = ERROR_CLASSES[kind]
    if error_class is ValidationFailedApiError:
        return ValidationFailedApiError(
            {"__root__": [detail or kind_spec(kind).message]}, cause=error
        )
    headers = getattr(error, "headers", None) or {}
    return error_class(detail, error, headers=dict(headers))


_RULES: tuple[tuple[Predicate, Constructor], ...] = (
    (lambda e: isinstance(e, ApiError), lambda e: e),  # type: ignore[return-value]
    (
        lambda e: isinstance(e, AuthorizationError),
        lambda e: ForbiddenApiError(cause=e),
    ),
    (lambda e: isinstance(e, AuthenticationError), _unauthorized),
    (_is_validation_failure, _validation_failed),
    (lambda e: _http_status(e) == 405, _method_not_allowed),
    # Not-found responses are generic: the original detail is dropped
    (_is_not_found, lambda e: NotFoundApiError()),
    (_is_registered_http_error, _from_http_status),
)


def classify(error: BaseException) -> ApiError:
    """
    Map any exception to exactly one ApiError.

    Args:
        error: The exception raised while handling a request

    Returns:
        The error itself if it is already an ApiError, otherwise a new
        ApiError that wraps it as cause (except for not-found errors)
    """
    for matches, build in _RULES:
        if matches(error):
            return build(error)
    return InternalServerErrorApiError(cause=error)
