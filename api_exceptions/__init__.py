"""
Exception-to-HTTP-response translation for FastAPI applications.

Usage:
    from fastapi import FastAPI
    from api_exceptions import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from api_exceptions.api import (
    ExceptionHandler,
    RenderMode,
    Reporter,
    classify,
    register_exception_handlers,
)
from api_exceptions.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    FormValidationError,
    RecordNotFoundError,
)
from api_exceptions.models.errors import (
    ApiError,
    BadRequestApiError,
    ConflictApiError,
    ErrorKind,
    ForbiddenApiError,
    InternalServerErrorApiError,
    MethodNotAllowedApiError,
    NotFoundApiError,
    ServiceUnavailableApiError,
    TooManyRequestsApiError,
    UnauthorizedApiError,
    ValidationFailedApiError,
)

__version__ = "1.0.0"

__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestApiError",
    "ConflictApiError",
    "ErrorKind",
    "ExceptionHandler",
    "ForbiddenApiError",
    "FormValidationError",
    "InternalServerErrorApiError",
    "MethodNotAllowedApiError",
    "NotFoundApiError",
    "RecordNotFoundError",
    "RenderMode",
    "Reporter",
    "ServiceUnavailableApiError",
    "TooManyRequestsApiError",
    "UnauthorizedApiError",
    "ValidationFailedApiError",
    "classify",
    "register_exception_handlers",
]
