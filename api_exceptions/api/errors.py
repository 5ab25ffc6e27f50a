"""
Centralized exception handling for FastAPI applications.

Every error raised while handling a request goes through the same pipeline:
classify it into an ApiError, report it, pick a rendering mode from the
request, and render. The resolved ApiError is attached to the response and
to ``request.state`` for introspection.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response

from api_exceptions.api.classifier import classify, scalar_input
from api_exceptions.api.negotiation import RenderMode, choose_render_mode
from api_exceptions.api.rendering import render_page, render_structured
from api_exceptions.api.reporting import Reporter
from api_exceptions.core.config import Settings, get_settings
from api_exceptions.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    FormValidationError,
    RecordNotFoundError,
)
from api_exceptions.models.errors import ApiError, ValidationFailedApiError
from api_exceptions.ui.views import ViewResolver, get_view_resolver

logger = logging.getLogger(__name__)

# Exception types routed to the handler, most specific first
HANDLED_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ApiError,
    AuthorizationError,
    AuthenticationError,
    FormValidationError,
    RecordNotFoundError,
    RequestValidationError,
    PydanticValidationError,
    StarletteHTTPException,
    Exception,
)

_DEFAULT = object()

# Bodies whose fields are flashed back after a validation redirect
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class ExceptionHandler:
    """
    Translates exceptions into HTTP responses.

    Usage:
        handler = ExceptionHandler()
        app.add_exception_handler(Exception, handler)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        views: ViewResolver | None | object = _DEFAULT,
        reporter: Reporter | None = None,
    ) -> None:
        """
        Initialize the handler.

        Args:
            settings: Configuration; defaults to the cached settings
            views: Template resolver, or None to disable page rendering;
                defaults to the Jinja2 resolver built from settings
            reporter: Error reporter; defaults to a log-only reporter
        """
        self.settings = settings or get_settings()
        self.views: ViewResolver | None = (
            get_view_resolver(self.settings) if views is _DEFAULT else views  # type: ignore[assignment]
        )
        self.reporter = reporter or Reporter(dont_report=self.settings.dont_report)

    def handle(
        self,
        request: Request,
        exc: BaseException,
        submitted_input: Mapping[str, Any] | None = None,
    ) -> Response:
        """
        Classify, report and render an exception.

        Args:
            request: The incoming HTTP request
            exc: The exception raised while handling it
            submitted_input: Parsed form values to flash on a validation
                redirect, under any input the error itself carries

        Returns:
            The rendered response, annotated with the resolved ApiError
        """
        api_error = classify(exc)
        self.reporter.report(exc)

        mode = choose_render_mode(request, self.views is not None)
        if mode is RenderMode.PAGE and self.views is not None:
            response = render_page(
                api_error,
                request,
                self.views,
                namespace=self.settings.template_namespace,
                fallback_url=self.settings.redirect_fallback_url,
                submitted_input=submitted_input,
            )
        else:
            response = render_structured(api_error)

        logger.debug(f"Rendered {api_error!r} for {request.url.path} as {mode.value}")
        request.state.api_error = api_error
        response.api_error = api_error  # type: ignore[attr-defined]
        return response

    def _redirects_with_input(self, request: Request, exc: BaseException) -> bool:
        content_type = request.headers.get("content-type", "").lower()
        if not content_type.startswith(FORM_CONTENT_TYPES):
            return False
        if choose_render_mode(request, self.views is not None) is not RenderMode.PAGE:
            return False
        return isinstance(classify(exc), ValidationFailedApiError)

    async def _submitted_form(self, request: Request) -> dict[str, Any]:
        # The route has usually parsed the form already; Request caches it
        try:
            form = await request.form()
        except (MultiPartException, ClientDisconnect, RuntimeError) as e:
            logger.warning(
                f"Could not read submitted form for {request.url.path}: {e}"
            )
            return {}
        return scalar_input(form)

    async def __call__(self, request: Request, exc: Exception) -> Response:
        submitted_input = None
        if self._redirects_with_input(request, exc):
            submitted_input = await self._submitted_form(request)
        return self.handle(request, exc, submitted_input=submitted_input)


def register_exception_handlers(
    app: FastAPI, handler: ExceptionHandler | None = None
) -> ExceptionHandler:
    """
    Register the exception handler on the FastAPI app.

    Args:
        app: The FastAPI application instance
        handler: Handler to install; a default one is created if omitted

    Returns:
        The installed handler
    """
    handler = handler or ExceptionHandler()
    for exc_class in HANDLED_EXCEPTIONS:
        app.add_exception_handler(exc_class, handler)
    return handler
