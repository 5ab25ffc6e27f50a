"""
Response rendering for classified errors.

Structured clients get the error's JSON body. Page clients get the first
available of: the application's ``errors.<status>`` template, the bundled
``<namespace>::errors.<status>`` template, or the JSON body. Validation
failures in page mode redirect back with the errors and input flashed to
the session instead.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping
from urllib.parse import urlsplit

from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.requests import Request
from starlette.responses import Response

from api_exceptions.api.classifier import scalar_input
from api_exceptions.models.errors import ApiError, ValidationFailedApiError
from api_exceptions.ui.views import NAMESPACE_DELIMITER, ViewResolver

logger = logging.getLogger(__name__)

# Session keys for flashed validation state
FLASH_ERRORS_KEY = "errors"
FLASH_INPUT_KEY = "_old_input"

REDIRECT_STATUS = 302


def render_structured(api_error: ApiError) -> JSONResponse:
    """
    Serialize an error as JSON.

    The body never contains the error's cause.

    Args:
        api_error: The classified error

    Returns:
        JSONResponse with the error's status code and headers
    """
    return JSONResponse(
        status_code=api_error.status_code,
        content=api_error.to_dict(),
        headers=api_error.headers,
    )


def template_candidates(status_code: int, namespace: str) -> Iterator[str]:
    """Yield template ids for a status, most specific first."""
    yield f"errors.{status_code}"
    yield f"{namespace}{NAMESPACE_DELIMITER}errors.{status_code}"


def _render_template(
    views: ViewResolver, template_id: str, api_error: ApiError, request: Request
) -> HTMLResponse | None:
    if not views.exists(template_id):
        return None
    markup = views.render(template_id, {"request": request, "error": api_error})
    logger.debug(f"Rendered error page {template_id} for {request.url.path}")
    return HTMLResponse(
        content=markup, status_code=api_error.status_code, headers=api_error.headers
    )


def render_page(
    api_error: ApiError,
    request: Request,
    views: ViewResolver,
    namespace: str = "api_exceptions",
    fallback_url: str = "/",
    submitted_input: Mapping[str, Any] | None = None,
) -> Response:
    """
    Render an error for a browser client.

    Args:
        api_error: The classified error
        request: The incoming HTTP request
        views: Template resolver
        namespace: Namespace of the bundled default templates
        fallback_url: Redirect target when no usable Referer is present
        submitted_input: Parsed request form values, flashed on validation

    Returns:
        A redirect for validation errors, a rendered page when a template
        exists, or the structured JSON response otherwise
    """
    if isinstance(api_error, ValidationFailedApiError):
        return redirect_for_validation(
            api_error, request, fallback_url, submitted_input=submitted_input
        )

    for template_id in template_candidates(api_error.status_code, namespace):
        response = _render_template(views, template_id, api_error, request)
        if response is not None:
            return response

    return render_structured(api_error)


def _same_origin_referer(request: Request) -> str | None:
    referer = request.headers.get("referer")
    if not referer:
        return None
    target = urlsplit(referer)
    if target.netloc:
        if (target.scheme, target.netloc) != (request.url.scheme, request.url.netloc):
            logger.warning(
                f"Ignoring cross-origin referer for redirect: "
                f"{target.scheme}://{target.netloc}"
            )
            return None
        return referer
    # Without an authority only a local absolute path is safe
    path = target.path
    if target.scheme or not path.startswith("/") or path.startswith(("//", "/\\")):
        logger.warning(f"Ignoring malformed referer for redirect: {referer!r}")
        return None
    return referer


def redirect_for_validation(
    api_error: ValidationFailedApiError,
    request: Request,
    fallback_url: str = "/",
    submitted_input: Mapping[str, Any] | None = None,
) -> RedirectResponse:
    """
    Redirect back to the submitting page with errors and input flashed.

    The flashed state is written to the Starlette session when
    SessionMiddleware is installed; without it only the redirect is sent.
    Old input is the query string, overlaid with the submitted form values,
    overlaid with the input carried by the validation signal.

    Args:
        api_error: The validation error
        request: The incoming HTTP request
        fallback_url: Target used when the Referer is missing or foreign
        submitted_input: Parsed request form values, if any

    Returns:
        RedirectResponse back to the previous page
    """
    old_input = scalar_input(
        {
            **request.query_params,
            **(submitted_input or {}),
            **api_error.old_input,
        }
    )

    if "session" in request.scope:
        request.session[FLASH_INPUT_KEY] = old_input
        request.session[FLASH_ERRORS_KEY] = api_error.field_errors
    else:
        logger.debug("No session middleware - validation errors not flashed")

    return RedirectResponse(
        url=_same_origin_referer(request) or fallback_url,
        status_code=REDIRECT_STATUS,
        headers=api_error.headers,
    )


def pop_flashed(request: Request) -> tuple[dict[str, Any], dict[str, list[str]]]:
    """
    Take flashed input and validation errors out of the session.

    Returns:
        (old_input, field_errors); both empty when nothing was flashed
    """
    if "session" not in request.scope:
        return {}, {}
    return (
        request.session.pop(FLASH_INPUT_KEY, {}),
        request.session.pop(FLASH_ERRORS_KEY, {}),
    )
