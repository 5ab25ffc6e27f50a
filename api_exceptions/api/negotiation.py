"""
Content negotiation for error responses.

Decides whether an error should be rendered as structured JSON or as an
HTML page, based on the request's declared preferences and on whether page
rendering is available at all.
"""

from __future__ import annotations

from enum import Enum

from starlette.requests import Request


class RenderMode(str, Enum):
    """How an error response is rendered."""

    STRUCTURED = "structured"
    PAGE = "page"


def acceptable_content_types(request: Request) -> list[str]:
    """
    Parse the Accept header into media types ordered by quality.

    Entries with equal quality keep their header order; ``q=0`` entries
    are dropped.

    Args:
        request: The incoming HTTP request

    Returns:
        Lowercased media types, most preferred first
    """
    header = request.headers.get("accept", "")
    weighted: list[tuple[float, str]] = []
    for item in header.split(","):
        media_type, _, params = item.partition(";")
        media_type = media_type.strip().lower()
        if not media_type:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = 0.0
        if quality > 0:
            weighted.append((quality, media_type))
    # sorted() is stable, so header order breaks ties
    return [media_type for _, media_type in sorted(weighted, key=lambda w: -w[0])]


def accepts_any_content_type(request: Request) -> bool:
    types = acceptable_content_types(request)
    return not types or types[0] in ("*/*", "*")


def is_ajax(request: Request) -> bool:
    return request.headers.get("x-requested-with", "") == "XMLHttpRequest"


def is_pjax(request: Request) -> bool:
    return "x-pjax" in request.headers


def wants_json(request: Request) -> bool:
    """Return True if the most preferred Accept type is a JSON type."""
    types = acceptable_content_types(request)
    return bool(types) and ("/json" in types[0] or "+json" in types[0])


def expects_json(request: Request) -> bool:
    """
    Return True if the client expects a structured response.

    Either an XHR (not PJAX) that accepts anything, or a request whose
    preferred content type is JSON.
    """
    return (
        is_ajax(request) and not is_pjax(request) and accepts_any_content_type(request)
    ) or wants_json(request)


def choose_render_mode(request: Request, page_rendering_available: bool) -> RenderMode:
    """
    Pick the rendering strategy for an error response.

    Args:
        request: The incoming HTTP request
        page_rendering_available: Whether a template engine is configured

    Returns:
        STRUCTURED for JSON clients or when pages cannot be rendered,
        PAGE otherwise
    """
    if expects_json(request) or not page_rendering_available:
        return RenderMode.STRUCTURED
    return RenderMode.PAGE
