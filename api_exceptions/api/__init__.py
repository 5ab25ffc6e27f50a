"""
API layer package.

Provides error classification, content negotiation, rendering and
reporting, plus the FastAPI exception handler that ties them together.
"""

from api_exceptions.api.classifier import classify
from api_exceptions.api.errors import ExceptionHandler, register_exception_handlers
from api_exceptions.api.negotiation import RenderMode, choose_render_mode
from api_exceptions.api.rendering import (
    pop_flashed,
    redirect_for_validation,
    render_page,
    render_structured,
)
from api_exceptions.api.reporting import Reporter

__all__ = [
    "ExceptionHandler",
    "RenderMode",
    "Reporter",
    "choose_render_mode",
    "classify",
    "pop_flashed",
    "redirect_for_validation",
    "register_exception_handlers",
    "render_page",
    "render_structured",
]
