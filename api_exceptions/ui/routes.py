"""
Reference routes for the demo application.

A contact form that round-trips validation errors through the session,
plus endpoints that raise each failure signal.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from api_exceptions.api.rendering import pop_flashed
from api_exceptions.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    FormValidationError,
    RecordNotFoundError,
)

# Configure templates
templates = Jinja2Templates(directory=Path(__file__).parent / "templates")

router = APIRouter()

# In-memory records for the demo lookup endpoint
RECORDS: dict[int, dict[str, str]] = {1: {"name": "First record"}}


@router.get("/contact", response_class=HTMLResponse)
async def contact_form(request: Request, sent: bool = False) -> HTMLResponse:
    """
    Serve the contact form, pre-filled after a failed submission.

    Args:
        request: The incoming HTTP request
        sent: Whether a message was just sent

    Returns:
        HTML response with the contact form
    """
    old_input, errors = pop_flashed(request)
    return templates.TemplateResponse(
        request,
        "contact.html",
        {"old_input": old_input, "errors": errors, "sent": sent},
    )


@router.post("/contact")
async def submit_contact(
    email: str = Form(""), message: str = Form("")
) -> RedirectResponse:
    """Validate and accept a contact message."""
    errors: dict[str, list[str]] = {}
    if not email:
        errors.setdefault("email", []).append("The email field is required.")
    elif "@" not in email:
        errors.setdefault("email", []).append("The email must be a valid address.")
    if not message:
        errors.setdefault("message", []).append("The message field is required.")
    elif len(message) < 10:
        errors.setdefault("message", []).append(
            "The message must be at least 10 characters."
        )

    if errors:
        raise FormValidationError(errors, input={"email": email, "message": message})
    return RedirectResponse("/contact?sent=true", status_code=303)


@router.get("/records/{record_id}")
async def get_record(record_id: int) -> dict[str, str]:
    """Look up a demo record."""
    if record_id not in RECORDS:
        raise RecordNotFoundError("Record", record_id)
    return RECORDS[record_id]


@router.get("/admin")
async def admin() -> dict[str, str]:
    raise AuthorizationError()


@router.get("/account")
async def account() -> dict[str, str]:
    raise AuthenticationError(scheme="Bearer")


@router.get("/crash")
async def crash() -> dict[str, str]:
    raise RuntimeError("database password is hunter2")
