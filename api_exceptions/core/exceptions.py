"""Typed failure signals raised by application code.

Raise these from route handlers and services instead of building HTTP
responses directly. The exception handler classifies each one into an
ApiError kind:

- AuthorizationError -> forbidden
- AuthenticationError -> unauthorized
- FormValidationError -> validation_failed
- RecordNotFoundError -> not_found
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence


class AuthorizationError(Exception):
    """Authenticated caller is not allowed to perform this action."""

    def __init__(self, message: str = "This action is unauthorized.") -> None:
        super().__init__(message)


class AuthenticationError(Exception):
    """Credentials are missing, expired, or invalid.

    ``scheme`` names the authentication scheme to challenge the client with
    (sent back as ``WWW-Authenticate``).
    """

    def __init__(
        self, message: str = "Unauthenticated.", scheme: str | None = None
    ) -> None:
        super().__init__(message)
        self.scheme = scheme


class FormValidationError(Exception):
    """Submitted input failed validation.

    ``errors`` maps each field to its messages; a bare string is treated as a
    single message. ``input`` holds the submitted values so a form can be
    re-rendered pre-filled.
    """

    def __init__(
        self,
        errors: Mapping[str, Sequence[str] | str],
        input: Mapping[str, Any] | None = None,
    ) -> None:
        self.errors: dict[str, list[str]] = {
            name: [messages] if isinstance(messages, str) else list(messages)
            for name, messages in errors.items()
        }
        self.input: dict[str, Any] = dict(input or {})
        super().__init__(f"Validation failed for {len(self.errors)} field(s)")


class RecordNotFoundError(LookupError):
    """A record lookup by key returned nothing."""

    def __init__(self, model: str, key: Any = None) -> None:
        self.model = model
        self.key = key
        detail = f"No {model} record found"
        if key is not None:
            detail += f" for key {key!r}"
        super().__init__(detail)
