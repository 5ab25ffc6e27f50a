"""
Pytest configuration and fixtures for error handling tests.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Callable, Mapping

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from api_exceptions.core.config import Settings

# Configure pytest-asyncio to use function-scoped event loops
pytest_plugins = ("pytest_asyncio",)


class StubViewResolver:
    """ViewResolver that knows a fixed set of template ids."""

    def __init__(self, available: set[str] | None = None) -> None:
        self.available = set(available or ())
        self.rendered: list[tuple[str, dict[str, Any]]] = []

    def exists(self, template_id: str) -> bool:
        return template_id in self.available

    def render(self, template_id: str, context: Mapping[str, Any]) -> str:
        self.rendered.append((template_id, dict(context)))
        return f"<h1>{template_id}</h1>"


@pytest.fixture
def stub_views() -> Callable[..., StubViewResolver]:
    """Factory for stub view resolvers."""

    def _make(*template_ids: str) -> StubViewResolver:
        return StubViewResolver(set(template_ids))

    return _make


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Factory for bare Starlette requests."""

    def _make(
        headers: Mapping[str, str] | None = None,
        path: str = "/",
        method: str = "GET",
        query_string: bytes = b"",
        session: dict[str, Any] | None = None,
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "root_path": "",
            "scheme": "http",
            "server": ("test", 80),
            "query_string": query_string,
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in (headers or {}).items()
            ],
        }
        if session is not None:
            scope["session"] = session
        return Request(scope)

    return _make


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and working directory."""
    return Settings(templates_dir=tmp_path / "templates", _env_file=None)


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for the reference application."""
    # Import here to avoid circular imports and allow patching
    from api_exceptions.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def client_for() -> Callable[[FastAPI], AsyncClient]:
    """Factory for clients that return 500 responses instead of raising."""

    def _make(app: FastAPI) -> AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        return AsyncClient(transport=transport, base_url="http://test")

    return _make
