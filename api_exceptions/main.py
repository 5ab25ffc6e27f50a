"""
Reference FastAPI application.

Configures and creates a FastAPI application with:
- Session middleware (flashed validation errors)
- The api_exceptions exception handlers
- Demo routes exercising every error kind
"""

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

# Load environment variables first
load_dotenv()

from api_exceptions.api.errors import register_exception_handlers  # noqa: E402
from api_exceptions.core.config import get_settings  # noqa: E402
from api_exceptions.core.logging import configure_logging  # noqa: E402
from api_exceptions.ui.routes import router as ui_router  # noqa: E402

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="API Exceptions Demo",
    description="Error classification and rendering for JSON and HTML clients",
    version="1.0.0",
)

# Register exception handlers
register_exception_handlers(app)

app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)

# Mount routers
app.include_router(ui_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_exceptions.main:app", host="127.0.0.1", port=8000, reload=True)
