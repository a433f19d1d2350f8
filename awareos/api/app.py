"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import context, control, events, suggestions


# Global application instance
_app: Application | None = None


def get_app() -> Application:
    """Get the global application instance."""
    global _app
    if not _app:
        _app = Application()
    return _app


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    When an application is passed in, the caller owns its lifecycle.
    """
    owns_application = application is None
    application = application or get_app()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Manage application lifespan."""
        if owns_application:
            await application.start()
        yield
        if owns_application:
            await application.stop()

    fastapi_app = FastAPI(
        title="AwareOS API",
        description="Control surface for the AwareOS orchestration core",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Enable CORS
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:5174"],  # Vite default
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(events.create_events_router(application))
    fastapi_app.include_router(suggestions.create_suggestions_router(application))
    fastapi_app.include_router(context.create_context_router(application))
    fastapi_app.include_router(control.create_control_router(application))

    return fastapi_app
