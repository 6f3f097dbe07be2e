"""
FastAPI application factory and configuration.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..core.exceptions import AuthenticationRequired, BookingValidationError, SessionNotFoundError
from ..services.external import ExternalAPIService
from ..services.sessions import WizardSessionStore
from ..utils.logging import configure_logging
from .middleware import SecurityHeaders, LoggingMiddleware
from .handlers import BookingHandler, HealthHandler


def create_app(
    external_api: Optional[ExternalAPIService] = None,
    sessions: Optional[WizardSessionStore] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Bike rental booking wizard for Cycle.LK",
        version=settings.app_version,
        debug=settings.debug,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.add_middleware(SecurityHeaders)
    app.add_middleware(LoggingMiddleware)

    # Initialize handlers
    sessions = sessions or WizardSessionStore(external_api)
    health_handler = HealthHandler(sessions)
    booking_handler = BookingHandler(sessions, external_api)
    app.state.sessions = sessions

    # Register routes
    app.include_router(health_handler.router, prefix="/health", tags=["health"])
    app.include_router(booking_handler.router, prefix="/booking", tags=["booking"])

    @app.exception_handler(BookingValidationError)
    async def booking_validation_error(request: Request, exc: BookingValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AuthenticationRequired)
    async def authentication_required(request: Request, exc: AuthenticationRequired):
        return JSONResponse(
            status_code=401,
            content={"detail": str(exc), "redirect": settings.login_path},
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request: Request, exc: SessionNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.on_event("shutdown")
    async def close_sessions():
        await sessions.close_all()

    return app
