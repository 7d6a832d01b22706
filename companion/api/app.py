"""FastAPI server for the Universal Accessibility Companion"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from companion.api.routes.health import router as health_router
from companion.api.routes.history import router as history_router
from companion.api.routes.session import router as session_router
from companion.assist.errors import (
    CompanionError,
    HistoryItemNotFoundError,
    SessionBusyError,
    UnsupportedInputError,
)
from companion.assist.session import SessionController
from companion.config import API_HOST, API_PORT, APP_NAME, APP_VERSION, LOG_LEVEL, is_development
from companion.llm.client import AnalysisClient
from companion.observability.logging import configure_logging, get_logger
from companion.observability.telemetry import counter, log_event
from companion.speech.engines import MicrophoneRecognizer, Pyttsx3Synthesizer
from companion.storage.backends import create_backend
from companion.storage.history import HistoryStore
from companion.utils.error_sanitizer import get_safe_error_detail, sanitize_error_message

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

SessionFactory = Callable[[], SessionController]

ERROR_STATUS: dict[type[CompanionError], int] = {
    UnsupportedInputError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    SessionBusyError: status.HTTP_409_CONFLICT,
    HistoryItemNotFoundError: status.HTTP_404_NOT_FOUND,
}


def default_session_factory() -> SessionController:
    """
    Wire the production session: configured history backend, Gemini client,
    local speech engines.

    Side Effects:
        - Creates/opens the SQLite database when the sqlite backend is selected
        - Loads persisted history
    """
    history = HistoryStore(create_backend())
    return SessionController(
        client=AnalysisClient(),
        history=history,
        recognizer=MicrophoneRecognizer(),
        synthesizer=Pyttsx3Synthesizer(),
    )


def allowed_origins() -> list[str]:
    origins: list[str] = []
    extra = os.getenv("COMPANION_ALLOWED_ORIGINS", "")
    origins.extend(o.strip() for o in extra.split(",") if o.strip())

    # Allow localhost frontends in development only
    if is_development():
        origins.extend(
            [
                "http://localhost:3000",
                "http://localhost:5173",
                "http://localhost:8000",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:5173",
                "http://127.0.0.1:8000",
            ]
        )
    return origins


def create_app(session_factory: SessionFactory | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        session_factory: Builds the process-wide SessionController at startup.
            Defaults to ``default_session_factory``.
    """
    factory = session_factory or default_session_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting session...")
        app.state.session = factory()
        log_event("api.startup", service="companion", version=APP_VERSION)
        try:
            yield
        finally:
            # Guaranteed release of microphone and speech output
            app.state.session.close()
            log_event("api.shutdown", service="companion")

    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, lifespan=lifespan)

    @app.exception_handler(CompanionError)
    async def companion_error_handler(request: Request, exc: CompanionError) -> JSONResponse:
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        counter(f"api.companion_error.{status_code}")
        return JSONResponse(
            status_code=status_code,
            content={"detail": sanitize_error_message(exc.message, status_code)},
        )

    # Custom validation error handler to prevent information leakage
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        counter("api.validation_errors")

        return JSONResponse(
            status_code=422,
            content={
                "detail": "Invalid request format. Please check your request and try again.",
                "error_count": len(exc.errors()),
                "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        counter("api.unhandled_errors")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": get_safe_error_detail(exc, 500)},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    app.include_router(health_router)
    app.include_router(session_router)
    app.include_router(history_router)

    @app.get("/")
    def root() -> dict[str, Any]:
        return {
            "service": APP_NAME,
            "version": APP_VERSION,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "modes": "/api/modes",
                "session": "/api/session",
                "submit": "/api/session/submit",
                "render": "/api/session/render",
                "export": "/api/session/export",
                "history": "/api/history",
            },
        }

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn (console script ``companion-api``)."""
    import uvicorn

    configure_logging(LOG_LEVEL)
    uvicorn.run(app, host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
