"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from macro_tracker.api.days import router as days_router
from macro_tracker.api.saved_workouts import router as saved_workouts_router
from macro_tracker.api.targets import router as targets_router
from macro_tracker.app_logging import configure_logging
from macro_tracker.containers import AppContainer
from macro_tracker.domain.errors import MacroTrackerError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Macro Tracker")
    app.state.container = container

    app.include_router(days_router)
    app.include_router(targets_router)
    app.include_router(saved_workouts_router)

    @app.exception_handler(MacroTrackerError)
    async def handle_domain_error(
        request: Request, exc: MacroTrackerError
    ) -> JSONResponse:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
