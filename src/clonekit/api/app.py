"""FastAPI app factory with lifespan, correlation-id middleware and error handling.

- create_app(): builds the app and includes the cloning router
- lifespan: structured logging and DB tables (skipped when TESTING=1)
- ValidationError maps to 404; anything unhandled maps to 500 with an error_id
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..config import settings
from ..database import init_db
from ..exceptions import ValidationError
from ..logging_config import correlation_id_var, setup_structured_logging
from ..version import __version__
from .router import router as cloning_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and create tables on startup unless running under tests."""
    if os.getenv("TESTING") != "1":
        setup_structured_logging(settings.log_level)
        init_db()
        logger.info("[STARTUP] Database initialized")
    yield


async def correlation_id_middleware(request: Request, call_next):
    """Propagate X-Correlation-ID (or a fresh uuid) into logs and the response."""
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
    correlation_id_var.set(correlation_id)

    response = await call_next(request)

    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def global_exception_handler(request: Request, exc: Exception):
    """Return an opaque error_id; details stay in the server log."""
    error_id = str(uuid.uuid4())[:8]
    logger.error(f"Unhandled exception (error_id={error_id}): {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="clonekit",
        description="Engagement cloning with client-data sanitization and lineage tracking",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def add_correlation_id_middleware(request: Request, call_next):
        return await correlation_id_middleware(request, call_next)

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    app.include_router(cloning_router)
    return app


app = create_app()
