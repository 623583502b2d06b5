"""FastAPI application factory.

App factory pattern: create_app() returns a configured FastAPI instance.
Lifespan manages startup/shutdown (logging, optional schema creation,
engine disposal). Middleware, CORS, error handlers and routers are all
registered here; each concern lives in its own module.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskflow import __version__
from taskflow.api import api_router
from taskflow.api.errors import register_exception_handlers
from taskflow.config import settings
from taskflow.log import configure_logging
from taskflow.middleware.request_id import RequestIdMiddleware
from taskflow.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    from taskflow.db.engine import engine

    logger.info(
        "taskflow.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if settings.create_schema_on_startup:
        from taskflow.db.models import Base

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("taskflow.schema_created")

    yield

    logger.info("taskflow.shutdown")
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="TaskFlow API",
        description="Task management API with JWT auth and per-user task ownership",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: Security → RequestId → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "success": True,
            "message": "TaskFlow API is running",
            "documentation": app.docs_url,
        }

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskflow.main:app)
app = create_app()
