"""
Novel Comments API - Main Application Entry Point.

This module builds and runs the FastAPI application that stores reader comments
about novels in SQLite and serves the single-page front end.

Key Responsibilities:
- Build the application (`create_app`): middleware, exception handlers, API
  routes, the front-end entry page and static files.
- Manage the database lifecycle in the lifespan handler: open the comment
  store and create the `comments` table on startup, close it on shutdown.
  uvicorn runs the shutdown half when it receives SIGINT or SIGTERM and then
  exits with status 0.
- Fail fast: if the table cannot be created, startup aborts and uvicorn exits
  with a non-zero status instead of serving requests against a missing table.

Run with `python main.py`, the `novel-comments` console script, or
`uvicorn main:app`. The listening port comes from `PORT` (default 3000).
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from api.endpoints import router
from api.health_router import health_router, SERVICE_NAME, SERVICE_VERSION
from core.config import Settings
from core.exceptions import register_exception_handlers
from core.logging_config import setup_logging, get_logger
from core.middleware import (
    CorrelationMiddleware,
    ErrorHandlingMiddleware,
    PerformanceMiddleware,
)
from services.comment_store import CommentStore

logger = get_logger("main")

INDEX_FILE = "index.html"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging()
        store = CommentStore.open(settings.database_url)
        try:
            await store.bootstrap()
        except Exception as e:
            logger.critical(f"Database initialization failed: {e}", exc_info=True)
            await store.close()
            raise

        app.state.store = store
        logger.info(f"Server running at http://localhost:{settings.port}")

        try:
            yield
        finally:
            # Cleanup on shutdown
            logger.info("Shutting down Novel Comments API")
            try:
                await store.close()
            except Exception as e:
                logger.error(f"Error closing database connection: {e}")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Create, list and delete reader comments about novels",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Innermost, so error responses still get CORS and timing headers
    app.add_middleware(ErrorHandlingMiddleware, redact=settings.redact_store_errors)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(PerformanceMiddleware)
    # Added last so it wraps everything else
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app, redact_store_errors=settings.redact_store_errors)

    app.include_router(health_router)
    app.include_router(router)

    mount_front_end(app, settings)

    return app


def mount_front_end(app: FastAPI, settings: Settings):
    """Serve `index.html` at `/` and the rest of the static directory verbatim"""
    static_dir = settings.static_dir
    if not static_dir.is_dir():
        logger.warning(f"Static directory {static_dir} not found, front end disabled")
        return

    index_path = static_dir / INDEX_FILE

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(index_path)

    # Mounted after the API routes so they take precedence
    app.mount("/", StaticFiles(directory=static_dir), name="static")


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    run()
