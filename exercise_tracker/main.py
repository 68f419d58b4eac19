"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    uvicorn exercise_tracker.main:app --reload

Or, honouring HOST and PORT from the environment:
    python -m exercise_tracker.main
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError

from .api.routes import exercises, users
from .config.settings import get_settings
from .infrastructure.mongo.client import MongoConfig, create_mongo_client
from .infrastructure.mongo.repositories import ExerciseRepository, UserRepository

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).parent
VIEWS_DIR = PACKAGE_DIR / "views"
PUBLIC_DIR = PACKAGE_DIR / "public"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup opens the MongoDB client (or the in-memory mock), checks the
    server is reachable, and creates the indexes the repositories rely on.
    Shutdown closes the client.
    """
    settings = get_settings()

    logger.info(
        "Exercise Tracker API starting",
        extra={"version": settings.api_version, "mock_mode": settings.mongo_mock_mode}
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    client = create_mongo_client(
        config=MongoConfig(
            uri=settings.mongo_uri,
            database=settings.mongo_database,
            server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
        ),
        mock_mode=settings.mongo_mock_mode,
    )
    database = client[settings.mongo_database]
    app.state.mongo_client = client
    app.state.database = database

    # A failed connection is logged, not fatal; requests will fail with 500
    # until the server is reachable
    try:
        await client.admin.command("ping")
        await UserRepository(database).ensure_indexes()
        await ExerciseRepository(database).ensure_indexes()
        logger.info("MongoDB connected successfully", extra={"database": settings.mongo_database})
    except PyMongoError as e:
        logger.error("MongoDB connection error", extra={"error": str(e)})

    yield

    await client.close()
    logger.info("Exercise Tracker API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Called once at import
    time for uvicorn, and once per test for an isolated app.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Exercise tracker.

        1. **Create a user**: `POST /api/users` with form field `username`
        2. **Add exercises**: `POST /api/users/{_id}/exercises` with form fields
           `description`, `duration` (minutes) and optional `date` (yyyy-mm-dd)
        3. **Read the log**: `GET /api/users/{_id}/logs?from=&to=&limit=`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    # Any origin by default; set CORS_ORIGINS to restrict
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        users.router,
        prefix="/api/users",
        tags=["Users"],
    )

    app.include_router(
        exercises.router,
        prefix="/api/users",
        tags=["Exercises"],
    )

    app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    # Landing page
    @app.get("/", include_in_schema=False)
    async def root():
        return FileResponse(VIEWS_DIR / "index.html")

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Log the full error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "exercise_tracker.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
