"""
FastAPI Application Entry Point

This module initializes the FastAPI application with:
- Database lifecycle (one Database per process, on app.state)
- CORS configuration
- Middleware setup
- Route registration
- Health check endpoints
- Mapping of domain errors to HTTP responses
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reserves.core.config import Settings, settings
from reserves.core.exceptions import ReservesError
from reserves.db.database import Database
from reserves.db.redis import check_redis_connection
from reserves.middleware.logging import LoggingMiddleware
from reserves.api.v1.router import api_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================================
# Application Lifespan Events
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Startup:
    - Create the Database unless one was put on app.state already (tests)
    - Check database connection

    Shutdown:
    - Dispose the engine
    """
    # ========== STARTUP ==========
    config: Settings = app.state.config
    logger.info(f"Starting {config.PROJECT_NAME}...")
    logger.info(f"Debug mode: {config.DEBUG}")

    database: Optional[Database] = getattr(app.state, "database", None)
    owns_database = database is None
    if owns_database:
        database = Database.from_settings(config)
        app.state.database = database

    if await database.check_connection():
        logger.info("Database connection established successfully")
    else:
        logger.warning("Database connection check failed")

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    logger.info(f"Shutting down {config.PROJECT_NAME}...")
    if owns_database:
        await database.dispose()
        app.state.database = None
    logger.info("Shutdown complete")


# ============================================================
# Create FastAPI Application
# ============================================================
def create_app(config: Settings = settings, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Pass ``database`` to run against an existing engine (tests);
    otherwise one is created from ``config`` at startup. Request handlers
    read ``config`` back from app.state.
    """
    app = FastAPI(
        title=config.PROJECT_NAME,
        description="""
        Police Reserves Administration API

        Features:
        - Events and training with signups
        - Equipment check-out and return
        - Policy acknowledgement
        - Membership applications
        - In-app notifications and scheduled reminders
        """,
        version="1.0.0",
        openapi_url=f"{config.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.config = config
    if database is not None:
        app.state.database = database

    # ----------------------------------------------------
    # Middleware Configuration
    # ----------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.DEBUG else config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    if config.DEBUG:
        app.add_middleware(LoggingMiddleware)

    # ----------------------------------------------------
    # Health Check Endpoints
    # ----------------------------------------------------
    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": config.PROJECT_NAME,
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs" if config.DEBUG else "disabled"
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check endpoint for monitoring.

        Checks:
        - Database connectivity
        - Redis connectivity (used by the reminder worker)
        """
        db_healthy = await request.app.state.database.check_connection()
        redis_healthy = await check_redis_connection(config)

        return {
            "status": "healthy" if db_healthy and redis_healthy else "degraded",
            "database": "connected" if db_healthy else "disconnected",
            "redis": "connected" if redis_healthy else "disconnected",
        }

    # ============================================================
    # Include API Router
    # ============================================================
    app.include_router(
        api_router,
        prefix=config.API_V1_PREFIX
    )

    # ----------------------------------------------------
    # Exception Handlers
    # ----------------------------------------------------
    @app.exception_handler(ReservesError)
    async def reserves_error_handler(request: Request, exc: ReservesError):
        """Domain errors carry their own status code."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message or type(exc).__name__}
        )

    @app.exception_handler(500)
    async def internal_error_handler(request, exc):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    return app


app = create_app()
