"""
Spelling Voice Engine - Backend Application

FastAPI application for the voice spelling game.
Validates spelled answers and learns per-player phonetic mappings.

Features:
    - Transcript decoding (letter names, NATO alphabet, phrase fragments)
    - Spelled-vs-said anti-cheat from audio or transcript timing
    - Per-player phonetic learning with protected static mappings

Run:
    uvicorn main:app --reload
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import uvicorn

from config.settings import settings
from core import database
from utils.logging import setup_logging, get_logger
from utils.exceptions import SpellingEngineError
from utils.rate_limit import limiter, rate_limit_exceeded_handler
from utils.tasks import get_task_stats, wait_for_background_tasks

# Import Routers
from routers import validation_router, phonetic_learning_router

# Initialize logging
setup_logging()
logger = get_logger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    
    Handles startup and shutdown events:
        - Startup: Initialize database tables
        - Shutdown: Flush background writes, dispose engine
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    
    await database.create_tables()
    logger.info("Database tables initialized")
    
    yield
    
    logger.info("Shutting down application")
    await wait_for_background_tasks(timeout=5)
    await database.engine.dispose()


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Voice spelling validation and adaptive phonetic learning API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Attach rate limiter to app state
app.state.limiter = limiter


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(SpellingEngineError)
async def spelling_engine_exception_handler(request: Request, exc: SpellingEngineError):
    """
    Handle custom engine exceptions.
    
    Returns standardized error response with appropriate status code.
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}", extra={"details": exc.details})
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


# Rate limit exceeded handler
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# =============================================================================
# Routers
# =============================================================================

app.include_router(validation_router)
app.include_router(phonetic_learning_router)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint - basic health check.
    
    Returns:
        dict: Simple status message
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Detailed health check endpoint.
    
    Checks:
        - Database connectivity
        - Background task stats
    """
    db_healthy = await database.check_database_health()
    
    return {
        "status": "healthy" if db_healthy else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "components": {
            "database": db_healthy,
            "background_tasks": get_task_stats(),
        },
    }


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
