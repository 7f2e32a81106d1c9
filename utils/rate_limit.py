"""
Rate Limiting Middleware

Provides request rate limiting using Redis (production) or in-memory (development).
Uses slowapi for FastAPI-compatible rate limiting.

Usage:
    from utils.rate_limit import limiter, rate_limit_exceeded_handler
    
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from config.settings import settings
from utils.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Rate Limiter Configuration
# =============================================================================

def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.
    
    Handles X-Forwarded-For header for requests behind a proxy/load balancer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def _get_storage_uri() -> str:
    """Redis when configured, otherwise in-memory."""
    if settings.REDIS_URL:
        logger.info("Rate limiter using Redis storage")
        return settings.REDIS_URL
    return "memory://"


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["200/minute"],
    storage_uri=_get_storage_uri(),
    enabled=settings.RATE_LIMIT_ENABLED,
)


# =============================================================================
# Rate Limit Presets
# =============================================================================

RATE_LIMITS = {
    "validate": "120/minute",  # One call per spelling attempt
    "log": "120/minute",       # Recognition events
    "learn": "10/minute",      # Learning passes scan the log window
    "mappings": "30/minute",   # Mapping management
    "default": "200/minute",
}


# =============================================================================
# Exception Handler
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded exceptions."""
    client_ip = get_client_ip(request)
    logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
    
    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitExceeded",
            "message": f"Too many requests. Limit: {exc.detail}",
            "retry_after": "60 seconds"
        },
        headers={"Retry-After": "60"}
    )


# =============================================================================
# Decorator Helpers
# =============================================================================

def limit_validate(func):
    """Apply validation rate limit."""
    return limiter.limit(RATE_LIMITS["validate"])(func)


def limit_log(func):
    """Apply recognition logging rate limit."""
    return limiter.limit(RATE_LIMITS["log"])(func)


def limit_learn(func):
    """Apply learning pass rate limit."""
    return limiter.limit(RATE_LIMITS["learn"])(func)


def limit_mappings(func):
    """Apply mapping management rate limit."""
    return limiter.limit(RATE_LIMITS["mappings"])(func)
