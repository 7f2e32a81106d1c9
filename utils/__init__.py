"""
Utilities Module

Provides shared utilities across the application:
- Logging configuration
- Custom exceptions
- Rate limiting
- Background tasks
"""

from .logging import get_logger, setup_logging, log_learning_decision, log_spelling_verdict
from .exceptions import (
    SpellingEngineError,
    InvalidRecognitionEventError,
    MappingRejectedError,
    MappingNotFoundError,
    PersistenceError,
)
from .rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    RATE_LIMITS,
    limit_validate,
    limit_log,
    limit_learn,
    limit_mappings,
)
from .tasks import run_in_background, wait_for_background_tasks, get_task_stats

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "log_learning_decision",
    "log_spelling_verdict",
    # Exceptions
    "SpellingEngineError",
    "InvalidRecognitionEventError",
    "MappingRejectedError",
    "MappingNotFoundError",
    "PersistenceError",
    # Rate limiting
    "limiter",
    "rate_limit_exceeded_handler",
    "RATE_LIMITS",
    "limit_validate",
    "limit_log",
    "limit_learn",
    "limit_mappings",
    # Background tasks
    "run_in_background",
    "wait_for_background_tasks",
    "get_task_stats",
]
