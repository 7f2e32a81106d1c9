"""
Logging Configuration Module

Provides structured logging with consistent formatting across the application.

Usage:
    from utils.logging import get_logger
    
    logger = get_logger(__name__)
    logger.info("Learning pass finished", extra={"user_id": user_id})
    logger.error("Failed to persist mapping", exc_info=True)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from config.settings import settings


# =============================================================================
# Custom Formatters
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """
    Colored log formatter for console output.
    
    Colors:
        - DEBUG: Cyan
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """
    
    COLORS = {
        logging.DEBUG: "\033[36m",      # Cyan
        logging.INFO: "\033[32m",       # Green
        logging.WARNING: "\033[33m",    # Yellow
        logging.ERROR: "\033[31m",      # Red
        logging.CRITICAL: "\033[1;31m", # Bold Red
    }
    RESET = "\033[0m"
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname:8}{self.RESET}"
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for production/structured logging.
    
    Outputs logs as JSON objects for easy parsing by log aggregators.
    """
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        
        if hasattr(record, "details"):
            log_data["details"] = record.details
            
        return json.dumps(log_data, default=str)


# =============================================================================
# Logger Configuration
# =============================================================================

def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None
) -> None:
    """
    Configure application-wide logging.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to DEBUG if settings.DEBUG else INFO.
        json_format: Use JSON formatter for structured logging.
                     Defaults to settings.LOG_JSON.
    
    Example:
        setup_logging(level="DEBUG")
        setup_logging(json_format=True)  # For production
    """
    if level is None:
        level = "DEBUG" if settings.DEBUG else "INFO"
    if json_format is None:
        json_format = settings.LOG_JSON
    
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = ColoredFormatter(
            fmt="%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S"
        )
    
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    
    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.
    
    Args:
        name: Logger name, typically __name__ of the calling module.
    
    Returns:
        logging.Logger: Configured logger instance.
    """
    return logging.getLogger(name)


# =============================================================================
# Convenience Functions
# =============================================================================

def log_learning_decision(
    heard: str,
    intended: str,
    accepted: bool,
    reason: str,
    user_id: Optional[str] = None
) -> None:
    """
    Log a proposed phonetic mapping with standard format.
    
    Every candidate the learning engine proposes goes through here,
    whether it was accepted or rejected, so unsafe mappings always
    leave a trace.
    
    Args:
        heard: Transcribed token
        intended: Letters it was deduced to mean
        accepted: Whether the mapping passed the safety checks
        reason: Machine-readable reason code
        user_id: Owner of the mapping, if known
    """
    logger = get_logger("phonetic_learning")
    
    status = "✅" if accepted else "❌"
    msg = f"{status} '{heard}' → '{intended}' | {reason}"
    
    if user_id:
        msg += f" | user={user_id}"
    
    if accepted:
        logger.info(msg)
    else:
        logger.warning(msg)


def log_spelling_verdict(
    target_word: str,
    is_spelled_out: bool,
    reason: str,
    source: str,
    **signals
) -> None:
    """
    Log an anti-cheat verdict with the signals that produced it.
    
    Args:
        target_word: Word the player was asked to spell
        is_spelled_out: Classifier verdict
        reason: Machine-readable reason code
        source: Evidence source (audio, transcript_timing, none)
        **signals: Computed metrics (segment counts, gaps, durations)
    """
    logger = get_logger("anticheat")
    
    verdict = "SPELLED" if is_spelled_out else "SAID (rejected)"
    details = ", ".join(f"{key}={value}" for key, value in signals.items())
    logger.debug(f"[{source}] '{target_word}' → {verdict} | {reason} | {details}")
