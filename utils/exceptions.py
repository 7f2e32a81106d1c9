"""
Custom Exceptions Module

Defines application-specific exceptions for the service boundary.
The spelling engine itself never raises for malformed input; these are
raised by the persistence layer and the HTTP routers only.

Usage:
    from utils.exceptions import MappingRejectedError
    
    try:
        await store.upsert_mapping(db, user_id, heard, intended)
    except MappingRejectedError as e:
        logger.warning(f"Mapping refused: {e}")
"""

from typing import Optional, Dict, Any


class SpellingEngineError(Exception):
    """
    Base exception for all spelling engine service errors.
    
    Attributes:
        message: Human-readable error message
        details: Additional error details (optional)
        status_code: HTTP status code to return (optional)
    """
    
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# Phonetic Learning Exceptions
# =============================================================================

class InvalidRecognitionEventError(SpellingEngineError):
    """
    Raised when a recognition event submitted for logging is malformed.
    
    Common causes:
        - Missing user id or word
        - Non-boolean correctness flag
    """
    
    def __init__(
        self,
        message: str = "Invalid recognition event",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"field": field, **(details or {})},
            status_code=422
        )


class MappingRejectedError(SpellingEngineError):
    """
    Raised when a mapping fails the safety re-check right before it is written.
    
    Common causes:
        - The heard token is protected by the static dictionary
        - The user already maps the heard token to different letters
    """
    
    def __init__(
        self,
        message: str = "Phonetic mapping rejected",
        heard: Optional[str] = None,
        intended: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"heard": heard, "intended": intended, "reason": reason, **(details or {})},
            status_code=409
        )


class MappingNotFoundError(SpellingEngineError):
    """Raised when a mapping id does not exist for the requesting user."""
    
    def __init__(
        self,
        message: str = "Phonetic mapping not found",
        mapping_id: Optional[int] = None
    ):
        super().__init__(
            message=message,
            details={"mapping_id": mapping_id},
            status_code=404
        )


class PersistenceError(SpellingEngineError):
    """
    Raised when the database rejects a write.
    
    Never reaches the player's validation result; only surfaced by
    the management endpoints.
    """
    
    def __init__(
        self,
        message: str = "Database operation failed",
        operation: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"operation": operation, **(details or {})},
            status_code=500
        )
