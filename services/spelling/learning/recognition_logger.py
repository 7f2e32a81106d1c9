"""
Recognition Logger

Records spelling attempts as learning evidence.

Logging is fire-and-forget: a failed write is logged and dropped, and
never reaches the validation result the player already received.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy import select
from sqlalchemy.sql import Select

from core.models import RecognitionLog
from services.spelling.models import (
    InputMode,
    RecognitionEvent,
    RejectionReason,
    parse_input_mode,
)
from utils.exceptions import InvalidRecognitionEventError
from utils.logging import get_logger
from utils.tasks import run_in_background

logger = get_logger(__name__)


DEFAULT_LOG_LIMIT = 100
DEFAULT_WINDOW_DAYS = 30


# =============================================================================
# Incoming Event Schema
# =============================================================================

class RecognitionEventIn(BaseModel):
    """Recognition event as submitted by a game client."""
    user_id: str = Field(..., min_length=1, max_length=255)
    word_to_spell: str = Field(..., min_length=1, max_length=255)
    raw_transcript: str = Field(default="", max_length=2000)
    extracted_letters: str = Field(default="", max_length=255)
    was_correct: bool
    rejection_reason: Optional[RejectionReason] = None
    input_method: InputMode = InputMode.VOICE
    
    @field_validator("user_id", "word_to_spell")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()
    
    @field_validator("input_method", mode="before")
    @classmethod
    def lowercase_mode(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v
    
    def to_event(self) -> RecognitionEvent:
        return RecognitionEvent(
            user_id=self.user_id,
            word_to_spell=self.word_to_spell,
            raw_transcript=self.raw_transcript,
            extracted_letters=self.extracted_letters,
            was_correct=self.was_correct,
            rejection_reason=self.rejection_reason.value if self.rejection_reason else None,
            input_method=self.input_method,
        )


def validate_recognition_event(payload: Dict[str, Any]) -> RecognitionEvent:
    """
    Validate a raw payload into a RecognitionEvent.
    
    Raises:
        InvalidRecognitionEventError: On the first invalid field
    """
    try:
        return RecognitionEventIn.model_validate(payload).to_event()
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise InvalidRecognitionEventError(
            message=f"Invalid recognition event: {first.get('msg')}",
            field=field or None,
        ) from e


# =============================================================================
# Record Building
# =============================================================================

def _input_method_value(value) -> str:
    mode = parse_input_mode(value)
    if mode is not None:
        return mode.value
    # Kept as sent; never read back as learning evidence
    return str(value).strip().lower()[:20]


def create_log_record(event: RecognitionEvent) -> Dict[str, Any]:
    """
    Normalize an event into column values for RecognitionLog.
    
    Word, transcript and letters are lowercased and trimmed.
    """
    return {
        "user_id": event.user_id,
        "word_to_spell": (event.word_to_spell or "").lower().strip(),
        "raw_transcript": (event.raw_transcript or "").lower().strip(),
        "extracted_letters": (event.extracted_letters or "").lower().strip(),
        "was_correct": bool(event.was_correct),
        "rejection_reason": event.rejection_reason,
        "input_method": _input_method_value(event.input_method),
    }


def build_log_query(
    user_id: str,
    incorrect_only: bool = True,
    limit: int = DEFAULT_LOG_LIMIT,
    since: Optional[datetime] = None,
) -> Select:
    """
    Build the query for a user's recent recognition logs, newest first.
    
    Args:
        user_id: Player identifier
        incorrect_only: Only failed attempts (learning evidence)
        limit: Maximum rows
        since: Oldest timestamp to include (default: 30 days ago)
    """
    if since is None:
        since = datetime.now(timezone.utc) - timedelta(days=DEFAULT_WINDOW_DAYS)
    
    query = select(RecognitionLog).where(
        RecognitionLog.user_id == user_id,
        RecognitionLog.created_at >= since,
    )
    if incorrect_only:
        query = query.where(RecognitionLog.was_correct.is_(False))
    
    return query.order_by(RecognitionLog.created_at.desc(), RecognitionLog.id.desc()).limit(limit)


# =============================================================================
# Logger
# =============================================================================

class RecognitionLogger:
    """
    Fire-and-forget recognition event writer.
    
    Args:
        writer: Async callable persisting one normalized record
    """
    
    def __init__(self, writer: Callable[[Dict[str, Any]], Awaitable[Any]]):
        self._writer = writer
    
    @staticmethod
    def should_log(event: RecognitionEvent) -> bool:
        """Only identified players' voice attempts are learning evidence."""
        if not event.user_id:
            return False
        return parse_input_mode(event.input_method) == InputMode.VOICE
    
    def log(self, event: RecognitionEvent):
        """
        Schedule a write without waiting for it.
        
        Returns:
            The background task, or None when the event was skipped
        """
        if not self.should_log(event):
            logger.debug("Skipping recognition log (anonymous or keyboard input)")
            return None
        
        return run_in_background(
            self._write,
            create_log_record(event),
            task_name="log_recognition_event",
        )
    
    async def _write(self, record: Dict[str, Any]) -> bool:
        try:
            await self._writer(record)
            return True
        except Exception as e:
            logger.error(
                f"Failed to log recognition event for user {record.get('user_id')}: {e}"
            )
            return False
