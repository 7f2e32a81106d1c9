"""
FastAPI Dependencies Module

Provides dependency injection for the spelling engine and its stores.
Engine components are singletons; they hold only immutable tables.

Usage:
    from core.dependencies import get_validator, get_store
    
    @router.post("/validate")
    async def validate(
        validator: SpellingValidator = Depends(get_validator)
    ):
        ...
"""

from typing import Any, Dict, Iterable

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from core.database import SessionLocal
from services.spelling.learning import (
    PhoneticLearningStore,
    RecognitionLogger,
    get_phonetic_learning_store,
)
from services.spelling.validation import SpellingValidator, get_spelling_validator
from utils.logging import get_logger
from utils.tasks import run_in_background

logger = get_logger(__name__)


def get_validator() -> SpellingValidator:
    """Get the shared spelling validator."""
    return get_spelling_validator()


def get_store() -> PhoneticLearningStore:
    """Get the shared phonetic learning store."""
    return get_phonetic_learning_store()


def get_session_factory() -> sessionmaker:
    """
    Session factory for work that outlives the request.
    
    Background writes cannot reuse the request session, which is closed
    once the response is sent.
    """
    return SessionLocal


def get_recognition_logger(
    session_factory: sessionmaker = Depends(get_session_factory),
    store: PhoneticLearningStore = Depends(get_store),
) -> RecognitionLogger:
    """Recognition logger writing through its own session."""
    
    async def write(record: Dict[str, Any]) -> None:
        async with session_factory() as db:
            await store.record_event(db, record)
    
    return RecognitionLogger(write)


def schedule_mapping_usage(
    session_factory: sessionmaker,
    store: PhoneticLearningStore,
    user_id: str,
    heards: Iterable[str],
):
    """Increment usage counters in the background."""
    heards = list(heards)
    if not heards:
        return None
    
    async def record() -> int:
        async with session_factory() as db:
            return await store.record_mapping_usage(db, user_id, heards)
    
    return run_in_background(record, task_name="record_mapping_usage")
