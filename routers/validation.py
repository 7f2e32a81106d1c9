"""
Validation Router

Spelling attempt validation endpoint.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from core.database import get_db
from core.dependencies import (
    get_recognition_logger,
    get_session_factory,
    get_store,
    get_validator,
    schedule_mapping_usage,
)
from core.schemas import ValidateRequest, ValidationResponse
from services.spelling.decoding import format_transcript_for_display
from services.spelling.learning import PhoneticLearningStore, RecognitionLogger
from services.spelling.models import InputMode, RecognitionEvent
from services.spelling.validation import SpellingValidator, ValidationOptions
from utils.logging import get_logger
from utils.rate_limit import limit_validate

logger = get_logger(__name__)

router = APIRouter(tags=["Validation"])


@router.post("/validate", response_model=ValidationResponse)
@limit_validate
async def validate_spelling(
    request: Request,
    payload: ValidateRequest,
    db: AsyncSession = Depends(get_db),
    validator: SpellingValidator = Depends(get_validator),
    store: PhoneticLearningStore = Depends(get_store),
    recognition_logger: RecognitionLogger = Depends(get_recognition_logger),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Validate one spelling attempt.
    
    When user_id is given, the player's learned mappings are applied and
    voice attempts are logged as learning evidence in the background.
    """
    user_mappings = {}
    if payload.user_id:
        try:
            user_mappings = await store.get_user_mappings(db, payload.user_id)
        except SQLAlchemyError as e:
            # Validation still runs with the static tables only
            logger.error(f"Could not load mappings for user {payload.user_id}: {e}")
    
    options = ValidationOptions(
        user_mappings=user_mappings,
        audio_timing=payload.audio_segments(),
        letter_timing=payload.transcript_timing(),
    )
    result = validator.validate(
        payload.utterance,
        payload.correct_word,
        payload.input_mode,
        options,
    )
    
    if payload.user_id:
        recognition_logger.log(
            RecognitionEvent(
                user_id=payload.user_id,
                word_to_spell=payload.correct_word,
                raw_transcript=payload.utterance,
                extracted_letters=result.normalized_answer,
                was_correct=result.is_correct,
                rejection_reason=result.rejection_reason.value if result.rejection_reason else None,
                input_method=payload.input_mode,
            )
        )
        schedule_mapping_usage(
            session_factory,
            store,
            payload.user_id,
            [heard for heard, _ in result.applied_user_mappings],
        )
    
    if payload.input_mode == InputMode.VOICE:
        display = format_transcript_for_display(payload.utterance)
    else:
        display = "-".join(result.normalized_answer.upper())
    
    return ValidationResponse.from_result(result, display=display)
