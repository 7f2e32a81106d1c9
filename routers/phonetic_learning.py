"""
Phonetic Learning Router

Recognition logging, learning passes and per-user mapping management.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from core.database import get_db
from core.dependencies import get_store
from core.schemas import (
    LearnRequest,
    LearnResponse,
    MappingCreate,
    MappingResponse,
    StatsResponse,
)
from services.spelling.learning import (
    PhoneticLearningStore,
    create_log_record,
    validate_recognition_event,
)
from services.spelling.models import PhoneticMapping
from utils.rate_limit import limit_learn, limit_log, limit_mappings

router = APIRouter(prefix="/phonetic-learning", tags=["Phonetic Learning"])


@router.post("/log", status_code=201)
@limit_log
async def log_recognition_event(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    store: PhoneticLearningStore = Depends(get_store),
):
    """Store one recognition event and return its id."""
    event = validate_recognition_event(payload)
    log = await store.record_event(db, create_log_record(event))
    return {"success": True, "id": log.id}


@router.post("/learn", response_model=LearnResponse)
@limit_learn
async def run_learning(
    request: Request,
    payload: LearnRequest,
    db: AsyncSession = Depends(get_db),
    store: PhoneticLearningStore = Depends(get_store),
):
    """Learn new mappings from the player's recent failed attempts."""
    result = await store.run_learning_pass(db, payload.user_id)
    return LearnResponse(
        user_id=result.user_id,
        events_analyzed=result.events_analyzed,
        patterns_found=result.patterns_found,
        learned_count=result.learned_count,
        mappings=[MappingResponse.model_validate(m) for m in result.mappings],
    )


@router.get("/mappings", response_model=List[MappingResponse])
@limit_mappings
async def list_mappings(
    request: Request,
    user_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    store: PhoneticLearningStore = Depends(get_store),
):
    """All mappings of a player, most used first."""
    return await store.list_mappings(db, user_id)


@router.post("/mappings", response_model=MappingResponse, status_code=201)
@limit_mappings
async def create_mapping(
    request: Request,
    payload: MappingCreate,
    db: AsyncSession = Depends(get_db),
    store: PhoneticLearningStore = Depends(get_store),
):
    """Add or replace a mapping. Protected sounds are refused with 409."""
    mapping = PhoneticMapping(
        heard=payload.heard,
        intended=payload.intended,
        source=payload.source,
        confidence=payload.confidence,
        occurrence_count=0,
        user_id=payload.user_id,
    )
    return await store.upsert_mapping(db, mapping)


@router.delete("/mappings/{mapping_id}")
@limit_mappings
async def delete_mapping(
    request: Request,
    mapping_id: int,
    user_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    store: PhoneticLearningStore = Depends(get_store),
):
    """Delete one of the player's mappings."""
    await store.delete_mapping(db, user_id, mapping_id)
    return {"success": True, "message": "Mapping deleted"}


@router.get("/stats", response_model=StatsResponse)
@limit_mappings
async def get_stats(
    request: Request,
    user_id: str = Query(..., min_length=1),
    logs_limit: int = Query(50, ge=1, le=settings.STATS_MAX_LOGS),
    db: AsyncSession = Depends(get_db),
    store: PhoneticLearningStore = Depends(get_store),
):
    """Learning statistics and recent attempts."""
    return await store.get_stats(db, user_id, logs_limit)
