"""
Phonetic Learning Store

Persistence for recognition logs and per-user phonetic mappings, and the
learning pass that turns one into the other.

Learning passes are serialized per user, and mappings are upserted on
(user_id, heard), so two passes for the same player converge on one row.
"""

import asyncio
import weakref
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from core.models import RecognitionLog, UserPhoneticMapping
from services.spelling.dictionary import normalize_heard
from services.spelling.learning.engine import PhoneticLearningEngine, get_learning_engine
from services.spelling.learning.recognition_logger import build_log_query
from services.spelling.models import (
    MappingSource,
    PhoneticMapping,
    RecognitionEvent,
    parse_input_mode,
)
from utils.exceptions import MappingNotFoundError, MappingRejectedError, PersistenceError
from utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LearningPassResult:
    """Outcome of one learning pass for one player."""
    user_id: str
    events_analyzed: int = 0
    patterns_found: int = 0
    mappings: List[UserPhoneticMapping] = field(default_factory=list)
    
    @property
    def learned_count(self) -> int:
        return len(self.mappings)


class PhoneticLearningStore:
    """
    Database access for phonetic learning.
    
    Every method takes the caller's AsyncSession; the store keeps no
    connection of its own.
    """
    
    def __init__(
        self,
        engine: Optional[PhoneticLearningEngine] = None,
        window_days: Optional[int] = None,
        max_events: Optional[int] = None,
    ):
        self.engine = engine or get_learning_engine()
        self.window_days = window_days or settings.LEARNING_WINDOW_DAYS
        self.max_events = max_events or settings.LEARNING_MAX_EVENTS
        # Entries live only while a pass holds or awaits the lock
        self._user_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )
    
    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock
    
    # =========================================================================
    # Recognition logs
    # =========================================================================
    
    async def record_event(self, db: AsyncSession, record: Dict[str, Any]) -> RecognitionLog:
        """
        Append one normalized recognition record.
        
        Raises:
            PersistenceError: If the write fails
        """
        log = RecognitionLog(**record)
        db.add(log)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(
                message="Failed to store recognition event",
                operation="record_event",
                details={"error": str(e)},
            ) from e
        
        await db.refresh(log)
        return log
    
    async def fetch_learning_events(
        self,
        db: AsyncSession,
        user_id: str,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[RecognitionEvent]:
        """Failed attempts in the learning window, newest first."""
        if since is None:
            since = datetime.now(timezone.utc) - timedelta(days=self.window_days)
        
        result = await db.execute(
            build_log_query(
                user_id,
                incorrect_only=True,
                limit=limit or self.max_events,
                since=since,
            )
        )
        
        return [
            RecognitionEvent(
                user_id=row.user_id,
                word_to_spell=row.word_to_spell,
                raw_transcript=row.raw_transcript,
                extracted_letters=row.extracted_letters,
                was_correct=row.was_correct,
                rejection_reason=row.rejection_reason,
                input_method=parse_input_mode(row.input_method) or row.input_method,
                event_id=str(row.id),
            )
            for row in result.scalars().all()
        ]
    
    # =========================================================================
    # Mappings
    # =========================================================================
    
    async def list_mappings(self, db: AsyncSession, user_id: str) -> List[UserPhoneticMapping]:
        """All mappings of a player, most used first."""
        result = await db.execute(
            select(UserPhoneticMapping)
            .where(UserPhoneticMapping.user_id == user_id)
            .order_by(
                UserPhoneticMapping.times_applied.desc(),
                UserPhoneticMapping.id.asc(),
            )
        )
        return list(result.scalars().all())
    
    async def get_user_mappings(self, db: AsyncSession, user_id: str) -> Dict[str, str]:
        """Snapshot of a player's mappings as heard → letters."""
        result = await db.execute(
            select(UserPhoneticMapping.heard, UserPhoneticMapping.intended)
            .where(UserPhoneticMapping.user_id == user_id)
        )
        return {heard: intended for heard, intended in result.all()}
    
    async def upsert_mapping(self, db: AsyncSession, mapping: PhoneticMapping) -> UserPhoneticMapping:
        """
        Insert or update the mapping for (user_id, heard).
        
        Safety is re-checked right before the write. Learned mappings may
        not replace a different existing letter; manual mappings may.
        Confidence never decreases on update.
        
        Raises:
            MappingRejectedError: If the mapping fails the safety check
            PersistenceError: If the write fails
        """
        heard = normalize_heard(mapping.heard)
        intended = normalize_heard(mapping.intended)
        
        result = await db.execute(
            select(UserPhoneticMapping).where(
                UserPhoneticMapping.user_id == mapping.user_id,
                UserPhoneticMapping.heard == heard,
            )
        )
        existing = result.scalars().first()
        
        known = {}
        if existing is not None and mapping.source != MappingSource.MANUAL:
            known = {existing.heard: existing.intended}
        
        validation = self.engine.validate_candidate(heard, intended, known)
        if not validation.is_valid:
            logger.warning(
                f"Refusing to store '{heard}' → '{intended}' for user "
                f"{mapping.user_id}: {validation.reason.value}"
            )
            raise MappingRejectedError(
                message=f"Mapping '{heard}' → '{intended}' rejected",
                heard=heard,
                intended=intended,
                reason=validation.reason.value,
            )
        
        if existing is not None:
            existing.intended = intended
            existing.source = mapping.source.value
            existing.confidence = max(existing.confidence or 0.0, mapping.confidence)
            existing.occurrence_count = max(existing.occurrence_count or 0, mapping.occurrence_count)
            row = existing
        else:
            row = UserPhoneticMapping(
                user_id=mapping.user_id,
                heard=heard,
                intended=intended,
                source=mapping.source.value,
                confidence=mapping.confidence,
                occurrence_count=mapping.occurrence_count,
                times_applied=0,
            )
            db.add(row)
        
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(
                message="Failed to store phonetic mapping",
                operation="upsert_mapping",
                details={"heard": heard, "error": str(e)},
            ) from e
        
        await db.refresh(row)
        logger.info(
            f"{'Updated' if existing is not None else 'Added'} mapping "
            f"'{heard}' → '{intended}' for user {mapping.user_id}"
        )
        return row
    
    async def delete_mapping(self, db: AsyncSession, user_id: str, mapping_id: int) -> None:
        """
        Delete one of the player's mappings.
        
        Raises:
            MappingNotFoundError: If the id does not belong to the player
        """
        result = await db.execute(
            select(UserPhoneticMapping).where(
                UserPhoneticMapping.id == mapping_id,
                UserPhoneticMapping.user_id == user_id,
            )
        )
        mapping = result.scalars().first()
        if mapping is None:
            raise MappingNotFoundError(mapping_id=mapping_id)
        
        await db.delete(mapping)
        await db.commit()
        logger.info(f"Deleted mapping {mapping_id} for user {user_id}")
    
    async def record_mapping_usage(
        self,
        db: AsyncSession,
        user_id: str,
        heards: Iterable[str],
    ) -> int:
        """
        Increment times_applied for mappings used in a decode.
        
        Returns:
            Number of mappings updated
        """
        counts: Dict[str, int] = defaultdict(int)
        for heard in heards:
            counts[normalize_heard(heard)] += 1
        if not counts:
            return 0
        
        result = await db.execute(
            select(UserPhoneticMapping).where(
                UserPhoneticMapping.user_id == user_id,
                UserPhoneticMapping.heard.in_(list(counts)),
            )
        )
        rows = result.scalars().all()
        for row in rows:
            row.times_applied = (row.times_applied or 0) + counts[row.heard]
        
        await db.commit()
        return len(rows)
    
    # =========================================================================
    # Learning pass
    # =========================================================================
    
    async def run_learning_pass(self, db: AsyncSession, user_id: str) -> LearningPassResult:
        """
        Learn new mappings from a player's recent failed attempts.
        
        At most one pass per player runs at a time in this process.
        """
        async with self._lock_for(user_id):
            result = LearningPassResult(user_id=user_id)
            
            events = await self.fetch_learning_events(db, user_id)
            result.events_analyzed = len(events)
            if not events:
                return result
            
            user_mappings = await self.get_user_mappings(db, user_id)
            patterns = self.engine.find_learnable_patterns(events, user_mappings)
            result.patterns_found = len(patterns)
            
            for pattern in patterns:
                if pattern.heard in user_mappings:
                    continue
                
                mapping = self.engine.create_mapping(pattern, user_id)
                try:
                    row = await self.upsert_mapping(db, mapping)
                except MappingRejectedError as e:
                    logger.warning(f"Learning pass skipped '{pattern.heard}': {e.message}")
                    continue
                result.mappings.append(row)
            
            logger.info(
                f"Learning pass for user {user_id}: {result.events_analyzed} events, "
                f"{result.patterns_found} patterns, {result.learned_count} learned"
            )
            return result
    
    # =========================================================================
    # Stats
    # =========================================================================
    
    async def get_stats(
        self,
        db: AsyncSession,
        user_id: str,
        logs_limit: int = 50,
    ) -> Dict[str, Any]:
        """Learning statistics and recent attempts for one player."""
        logs_limit = max(1, min(logs_limit, settings.STATS_MAX_LOGS))
        since = datetime.now(timezone.utc) - timedelta(days=self.window_days)
        
        mappings = await self.list_mappings(db, user_id)
        learned = [m for m in mappings if m.source == MappingSource.USER_LEARNED.value]
        manual = [m for m in mappings if m.source == MappingSource.MANUAL.value]
        
        avg_confidence = (
            sum(m.confidence for m in mappings) / len(mappings) if mappings else 0.0
        )
        
        window = (
            RecognitionLog.user_id == user_id,
            RecognitionLog.created_at >= since,
        )
        total_logs = await db.scalar(select(func.count(RecognitionLog.id)).where(*window)) or 0
        correct_logs = await db.scalar(
            select(func.count(RecognitionLog.id)).where(*window, RecognitionLog.was_correct.is_(True))
        ) or 0
        
        recent = await db.execute(
            build_log_query(user_id, incorrect_only=False, limit=logs_limit, since=since)
        )
        
        most_used = None
        if mappings and mappings[0].times_applied > 0:
            top = mappings[0]
            most_used = {"heard": top.heard, "intended": top.intended, "times_applied": top.times_applied}
        
        return {
            "total_mappings": len(mappings),
            "auto_learned_count": len(learned),
            "manual_count": len(manual),
            "avg_confidence": round(avg_confidence, 4),
            "window_days": self.window_days,
            "total_logs_in_window": total_logs,
            "success_rate": round(correct_logs / total_logs, 4) if total_logs else 0.0,
            "most_used_mapping": most_used,
            "recent_logs": list(recent.scalars().all()),
        }


# Singleton instance
_store: Optional[PhoneticLearningStore] = None


def get_phonetic_learning_store() -> PhoneticLearningStore:
    """Get singleton store."""
    global _store
    if _store is None:
        _store = PhoneticLearningStore()
    return _store
