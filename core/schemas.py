"""
API Schemas

Pydantic request/response models for the validation and phonetic
learning endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.spelling.learning.recognition_logger import RecognitionEventIn
from services.spelling.models import (
    AudioWordTiming,
    InputMode,
    MappingSource,
    SpellingVerdict,
    TranscriptTiming,
    ValidationResult,
)


# =============================================================================
# Validation
# =============================================================================

class AudioWordTimingIn(BaseModel):
    """One recognizer audio segment. Accepts start/end as aliases."""
    model_config = ConfigDict(populate_by_name=True)
    
    word: str
    start_sec: float = Field(..., ge=0, alias="start")
    end_sec: float = Field(..., ge=0, alias="end")
    gap_from_previous_sec: Optional[float] = None
    
    def to_domain(self) -> AudioWordTiming:
        return AudioWordTiming(
            word=self.word,
            start_sec=self.start_sec,
            end_sec=self.end_sec,
            gap_from_previous_sec=self.gap_from_previous_sec,
        )


class ValidateRequest(BaseModel):
    utterance: str = Field(default="", max_length=2000, description="Transcript or typed answer")
    correct_word: str = Field(..., min_length=1, max_length=255)
    input_mode: InputMode = InputMode.VOICE
    user_id: Optional[str] = Field(None, description="Loads the player's learned mappings")
    audio_timing: Optional[List[AudioWordTimingIn]] = None
    letter_times: Optional[List[float]] = Field(
        None, description="Arrival time (seconds) of each decoded letter"
    )
    
    def audio_segments(self) -> Optional[List[AudioWordTiming]]:
        if self.audio_timing is None:
            return None
        return [segment.to_domain() for segment in self.audio_timing]
    
    def transcript_timing(self) -> Optional[TranscriptTiming]:
        if self.letter_times is None:
            return None
        return TranscriptTiming(letter_times=tuple(self.letter_times))


class AppliedMappingResponse(BaseModel):
    heard: str
    intended: str


class SpellingVerdictResponse(BaseModel):
    is_spelled_out: bool
    reason: str
    source: str
    is_low_confidence: bool
    signals: Dict[str, Any] = {}
    
    @classmethod
    def from_verdict(cls, verdict: SpellingVerdict) -> "SpellingVerdictResponse":
        return cls(
            is_spelled_out=verdict.is_spelled_out,
            reason=verdict.reason.value,
            source=verdict.source.value,
            is_low_confidence=verdict.is_low_confidence,
            signals=dict(verdict.signals),
        )


class ValidationResponse(BaseModel):
    is_correct: bool
    normalized_answer: str
    normalized_correct: str
    similarity: float
    was_spelled_out: Optional[bool] = None
    rejection_reason: Optional[str] = None
    display: str = ""
    verdict: Optional[SpellingVerdictResponse] = None
    applied_user_mappings: List[AppliedMappingResponse] = []
    unresolved_tokens: List[str] = []
    
    @classmethod
    def from_result(cls, result: ValidationResult, display: str = "") -> "ValidationResponse":
        return cls(
            is_correct=result.is_correct,
            normalized_answer=result.normalized_answer,
            normalized_correct=result.normalized_correct,
            similarity=round(result.similarity, 4),
            was_spelled_out=result.was_spelled_out,
            rejection_reason=result.rejection_reason.value if result.rejection_reason else None,
            display=display,
            verdict=SpellingVerdictResponse.from_verdict(result.verdict) if result.verdict else None,
            applied_user_mappings=[
                AppliedMappingResponse(heard=heard, intended=intended)
                for heard, intended in result.applied_user_mappings
            ],
            unresolved_tokens=list(result.unresolved_tokens),
        )


# =============================================================================
# Phonetic Learning
# =============================================================================

class RecognitionLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    user_id: str
    word_to_spell: str
    raw_transcript: str
    extracted_letters: str
    was_correct: bool
    rejection_reason: Optional[str] = None
    input_method: str
    created_at: Optional[datetime] = None


class MappingCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    heard: str = Field(..., min_length=1, max_length=255)
    intended: str = Field(..., min_length=1, max_length=2, description="One or two letters")
    source: MappingSource = MappingSource.MANUAL
    confidence: float = Field(default=1.0, ge=0, le=1)
    
    @field_validator("intended")
    @classmethod
    def letters_only(cls, v: str) -> str:
        v = v.strip().lower()
        if not v.isalpha():
            raise ValueError("intended must contain letters only")
        return v
    
    @field_validator("source")
    @classmethod
    def not_static(cls, v: MappingSource) -> MappingSource:
        if v == MappingSource.STATIC:
            raise ValueError("static mappings cannot be added per user")
        return v


class MappingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    user_id: str
    heard: str
    intended: str
    source: str
    confidence: float
    occurrence_count: int
    times_applied: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LearnRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)


class LearnResponse(BaseModel):
    user_id: str
    events_analyzed: int
    patterns_found: int
    learned_count: int
    mappings: List[MappingResponse] = []


class MostUsedMapping(BaseModel):
    heard: str
    intended: str
    times_applied: int


class StatsResponse(BaseModel):
    total_mappings: int
    auto_learned_count: int
    manual_count: int
    avg_confidence: float
    window_days: int
    total_logs_in_window: int
    success_rate: float
    most_used_mapping: Optional[MostUsedMapping] = None
    recent_logs: List[RecognitionLogResponse] = []


class HealthResponse(BaseModel):
    status: str
    app: str
    version: str
    components: Dict[str, Any] = {}


__all__ = [
    "AudioWordTimingIn",
    "ValidateRequest",
    "AppliedMappingResponse",
    "SpellingVerdictResponse",
    "ValidationResponse",
    "RecognitionEventIn",
    "RecognitionLogResponse",
    "MappingCreate",
    "MappingResponse",
    "LearnRequest",
    "LearnResponse",
    "MostUsedMapping",
    "StatsResponse",
    "HealthResponse",
]
