"""
Spelling Engine Models

Shared value types for validation, anti-cheat classification and
phonetic learning. All records are frozen: results are produced fresh
per call and never mutated after return.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================================
# Enums
# =============================================================================

class InputMode(str, Enum):
    """How the player submitted the answer."""
    VOICE = "voice"
    KEYBOARD = "keyboard"


def parse_input_mode(value: Any) -> Optional[InputMode]:
    """Case-insensitive InputMode lookup. Unknown values give None."""
    if isinstance(value, InputMode):
        return value
    try:
        return InputMode(str(value).strip().lower())
    except ValueError:
        return None


class RejectionReason(str, Enum):
    """Why an answer was rejected before (or instead of) letter comparison."""
    NOT_SPELLED_OUT = "not_spelled_out"
    EMPTY = "empty"


class MappingSource(str, Enum):
    """Where a phonetic mapping came from."""
    STATIC = "static"
    USER_LEARNED = "user_learned"
    MANUAL = "manual"


class EvidenceSource(str, Enum):
    """Which evidence the anti-cheat classifier relied on."""
    AUDIO = "audio"
    TRANSCRIPT_TIMING = "transcript_timing"
    TRANSCRIPT_SHAPE = "transcript_shape"
    NONE = "none"


class SpellingReason(str, Enum):
    """Machine-readable reason attached to every anti-cheat verdict."""
    SINGLE_LETTER_TARGET = "single_letter_target"
    NO_AUDIO_SEGMENTS = "no_audio_segments"
    SINGLE_LETTER_ANSWER = "single_letter_answer"
    SAID_WHOLE_WORD = "said_whole_word"
    SPELLING_PATTERN = "spelling_pattern"
    PAUSES_BETWEEN_LETTERS = "pauses_between_letters"
    TOO_FAST_FOR_SPELLING = "too_fast_for_spelling"
    DEFAULT_ACCEPT = "default_accept"
    FALLBACK_TOO_FEW_LETTERS = "fallback_too_few_letters"
    FALLBACK_GAPS_PRESENT = "fallback_gaps_present"
    FALLBACK_TOO_FAST = "fallback_too_fast"
    SHAPE_PHRASE_FRAGMENT = "shape_phrase_fragment"
    SHAPE_LETTER_FORMS = "shape_letter_forms"
    SHAPE_SAID_WORD = "shape_said_word"
    SHAPE_MULTIPLE_PARTS = "shape_multiple_parts"
    SHAPE_SINGLE_TOKEN = "shape_single_token"


class LearningReason(str, Enum):
    """Outcome of single-event learning analysis."""
    SINGLE_UNKNOWN_DEDUCED = "single_unknown_deduced"
    ALREADY_CORRECT = "already_correct"
    NOT_VOICE_SPELLING = "not_voice_spelling"
    EMPTY_TRANSCRIPT = "empty_transcript"
    ALL_KNOWN = "all_known"
    MULTIPLE_UNKNOWNS = "multiple_unknowns"
    WORD_MISMATCH = "word_mismatch"
    PROTECTED_MAPPING = "protected_mapping"
    CONFLICTING_USER_MAPPING = "conflicting_user_mapping"


class CandidateReason(str, Enum):
    """Outcome of the mapping safety check."""
    VALID_NOVEL_MAPPING = "valid_novel_mapping"
    PROTECTED_GLOBAL_MAPPING = "protected_global_mapping"
    CONFLICTS_WITH_EXISTING_USER_MAPPING = "conflicts_with_existing_user_mapping"
    INVALID_INTENDED = "invalid_intended"


# =============================================================================
# Audio Evidence
# =============================================================================

@dataclass(frozen=True)
class AudioWordTiming:
    """
    One recognized audio segment, as reported by the recognizer.
    
    Times are seconds from the start of the audio. When the recognizer
    does not report the gap, it is derived from the previous segment.
    """
    word: str
    start_sec: float
    end_sec: float
    gap_from_previous_sec: Optional[float] = None
    
    @property
    def duration_sec(self) -> float:
        return max(self.end_sec - self.start_sec, 0.0)


@dataclass(frozen=True)
class TranscriptTiming:
    """Wall-clock arrival time (seconds) of each decoded letter, in order."""
    letter_times: Tuple[float, ...] = ()
    
    @property
    def letter_count(self) -> int:
        return len(self.letter_times)
    
    @property
    def average_gap_ms(self) -> float:
        """Mean gap between consecutive letter arrivals in milliseconds."""
        if len(self.letter_times) < 2:
            return 0.0
        gaps = [
            later - earlier
            for earlier, later in zip(self.letter_times, self.letter_times[1:])
        ]
        return sum(gaps) / len(gaps) * 1000


@dataclass(frozen=True)
class SpellingVerdict:
    """Result of the spelled-vs-said classifier."""
    is_spelled_out: bool
    reason: SpellingReason
    source: EvidenceSource
    signals: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def is_low_confidence(self) -> bool:
        """Verdicts from transcript-arrival timing are less reliable than audio."""
        return self.source != EvidenceSource.AUDIO


# =============================================================================
# Validation
# =============================================================================

@dataclass(frozen=True)
class DecodeResult:
    """Letters decoded from a transcript, with the mappings that produced them."""
    letters: str
    applied_user_mappings: Tuple[Tuple[str, str], ...] = ()
    applied_static_mappings: Tuple[Tuple[str, str], ...] = ()
    unresolved_tokens: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one spelling attempt."""
    is_correct: bool
    normalized_answer: str
    normalized_correct: str
    similarity: float
    was_spelled_out: Optional[bool] = None
    rejection_reason: Optional[RejectionReason] = None
    verdict: Optional[SpellingVerdict] = None
    applied_user_mappings: Tuple[Tuple[str, str], ...] = ()
    unresolved_tokens: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnswerAnalysis:
    """Positional breakdown of an answer for feedback."""
    correct_letters: int
    total_letters: int
    percentage_correct: int
    was_close: bool


# =============================================================================
# Learning
# =============================================================================

@dataclass(frozen=True)
class RecognitionEvent:
    """
    One spelling attempt, the unit of evidence for learning.
    
    Example:
        RecognitionEvent(
            user_id="abc123",
            word_to_spell="to",
            raw_transcript="tee ohs",
            extracted_letters="tos",
            was_correct=False,
        )
    """
    user_id: str
    word_to_spell: str
    raw_transcript: str
    extracted_letters: str
    was_correct: bool
    rejection_reason: Optional[str] = None
    input_method: InputMode = InputMode.VOICE
    event_id: Optional[str] = None


@dataclass(frozen=True)
class MappingCandidate:
    """A deduced (heard, intended) pair from one event."""
    heard: str
    intended: str


@dataclass(frozen=True)
class LearningAnalysis:
    """Result of analyzing one event for a learnable mapping."""
    can_learn: bool
    reason: LearningReason
    candidate: Optional[MappingCandidate] = None


@dataclass(frozen=True)
class CandidateValidation:
    """Result of the mapping safety check."""
    is_valid: bool
    reason: CandidateReason


@dataclass
class PatternCandidate:
    """
    Aggregation of one (heard, intended) pair across a batch of events.
    
    Transient: exists only during a learning pass.
    """
    heard: str
    intended: str
    occurrence_count: int = 0
    event_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PhoneticMapping:
    """A heard token and the letters it stands for."""
    heard: str
    intended: str
    source: MappingSource
    confidence: float
    occurrence_count: int
    user_id: Optional[str] = None
