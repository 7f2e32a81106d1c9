"""
Spelling Engine

Voice spelling validation with adaptive per-user phonetic learning.

Usage:
    from services.spelling import validate_answer, InputMode
    
    result = validate_answer("see a tea", "cat", InputMode.VOICE)
    result.is_correct  # True
"""

from services.spelling.models import (
    InputMode,
    parse_input_mode,
    RejectionReason,
    MappingSource,
    EvidenceSource,
    SpellingReason,
    LearningReason,
    CandidateReason,
    AudioWordTiming,
    TranscriptTiming,
    SpellingVerdict,
    DecodeResult,
    ValidationResult,
    AnswerAnalysis,
    RecognitionEvent,
    MappingCandidate,
    LearningAnalysis,
    CandidateValidation,
    PatternCandidate,
    PhoneticMapping,
)
from services.spelling.dictionary import PhoneticDictionary, get_phonetic_dictionary
from services.spelling.decoding import (
    TranscriptDecoder,
    get_transcript_decoder,
    normalize_answer,
    extract_letters,
    format_transcript_for_display,
)
from services.spelling.anticheat import (
    ClassifierThresholds,
    SpelledOutClassifier,
    LetterArrivalTracker,
)
from services.spelling.matching import calculate_similarity, analyze_answer
from services.spelling.validation import (
    ValidationOptions,
    SpellingValidator,
    get_spelling_validator,
    validate_answer,
)
from services.spelling.learning import (
    LearningConfig,
    PhoneticLearningEngine,
    get_learning_engine,
    is_protected_mapping,
    validate_candidate,
)

__all__ = [
    # Models
    'InputMode',
    'parse_input_mode',
    'RejectionReason',
    'MappingSource',
    'EvidenceSource',
    'SpellingReason',
    'LearningReason',
    'CandidateReason',
    'AudioWordTiming',
    'TranscriptTiming',
    'SpellingVerdict',
    'DecodeResult',
    'ValidationResult',
    'AnswerAnalysis',
    'RecognitionEvent',
    'MappingCandidate',
    'LearningAnalysis',
    'CandidateValidation',
    'PatternCandidate',
    'PhoneticMapping',
    # Dictionary & decoding
    'PhoneticDictionary',
    'get_phonetic_dictionary',
    'TranscriptDecoder',
    'get_transcript_decoder',
    'normalize_answer',
    'extract_letters',
    'format_transcript_for_display',
    # Anti-cheat
    'ClassifierThresholds',
    'SpelledOutClassifier',
    'LetterArrivalTracker',
    # Matching
    'calculate_similarity',
    'analyze_answer',
    # Validation
    'ValidationOptions',
    'SpellingValidator',
    'get_spelling_validator',
    'validate_answer',
    # Learning
    'LearningConfig',
    'PhoneticLearningEngine',
    'get_learning_engine',
    'is_protected_mapping',
    'validate_candidate',
]
