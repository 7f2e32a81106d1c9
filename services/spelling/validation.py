"""
Validation Engine

Single entry point for deciding whether a spelling attempt is correct.

Flow for voice input:
    empty check → spelled-vs-said classifier → transcript decoder
    → exact comparison → similarity (analytics only)

Keyboard input skips the classifier and decoder.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

from services.spelling.anticheat import SpelledOutClassifier, get_spelled_out_classifier
from services.spelling.decoding import (
    TranscriptDecoder,
    get_transcript_decoder,
    normalize_answer,
)
from services.spelling.matching import calculate_similarity
from services.spelling.models import (
    AudioWordTiming,
    InputMode,
    RejectionReason,
    TranscriptTiming,
    ValidationResult,
    parse_input_mode,
)
from utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValidationOptions:
    """
    Per-attempt evidence supplied by the caller.
    
    user_mappings is a read-only snapshot of the player's learned
    mappings, loaded once per session.
    """
    user_mappings: Mapping[str, str] = field(default_factory=dict)
    audio_timing: Optional[Sequence[AudioWordTiming]] = None
    letter_timing: Optional[TranscriptTiming] = None


class SpellingValidator:
    """
    Validate spelling attempts.
    
    Example:
        validator = SpellingValidator()
        result = validator.validate("see a tea", "cat", InputMode.VOICE)
        result.is_correct  # True
    """
    
    def __init__(
        self,
        decoder: Optional[TranscriptDecoder] = None,
        classifier: Optional[SpelledOutClassifier] = None,
    ):
        self.decoder = decoder or get_transcript_decoder()
        self.classifier = classifier or get_spelled_out_classifier()
    
    def validate(
        self,
        utterance: str,
        correct_word: str,
        input_mode: Union[InputMode, str] = InputMode.VOICE,
        options: Optional[ValidationOptions] = None,
    ) -> ValidationResult:
        """
        Validate one attempt.
        
        Args:
            utterance: Transcript (voice) or typed text (keyboard)
            correct_word: Target word
            input_mode: voice or keyboard, any case; unknown values are
                validated as voice
            options: User mappings and timing evidence
            
        Returns:
            ValidationResult, never raises for malformed input
        """
        mode = parse_input_mode(input_mode)
        if mode is None:
            logger.warning(f"Unknown input mode '{input_mode}', validating as voice")
            mode = InputMode.VOICE
        options = options or ValidationOptions()
        
        normalized_correct = normalize_answer(correct_word)
        normalized_input = normalize_answer(utterance)
        
        if not normalized_input:
            return ValidationResult(
                is_correct=False,
                normalized_answer="",
                normalized_correct=normalized_correct,
                similarity=0.0,
                rejection_reason=RejectionReason.EMPTY,
            )
        
        if mode == InputMode.KEYBOARD:
            return ValidationResult(
                is_correct=normalized_input == normalized_correct,
                normalized_answer=normalized_input,
                normalized_correct=normalized_correct,
                similarity=calculate_similarity(normalized_input, normalized_correct),
            )
        
        return self._validate_voice(utterance, normalized_correct, correct_word, options)
    
    def _validate_voice(
        self,
        utterance: str,
        normalized_correct: str,
        correct_word: str,
        options: ValidationOptions,
    ) -> ValidationResult:
        verdict = self.classifier.classify(
            utterance,
            correct_word,
            audio_timing=options.audio_timing,
            letter_timing=options.letter_timing,
        )
        
        # A said word never scores, even when its letters match
        if not verdict.is_spelled_out:
            logger.info(
                f"Rejected '{utterance}' for '{correct_word}': "
                f"{verdict.reason.value} ({verdict.source.value})"
            )
            return ValidationResult(
                is_correct=False,
                normalized_answer=normalize_answer(utterance),
                normalized_correct=normalized_correct,
                similarity=0.0,
                was_spelled_out=False,
                rejection_reason=RejectionReason.NOT_SPELLED_OUT,
                verdict=verdict,
            )
        
        decoded = self.decoder.decode(utterance, options.user_mappings)
        normalized_answer = normalize_answer(decoded.letters)
        
        return ValidationResult(
            is_correct=normalized_answer == normalized_correct,
            normalized_answer=normalized_answer,
            normalized_correct=normalized_correct,
            similarity=calculate_similarity(normalized_answer, normalized_correct),
            was_spelled_out=True,
            verdict=verdict,
            applied_user_mappings=decoded.applied_user_mappings,
            unresolved_tokens=decoded.unresolved_tokens,
        )


# Singleton instance
_validator: Optional[SpellingValidator] = None


def get_spelling_validator() -> SpellingValidator:
    """Get singleton validator."""
    global _validator
    if _validator is None:
        _validator = SpellingValidator()
    return _validator


def validate_answer(
    utterance: str,
    correct_word: str,
    input_mode: Union[InputMode, str] = InputMode.VOICE,
    options: Optional[ValidationOptions] = None,
) -> ValidationResult:
    """Convenience function for validating with the default components."""
    return get_spelling_validator().validate(utterance, correct_word, input_mode, options)
