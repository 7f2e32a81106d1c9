"""
Unit Tests for the Validation Engine

Empty short-circuit, anti-cheat rejection, decoding and comparison.
"""

import pytest

from services.spelling.anticheat import SpelledOutClassifier
from services.spelling.models import (
    AudioWordTiming,
    EvidenceSource,
    InputMode,
    RejectionReason,
    SpellingReason,
    TranscriptTiming,
)
from services.spelling.validation import (
    SpellingValidator,
    ValidationOptions,
    validate_answer,
)


class ExplodingClassifier(SpelledOutClassifier):
    """Fails the test if classification is attempted."""
    
    def classify(self, *args, **kwargs):
        raise AssertionError("classifier must not run")


class TestEmptyAnswer:
    """Empty input is rejected before any other work."""
    
    @pytest.mark.parametrize("utterance", ["", "   ", "..."])
    def test_empty_voice_answer(self, decoder, utterance):
        validator = SpellingValidator(decoder=decoder, classifier=ExplodingClassifier())
        result = validator.validate(utterance, "cat", InputMode.VOICE)
        
        assert not result.is_correct
        assert result.rejection_reason == RejectionReason.EMPTY
        assert result.similarity == 0.0
        assert result.verdict is None
        assert result.was_spelled_out is None
    
    def test_empty_keyboard_answer(self, validator):
        result = validator.validate("", "cat", InputMode.KEYBOARD)
        assert not result.is_correct
        assert result.rejection_reason == RejectionReason.EMPTY


class TestVoiceValidation:
    """Tests for voice attempts."""
    
    def test_said_word_is_rejected_even_when_letters_match(self, validator):
        options = ValidationOptions(audio_timing=[AudioWordTiming("fun", 0.0, 0.4)])
        result = validator.validate("fun", "fun", InputMode.VOICE, options)
        
        assert not result.is_correct
        assert result.was_spelled_out is False
        assert result.rejection_reason == RejectionReason.NOT_SPELLED_OUT
        assert result.similarity == 0.0
        assert result.normalized_answer == "fun"
    
    def test_spelled_word_is_accepted(self, validator):
        options = ValidationOptions(audio_timing=[
            AudioWordTiming("c", 0.0, 0.2),
            AudioWordTiming("a", 0.35, 0.55),
            AudioWordTiming("t", 0.7, 0.9),
        ])
        result = validator.validate("c a t", "cat", InputMode.VOICE, options)
        
        assert result.is_correct
        assert result.was_spelled_out is True
        assert result.rejection_reason is None
        assert result.similarity == 1.0
        assert result.verdict.is_spelled_out
    
    def test_letter_names_decode_to_target(self, validator):
        result = validator.validate("see a tea", "cat", InputMode.VOICE)
        assert result.is_correct
        assert result.normalized_answer == "cat"
    
    def test_wrong_letters(self, validator):
        result = validator.validate("dee oh gee", "cat", InputMode.VOICE)
        assert not result.is_correct
        assert result.normalized_answer == "dog"
        assert result.similarity == 0.0
        assert result.rejection_reason is None
    
    def test_user_mapping_makes_answer_correct(self, validator):
        options = ValidationOptions(user_mappings={"ohs": "o"})
        result = validator.validate("tee ohs", "to", InputMode.VOICE, options)
        
        assert result.is_correct
        assert result.applied_user_mappings == (("ohs", "o"),)
    
    def test_unresolved_tokens_are_reported(self, validator):
        result = validator.validate("tee ohs", "to", InputMode.VOICE)
        assert not result.is_correct
        assert result.unresolved_tokens == ("ohs",)
    
    def test_said_word_without_timing_is_rejected(self, validator):
        result = validator.validate("dog", "dog", InputMode.VOICE)
        
        assert not result.is_correct
        assert result.rejection_reason == RejectionReason.NOT_SPELLED_OUT
        assert result.verdict.reason == SpellingReason.SHAPE_SAID_WORD
        assert result.verdict.is_low_confidence
    
    def test_spelled_word_without_timing_is_accepted(self, validator):
        result = validator.validate("dee oh gee", "dog", InputMode.VOICE)
        
        assert result.is_correct
        assert result.was_spelled_out is True
        assert result.verdict.source == EvidenceSource.TRANSCRIPT_SHAPE
    
    def test_fallback_timing_rejection(self, validator):
        options = ValidationOptions(letter_timing=TranscriptTiming((2.0, 2.0, 2.0)))
        result = validator.validate("cat", "cat", InputMode.VOICE, options)
        
        assert not result.is_correct
        assert result.rejection_reason == RejectionReason.NOT_SPELLED_OUT
        assert result.verdict.is_low_confidence


class TestInputModeParsing:
    """Mode strings are matched case-insensitively and never raise."""
    
    def test_mixed_case_voice(self, validator):
        result = validator.validate("c a t", "cat", "Voice")
        assert result.is_correct
        assert result.verdict is not None
    
    def test_mixed_case_keyboard(self, decoder):
        validator = SpellingValidator(decoder=decoder, classifier=ExplodingClassifier())
        result = validator.validate("cat", "cat", " KEYBOARD ")
        assert result.is_correct
    
    @pytest.mark.parametrize("mode", ["telepathy", "", None])
    def test_unknown_mode_is_validated_as_voice(self, validator, mode):
        result = validator.validate("cat", "cat", mode)
        
        assert not result.is_correct
        assert result.rejection_reason == RejectionReason.NOT_SPELLED_OUT


class TestKeyboardValidation:
    """Keyboard attempts are compared directly."""
    
    def test_typed_answer_is_normalized(self, decoder):
        validator = SpellingValidator(decoder=decoder, classifier=ExplodingClassifier())
        result = validator.validate(" C a T ", "cat", InputMode.KEYBOARD)
        
        assert result.is_correct
        assert result.was_spelled_out is None
        assert result.verdict is None
    
    def test_typed_letters_are_not_decoded(self, validator):
        """'bee' typed is three letters, not 'b'."""
        result = validator.validate("bee", "b", InputMode.KEYBOARD)
        assert not result.is_correct
    
    def test_wrong_typed_answer_has_similarity(self, validator):
        result = validator.validate("cot", "cat", "keyboard")
        assert not result.is_correct
        assert result.similarity == pytest.approx(0.667, abs=0.001)


def test_validate_answer_convenience():
    result = validate_answer("are you in", "run")
    assert result.is_correct
