"""
Unit Tests for Recognition Logging

Event validation, record normalization and fire-and-forget writes.
"""

import pytest

from services.spelling.learning import (
    RecognitionLogger,
    build_log_query,
    create_log_record,
    validate_recognition_event,
)
from services.spelling.models import InputMode, RecognitionEvent
from utils.exceptions import InvalidRecognitionEventError


def voice_event(**overrides) -> RecognitionEvent:
    values = dict(
        user_id="player-1",
        word_to_spell="  Cat ",
        raw_transcript=" See A Tea ",
        extracted_letters="CAT",
        was_correct=True,
    )
    values.update(overrides)
    return RecognitionEvent(**values)


class TestEventValidation:
    """Tests for incoming event payloads."""
    
    def test_valid_payload(self):
        event = validate_recognition_event({
            "user_id": "player-1",
            "word_to_spell": "to",
            "raw_transcript": "tee ohs",
            "extracted_letters": "tohs",
            "was_correct": False,
        })
        assert event.word_to_spell == "to"
        assert event.input_method == InputMode.VOICE
        assert event.rejection_reason is None
    
    def test_rejection_reason_is_kept_as_string(self):
        event = validate_recognition_event({
            "user_id": "player-1",
            "word_to_spell": "fun",
            "raw_transcript": "fun",
            "was_correct": False,
            "rejection_reason": "not_spelled_out",
        })
        assert event.rejection_reason == "not_spelled_out"
    
    def test_missing_user_id(self):
        with pytest.raises(InvalidRecognitionEventError) as exc_info:
            validate_recognition_event({"word_to_spell": "to", "was_correct": False})
        assert exc_info.value.status_code == 422
        assert exc_info.value.details["field"] == "user_id"
    
    def test_blank_word(self):
        with pytest.raises(InvalidRecognitionEventError):
            validate_recognition_event({
                "user_id": "player-1",
                "word_to_spell": "   ",
                "was_correct": False,
            })
    
    def test_input_method_is_case_insensitive(self):
        event = validate_recognition_event({
            "user_id": "player-1",
            "word_to_spell": "to",
            "was_correct": False,
            "input_method": " Keyboard ",
        })
        assert event.input_method == InputMode.KEYBOARD
    
    def test_unknown_input_method(self):
        with pytest.raises(InvalidRecognitionEventError):
            validate_recognition_event({
                "user_id": "player-1",
                "word_to_spell": "to",
                "was_correct": False,
                "input_method": "telepathy",
            })


class TestLogRecord:
    """Tests for record normalization."""
    
    def test_fields_are_lowercased_and_trimmed(self):
        record = create_log_record(voice_event())
        assert record["word_to_spell"] == "cat"
        assert record["raw_transcript"] == "see a tea"
        assert record["extracted_letters"] == "cat"
        assert record["input_method"] == "voice"
        assert record["was_correct"] is True
    
    def test_input_method_string_is_normalized(self):
        assert create_log_record(voice_event(input_method="Voice"))["input_method"] == "voice"
        assert create_log_record(voice_event(input_method="Telepathy"))["input_method"] == "telepathy"
    
    def test_build_log_query_filters_incorrect(self):
        where = str(build_log_query("player-1")).split("WHERE")[1]
        assert "was_correct" in where
        
        where = str(build_log_query("player-1", incorrect_only=False)).split("WHERE")[1]
        assert "was_correct" not in where


class TestRecognitionLogger:
    """Fire-and-forget logging behavior."""
    
    def test_skips_anonymous_and_keyboard_events(self):
        assert not RecognitionLogger.should_log(voice_event(user_id=""))
        assert not RecognitionLogger.should_log(voice_event(input_method=InputMode.KEYBOARD))
        assert RecognitionLogger.should_log(voice_event())
        assert RecognitionLogger.should_log(voice_event(input_method="VOICE"))
        assert not RecognitionLogger.should_log(voice_event(input_method="telepathy"))
    
    async def test_writes_normalized_record(self):
        written = []
        
        async def writer(record):
            written.append(record)
        
        task = RecognitionLogger(writer).log(voice_event())
        assert await task is True
        assert written[0]["word_to_spell"] == "cat"
    
    async def test_skipped_event_schedules_nothing(self):
        async def writer(record):
            raise AssertionError("should not be called")
        
        assert RecognitionLogger(writer).log(voice_event(user_id="")) is None
    
    async def test_write_failure_is_swallowed(self):
        async def writer(record):
            raise RuntimeError("database is down")
        
        task = RecognitionLogger(writer).log(voice_event())
        assert await task is False
    
    def test_without_event_loop_nothing_is_scheduled(self):
        calls = []
        
        async def writer(record):
            calls.append(record)
        
        assert RecognitionLogger(writer).log(voice_event()) is None
        assert calls == []
