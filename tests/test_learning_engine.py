"""
Unit Tests for the Phonetic Learning Engine

Single-event deduction, safety checks, aggregation and confidence.
"""

import pytest

from services.spelling.learning import (
    LearningConfig,
    PhoneticLearningEngine,
    is_protected_mapping,
    validate_candidate,
)
from services.spelling.models import (
    CandidateReason,
    InputMode,
    LearningReason,
    MappingSource,
    PatternCandidate,
)


class TestSafetyChecks:
    """The protected-mapping invariant and conflict detection."""
    
    def test_static_keys_are_never_valid_candidates(self, learning_engine, dictionary):
        for heard in dictionary.protected_keys:
            result = learning_engine.validate_candidate(heard, "q", {})
            assert not result.is_valid
            assert result.reason == CandidateReason.PROTECTED_GLOBAL_MAPPING
    
    def test_vee_cannot_become_b(self):
        result = validate_candidate("vee", "b", {})
        assert not result.is_valid
        assert result.reason == CandidateReason.PROTECTED_GLOBAL_MAPPING
    
    def test_protected_even_with_same_letter(self, learning_engine):
        result = learning_engine.validate_candidate("vee", "v", {})
        assert not result.is_valid
    
    def test_conflicting_user_mapping(self, learning_engine):
        result = learning_engine.validate_candidate("ohs", "o", {"ohs": "u"})
        assert not result.is_valid
        assert result.reason == CandidateReason.CONFLICTS_WITH_EXISTING_USER_MAPPING
    
    def test_same_user_mapping_is_valid(self, learning_engine):
        result = learning_engine.validate_candidate("ohs", "o", {"ohs": "o"})
        assert result.is_valid
        assert result.reason == CandidateReason.VALID_NOVEL_MAPPING
    
    @pytest.mark.parametrize("intended", ["", "abc", "1", "o!"])
    def test_intended_must_be_one_or_two_letters(self, learning_engine, intended):
        result = learning_engine.validate_candidate("ohs", intended, {})
        assert not result.is_valid
        assert result.reason == CandidateReason.INVALID_INTENDED
    
    def test_is_protected_mapping(self):
        assert is_protected_mapping("  Vee ")
        assert is_protected_mapping("alpha")
        assert not is_protected_mapping("ohs")


class TestSingleEventInference:
    """Positional deduction of one unknown token."""
    
    def test_unknown_last_token(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("to", "tee ohs"))
        
        assert analysis.can_learn
        assert analysis.reason == LearningReason.SINGLE_UNKNOWN_DEDUCED
        assert analysis.candidate.heard == "ohs"
        assert analysis.candidate.intended == "o"
    
    def test_unknown_first_token(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("pot", "pea oh tee"))
        assert analysis.can_learn
        assert (analysis.candidate.heard, analysis.candidate.intended) == ("pea", "p")
    
    def test_unknown_middle_token(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("cat", "see ayy tee"))
        assert analysis.can_learn
        assert (analysis.candidate.heard, analysis.candidate.intended) == ("ayy", "a")
    
    def test_unknown_may_cover_two_letters(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("tea", "tee eeya"))
        assert analysis.can_learn
        assert analysis.candidate.intended == "ea"
    
    def test_phrases_count_as_known(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("runs", "are you in ezz"))
        assert analysis.can_learn
        assert (analysis.candidate.heard, analysis.candidate.intended) == ("ezz", "s")
    
    def test_multiple_unknowns(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("cat", "zork blip flarn"))
        assert not analysis.can_learn
        assert analysis.reason == LearningReason.MULTIPLE_UNKNOWNS
        assert analysis.candidate is None
    
    def test_all_known(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("ta", "tee oh"))
        assert not analysis.can_learn
        assert analysis.reason == LearningReason.ALL_KNOWN
    
    def test_remainder_too_long(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("there", "tee ohs"))
        assert analysis.reason == LearningReason.WORD_MISMATCH
    
    def test_prefix_mismatch(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("to", "bee ohs"))
        assert analysis.reason == LearningReason.WORD_MISMATCH
    
    def test_already_correct(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(
            make_event("to", "tee oh", was_correct=True)
        )
        assert analysis.reason == LearningReason.ALREADY_CORRECT
    
    def test_keyboard_events_are_not_evidence(self, learning_engine, make_event):
        event = make_event("to", "tee ohs", input_method=InputMode.KEYBOARD)
        analysis = learning_engine.analyze_for_learning(event)
        assert analysis.reason == LearningReason.NOT_VOICE_SPELLING
    
    def test_input_method_strings_are_case_insensitive(self, learning_engine, make_event):
        voice = make_event("to", "tee ohs", input_method="Voice")
        assert learning_engine.analyze_for_learning(voice).can_learn
        
        unknown = make_event("to", "tee ohs", input_method="telepathy")
        analysis = learning_engine.analyze_for_learning(unknown)
        assert analysis.reason == LearningReason.NOT_VOICE_SPELLING
    
    def test_rejected_attempts_are_not_evidence(self, learning_engine, make_event):
        event = make_event("to", "tee ohs", rejection_reason="not_spelled_out")
        analysis = learning_engine.analyze_for_learning(event)
        assert analysis.reason == LearningReason.NOT_VOICE_SPELLING
    
    def test_empty_transcript(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(make_event("to", "   "))
        assert analysis.reason == LearningReason.EMPTY_TRANSCRIPT
    
    def test_user_mapping_resolves_token(self, learning_engine, make_event):
        analysis = learning_engine.analyze_for_learning(
            make_event("to", "tee ohs"), {"ohs": "o"}
        )
        assert analysis.reason == LearningReason.ALL_KNOWN


class TestPatternAggregation:
    """Cross-event aggregation and the occurrence threshold."""
    
    def test_single_occurrence_is_not_learnable(self, learning_engine, make_event):
        patterns = learning_engine.find_learnable_patterns([make_event("to", "tee ohs", "e1")])
        assert patterns == []
    
    def test_two_occurrences_across_words(self, learning_engine, make_event):
        events = [
            make_event("to", "tee ohs", "e1"),
            make_event("no", "en ohs", "e2"),
        ]
        patterns = learning_engine.find_learnable_patterns(events)
        
        assert len(patterns) == 1
        assert patterns[0].heard == "ohs"
        assert patterns[0].intended == "o"
        assert patterns[0].occurrence_count == 2
        assert patterns[0].event_ids == ["e1", "e2"]
    
    def test_same_event_counts_once(self, learning_engine, make_event):
        events = [make_event("to", "tee ohs", "e1"), make_event("to", "tee ohs", "e1")]
        assert learning_engine.find_learnable_patterns(events) == []
    
    def test_events_without_ids_count_individually(self, learning_engine, make_event):
        events = [make_event("to", "tee ohs"), make_event("no", "en ohs")]
        patterns = learning_engine.find_learnable_patterns(events)
        assert patterns[0].occurrence_count == 2
        assert patterns[0].event_ids == []
    
    def test_different_intended_are_separate_patterns(self, learning_engine, make_event):
        events = [
            make_event("to", "tee ohs", "e1"),
            make_event("tu", "tee ohs", "e2"),
        ]
        assert learning_engine.find_learnable_patterns(events) == []
    
    def test_custom_threshold(self, dictionary, make_event):
        engine = PhoneticLearningEngine(dictionary, LearningConfig(min_occurrences=1))
        patterns = engine.find_learnable_patterns([make_event("to", "tee ohs", "e1")])
        assert len(patterns) == 1


class TestMappingCreation:
    """Confidence curve for created mappings."""
    
    @pytest.mark.parametrize("count,expected", [
        (2, 0.75),
        (3, 0.85),
        (4, 0.95),
        (10, 0.99),
    ])
    def test_confidence(self, learning_engine, count, expected):
        pattern = PatternCandidate(heard="ohs", intended="o", occurrence_count=count)
        mapping = learning_engine.create_mapping(pattern, "player-1")
        
        assert mapping.confidence == pytest.approx(expected)
        assert mapping.source == MappingSource.USER_LEARNED
        assert mapping.user_id == "player-1"
        assert mapping.occurrence_count == count


class TestApplyMappings:
    """Resolution report for a transcript."""
    
    def test_reports_applied_mappings(self, learning_engine):
        result = learning_engine.apply_mappings_to_transcript("tee ohs zork", {"ohs": "o"})
        
        assert result.letters == "to"
        assert result.applied_user_mappings == (("ohs", "o"),)
        assert result.applied_static_mappings == (("tee", "t"),)
        assert result.unresolved_tokens == ("zork",)


def test_config_from_settings():
    config = LearningConfig.from_settings()
    assert config.min_occurrences == 2
    assert config.max_confidence == pytest.approx(0.99)
