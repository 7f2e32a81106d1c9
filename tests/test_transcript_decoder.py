"""
Unit Tests for the Transcript Decoder

Phrase substitution, tokenization and per-token resolution.
"""

import pytest

from services.spelling.decoding import (
    clean_transcript,
    format_transcript_for_display,
    is_empty_answer,
    is_valid_spelling_input,
    normalize_answer,
    tokenize,
)


class TestDecoding:
    """Tests for letter decoding."""
    
    @pytest.mark.parametrize("transcript,expected", [
        ("D O G", "dog"),
        ("dee oh gee", "dog"),
        ("delta oscar golf", "dog"),
        ("are you in", "run"),
        ("see a tea es", "cats"),
        ("C. A. T.", "cat"),
        ("c, a, t", "cat"),
        ("x-ray why zee", "xyz"),
        ("double u eye en", "win"),
    ])
    def test_decodes_spelled_transcripts(self, decoder, transcript, expected):
        assert decoder.decode(transcript).letters == expected
    
    def test_empty_transcript(self, decoder):
        result = decoder.decode("")
        assert result.letters == ""
        assert result.unresolved_tokens == ()
    
    def test_unknown_token_passes_through(self, decoder):
        """Unresolved tokens stay in the output so they cause a mismatch."""
        result = decoder.decode("tee zork")
        assert result.letters == "tzork"
        assert result.unresolved_tokens == ("zork",)
    
    def test_phrase_does_not_match_inside_word(self, decoder):
        """'i am' must not match the start of 'i amber'."""
        result = decoder.decode("i amber")
        assert result.letters == "iamber"
        assert result.unresolved_tokens == ("amber",)
    
    def test_longest_phrase_wins(self, decoder):
        result = decoder.decode("are you in")
        assert result.applied_static_mappings == (("are you in", "run"),)
    
    def test_decoding_is_deterministic(self, decoder):
        transcript = "see a tea bee oh you"
        assert decoder.decode(transcript) == decoder.decode(transcript)


class TestUserMappings:
    """Per-user mappings are consulted before static tables."""
    
    def test_user_mapping_resolves_novel_sound(self, decoder):
        result = decoder.decode("tee ohs", {"ohs": "o"})
        assert result.letters == "to"
        assert result.applied_user_mappings == (("ohs", "o"),)
        assert result.unresolved_tokens == ()
    
    def test_without_user_mapping_sound_is_unresolved(self, decoder):
        result = decoder.decode("tee ohs")
        assert result.letters == "tohs"
        assert result.unresolved_tokens == ("ohs",)
    
    def test_extract_letters(self, decoder):
        assert decoder.extract_letters("Tee OHS", {"ohs": "o"}) == "to"


class TestTokenize:
    """Tests for phrase-preserving tokenization."""
    
    def test_phrase_kept_as_one_token(self, dictionary):
        tokens, phrases = tokenize("are you in", dictionary)
        assert len(tokens) == 1
        assert list(phrases.values()) == [("are you in", "run")]
    
    def test_splits_on_commas_and_hyphens(self, dictionary):
        tokens, phrases = tokenize("a,b-c  d", dictionary)
        assert tokens == ["a", "b", "c", "d"]
        assert phrases == {}
    
    def test_clean_transcript(self):
        assert clean_transcript("  C. A. T!  ") == "c a t"
        assert clean_transcript("") == ""


class TestDisplayAndNormalization:
    """Tests for display formatting and answer helpers."""
    
    @pytest.mark.parametrize("transcript,expected", [
        ("are you in", "R-U-N"),
        ("dee oh gee", "D-O-G"),
        ("b e a", "B-E-A"),
        ("", ""),
        ("   ", ""),
    ])
    def test_format_for_display(self, transcript, expected):
        assert format_transcript_for_display(transcript) == expected
    
    def test_normalize_answer(self):
        assert normalize_answer("  C a T! ") == "cat"
        assert normalize_answer("") == ""
    
    def test_is_empty_answer(self):
        assert is_empty_answer("")
        assert is_empty_answer("  ...  ")
        assert not is_empty_answer("c")
    
    def test_is_valid_spelling_input(self):
        assert is_valid_spelling_input("c a t")
        assert is_valid_spelling_input("CAT")
        assert not is_valid_spelling_input("c4t")
        assert not is_valid_spelling_input("cat!")
