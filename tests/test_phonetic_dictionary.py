"""
Unit Tests for the Phonetic Dictionary

Static lookup tables, protected keys and phrase ordering.
"""

import string

import pytest

from services.spelling.dictionary import (
    PhoneticDictionary,
    get_phonetic_dictionary,
    normalize_heard,
)


class TestLookup:
    """Tests for single-token lookup."""
    
    def test_every_letter_maps_to_itself(self, dictionary):
        """All 26 letters resolve to themselves."""
        for letter in string.ascii_lowercase:
            assert dictionary.lookup(letter) == letter
    
    def test_nato_words(self, dictionary):
        """NATO alphabet words resolve to their letter."""
        assert dictionary.lookup("alpha") == "a"
        assert dictionary.lookup("Delta") == "d"
        assert dictionary.lookup(" zulu ") == "z"
    
    def test_spoken_letter_names(self, dictionary):
        """Letter names and common mishearings resolve."""
        assert dictionary.lookup("bee") == "b"
        assert dictionary.lookup("tee") == "t"
        assert dictionary.lookup("double you") == "w"
    
    def test_unknown_token_returns_none(self, dictionary):
        """Unknown input returns None instead of raising."""
        assert dictionary.lookup("zork") is None
        assert dictionary.lookup("") is None
        assert dictionary.lookup(None) is None


class TestProtectedKeys:
    """Tests for the protected key set."""
    
    def test_all_table_keys_are_protected(self, dictionary):
        """Every key of every table is protected."""
        for table in (dictionary.letters, dictionary.nato, dictionary.spoken):
            for heard in table:
                assert dictionary.is_protected(heard)
    
    def test_protection_ignores_case_and_whitespace(self, dictionary):
        assert dictionary.is_protected("  VEE ")
        assert dictionary.is_protected("double   u")
    
    def test_novel_sound_is_not_protected(self, dictionary):
        assert not dictionary.is_protected("ohs")
    
    def test_protected_set_is_frozen(self, dictionary):
        assert isinstance(dictionary.protected_keys, frozenset)


class TestPhraseTable:
    """Tests for the precomputed phrase table."""
    
    def test_phrases_sorted_longest_first(self, dictionary):
        """Longer phrases come before the phrases they contain."""
        lengths = [len(heard) for heard, _, _ in dictionary.phrases]
        assert lengths == sorted(lengths, reverse=True)
        
        order = [heard for heard, _, _ in dictionary.phrases]
        assert order.index("are you in") < order.index("are you")
    
    def test_hyphenated_keys_are_phrases(self, dictionary):
        heards = {heard for heard, _, _ in dictionary.phrases}
        assert "x-ray" in heards
        assert "double-u" in heards
        assert "double u" in heards
    
    def test_single_words_are_not_phrases(self, dictionary):
        heards = {heard for heard, _, _ in dictionary.phrases}
        assert "alpha" not in heards
        assert "bee" not in heards


class TestImmutability:
    """Tables cannot be modified after construction."""
    
    def test_tables_are_read_only(self, dictionary):
        with pytest.raises(TypeError):
            dictionary.nato["alpha"] = "b"
        with pytest.raises(TypeError):
            dictionary.spoken["ohs"] = "o"
    
    def test_custom_tables_are_normalized(self):
        custom = PhoneticDictionary(
            letters={"a": "a"},
            nato={"Alpha ": "A"},
            spoken={"Are  You": "RU"},
        )
        assert custom.lookup("alpha") == "a"
        assert custom.is_protected("are you")
        assert len(custom) == 3
    
    def test_default_instance_is_shared(self):
        assert get_phonetic_dictionary() is get_phonetic_dictionary()


def test_normalize_heard():
    assert normalize_heard("  Double   U ") == "double u"
    assert normalize_heard("") == ""
