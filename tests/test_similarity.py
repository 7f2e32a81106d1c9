"""
Unit Tests for the Similarity Scorer

Edit distance, normalized similarity and positional analysis.
"""

import pytest

from services.spelling.matching import (
    analyze_answer,
    calculate_similarity,
    levenshtein_distance,
)


class TestLevenshtein:
    """Tests for raw edit distance."""
    
    @pytest.mark.parametrize("s1,s2,expected", [
        ("cat", "cat", 0),
        ("cat", "cot", 1),
        ("cat", "cats", 1),
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("abc", "", 3),
    ])
    def test_distance(self, s1, s2, expected):
        assert levenshtein_distance(s1, s2) == expected


class TestSimilarity:
    """Tests for normalized similarity."""
    
    def test_identical_strings(self):
        assert calculate_similarity("cat", "cat") == 1.0
        assert calculate_similarity("", "") == 1.0
    
    def test_empty_side_scores_zero(self):
        assert calculate_similarity("cat", "") == 0.0
        assert calculate_similarity("", "cat") == 0.0
    
    def test_partial_match(self):
        assert calculate_similarity("cat", "cot") == pytest.approx(2 / 3)
        assert calculate_similarity("dog", "cat") == 0.0
    
    def test_symmetric(self):
        assert calculate_similarity("spell", "spel") == calculate_similarity("spel", "spell")


class TestAnalyzeAnswer:
    """Tests for positional letter analysis."""
    
    def test_exact_answer(self):
        analysis = analyze_answer("cat", "cat")
        assert analysis.correct_letters == 3
        assert analysis.total_letters == 3
        assert analysis.percentage_correct == 100
        assert analysis.was_close
    
    def test_one_letter_off(self):
        analysis = analyze_answer("cot", "cat")
        assert analysis.correct_letters == 2
        assert analysis.percentage_correct == 67
        assert not analysis.was_close
    
    def test_close_threshold(self):
        assert analyze_answer("hellp", "hello").was_close
        assert not analyze_answer("catz", "cats").was_close
    
    def test_answer_is_normalized(self):
        assert analyze_answer("C A T", "cat").percentage_correct == 100
    
    def test_empty_target(self):
        analysis = analyze_answer("cat", "")
        assert analysis.percentage_correct == 0
        assert not analysis.was_close
