"""
Matching Package

Edit-distance similarity and positional answer analysis.
"""

from services.spelling.matching.similarity import (
    levenshtein_distance,
    calculate_similarity,
    analyze_answer,
)

__all__ = ['levenshtein_distance', 'calculate_similarity', 'analyze_answer']
