"""
Anti-Cheat Package

Spelled-vs-said classification from audio or transcript timing.
"""

from services.spelling.anticheat.classifier import (
    ClassifierThresholds,
    SpelledOutClassifier,
    get_spelled_out_classifier,
)
from services.spelling.anticheat.letter_timing import LetterArrivalTracker

__all__ = [
    'ClassifierThresholds',
    'SpelledOutClassifier',
    'get_spelled_out_classifier',
    'LetterArrivalTracker',
]
