"""
Spelling Config Package

Static phonetic tables for letter decoding.
"""

from services.spelling.config.phonetic_tables import (
    SINGLE_LETTERS,
    NATO_PHONETIC,
    SPOKEN_LETTER_NAMES,
    PHRASE_FRAGMENTS,
    get_spoken_letter_table,
)

__all__ = [
    'SINGLE_LETTERS',
    'NATO_PHONETIC',
    'SPOKEN_LETTER_NAMES',
    'PHRASE_FRAGMENTS',
    'get_spoken_letter_table',
]
