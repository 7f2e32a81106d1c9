"""
Transcript Decoding Package

Voice transcript → intended letters.
"""

from services.spelling.decoding.transcript_decoder import (
    TranscriptDecoder,
    get_transcript_decoder,
    clean_transcript,
    tokenize,
    split_placeholder,
    normalize_answer,
    is_empty_answer,
    is_valid_spelling_input,
    extract_letters,
    format_transcript_for_display,
)

__all__ = [
    'TranscriptDecoder',
    'get_transcript_decoder',
    'clean_transcript',
    'tokenize',
    'split_placeholder',
    'normalize_answer',
    'is_empty_answer',
    'is_valid_spelling_input',
    'extract_letters',
    'format_transcript_for_display',
]
