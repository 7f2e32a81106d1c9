"""
Transcript Decoder

Turns a raw voice transcript into the letters the player intended.

Decoding runs in three passes:
1. Phrase substitution: multi-word keys ("are you in", "double u", "x-ray")
   are replaced longest first by placeholder tokens so the split below
   cannot break them apart.
2. Tokenization on whitespace, commas and hyphens.
3. Per-token resolution: placeholder, per-user mapping, single letter,
   NATO alphabet, spoken letter name, otherwise the token verbatim.
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from services.spelling.dictionary import (
    PhoneticDictionary,
    get_phonetic_dictionary,
    normalize_heard,
)
from services.spelling.models import DecodeResult
from utils.logging import get_logger

logger = get_logger(__name__)


_PUNCTUATION = re.compile(r'[.!?;:"]')
_APOSTROPHES = re.compile(r"'")
_TOKEN_SEPARATORS = re.compile(r'[\s,\-]+')
_NON_LETTERS = re.compile(r'[^a-z]')
_WHITESPACE = re.compile(r'\s+')
_PLACEHOLDER = re.compile(r'^__phrase(\d+)__$')
_ONLY_LETTERS = re.compile(r'^[a-z]*$')


# =============================================================================
# Answer Normalization
# =============================================================================

def normalize_answer(answer: str) -> str:
    """
    Normalize an answer for comparison.
    
    Lowercases and strips everything that is not a letter:
    "C A T" → "cat", "  Cat! " → "cat".
    """
    if not answer:
        return ""
    return _NON_LETTERS.sub('', answer.lower())


def is_empty_answer(answer: str) -> bool:
    """True when nothing letter-like is left after normalization."""
    return len(normalize_answer(answer)) == 0


def is_valid_spelling_input(answer: str) -> bool:
    """True when keyboard input contains only letters (whitespace ignored)."""
    if answer is None:
        return False
    return _ONLY_LETTERS.match(_WHITESPACE.sub('', answer).lower()) is not None


def clean_transcript(transcript: str) -> str:
    """
    Lowercase, trim and drop punctuation recognizers add.
    
    "C. A. T." → "c a t"
    """
    if not transcript:
        return ""
    text = _APOSTROPHES.sub('', transcript.lower())
    text = _PUNCTUATION.sub(' ', text)
    return _WHITESPACE.sub(' ', text).strip()


# =============================================================================
# Tokenization
# =============================================================================

def tokenize(
    transcript: str,
    dictionary: Optional[PhoneticDictionary] = None,
) -> Tuple[List[str], Dict[str, Tuple[str, str]]]:
    """
    Split a transcript into heard tokens with phrases kept whole.
    
    Args:
        transcript: Raw transcript
        dictionary: Phonetic tables (process default if omitted)
        
    Returns:
        (tokens, phrases) where phrases maps each placeholder token to
        its (original phrase, decoded letters)
    """
    dictionary = dictionary or get_phonetic_dictionary()
    processed = clean_transcript(transcript)
    if not processed:
        return [], {}
    
    phrases: Dict[str, Tuple[str, str]] = {}
    
    for heard, letters, pattern in dictionary.phrases:
        if heard not in processed:
            continue
        
        def _substitute(match, heard=heard, letters=letters):
            placeholder = f"__phrase{len(phrases)}__"
            phrases[placeholder] = (heard, letters)
            return f" {placeholder} "
        
        processed = pattern.sub(_substitute, processed)
    
    tokens = [part for part in _TOKEN_SEPARATORS.split(processed) if part]
    return tokens, phrases


def split_placeholder(
    token: str,
    phrases: Mapping[str, Tuple[str, str]],
) -> Optional[Tuple[str, str]]:
    """Return (phrase, letters) when token is a phrase placeholder."""
    if not _PLACEHOLDER.match(token) or token not in phrases:
        return None
    return phrases[token]


# =============================================================================
# Decoder
# =============================================================================

class TranscriptDecoder:
    """
    Decode transcripts into letters.
    
    Per-user mappings are consulted before the static tables. They never
    cover protected tokens, so the override only ever applies to novel
    sounds.
    
    Example:
        decoder = TranscriptDecoder()
        decoder.decode("are you in").letters        # "run"
        decoder.decode("dee oh gee").letters        # "dog"
        decoder.decode("tee ohs", {"ohs": "o"})     # letters "to"
    """
    
    def __init__(self, dictionary: Optional[PhoneticDictionary] = None):
        self.dictionary = dictionary or get_phonetic_dictionary()
    
    def decode(
        self,
        transcript: str,
        user_mappings: Optional[Mapping[str, str]] = None,
    ) -> DecodeResult:
        """
        Decode a transcript.
        
        Args:
            transcript: Raw transcript from the recognizer
            user_mappings: Per-user heard → letters snapshot
            
        Returns:
            DecodeResult with the letters and the mappings that produced them
        """
        tokens, phrases = tokenize(transcript, self.dictionary)
        if not tokens:
            return DecodeResult(letters="")
        
        user_mappings = user_mappings or {}
        
        letters: List[str] = []
        applied_user: List[Tuple[str, str]] = []
        applied_static: List[Tuple[str, str]] = []
        unresolved: List[str] = []
        
        for token in tokens:
            phrase = split_placeholder(token, phrases)
            if phrase is not None:
                letters.append(phrase[1])
                applied_static.append(phrase)
                continue
            
            learned = user_mappings.get(normalize_heard(token))
            if learned:
                letters.append(learned)
                applied_user.append((token, learned))
                continue
            
            resolved = self.dictionary.lookup(token)
            if resolved is not None:
                letters.append(resolved)
                if resolved != token:
                    applied_static.append((token, resolved))
                continue
            
            # Unknown tokens pass through so they surface as a mismatch
            letters.append(token)
            unresolved.append(token)
        
        if unresolved:
            logger.debug(f"Unresolved tokens in '{transcript}': {unresolved}")
        
        return DecodeResult(
            letters="".join(letters),
            applied_user_mappings=tuple(applied_user),
            applied_static_mappings=tuple(applied_static),
            unresolved_tokens=tuple(unresolved),
        )
    
    def extract_letters(
        self,
        transcript: str,
        user_mappings: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Decode and return only the letter string."""
        return self.decode(transcript, user_mappings).letters
    
    def format_for_display(self, transcript: str) -> str:
        """
        Format decoded letters for display: "are you in" → "R-U-N".
        
        Returns an empty string for empty input.
        """
        if not transcript or not transcript.strip():
            return ""
        letters = self.extract_letters(transcript)
        if not letters:
            return ""
        return "-".join(letters.upper())


# =============================================================================
# Module helpers
# =============================================================================

_decoder: Optional[TranscriptDecoder] = None


def get_transcript_decoder() -> TranscriptDecoder:
    """Get singleton decoder over the default dictionary."""
    global _decoder
    if _decoder is None:
        _decoder = TranscriptDecoder()
    return _decoder


def extract_letters(
    transcript: str,
    user_mappings: Optional[Mapping[str, str]] = None,
) -> str:
    """Convenience function for decoding with the default dictionary."""
    return get_transcript_decoder().extract_letters(transcript, user_mappings)


def format_transcript_for_display(transcript: str) -> str:
    """Convenience function for display formatting."""
    return get_transcript_decoder().format_for_display(transcript)
