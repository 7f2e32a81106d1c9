"""
Phonetic Dictionary

Immutable lookup tables for letter decoding, built once per process and
shared read-only by every validation and learning call.

The set of protected heard tokens (every key of every table) and the
longest-first phrase table are derived once at construction.
"""

import re
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional, Pattern, Tuple

from services.spelling.config import (
    SINGLE_LETTERS,
    NATO_PHONETIC,
    get_spoken_letter_table,
)

_WHITESPACE = re.compile(r'\s+')
_PHRASE_SEPARATORS = re.compile(r'[\s\-]')


def normalize_heard(text: str) -> str:
    """Lowercase, trim and collapse inner whitespace of a heard token."""
    if not text:
        return ""
    return _WHITESPACE.sub(' ', text.lower().strip())


class PhoneticDictionary:
    """
    Static heard-token → letter tables.
    
    Lookup priority for a single token is fixed:
    single letter, then NATO alphabet, then spoken letter names.
    Keys that contain whitespace or hyphens are phrases; the decoder
    substitutes them before tokenizing.
    """
    
    def __init__(
        self,
        letters: Optional[Mapping[str, str]] = None,
        nato: Optional[Mapping[str, str]] = None,
        spoken: Optional[Mapping[str, str]] = None,
    ):
        self._letters = self._freeze(SINGLE_LETTERS if letters is None else letters)
        self._nato = self._freeze(NATO_PHONETIC if nato is None else nato)
        self._spoken = self._freeze(get_spoken_letter_table() if spoken is None else spoken)
        
        self._protected = frozenset(
            list(self._letters) + list(self._nato) + list(self._spoken)
        )
        self._phrases = self._build_phrase_table()
    
    @staticmethod
    def _freeze(table: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType({
            normalize_heard(heard): intended.lower()
            for heard, intended in table.items()
        })
    
    def _build_phrase_table(self) -> Tuple[Tuple[str, str, Pattern], ...]:
        """Phrase keys sorted longest first, each with a boundary-aware pattern."""
        phrases = {}
        for table in (self._nato, self._spoken):
            for heard, intended in table.items():
                if _PHRASE_SEPARATORS.search(heard) and heard not in phrases:
                    phrases[heard] = intended
        
        ordered = sorted(phrases.items(), key=lambda item: len(item[0]), reverse=True)
        return tuple(
            (
                heard,
                intended,
                re.compile(r'(?<![a-z0-9_])' + re.escape(heard) + r'(?![a-z0-9_])'),
            )
            for heard, intended in ordered
        )
    
    # =========================================================================
    # Views
    # =========================================================================
    
    @property
    def letters(self) -> Mapping[str, str]:
        return self._letters
    
    @property
    def nato(self) -> Mapping[str, str]:
        return self._nato
    
    @property
    def spoken(self) -> Mapping[str, str]:
        return self._spoken
    
    @property
    def phrases(self) -> Tuple[Tuple[str, str, Pattern], ...]:
        """(heard, letters, pattern) triples, longest heard first."""
        return self._phrases
    
    @property
    def protected_keys(self) -> frozenset:
        return self._protected
    
    # =========================================================================
    # Lookup
    # =========================================================================
    
    def lookup(self, token: str) -> Optional[str]:
        """
        Resolve a single token against the static tables.
        
        Args:
            token: Heard token (any case)
            
        Returns:
            The letters it stands for, or None when unknown
        """
        heard = normalize_heard(token)
        if not heard:
            return None
        
        if len(heard) == 1 and heard in self._letters:
            return self._letters[heard]
        if heard in self._nato:
            return self._nato[heard]
        return self._spoken.get(heard)
    
    def is_protected(self, heard: str) -> bool:
        """True when the token already has a static meaning."""
        return normalize_heard(heard) in self._protected
    
    def __contains__(self, heard: str) -> bool:
        return self.is_protected(heard)
    
    def __len__(self) -> int:
        return len(self._protected)


@lru_cache()
def get_phonetic_dictionary() -> PhoneticDictionary:
    """Get the process-wide default dictionary."""
    return PhoneticDictionary()
