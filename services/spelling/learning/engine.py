"""
Phonetic Learning Engine

Infers per-user phonetic mappings from failed voice attempts.

Example: a player spells "to" and the recognizer hears "tee ohs".
"tee" is a known letter name for "t", so the only unknown token "ohs"
must stand for the remaining "o". Once the same pattern shows up in
enough distinct attempts it becomes a learned mapping for that player.

Safety rules:
- A heard token that exists in the static dictionary is protected and
  can never become a learned mapping, even with the same letter.
- A learned mapping is never overwritten by a different inference.
Both rules are checked when a candidate is deduced, again when patterns
are aggregated, and once more by the store before writing.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from config.settings import Settings, get_settings
from services.spelling.decoding import split_placeholder, tokenize
from services.spelling.dictionary import (
    PhoneticDictionary,
    get_phonetic_dictionary,
    normalize_heard,
)
from services.spelling.models import (
    CandidateReason,
    CandidateValidation,
    DecodeResult,
    InputMode,
    LearningAnalysis,
    LearningReason,
    MappingCandidate,
    MappingSource,
    PatternCandidate,
    PhoneticMapping,
    RecognitionEvent,
    parse_input_mode,
)
from utils.logging import get_logger, log_learning_decision

logger = get_logger(__name__)

_INTENDED_PATTERN = re.compile(r'^[a-z]{1,2}$')

# Longest letter run a single heard token may stand for
MAX_INTENDED_LENGTH = 2


@dataclass(frozen=True)
class LearningConfig:
    """Occurrence threshold and confidence curve for learned mappings."""
    min_occurrences: int = 2
    initial_confidence: float = 0.75
    confidence_boost: float = 0.10
    max_confidence: float = 0.99
    
    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LearningConfig":
        settings = settings or get_settings()
        return cls(
            min_occurrences=settings.LEARNING_MIN_OCCURRENCES,
            initial_confidence=settings.LEARNING_INITIAL_CONFIDENCE,
            confidence_boost=settings.LEARNING_CONFIDENCE_BOOST,
            max_confidence=settings.LEARNING_MAX_CONFIDENCE,
        )


_CANDIDATE_TO_LEARNING_REASON = {
    CandidateReason.PROTECTED_GLOBAL_MAPPING: LearningReason.PROTECTED_MAPPING,
    CandidateReason.CONFLICTS_WITH_EXISTING_USER_MAPPING: LearningReason.CONFLICTING_USER_MAPPING,
    CandidateReason.INVALID_INTENDED: LearningReason.WORD_MISMATCH,
}


class PhoneticLearningEngine:
    """
    Safety-constrained mapping inference.
    
    Stateless apart from the injected dictionary and config; user
    mappings are passed in per call as a read-only snapshot.
    """
    
    def __init__(
        self,
        dictionary: Optional[PhoneticDictionary] = None,
        config: Optional[LearningConfig] = None,
    ):
        self.dictionary = dictionary or get_phonetic_dictionary()
        self.config = config or LearningConfig()
    
    # =========================================================================
    # Safety checks
    # =========================================================================
    
    def is_protected_mapping(self, heard: str) -> bool:
        """True when heard already has a static meaning."""
        return self.dictionary.is_protected(heard)
    
    def validate_candidate(
        self,
        heard: str,
        intended: str,
        user_mappings: Optional[Mapping[str, str]] = None,
    ) -> CandidateValidation:
        """
        Check whether (heard, intended) may become a learned mapping.
        
        Args:
            heard: Heard token
            intended: Letters it would map to
            user_mappings: The player's existing learned mappings
            
        Returns:
            CandidateValidation with an explicit reason
        """
        heard = normalize_heard(heard)
        intended = normalize_heard(intended)
        user_mappings = user_mappings or {}
        
        if self.is_protected_mapping(heard):
            return CandidateValidation(False, CandidateReason.PROTECTED_GLOBAL_MAPPING)
        
        existing = user_mappings.get(heard)
        if existing is not None and existing != intended:
            return CandidateValidation(
                False, CandidateReason.CONFLICTS_WITH_EXISTING_USER_MAPPING
            )
        
        if not heard or not _INTENDED_PATTERN.match(intended):
            return CandidateValidation(False, CandidateReason.INVALID_INTENDED)
        
        return CandidateValidation(True, CandidateReason.VALID_NOVEL_MAPPING)
    
    # =========================================================================
    # Single-event inference
    # =========================================================================
    
    def analyze_for_learning(
        self,
        event: RecognitionEvent,
        user_mappings: Optional[Mapping[str, str]] = None,
    ) -> LearningAnalysis:
        """
        Deduce at most one new mapping from a failed attempt.
        
        Args:
            event: Recognition event to analyze
            user_mappings: The player's existing learned mappings
            
        Returns:
            LearningAnalysis with the candidate when one could be deduced
        """
        if event.was_correct:
            return LearningAnalysis(False, LearningReason.ALREADY_CORRECT)
        
        if parse_input_mode(event.input_method) != InputMode.VOICE or event.rejection_reason:
            return LearningAnalysis(False, LearningReason.NOT_VOICE_SPELLING)
        
        user_mappings = user_mappings or {}
        correct_word = re.sub(r'[^a-z]', '', (event.word_to_spell or '').lower())
        tokens, phrases = tokenize(event.raw_transcript, self.dictionary)
        
        if not tokens or not correct_word:
            return LearningAnalysis(False, LearningReason.EMPTY_TRANSCRIPT)
        
        resolved: List[Optional[str]] = [
            self._resolve(token, phrases, user_mappings) for token in tokens
        ]
        unknown_positions = [i for i, letters in enumerate(resolved) if letters is None]
        
        if not unknown_positions:
            return LearningAnalysis(False, LearningReason.ALL_KNOWN)
        if len(unknown_positions) > 1:
            return LearningAnalysis(False, LearningReason.MULTIPLE_UNKNOWNS)
        
        position = unknown_positions[0]
        heard = normalize_heard(tokens[position])
        intended = self._deduce_gap(correct_word, resolved, position)
        
        if intended is None:
            return LearningAnalysis(False, LearningReason.WORD_MISMATCH)
        
        validation = self.validate_candidate(heard, intended, user_mappings)
        log_learning_decision(
            heard, intended, validation.is_valid, validation.reason.value, event.user_id
        )
        
        if not validation.is_valid:
            return LearningAnalysis(False, _CANDIDATE_TO_LEARNING_REASON[validation.reason])
        
        return LearningAnalysis(
            True,
            LearningReason.SINGLE_UNKNOWN_DEDUCED,
            MappingCandidate(heard=heard, intended=intended),
        )
    
    def _resolve(
        self,
        token: str,
        phrases: Mapping,
        user_mappings: Mapping[str, str],
    ) -> Optional[str]:
        """User mapping, then static tables (single letters included)."""
        phrase = split_placeholder(token, phrases)
        if phrase is not None:
            return phrase[1]
        
        heard = normalize_heard(token)
        if heard in user_mappings:
            return user_mappings[heard]
        return self.dictionary.lookup(heard)
    
    @staticmethod
    def _deduce_gap(
        correct_word: str,
        resolved: List[Optional[str]],
        position: int,
    ) -> Optional[str]:
        """Letters the single unknown token must cover, if unambiguous."""
        prefix = "".join(resolved[:position])
        suffix = "".join(resolved[position + 1:])
        last = len(resolved) - 1
        
        if position == last:
            if correct_word.startswith(prefix):
                remaining = correct_word[len(prefix):]
                if 0 < len(remaining) <= MAX_INTENDED_LENGTH:
                    return remaining
        
        if position == 0:
            if correct_word.endswith(suffix):
                remaining = correct_word[:len(correct_word) - len(suffix)]
                if 0 < len(remaining) <= MAX_INTENDED_LENGTH:
                    return remaining
        
        if 0 < position < last:
            if (
                len(prefix) + len(suffix) < len(correct_word)
                and correct_word.startswith(prefix)
                and correct_word.endswith(suffix)
            ):
                middle = correct_word[len(prefix):len(correct_word) - len(suffix)]
                if 0 < len(middle) <= MAX_INTENDED_LENGTH:
                    return middle
        
        return None
    
    # =========================================================================
    # Cross-event aggregation
    # =========================================================================
    
    def find_learnable_patterns(
        self,
        events: Iterable[RecognitionEvent],
        user_mappings: Optional[Mapping[str, str]] = None,
    ) -> List[PatternCandidate]:
        """
        Group deduced candidates and keep those seen often enough.
        
        Occurrences are counted over distinct events. Safety validation
        runs again on every surviving pattern.
        
        Args:
            events: A batch of one player's recognition events
            user_mappings: The player's existing learned mappings
            
        Returns:
            Patterns eligible for persistence, in first-seen order
        """
        user_mappings = user_mappings or {}
        patterns: Dict[tuple, PatternCandidate] = {}
        
        for event in events:
            analysis = self.analyze_for_learning(event, user_mappings)
            if not analysis.can_learn or analysis.candidate is None:
                continue
            
            key = (analysis.candidate.heard, analysis.candidate.intended)
            pattern = patterns.get(key)
            if pattern is None:
                pattern = PatternCandidate(heard=key[0], intended=key[1])
                patterns[key] = pattern
            
            if event.event_id is not None:
                if event.event_id in pattern.event_ids:
                    continue
                pattern.event_ids.append(event.event_id)
            pattern.occurrence_count += 1
        
        learnable = []
        for pattern in patterns.values():
            if pattern.occurrence_count < self.config.min_occurrences:
                logger.debug(
                    f"Pattern '{pattern.heard}' → '{pattern.intended}' seen "
                    f"{pattern.occurrence_count}x, below threshold"
                )
                continue
            
            validation = self.validate_candidate(pattern.heard, pattern.intended, user_mappings)
            if not validation.is_valid:
                log_learning_decision(
                    pattern.heard, pattern.intended, False, validation.reason.value
                )
                continue
            
            learnable.append(pattern)
        
        return learnable
    
    def create_mapping(
        self,
        pattern: PatternCandidate,
        user_id: Optional[str] = None,
    ) -> PhoneticMapping:
        """
        Build a confidence-scored mapping from an eligible pattern.
        
        confidence = initial + (occurrences - min) * boost, capped at max.
        """
        config = self.config
        extra = max(pattern.occurrence_count - config.min_occurrences, 0)
        confidence = min(
            config.initial_confidence + extra * config.confidence_boost,
            config.max_confidence,
        )
        
        return PhoneticMapping(
            heard=pattern.heard,
            intended=pattern.intended,
            source=MappingSource.USER_LEARNED,
            confidence=round(confidence, 4),
            occurrence_count=pattern.occurrence_count,
            user_id=user_id,
        )
    
    # =========================================================================
    # Mapping application
    # =========================================================================
    
    def apply_mappings_to_transcript(
        self,
        transcript: str,
        user_mappings: Optional[Mapping[str, str]] = None,
    ) -> DecodeResult:
        """
        Resolve a transcript and report which mappings were used.
        
        Unlike decoding, unresolved tokens are left out of the letters
        and only listed in unresolved_tokens.
        """
        user_mappings = user_mappings or {}
        tokens, phrases = tokenize(transcript, self.dictionary)
        
        letters, applied_user, applied_static, unresolved = [], [], [], []
        
        for token in tokens:
            phrase = split_placeholder(token, phrases)
            if phrase is not None:
                letters.append(phrase[1])
                applied_static.append(phrase)
                continue
            
            heard = normalize_heard(token)
            if heard in user_mappings:
                letters.append(user_mappings[heard])
                applied_user.append((heard, user_mappings[heard]))
                continue
            
            static = self.dictionary.lookup(heard)
            if static is not None:
                letters.append(static)
                if static != heard:
                    applied_static.append((heard, static))
                continue
            
            unresolved.append(heard)
        
        return DecodeResult(
            letters="".join(letters),
            applied_user_mappings=tuple(applied_user),
            applied_static_mappings=tuple(applied_static),
            unresolved_tokens=tuple(unresolved),
        )


# =============================================================================
# Module helpers
# =============================================================================

_engine: Optional[PhoneticLearningEngine] = None


def get_learning_engine() -> PhoneticLearningEngine:
    """Get singleton engine configured from settings."""
    global _engine
    if _engine is None:
        _engine = PhoneticLearningEngine(config=LearningConfig.from_settings())
    return _engine


def is_protected_mapping(heard: str) -> bool:
    """Convenience check against the default dictionary."""
    return get_phonetic_dictionary().is_protected(heard)


def validate_candidate(
    heard: str,
    intended: str,
    user_mappings: Optional[Mapping[str, str]] = None,
) -> CandidateValidation:
    """Convenience safety check with the default engine."""
    return get_learning_engine().validate_candidate(heard, intended, user_mappings)
