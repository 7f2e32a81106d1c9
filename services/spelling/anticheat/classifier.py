"""
Spelled-vs-Said Classifier

Decides whether a voice answer was spelled letter by letter or just said
as a whole word. Saying "cat" for the word "cat" must not score.

Evidence paths, strongest first:
- Audio timing: word-level segments from the recognizer.
- Transcript timing: arrival times of letters across partial recognizer
  updates.
- Transcript shape: with no timing at all, the transcript itself. Letter
  names and phrase fragments count as spelling; a lone token equal to the
  target word does not.

Verdicts from the last two paths are marked low confidence.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from config.settings import Settings, get_settings
from services.spelling.decoding import clean_transcript, normalize_answer
from services.spelling.dictionary import PhoneticDictionary, get_phonetic_dictionary
from services.spelling.models import (
    AudioWordTiming,
    EvidenceSource,
    SpellingReason,
    SpellingVerdict,
    TranscriptTiming,
)
from utils.logging import log_spelling_verdict

_SEGMENT_PUNCTUATION = re.compile(r'[^\w]')
_PART_SEPARATORS = re.compile(r'[\s,\-]+')


@dataclass(frozen=True)
class ClassifierThresholds:
    """
    Tunable anti-cheat thresholds.
    
    Defaults were tuned against one recognizer's segmentation; a different
    upstream recognizer may need different values.
    """
    min_gap_sec: float = 0.08
    min_seconds_per_letter: float = 0.10
    single_letter_ratio: float = 0.5
    segment_letter_ratio: float = 0.6
    backstop_min_letters: int = 3
    fallback_min_letter_gap_ms: float = 100.0
    shape_letter_form_ratio: float = 0.5
    
    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ClassifierThresholds":
        settings = settings or get_settings()
        return cls(
            min_gap_sec=settings.SPELLING_MIN_GAP_SEC,
            min_seconds_per_letter=settings.SPELLING_MIN_SECONDS_PER_LETTER,
            single_letter_ratio=settings.SPELLING_SINGLE_LETTER_RATIO,
            segment_letter_ratio=settings.SPELLING_SEGMENT_LETTER_RATIO,
            backstop_min_letters=settings.SPELLING_BACKSTOP_MIN_LETTERS,
            fallback_min_letter_gap_ms=settings.FALLBACK_MIN_LETTER_GAP_MS,
            shape_letter_form_ratio=settings.SPELLING_SHAPE_LETTER_FORM_RATIO,
        )


def _average_gap_sec(segments: Sequence[AudioWordTiming]) -> float:
    """Mean positive gap between consecutive segments, first segment excluded."""
    if len(segments) < 2:
        return 0.0
    
    total_gap = 0.0
    for previous, current in zip(segments, segments[1:]):
        gap = current.gap_from_previous_sec
        if gap is None:
            gap = current.start_sec - previous.end_sec
        if gap > 0:
            total_gap += gap
    
    return total_gap / (len(segments) - 1)


def _is_single_letter_segment(segment: AudioWordTiming) -> bool:
    return len(_SEGMENT_PUNCTUATION.sub('', segment.word or '')) == 1


class SpelledOutClassifier:
    """
    Classify an utterance as spelled out or said.
    
    Never raises. Rejecting a real speller costs more than missing a rare
    cheat, so undecided timing cases fall through to acceptance. Without
    timing, only a transcript that looks like letters is accepted.
    
    Example:
        classifier = SpelledOutClassifier()
        verdict = classifier.classify(
            "fun", "fun",
            audio_timing=[AudioWordTiming("fun", 0.0, 0.4)],
        )
        verdict.is_spelled_out  # False
    """
    
    def __init__(
        self,
        thresholds: Optional[ClassifierThresholds] = None,
        dictionary: Optional[PhoneticDictionary] = None,
    ):
        self.thresholds = thresholds or ClassifierThresholds()
        self.dictionary = dictionary or get_phonetic_dictionary()
    
    def classify(
        self,
        transcript: str,
        target_word: str,
        audio_timing: Optional[Sequence[AudioWordTiming]] = None,
        letter_timing: Optional[TranscriptTiming] = None,
    ) -> SpellingVerdict:
        """
        Classify one utterance.
        
        Args:
            transcript: Final transcript from the recognizer
            target_word: Word the player was asked to spell
            audio_timing: Word-level audio segments, in order
            letter_timing: Letter arrival times from partial updates
            
        Returns:
            SpellingVerdict with the reason and computed signals
        """
        if len(normalize_answer(target_word)) == 1:
            verdict = SpellingVerdict(
                is_spelled_out=True,
                reason=SpellingReason.SINGLE_LETTER_TARGET,
                source=EvidenceSource.NONE,
            )
        elif audio_timing is not None:
            verdict = self._classify_audio(transcript, list(audio_timing))
        elif letter_timing is not None:
            verdict = self._classify_letter_timing(letter_timing)
        else:
            verdict = self._classify_shape(transcript, target_word)
        
        log_spelling_verdict(
            target_word,
            verdict.is_spelled_out,
            verdict.reason.value,
            verdict.source.value,
            **verdict.signals,
        )
        return verdict
    
    # =========================================================================
    # Audio timing path
    # =========================================================================
    
    def _classify_audio(
        self,
        transcript: str,
        segments: Sequence[AudioWordTiming],
    ) -> SpellingVerdict:
        t = self.thresholds
        
        segment_count = len(segments)
        letter_count = len(normalize_answer(transcript))
        single_letter_segments = sum(1 for s in segments if _is_single_letter_segment(s))
        avg_gap_sec = _average_gap_sec(segments)
        total_duration = segments[-1].end_sec - segments[0].start_sec if segments else 0.0
        seconds_per_letter = total_duration / letter_count if letter_count else 0.0
        
        single_letter_ratio = single_letter_segments / segment_count if segment_count else 0.0
        segment_letter_ratio = segment_count / letter_count if letter_count else 0.0
        multiple_segments = segment_count > 1
        
        signals = {
            "segment_count": segment_count,
            "letter_count": letter_count,
            "single_letter_segments": single_letter_segments,
            "avg_gap_ms": round(avg_gap_sec * 1000, 1),
            "total_duration_sec": round(total_duration, 3),
            "seconds_per_letter": round(seconds_per_letter, 3),
        }
        
        def verdict(accepted: bool, reason: SpellingReason) -> SpellingVerdict:
            return SpellingVerdict(
                is_spelled_out=accepted,
                reason=reason,
                source=EvidenceSource.AUDIO,
                signals=signals,
            )
        
        if segment_count == 0:
            return verdict(True, SpellingReason.NO_AUDIO_SEGMENTS)
        
        if letter_count == 1:
            return verdict(True, SpellingReason.SINGLE_LETTER_ANSWER)
        
        # One undivided segment covering several letters is the word said aloud
        if segment_count == 1 and single_letter_segments == 0 and letter_count >= 2:
            return verdict(False, SpellingReason.SAID_WHOLE_WORD)
        
        if multiple_segments and (
            single_letter_ratio >= t.single_letter_ratio
            or segment_letter_ratio >= t.segment_letter_ratio
        ):
            return verdict(True, SpellingReason.SPELLING_PATTERN)
        
        if multiple_segments and avg_gap_sec >= t.min_gap_sec:
            return verdict(True, SpellingReason.PAUSES_BETWEEN_LETTERS)
        
        if (
            letter_count >= t.backstop_min_letters
            and seconds_per_letter < t.min_seconds_per_letter
        ):
            return verdict(False, SpellingReason.TOO_FAST_FOR_SPELLING)
        
        return verdict(True, SpellingReason.DEFAULT_ACCEPT)
    
    # =========================================================================
    # Transcript timing fallback
    # =========================================================================
    
    def _classify_letter_timing(self, timing: TranscriptTiming) -> SpellingVerdict:
        signals = {
            "letter_count": timing.letter_count,
            "avg_gap_ms": round(timing.average_gap_ms, 1),
        }
        
        if timing.letter_count < 2:
            reason, accepted = SpellingReason.FALLBACK_TOO_FEW_LETTERS, True
        elif timing.average_gap_ms >= self.thresholds.fallback_min_letter_gap_ms:
            reason, accepted = SpellingReason.FALLBACK_GAPS_PRESENT, True
        else:
            reason, accepted = SpellingReason.FALLBACK_TOO_FAST, False
        
        return SpellingVerdict(
            is_spelled_out=accepted,
            reason=reason,
            source=EvidenceSource.TRANSCRIPT_TIMING,
            signals=signals,
        )
    
    # =========================================================================
    # Transcript shape (no timing)
    # =========================================================================
    
    def _classify_shape(self, transcript: str, target_word: str) -> SpellingVerdict:
        cleaned = clean_transcript(transcript)
        parts = [p for p in _PART_SEPARATORS.split(cleaned) if p]
        letter_form_parts = sum(
            1 for p in parts if len(p) == 1 or self.dictionary.lookup(p) is not None
        )
        
        signals = {
            "part_count": len(parts),
            "letter_form_parts": letter_form_parts,
        }
        
        def verdict(accepted: bool, reason: SpellingReason) -> SpellingVerdict:
            return SpellingVerdict(
                is_spelled_out=accepted,
                reason=reason,
                source=EvidenceSource.TRANSCRIPT_SHAPE,
                signals=signals,
            )
        
        if any(pattern.search(cleaned) for _, _, pattern in self.dictionary.phrases):
            return verdict(True, SpellingReason.SHAPE_PHRASE_FRAGMENT)
        
        multiple_parts = len(parts) > 1
        ratio = self.thresholds.shape_letter_form_ratio
        if multiple_parts and letter_form_parts >= len(parts) * ratio:
            return verdict(True, SpellingReason.SHAPE_LETTER_FORMS)
        
        if not multiple_parts and normalize_answer(cleaned) == normalize_answer(target_word):
            return verdict(False, SpellingReason.SHAPE_SAID_WORD)
        
        if multiple_parts:
            return verdict(True, SpellingReason.SHAPE_MULTIPLE_PARTS)
        return verdict(False, SpellingReason.SHAPE_SINGLE_TOKEN)


# Singleton instance
_classifier: Optional[SpelledOutClassifier] = None


def get_spelled_out_classifier() -> SpelledOutClassifier:
    """Get singleton classifier configured from settings."""
    global _classifier
    if _classifier is None:
        _classifier = SpelledOutClassifier(ClassifierThresholds.from_settings())
    return _classifier
