"""
Letter Arrival Tracking

Fallback timing evidence for recognizers that do not report word-level
timestamps. Each partial transcript update is decoded, and every letter
that was not present in the previous update is stamped with the time the
update arrived.

Usage:
    tracker = LetterArrivalTracker()
    tracker.observe("see", timestamp=0.00)
    tracker.observe("see a", timestamp=0.35)
    tracker.observe("see a tea", timestamp=0.71)
    timing = tracker.snapshot()   # 3 letters, ~355ms average gap
"""

import time
from typing import List, Mapping, Optional

from services.spelling.decoding import TranscriptDecoder, get_transcript_decoder
from services.spelling.models import TranscriptTiming


class LetterArrivalTracker:
    """
    Stamp decoded letters with their arrival time across partial results.
    
    Recognizers sometimes revise earlier words in a later partial. Letters
    that survive the revision keep their original stamp; only the changed
    tail is re-stamped.
    """
    
    def __init__(
        self,
        decoder: Optional[TranscriptDecoder] = None,
        user_mappings: Optional[Mapping[str, str]] = None,
    ):
        self.decoder = decoder or get_transcript_decoder()
        self.user_mappings = dict(user_mappings or {})
        self._letters = ""
        self._times: List[float] = []
    
    def observe(self, partial_transcript: str, timestamp: Optional[float] = None) -> int:
        """
        Record one partial recognizer update.
        
        Args:
            partial_transcript: Full transcript so far (not a delta)
            timestamp: Arrival time in seconds (monotonic clock if omitted)
            
        Returns:
            Number of newly stamped letters
        """
        if timestamp is None:
            timestamp = time.monotonic()
        
        letters = self.decoder.extract_letters(partial_transcript, self.user_mappings)
        
        # Keep stamps for the unchanged prefix
        common = 0
        for old, new in zip(self._letters, letters):
            if old != new:
                break
            common += 1
        
        self._times = self._times[:common]
        added = len(letters) - common
        self._times.extend([timestamp] * added)
        self._letters = letters
        
        return added
    
    def snapshot(self) -> TranscriptTiming:
        """Immutable view of the letter arrival times so far."""
        return TranscriptTiming(letter_times=tuple(self._times))
    
    @property
    def letters(self) -> str:
        return self._letters
    
    def reset(self) -> None:
        """Forget all observed letters (new attempt)."""
        self._letters = ""
        self._times = []
