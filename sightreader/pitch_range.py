"""Playable pitch ranges per clef and the key-strictness validity policy."""

import logging
import random
from typing import Final

from sightreader.key_signature import KeySignature

logger = logging.getLogger(__name__)

# Inclusive MIDI bounds. The on-screen keyboard spans F1 (29) to E6 (88).
TREBLE_RANGE: Final[tuple[int, int]] = (53, 88)  # F3 .. E6
BASS_RANGE: Final[tuple[int, int]] = (29, 67)    # F1 .. G4

CLEF_RANGES: Final[dict[str, tuple[int, int]]] = {
    "treble": TREBLE_RANGE,
    "bass": BASS_RANGE,
}

MAX_RANDOM_ATTEMPTS = 100


def clef_range(clef: str) -> tuple[int, int]:
    """Return the inclusive (low, high) pitch bounds for a clef."""
    try:
        return CLEF_RANGES[clef]
    except KeyError:
        supported = ", ".join(sorted(CLEF_RANGES))
        raise ValueError(f"Unknown clef '{clef}'. Use one of: {supported}.") from None


class PitchPolicy:
    """
    Decides which pitches are legal for a round.

    With accidentals allowed every pitch is valid; otherwise only pitches
    whose class is diatonic to the key are.
    """

    def __init__(self, key: KeySignature, use_accidentals: bool = False) -> None:
        self.key = key
        self.use_accidentals = use_accidentals
        self._diatonic = frozenset(key.diatonic_pitch_classes)

    @property
    def strict(self) -> bool:
        return not self.use_accidentals

    def is_valid(self, pitch: int) -> bool:
        if self.use_accidentals:
            return True
        return pitch % 12 in self._diatonic

    def random_valid_pitch(self, rng: random.Random, low: int, high: int) -> int:
        """
        Draw a valid pitch in [low, high].

        Tries MAX_RANDOM_ATTEMPTS uniform draws, then scans the range upward.
        If nothing in the range is valid the result degrades to ``low``.
        """
        for _ in range(MAX_RANDOM_ATTEMPTS):
            pitch = rng.randint(low, high)
            if self.is_valid(pitch):
                return pitch

        for pitch in range(low, high + 1):
            if self.is_valid(pitch):
                logger.debug("Random draws missed; scanned up to pitch %d", pitch)
                return pitch

        logger.warning(
            "No valid pitch in range %d-%d for %s; falling back to %d",
            low, high, self.key, low,
        )
        return low
