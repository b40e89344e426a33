"""ChordBuilder: Strategy pattern for stacking chord tones above a root."""

import random
from abc import ABC, abstractmethod

from sightreader.pitch_range import PitchPolicy

# ── Interval tables (semitones above the root) ──────────────────────────────

MINOR_THIRD = 3
MAJOR_THIRD = 4
DIMINISHED_FIFTH = 6
PERFECT_FIFTH = 7
DIMINISHED_SEVENTH = 9
MINOR_SEVENTH = 10
MAJOR_SEVENTH = 11

#: Largest interval a chord can span; the root must leave this much headroom.
CHORD_SPAN = MAJOR_SEVENTH

#: Candidate intervals per chord tone, in order of preference.
THIRD_CHOICES: tuple[int, ...] = (MINOR_THIRD, MAJOR_THIRD)
FIFTH_CHOICES: tuple[int, ...] = (PERFECT_FIFTH, DIMINISHED_FIFTH)
SEVENTH_CHOICES: tuple[int, ...] = (MAJOR_SEVENTH, MINOR_SEVENTH, DIMINISHED_SEVENTH)


class BuildFailed(Exception):
    """The requested chord cannot be built on this root under the active key."""

    def __init__(self, root: int, reason: str) -> None:
        super().__init__(f"Cannot build chord on {root}: {reason}")
        self.root = root
        self.reason = reason


# ── Abstract base ────────────────────────────────────────────────────────────

class ChordBuilder(ABC):
    """
    Abstract Strategy for turning a root pitch into a chord.

    Concrete subclasses decide which intervals are stacked on the root.
    """

    def __init__(self, policy: PitchPolicy) -> None:
        self.policy = policy

    @abstractmethod
    def build(self, root: int, seventh: bool, rng: random.Random) -> list[int]:
        """
        Return the chord's pitches, ascending, starting with ``root``.

        Args:
            root:    MIDI pitch of the chord root.
            seventh: Add a seventh on top of the triad.
            rng:     Random source for strategies that pick intervals randomly.

        Raises:
            BuildFailed: If the chord cannot be completed on this root.
        """


# ── Concrete strategies ──────────────────────────────────────────────────────

class DiatonicChordBuilder(ChordBuilder):
    """
    Stack thirds that stay inside the key.

    Each chord tone takes the first candidate interval whose pitch class is
    diatonic. A missing third fails the build; a missing fifth or seventh
    is simply left out. The finished chord is re-checked against the policy.
    """

    def _first_diatonic(self, root: int, choices: tuple[int, ...]) -> int | None:
        for interval in choices:
            if self.policy.key.is_diatonic(root + interval):
                return root + interval
        return None

    def build(self, root: int, seventh: bool, rng: random.Random) -> list[int]:
        pitches = [root]

        third = self._first_diatonic(root, THIRD_CHOICES)
        if third is None:
            raise BuildFailed(root, "no diatonic third")
        pitches.append(third)

        fifth = self._first_diatonic(root, FIFTH_CHOICES)
        if fifth is not None:
            pitches.append(fifth)

        if seventh:
            top = self._first_diatonic(root, SEVENTH_CHOICES)
            if top is not None:
                pitches.append(top)

        invalid = [pitch for pitch in pitches if not self.policy.is_valid(pitch)]
        if invalid:
            raise BuildFailed(root, f"pitches {invalid} are outside the key")

        return pitches


class ChromaticChordBuilder(ChordBuilder):
    """
    Random major/minor triads with an optional dominant or major seventh.

    No key checks are made, so this strategy never fails.
    """

    def build(self, root: int, seventh: bool, rng: random.Random) -> list[int]:
        third = rng.choice((MAJOR_THIRD, MINOR_THIRD))
        pitches = [root, root + third, root + PERFECT_FIFTH]
        if seventh:
            pitches.append(root + rng.choice((MINOR_SEVENTH, MAJOR_SEVENTH)))
        return pitches
