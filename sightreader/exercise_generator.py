"""ExerciseGenerator: builds a round of exercise items from game settings."""

import logging
import random

from sightreader.chord_builder import (
    CHORD_SPAN,
    BuildFailed,
    ChordBuilder,
    ChromaticChordBuilder,
    DiatonicChordBuilder,
)
from sightreader.exercise_models import (
    MODE_BEAMS,
    MODE_CHORDS,
    MODE_SINGLE,
    ExerciseItem,
    GameSettings,
)
from sightreader.key_signature import KeySignature
from sightreader.note_speller import spell_pitch
from sightreader.pitch_range import PitchPolicy, clef_range

logger = logging.getLogger(__name__)


class ExerciseGenerator:
    """
    Generates randomized, key-valid exercise rounds.

    Three modes are supported:

    1. **single** – ``single_count`` quarter notes, one pitch each.

    2. **chords** – ``chord_count`` chords. A root is drawn with enough
       headroom below the clef's top for a seventh chord, then a
       ChordBuilder stacks thirds on it. Strict rounds use the diatonic
       builder; when it reports BuildFailed a fresh root is drawn, up to
       ``max_chord_attempts`` times, after which the chromatic builder is
       used so generation always finishes.

    3. **beams** – 3-4 groups of 4-6 sixteenth notes, each item tagged with
       its group index (0, 1, 2, ...).

    All randomness comes from ``rng`` so a seeded ``random.Random`` gives a
    reproducible round.
    """

    DEFAULT_ITEM_COUNT = 6
    SEVENTH_PROBABILITY = 0.3
    MAX_CHORD_ATTEMPTS = 50

    BEAM_GROUPS = (3, 4)       # inclusive bounds on the number of groups
    BEAM_GROUP_SIZE = (4, 6)   # inclusive bounds on notes per group
    BEAM_DURATION = "16"
    DEFAULT_DURATION = "q"

    def __init__(
        self,
        rng: random.Random | None = None,
        single_count: int = DEFAULT_ITEM_COUNT,
        chord_count: int = DEFAULT_ITEM_COUNT,
        seventh_probability: float = SEVENTH_PROBABILITY,
        max_chord_attempts: int = MAX_CHORD_ATTEMPTS,
    ) -> None:
        """
        Args:
            rng:                 Random source; a fresh unseeded one when omitted.
            single_count:        Items per round in single-note mode.
            chord_count:         Items per round in chord mode.
            seventh_probability: Chance (0-1) that a chord gets a seventh.
            max_chord_attempts:  Roots tried per chord before falling back to
                                 a chromatic chord.
        """
        if not 0.0 <= seventh_probability <= 1.0:
            raise ValueError("seventh_probability must be between 0 and 1.")
        if max_chord_attempts < 1:
            raise ValueError("max_chord_attempts must be at least 1.")

        self.rng = rng if rng is not None else random.Random()
        self.single_count = single_count
        self.chord_count = chord_count
        self.seventh_probability = seventh_probability
        self.max_chord_attempts = max_chord_attempts

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _chord_builder(self, policy: PitchPolicy) -> ChordBuilder:
        if policy.strict:
            return DiatonicChordBuilder(policy)
        return ChromaticChordBuilder(policy)

    def _single_items(self, policy: PitchPolicy, low: int, high: int) -> list[ExerciseItem]:
        items: list[ExerciseItem] = []
        for _ in range(self.single_count):
            pitch = policy.random_valid_pitch(self.rng, low, high)
            items.append(ExerciseItem(notes=[spell_pitch(pitch, policy.key, self.DEFAULT_DURATION)]))
        return items

    def _build_chord(self, policy: PitchPolicy, low: int, high: int) -> list[int]:
        builder = self._chord_builder(policy)
        root_high = max(low, high - CHORD_SPAN)

        for attempt in range(1, self.max_chord_attempts + 1):
            root = policy.random_valid_pitch(self.rng, low, root_high)
            seventh = self.rng.random() < self.seventh_probability
            try:
                return builder.build(root, seventh, self.rng)
            except BuildFailed as exc:
                logger.debug("Chord attempt %d failed: %s", attempt, exc)

        logger.warning(
            "No chord in %s after %d attempts; using a chromatic chord",
            policy.key, self.max_chord_attempts,
        )
        root = policy.random_valid_pitch(self.rng, low, root_high)
        seventh = self.rng.random() < self.seventh_probability
        return ChromaticChordBuilder(policy).build(root, seventh, self.rng)

    def _chord_items(self, policy: PitchPolicy, low: int, high: int) -> list[ExerciseItem]:
        items: list[ExerciseItem] = []
        for _ in range(self.chord_count):
            pitches = sorted(self._build_chord(policy, low, high))
            notes = [spell_pitch(p, policy.key, self.DEFAULT_DURATION) for p in pitches]
            items.append(ExerciseItem(notes=notes))
        return items

    def _beam_items(self, policy: PitchPolicy, low: int, high: int) -> list[ExerciseItem]:
        items: list[ExerciseItem] = []
        group_count = self.rng.randint(*self.BEAM_GROUPS)

        for group_index in range(group_count):
            group_size = self.rng.randint(*self.BEAM_GROUP_SIZE)
            for _ in range(group_size):
                pitch = policy.random_valid_pitch(self.rng, low, high)
                items.append(
                    ExerciseItem(
                        notes=[spell_pitch(pitch, policy.key, self.BEAM_DURATION)],
                        beam_group_index=group_index,
                    )
                )
        return items

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, settings: GameSettings) -> list[ExerciseItem]:
        """
        Generate a fresh round for ``settings``.

        Returns:
            Ordered list of ExerciseItem, every one with status "pending".
        """
        key = KeySignature(settings.key_root, settings.key_type)
        policy = PitchPolicy(key, use_accidentals=settings.use_accidentals)
        low, high = clef_range(settings.clef)

        if settings.mode == MODE_SINGLE:
            items = self._single_items(policy, low, high)
        elif settings.mode == MODE_CHORDS:
            items = self._chord_items(policy, low, high)
        elif settings.mode == MODE_BEAMS:
            items = self._beam_items(policy, low, high)
        else:
            raise ValueError(f"Unsupported mode '{settings.mode}'.")

        logger.debug("Generated %d %s item(s) in %s (%s clef)", len(items), settings.mode, key, settings.clef)
        return items
