"""Data models for game settings and generated exercise items."""

import uuid
from dataclasses import dataclass, field
from typing import Final

from sightreader.key_signature import KEY_TYPES, ROOT_PITCH_CLASSES, KeySignature
from sightreader.note_speller import SpelledNote
from sightreader.pitch_range import CLEF_RANGES

MODE_SINGLE: Final = "single"
MODE_CHORDS: Final = "chords"
MODE_BEAMS: Final = "beams"
GAME_MODES: Final[tuple[str, ...]] = (MODE_SINGLE, MODE_CHORDS, MODE_BEAMS)

STATUS_PENDING: Final = "pending"
STATUS_CORRECT: Final = "correct"
STATUS_INCORRECT: Final = "incorrect"


def _new_item_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class GameSettings:
    """
    Per-round configuration.

    Attributes:
        clef:            "treble" or "bass"; bounds the pitch range.
        key_root:        Key root spelling, e.g. "D" or "Bb".
        key_type:        "major" or "minor".
        use_accidentals: Allow pitches outside the key (chromatic mode).
        mode:            "single", "chords" or "beams".
    """

    clef: str = "treble"
    key_root: str = "C"
    key_type: str = "major"
    use_accidentals: bool = False
    mode: str = MODE_SINGLE

    def __post_init__(self) -> None:
        if self.clef not in CLEF_RANGES:
            supported = ", ".join(sorted(CLEF_RANGES))
            raise ValueError(f"Unsupported clef '{self.clef}'. Use one of: {supported}.")
        if self.mode not in GAME_MODES:
            supported = ", ".join(GAME_MODES)
            raise ValueError(f"Unsupported mode '{self.mode}'. Use one of: {supported}.")
        if self.key_root not in ROOT_PITCH_CLASSES:
            raise ValueError(f"Unsupported key root '{self.key_root}'.")
        if self.key_type not in KEY_TYPES:
            supported = ", ".join(KEY_TYPES)
            raise ValueError(f"Unsupported key type '{self.key_type}'. Use one of: {supported}.")

    @property
    def key(self) -> KeySignature:
        return KeySignature(self.key_root, self.key_type)


@dataclass
class ExerciseItem:
    """
    One unit of practice: a single note or a chord.

    Attributes:
        notes:            Spelled notes, ascending by pitch. More than one means a chord.
        status:           "pending", "correct" or "incorrect" (the last is transient).
        beam_group_index: Shared by consecutive items drawn as one beamed group.
        id:               Unique identifier for the item.
    """

    notes: list[SpelledNote]
    status: str = STATUS_PENDING
    beam_group_index: int | None = None
    id: str = field(default_factory=_new_item_id)

    @property
    def is_chord(self) -> bool:
        return len(self.notes) > 1

    @property
    def is_beam_group(self) -> bool:
        return self.beam_group_index is not None

    @property
    def target_pitches(self) -> list[int]:
        """Pitches to match, sorted ascending."""
        return sorted(note.pitch for note in self.notes)

    @property
    def duration(self) -> str:
        return self.notes[0].duration if self.notes else "q"
