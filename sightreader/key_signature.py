"""Key signatures: diatonic pitch classes and sharp/flat spelling convention."""

from dataclasses import dataclass
from typing import Final

# ── Key roots ───────────────────────────────────────────────────────────────

#: The 15 canonical key-signature roots (enharmonic spellings kept distinct).
KEY_ROOTS: Final[tuple[str, ...]] = (
    "C", "G", "D", "A", "E", "B", "F#", "C#",
    "F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb",
)

KEY_TYPES: Final[tuple[str, ...]] = ("major", "minor")

#: Pitch class of every root spelling, including enharmonic aliases.
ROOT_PITCH_CLASSES: Final[dict[str, int]] = {
    "C": 0, "C#": 1, "Db": 1, "D": 2, "D#": 3, "Eb": 3,
    "E": 4, "F": 5, "F#": 6, "Gb": 6, "G": 7, "G#": 8,
    "Ab": 8, "A": 9, "A#": 10, "Bb": 10, "B": 11, "Cb": 11,
}

# ── Scale tables ────────────────────────────────────────────────────────────

#: Major (Ionian) scale steps above the root.
MAJOR_SCALE: Final[tuple[int, ...]] = (0, 2, 4, 5, 7, 9, 11)

#: Natural minor (Aeolian) scale steps above the root.
MINOR_SCALE: Final[tuple[int, ...]] = (0, 2, 3, 5, 7, 8, 10)

SHARP: Final = "sharp"
FLAT: Final = "flat"

# Roots whose signature is written with flats, in either mode.
_FLAT_ROOTS: Final[frozenset[str]] = frozenset({"F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb"})

# Minor keys whose relative major carries flats.
_FLAT_MINOR_ROOTS: Final[frozenset[str]] = frozenset({"D", "G", "C", "F", "Bb", "Eb"})


def _check_key(root: str, key_type: str) -> None:
    if root not in ROOT_PITCH_CLASSES:
        raise ValueError(f"Unknown key root '{root}'.")
    if key_type not in KEY_TYPES:
        supported = ", ".join(KEY_TYPES)
        raise ValueError(f"Unknown key type '{key_type}'. Use one of: {supported}.")


def diatonic_pitch_classes(root: str, key_type: str) -> list[int]:
    """
    Return the 7 pitch classes (0-11) of the key, in scale-degree order.

    Args:
        root:     Key root spelling, e.g. "D" or "Bb".
        key_type: "major" or "minor" (natural minor).

    Raises:
        ValueError: If the root or key type is unknown.
    """
    _check_key(root, key_type)
    root_pc = ROOT_PITCH_CLASSES[root]
    steps = MAJOR_SCALE if key_type == "major" else MINOR_SCALE
    return [(root_pc + step) % 12 for step in steps]


def spelling_convention(root: str, key_type: str) -> str:
    """Return FLAT for keys notated with flats, SHARP otherwise."""
    _check_key(root, key_type)
    if root in _FLAT_ROOTS:
        return FLAT
    if key_type == "minor" and root in _FLAT_MINOR_ROOTS:
        return FLAT
    return SHARP


@dataclass(frozen=True)
class KeySignature:
    """
    A key root plus mode.

    Attributes:
        root:     One of KEY_ROOTS (aliases like "D#" are accepted too).
        key_type: "major" or "minor".
    """

    root: str = "C"
    key_type: str = "major"

    def __post_init__(self) -> None:
        _check_key(self.root, self.key_type)

    @property
    def diatonic_pitch_classes(self) -> list[int]:
        return diatonic_pitch_classes(self.root, self.key_type)

    @property
    def uses_flats(self) -> bool:
        return spelling_convention(self.root, self.key_type) == FLAT

    @property
    def vexflow_spec(self) -> str:
        """Key signature name understood by VexFlow, e.g. 'D' or 'Dm'."""
        suffix = "m" if self.key_type == "minor" else ""
        return f"{self.root}{suffix}"

    def is_diatonic(self, pitch: int) -> bool:
        """True when the pitch's class belongs to the key's scale."""
        return pitch % 12 in self.diatonic_pitch_classes

    def __str__(self) -> str:
        return f"{self.root} {self.key_type}"
