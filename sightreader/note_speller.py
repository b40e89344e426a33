"""Note speller: turns an absolute MIDI pitch into a key-aware notated note."""

from dataclasses import dataclass
from typing import Final

from sightreader.key_signature import KeySignature

# ── Spelling tables ─────────────────────────────────────────────────────────

SHARP_NAMES: Final[tuple[str, ...]] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)
FLAT_NAMES: Final[tuple[str, ...]] = (
    "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
)

LETTER_PITCH_CLASSES: Final[dict[str, int]] = {
    "C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11,
}

ACCIDENTAL_SHARP: Final = "#"
ACCIDENTAL_FLAT: Final = "b"
ACCIDENTAL_NATURAL: Final = "n"

_ACCIDENTAL_OFFSETS: Final[dict[str | None, int]] = {
    None: 0,
    ACCIDENTAL_NATURAL: 0,
    ACCIDENTAL_SHARP: 1,
    ACCIDENTAL_FLAT: -1,
}

MIN_PITCH = 0
MAX_PITCH = 127


def octave_of(pitch: int) -> int:
    """Scientific octave number; MIDI 60 is C4."""
    return pitch // 12 - 1


def decode_spelling(letter: str, accidental: str | None, octave: int) -> int:
    """
    Convert a letter, accidental and octave back into a MIDI pitch.

    Raises:
        ValueError: If the letter or accidental is not recognised.
    """
    if letter not in LETTER_PITCH_CLASSES:
        raise ValueError(f"Unknown note letter '{letter}'.")
    if accidental not in _ACCIDENTAL_OFFSETS:
        raise ValueError(f"Unknown accidental '{accidental}'.")
    return (octave + 1) * 12 + LETTER_PITCH_CLASSES[letter] + _ACCIDENTAL_OFFSETS[accidental]


@dataclass(frozen=True)
class SpelledNote:
    """
    A pitch as it should be written on the staff in a given key.

    Attributes:
        pitch:      MIDI note number; the source of truth for judging.
        letter:     Note letter A-G.
        octave:     Scientific octave number.
        accidental: "#", "b", "n" (explicit natural) or None.
        duration:   VexFlow duration code ("q", "16", ...).
    """

    pitch: int
    letter: str
    octave: int
    accidental: str | None = None
    duration: str = "q"

    @property
    def name(self) -> str:
        """Letter with sharp/flat, e.g. 'F#'. Naturals are shown bare."""
        if self.accidental in (ACCIDENTAL_SHARP, ACCIDENTAL_FLAT):
            return f"{self.letter}{self.accidental}"
        return self.letter

    @property
    def label(self) -> str:
        return f"{self.name}{self.octave}"

    @property
    def vexflow_key(self) -> str:
        """Key string for a VexFlow StaveNote, e.g. 'f#/4' or 'fn/4'."""
        return f"{self.letter.lower()}{self.accidental or ''}/{self.octave}"

    @property
    def music21_name(self) -> str:
        """Pitch name with octave in music21 syntax (flats written as '-')."""
        return f"{self.name.replace('b', '-')}{self.octave}"

    def decode(self) -> int:
        return decode_spelling(self.letter, self.accidental, self.octave)


def spell_pitch(pitch: int, key: KeySignature, duration: str = "q") -> SpelledNote:
    """
    Spell a MIDI pitch for display in ``key``.

    The sharp or flat table is picked by the key's spelling convention.
    A natural letter that is foreign to the key (F in D major) gets an
    explicit "n" so the renderer cancels the signature's accidental.

    Raises:
        ValueError: If the pitch is outside 0-127.
    """
    if not MIN_PITCH <= pitch <= MAX_PITCH:
        raise ValueError(f"Pitch {pitch} is outside the MIDI range {MIN_PITCH}-{MAX_PITCH}.")

    pitch_class = pitch % 12
    raw_name = (FLAT_NAMES if key.uses_flats else SHARP_NAMES)[pitch_class]

    letter = raw_name[0]
    accidental = raw_name[1:] or None

    if accidental is None and not key.is_diatonic(pitch):
        accidental = ACCIDENTAL_NATURAL

    return SpelledNote(
        pitch=pitch,
        letter=letter,
        octave=octave_of(pitch),
        accidental=accidental,
        duration=duration,
    )
