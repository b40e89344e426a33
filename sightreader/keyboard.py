"""Keyboard: the on-screen piano layout and note-label parsing for input."""

import re
from dataclasses import dataclass
from typing import Final

from sightreader.note_speller import SHARP_NAMES, decode_spelling, octave_of

START_PITCH = 29       # F1: 18 white keys below middle C
TOTAL_WHITE_KEYS = 35  # F1 .. E6

_BLACK_PITCH_CLASSES: Final[frozenset[int]] = frozenset({1, 3, 6, 8, 10})

# Letter, optional accidental (#, b, or unicode sharp/flat), signed octave.
_LABEL_RE = re.compile(r"^([A-Ga-g])([#b♯♭]?)(-?\d)$")


@dataclass(frozen=True)
class KeyConfig:
    """
    One key on the on-screen piano.

    Attributes:
        pitch: MIDI note number.
        color: "white" or "black".
        label: Sharp-spelled name with octave, e.g. "C#4".
    """

    pitch: int
    color: str
    label: str

    @property
    def is_black(self) -> bool:
        return self.color == "black"


def build_keyboard_map(
    start_pitch: int = START_PITCH,
    white_keys: int = TOTAL_WHITE_KEYS,
) -> list[KeyConfig]:
    """Lay out keys upward from ``start_pitch`` until ``white_keys`` white keys exist."""
    keys: list[KeyConfig] = []
    pitch = start_pitch
    white_count = 0

    while white_count < white_keys:
        pitch_class = pitch % 12
        is_black = pitch_class in _BLACK_PITCH_CLASSES
        if not is_black:
            white_count += 1
        keys.append(
            KeyConfig(
                pitch=pitch,
                color="black" if is_black else "white",
                label=f"{SHARP_NAMES[pitch_class]}{octave_of(pitch)}",
            )
        )
        pitch += 1

    return keys


def parse_note_label(text: str) -> int:
    """
    Parse a typed note into a MIDI pitch.

    Accepts labels such as "F#4", "Gb4", "c5", "Cb4" (B3) or a bare MIDI
    number such as "61".

    Raises:
        ValueError: If the text is neither a note label nor a MIDI number.
    """
    cleaned = text.strip()
    if cleaned.isdigit():
        return int(cleaned)

    match = _LABEL_RE.match(cleaned)
    if not match:
        raise ValueError(f"Cannot read note '{text}'. Use a name like F#4 or a MIDI number.")

    letter, accidental, octave = match.groups()
    accidental = accidental.replace("♯", "#").replace("♭", "b")
    return decode_spelling(letter.upper(), accidental or None, int(octave))


class KeyboardLayout:
    """The playable keyboard, used to bound and label piano input."""

    def __init__(self, start_pitch: int = START_PITCH, white_keys: int = TOTAL_WHITE_KEYS) -> None:
        self.keys = build_keyboard_map(start_pitch, white_keys)
        self._by_pitch = {key.pitch: key for key in self.keys}

    @property
    def lowest(self) -> int:
        return self.keys[0].pitch

    @property
    def highest(self) -> int:
        return self.keys[-1].pitch

    def contains(self, pitch: int) -> bool:
        return pitch in self._by_pitch

    def key_for(self, pitch: int) -> KeyConfig:
        """
        Raises:
            ValueError: If the pitch is not on the keyboard.
        """
        try:
            return self._by_pitch[pitch]
        except KeyError:
            raise ValueError(
                f"Pitch {pitch} is not on the keyboard ({self.lowest}-{self.highest})."
            ) from None
