"""Unit tests for the on-screen keyboard layout and note-label parsing."""

import pytest

from sightreader.keyboard import KeyboardLayout, build_keyboard_map, parse_note_label


def test_keyboard_spans_f1_to_e6() -> None:
    keys = build_keyboard_map()
    assert keys[0].label == "F1"
    assert keys[0].pitch == 29
    assert keys[-1].label == "E6"
    assert keys[-1].pitch == 88
    assert sum(1 for key in keys if not key.is_black) == 35


def test_middle_c_is_nineteenth_white_key() -> None:
    whites = [key for key in build_keyboard_map() if key.color == "white"]
    assert whites[18].pitch == 60
    assert whites[18].label == "C4"


def test_black_keys_use_sharp_labels() -> None:
    labels = {key.pitch: key for key in build_keyboard_map()}
    assert labels[61].label == "C#4"
    assert labels[61].is_black


@pytest.mark.parametrize(
    ("text", "pitch"),
    [
        ("C4", 60),
        ("F#4", 66),
        ("Gb4", 66),
        ("c5", 72),
        ("Cb4", 59),
        ("B♭3", 58),
        ("61", 61),
        (" A0 ", 21),
    ],
)
def test_parse_note_label(text: str, pitch: int) -> None:
    assert parse_note_label(text) == pitch


@pytest.mark.parametrize("text", ["", "H4", "C", "C#x", "do4"])
def test_parse_note_label_rejects_garbage(text: str) -> None:
    with pytest.raises(ValueError):
        parse_note_label(text)


def test_layout_bounds() -> None:
    layout = KeyboardLayout()
    assert layout.lowest == 29
    assert layout.highest == 88
    assert layout.contains(29)
    assert layout.contains(88)
    assert not layout.contains(28)
    assert not layout.contains(89)
    assert layout.key_for(60).label == "C4"
    with pytest.raises(ValueError, match="not on the keyboard"):
        layout.key_for(100)
