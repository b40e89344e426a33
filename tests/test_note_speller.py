"""Unit tests for spelling MIDI pitches in a key."""

import pytest

from sightreader.key_signature import KEY_ROOTS, KEY_TYPES, KeySignature
from sightreader.note_speller import decode_spelling, spell_pitch


def test_every_pitch_round_trips_in_every_key() -> None:
    for root in KEY_ROOTS:
        for key_type in KEY_TYPES:
            key = KeySignature(root, key_type)
            for pitch in range(128):
                note = spell_pitch(pitch, key)
                assert note.decode() == pitch, (root, key_type, pitch)


def test_middle_c() -> None:
    note = spell_pitch(60, KeySignature("C", "major"))
    assert (note.letter, note.accidental, note.octave) == ("C", None, 4)
    assert note.label == "C4"


def test_b_below_middle_c_is_octave_three() -> None:
    note = spell_pitch(59, KeySignature("C", "major"))
    assert note.label == "B3"


def test_f_natural_in_d_major_is_marked_natural() -> None:
    note = spell_pitch(65, KeySignature("D", "major"))
    assert note.letter == "F"
    assert note.accidental == "n"
    assert note.vexflow_key == "fn/4"


def test_f_sharp_in_d_major_keeps_sharp_only() -> None:
    note = spell_pitch(66, KeySignature("D", "major"))
    assert note.letter == "F"
    assert note.accidental == "#"
    assert note.name == "F#"
    assert note.vexflow_key == "f#/4"


def test_diatonic_natural_has_no_marker() -> None:
    note = spell_pitch(67, KeySignature("D", "major"))
    assert note.accidental is None


def test_f_major_never_spells_with_sharps() -> None:
    key = KeySignature("F", "major")
    for pitch in range(128):
        assert spell_pitch(pitch, key).accidental != "#"


def test_f_major_chromatic_alterations_use_flats() -> None:
    key = KeySignature("F", "major")
    assert spell_pitch(66, key).name == "Gb"
    assert spell_pitch(61, key).name == "Db"
    assert spell_pitch(70, key).name == "Bb"


def test_e_natural_in_c_minor_is_marked_natural() -> None:
    note = spell_pitch(64, KeySignature("C", "minor"))
    assert (note.letter, note.accidental) == ("E", "n")


def test_music21_name_uses_dash_for_flats() -> None:
    note = spell_pitch(70, KeySignature("F", "major"))
    assert note.music21_name == "B-4"


def test_duration_is_carried() -> None:
    note = spell_pitch(72, KeySignature("C", "major"), duration="16")
    assert note.duration == "16"


@pytest.mark.parametrize("pitch", [-1, 128])
def test_out_of_range_pitch_raises(pitch: int) -> None:
    with pytest.raises(ValueError):
        spell_pitch(pitch, KeySignature())


def test_decode_spelling() -> None:
    assert decode_spelling("C", None, 4) == 60
    assert decode_spelling("C", "b", 4) == 59
    assert decode_spelling("B", "#", 3) == 60
    assert decode_spelling("F", "n", 4) == 65


def test_decode_spelling_rejects_unknown_letter() -> None:
    with pytest.raises(ValueError):
        decode_spelling("H", None, 4)
