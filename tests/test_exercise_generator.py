"""Unit tests for ExerciseGenerator across all three practice modes."""

import logging
import random

import pytest

from sightreader.chord_builder import BuildFailed, DiatonicChordBuilder
from sightreader.exercise_generator import ExerciseGenerator
from sightreader.exercise_models import GameSettings
from sightreader.key_signature import KEY_ROOTS, KEY_TYPES, KeySignature
from sightreader.pitch_range import clef_range


def _generate(seed: int = 0, **settings: object) -> list:
    return ExerciseGenerator(rng=random.Random(seed)).generate(GameSettings(**settings))  # type: ignore[arg-type]


def test_d_major_treble_single_round() -> None:
    allowed = {2, 4, 6, 7, 9, 11, 1}
    for seed in range(20):
        items = _generate(seed, clef="treble", key_root="D", key_type="major", mode="single")
        assert len(items) == 6
        for item in items:
            assert len(item.notes) == 1
            assert item.status == "pending"
            assert item.duration == "q"
            assert item.notes[0].pitch % 12 in allowed
            assert 53 <= item.notes[0].pitch <= 88


@pytest.mark.parametrize("mode", ["single", "chords", "beams"])
@pytest.mark.parametrize("clef", ["treble", "bass"])
def test_strict_rounds_stay_in_key_and_range(mode: str, clef: str) -> None:
    low, high = clef_range(clef)
    for root in KEY_ROOTS:
        for key_type in KEY_TYPES:
            key = KeySignature(root, key_type)
            items = _generate(len(root), clef=clef, key_root=root, key_type=key_type, mode=mode)
            for item in items:
                for note in item.notes:
                    assert key.is_diatonic(note.pitch), (root, key_type, note.pitch)
                    assert low <= note.pitch <= high


@pytest.mark.parametrize("clef", ["treble", "bass"])
def test_chromatic_chords_stay_in_range(clef: str) -> None:
    low, high = clef_range(clef)
    for seed in range(30):
        items = _generate(seed, clef=clef, key_root="A", use_accidentals=True, mode="chords")
        for item in items:
            assert all(low <= pitch <= high for pitch in item.target_pitches)


def test_chord_round_shape() -> None:
    for seed in range(30):
        items = _generate(seed, key_root="Bb", mode="chords")
        assert len(items) == 6
        for item in items:
            assert item.is_chord
            assert 3 <= len(item.notes) <= 4
            pitches = [note.pitch for note in item.notes]
            assert pitches == sorted(pitches)
            assert item.target_pitches == pitches


def test_beam_round_grouping() -> None:
    for seed in range(40):
        items = _generate(seed, key_root="E", mode="beams")
        indices = [item.beam_group_index for item in items]
        groups = sorted(set(indices))
        assert groups == list(range(len(groups)))
        assert 3 <= len(groups) <= 4
        assert indices == sorted(indices)
        sizes = [indices.count(group) for group in groups]
        assert all(4 <= size <= 6 for size in sizes)
        assert sum(sizes) == len(items)
        assert all(item.duration == "16" for item in items)
        assert all(item.is_beam_group for item in items)


def test_same_seed_same_round() -> None:
    first = _generate(42, key_root="Ab", mode="chords")
    second = _generate(42, key_root="Ab", mode="chords")
    assert [item.target_pitches for item in first] == [item.target_pitches for item in second]


def test_item_ids_are_unique() -> None:
    items = _generate(1, mode="beams")
    assert len({item.id for item in items}) == len(items)


def test_custom_counts() -> None:
    generator = ExerciseGenerator(rng=random.Random(0), single_count=10, chord_count=2)
    assert len(generator.generate(GameSettings(mode="single"))) == 10
    assert len(generator.generate(GameSettings(mode="chords"))) == 2


def test_seventh_probability_extremes() -> None:
    always = ExerciseGenerator(rng=random.Random(0), seventh_probability=1.0)
    never = ExerciseGenerator(rng=random.Random(0), seventh_probability=0.0)
    assert all(len(item.notes) == 4 for item in always.generate(GameSettings(mode="chords")))
    assert all(len(item.notes) == 3 for item in never.generate(GameSettings(mode="chords")))


def test_chord_falls_back_to_chromatic_after_max_attempts(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def always_fail(self: DiatonicChordBuilder, root: int, seventh: bool, rng: random.Random) -> list[int]:
        raise BuildFailed(root, "forced")

    monkeypatch.setattr(DiatonicChordBuilder, "build", always_fail)
    generator = ExerciseGenerator(rng=random.Random(3), max_chord_attempts=2)

    with caplog.at_level(logging.WARNING, logger="sightreader.exercise_generator"):
        items = generator.generate(GameSettings(mode="chords"))

    assert len(items) == 6
    assert all(3 <= len(item.notes) <= 4 for item in items)
    assert "using a chromatic chord" in caplog.text


@pytest.mark.parametrize("kwargs", [{"seventh_probability": 1.5}, {"max_chord_attempts": 0}])
def test_invalid_generator_options(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        ExerciseGenerator(**kwargs)


def test_invalid_settings_raise() -> None:
    with pytest.raises(ValueError, match="Unsupported mode"):
        GameSettings(mode="scales")
    with pytest.raises(ValueError, match="Unsupported clef"):
        GameSettings(clef="alto")
    with pytest.raises(ValueError, match="Unsupported key root"):
        GameSettings(key_root="H")
