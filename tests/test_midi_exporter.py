"""Unit tests for MidiExporter."""

import random
from pathlib import Path

from sightreader.exercise_generator import ExerciseGenerator
from sightreader.exercise_models import GameSettings
from sightreader.midi_exporter import MidiExporter


def test_export_writes_standard_midi_file(tmp_path: Path) -> None:
    items = ExerciseGenerator(rng=random.Random(0)).generate(GameSettings(mode="chords"))
    out = tmp_path / "round.mid"

    MidiExporter(tempo=60).export(items, str(out))

    data = out.read_bytes()
    assert data.startswith(b"MThd")
    assert data.count(b"MTrk") == 2


def test_export_beam_round(tmp_path: Path) -> None:
    items = ExerciseGenerator(rng=random.Random(6)).generate(GameSettings(mode="beams", clef="bass"))
    out = tmp_path / "beams.mid"

    MidiExporter().export(items, str(out))

    assert out.stat().st_size > 0


def test_defaults() -> None:
    exporter = MidiExporter()
    assert exporter.tempo == MidiExporter.DEFAULT_TEMPO
    assert exporter.velocity == MidiExporter.DEFAULT_VELOCITY
