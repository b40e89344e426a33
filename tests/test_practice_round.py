"""Unit tests for judging input in a PracticeRound."""

import logging
import random

import pytest

from sightreader.exercise_generator import ExerciseGenerator
from sightreader.exercise_models import GameSettings
from sightreader.practice_round import TRY_AGAIN, WRONG_CHORD, PracticeRound


def _round(mode: str = "single", seed: int = 0) -> PracticeRound:
    session = PracticeRound(GameSettings(mode=mode), ExerciseGenerator(rng=random.Random(seed)))
    session.start()
    return session


def test_correct_note_advances_cursor() -> None:
    session = _round()
    target = session.items[0].target_pitches[0]
    assert session.play_note(target) == "correct"
    assert session.cursor == 1
    assert session.items[0].status == "correct"
    assert session.feedback is None


def test_wrong_note_is_transient() -> None:
    session = _round()
    item = session.items[0]
    target = item.target_pitches[0]

    assert session.play_note(target + 1) == "incorrect"
    assert session.feedback == TRY_AGAIN
    assert session.mistakes == 1
    assert session.cursor == 0

    session.clear_feedback()
    assert item.status == "pending"
    assert session.feedback is None

    assert session.play_note(target) == "correct"


def test_next_input_clears_incorrect_state() -> None:
    session = _round()
    target = session.items[0].target_pitches[0]
    session.play_note(target + 2)
    assert session.play_note(target) == "correct"
    assert session.mistakes == 1


def test_completing_every_item_finishes_round() -> None:
    session = _round(mode="beams", seed=4)
    for item in list(session.items):
        session.play_note(item.target_pitches[0])
    assert session.is_complete
    assert session.current_item is None
    assert session.rounds_completed == 1
    with pytest.raises(RuntimeError):
        session.play_note(60)


def test_input_before_start_raises() -> None:
    session = PracticeRound(GameSettings())
    with pytest.raises(RuntimeError, match="not been started"):
        session.play_note(60)


def test_chord_judged_in_any_order() -> None:
    session = _round(mode="chords")
    target = session.items[0].target_pitches
    for pitch in reversed(target):
        assert session.play_note(pitch) == "pending"
    assert session.submit_chord() == "correct"
    assert session.selected_notes == []
    assert session.cursor == 1


def test_wrong_chord_keeps_selection_and_item() -> None:
    session = _round(mode="chords")
    target = session.items[0].target_pitches
    for pitch in target[:-1]:
        session.play_note(pitch)
    assert session.submit_chord() == "incorrect"
    assert session.feedback == WRONG_CHORD
    assert session.cursor == 0

    session.play_note(target[-1])
    assert session.items[0].status == "pending"
    assert session.submit_chord() == "correct"


def test_pressing_a_key_twice_deselects_it() -> None:
    session = _round(mode="chords")
    session.play_note(60)
    session.play_note(60)
    assert session.selected_notes == []


def test_submit_chord_outside_chord_round_raises() -> None:
    session = _round(mode="single")
    with pytest.raises(RuntimeError):
        session.submit_chord()


def test_next_round_replaces_sequence() -> None:
    session = _round()
    old_ids = {item.id for item in session.items}
    session.play_note(session.items[0].target_pitches[0])
    session.next_round()
    assert session.cursor == 0
    assert all(item.status == "pending" for item in session.items)
    assert old_ids.isdisjoint(item.id for item in session.items)


def _play_round_with_one_mistake(session: PracticeRound) -> None:
    session.start()
    first = session.items[0].target_pitches[0]
    session.play_note(first + 1)
    for item in list(session.items):
        session.play_note(item.target_pitches[0])


def test_round_mistakes_reset_each_round(caplog: pytest.LogCaptureFixture) -> None:
    session = PracticeRound(GameSettings(), ExerciseGenerator(rng=random.Random(3)))

    with caplog.at_level(logging.INFO, logger="sightreader.practice_round"):
        _play_round_with_one_mistake(session)
        _play_round_with_one_mistake(session)

    assert [r.getMessage() for r in caplog.records] == [
        "Round 1 complete with 1 mistake(s)",
        "Round 2 complete with 1 mistake(s)",
    ]
    assert session.round_mistakes == 1
    assert session.mistakes == 2

    session.start()
    assert session.round_mistakes == 0
    assert session.mistakes == 2
