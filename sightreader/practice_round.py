"""PracticeRound: judges piano input against the active exercise item."""

import logging

from sightreader.exercise_generator import ExerciseGenerator
from sightreader.exercise_models import (
    MODE_CHORDS,
    STATUS_CORRECT,
    STATUS_INCORRECT,
    STATUS_PENDING,
    ExerciseItem,
    GameSettings,
)

logger = logging.getLogger(__name__)

TRY_AGAIN = "Try again!"
WRONG_CHORD = "Incorrect chord notes."


class PracticeRound:
    """
    Owns the active item sequence and a cursor into it.

    Single-note and beam rounds judge every key press immediately. Chord
    rounds collect key presses into a selection that is judged on
    ``submit_chord()``, regardless of the order the keys were pressed.

    A wrong answer marks the item "incorrect" only until the next input or
    ``clear_feedback()``; the learner keeps retrying the same item.

    ``round_mistakes`` counts wrong answers in the current round and resets
    on ``start()``; ``mistakes`` is the total across every round played.
    """

    def __init__(self, settings: GameSettings, generator: ExerciseGenerator | None = None) -> None:
        self.settings = settings
        self.generator = generator if generator is not None else ExerciseGenerator()
        self.items: list[ExerciseItem] = []
        self.cursor = 0
        self.selected_notes: list[int] = []
        self.feedback: str | None = None
        self.mistakes = 0
        self.round_mistakes = 0
        self.rounds_completed = 0

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _active_item(self) -> ExerciseItem:
        if not self.items:
            raise RuntimeError("The round has not been started.")
        if self.is_complete:
            raise RuntimeError("The round is complete; start the next round.")
        return self.items[self.cursor]

    def _mark_correct(self, item: ExerciseItem) -> None:
        item.status = STATUS_CORRECT
        self.feedback = None
        self.cursor += 1
        if self.is_complete:
            self.rounds_completed += 1
            logger.info("Round %d complete with %d mistake(s)", self.rounds_completed, self.round_mistakes)

    def _mark_incorrect(self, item: ExerciseItem, message: str) -> None:
        item.status = STATUS_INCORRECT
        self.feedback = message
        self.mistakes += 1
        self.round_mistakes += 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_chord_round(self) -> bool:
        return self.settings.mode == MODE_CHORDS

    @property
    def is_complete(self) -> bool:
        return bool(self.items) and self.cursor >= len(self.items)

    @property
    def current_item(self) -> ExerciseItem | None:
        if not self.items or self.is_complete:
            return None
        return self.items[self.cursor]

    def start(self) -> list[ExerciseItem]:
        """Discard any previous sequence and generate a new one."""
        self.items = self.generator.generate(self.settings)
        self.cursor = 0
        self.selected_notes = []
        self.feedback = None
        self.round_mistakes = 0
        return self.items

    def next_round(self) -> list[ExerciseItem]:
        return self.start()

    def clear_feedback(self) -> None:
        """Revert a transient "incorrect" on the active item back to "pending"."""
        item = self.current_item
        if item is not None and item.status == STATUS_INCORRECT:
            item.status = STATUS_PENDING
        self.feedback = None

    def play_note(self, pitch: int) -> str:
        """
        Handle one key press.

        Returns:
            The active item's status after the press. In chord rounds the
            press only toggles the selection, so this stays "pending".

        Raises:
            RuntimeError: If no round is active.
        """
        item = self._active_item()
        self.clear_feedback()

        if self.is_chord_round:
            if pitch in self.selected_notes:
                self.selected_notes.remove(pitch)
            else:
                self.selected_notes.append(pitch)
            return item.status

        if pitch == item.target_pitches[0]:
            self._mark_correct(item)
        else:
            self._mark_incorrect(item, TRY_AGAIN)
        return item.status

    def submit_chord(self) -> str:
        """
        Judge the current selection against the active chord.

        Raises:
            RuntimeError: If no round is active or this is not a chord round.
        """
        if not self.is_chord_round:
            raise RuntimeError("submit_chord() is only valid in chord rounds.")
        item = self._active_item()
        self.clear_feedback()

        if sorted(self.selected_notes) == item.target_pitches:
            self.selected_notes = []
            self._mark_correct(item)
        else:
            self._mark_incorrect(item, WRONG_CHORD)
        return item.status
