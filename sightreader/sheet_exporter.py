"""SheetExporter: renders an exercise round as HTML or Markdown sheet music."""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Any, Final

from sightreader.exercise_models import STATUS_CORRECT, STATUS_INCORRECT, ExerciseItem, GameSettings
from sightreader.note_speller import ACCIDENTAL_NATURAL, SpelledNote
from sightreader.sheet_models import ScoreDocument, VexflowNote
from sightreader.sheet_renderers import (
    SheetRenderer,
    VerovioHtmlRenderer,
    VexflowMarkdownRenderer,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"html", "md-vexflow"}

COLOR_CORRECT: Final = "#22c55e"
COLOR_INCORRECT: Final = "#ef4444"
COLOR_ACTIVE: Final = "#3b82f6"
COLOR_DEFAULT: Final = "black"

DURATION_BEATS: Final[dict[str, Fraction]] = {
    "w": Fraction(4),
    "h": Fraction(2),
    "q": Fraction(1),
    "8": Fraction(1, 2),
    "16": Fraction(1, 4),
}


def time_signature_for(items: list[ExerciseItem]) -> tuple[int, int]:
    """
    Pick a time signature that holds the whole round in one measure.

    Whole beats give N/4; half-beat totals switch to eighths and anything
    finer to sixteenths. An empty round is 4/4.
    """
    total = sum(
        (DURATION_BEATS.get(item.duration, Fraction(1)) for item in items),
        Fraction(0),
    )
    if total == 0:
        return 4, 4
    if total.denominator == 1:
        return int(total), 4
    if (total * 2).denominator == 1:
        return int(total * 2), 8
    return int(total * 4), 16


class SheetExporter:
    """
    Convert a generated round into sheet output via a pluggable renderer.

    Supported formats:
    - ``html``: music21 stream -> MusicXML -> Verovio -> inline SVG page.
    - ``md-vexflow``: markdown file with embedded VexFlow JavaScript renderer.

    Note colors follow the round state: correct items green, a transiently
    incorrect item red, the active item blue.
    """

    _MUSIC21_BEAM_TYPES: Final[dict[str, str]] = {
        "8": "eighth",
        "16": "16th",
    }

    # Stave width heuristics, in VexFlow units before scaling
    _BASE_WIDTH = 80
    _ITEM_WIDTH = 100
    _BEAMED_ITEM_WIDTH = 22
    _ACCIDENTAL_PAD = 14
    _GROUP_GAP = 40
    _MIN_WIDTH = 400

    def __init__(self, title: str = "", output_format: str = "html") -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VerovioHtmlRenderer()
        return VexflowMarkdownRenderer()

    def _note_color(self, item: ExerciseItem, index: int, active_index: int | None) -> str:
        if item.status == STATUS_CORRECT:
            return COLOR_CORRECT
        if item.status == STATUS_INCORRECT:
            return COLOR_INCORRECT
        if index == active_index:
            return COLOR_ACTIVE
        return COLOR_DEFAULT

    def _stave_width(self, items: list[ExerciseItem]) -> int:
        width = self._BASE_WIDTH
        previous: ExerciseItem | None = None
        for item in items:
            if item.is_beam_group:
                if previous is not None and previous.beam_group_index != item.beam_group_index:
                    width += self._GROUP_GAP
                width += self._BEAMED_ITEM_WIDTH
                if any(note.accidental for note in item.notes):
                    width += self._ACCIDENTAL_PAD
            else:
                width += self._ITEM_WIDTH
            previous = item
        return max(width, self._MIN_WIDTH)

    def _subtitle(self, settings: GameSettings) -> str:
        return f"{settings.key_root} {settings.key_type} | {settings.clef} clef | {settings.mode}"

    def _items_to_document(
        self,
        items: list[ExerciseItem],
        settings: GameSettings,
        active_index: int | None,
    ) -> ScoreDocument:
        beats, beat_value = time_signature_for(items)
        notes = [
            VexflowNote(
                keys=[note.vexflow_key for note in item.notes],
                duration=item.duration,
                beam_group=item.beam_group_index,
                color=self._note_color(item, index, active_index),
            )
            for index, item in enumerate(items)
        ]
        return ScoreDocument(
            title=self.title,
            clef=settings.clef,
            key_signature=settings.key.vexflow_spec,
            time_signature=f"{beats}/{beat_value}",
            beats=beats,
            beat_value=beat_value,
            width=self._stave_width(items),
            notes=notes,
        )

    def _music21_note(self, spelled: SpelledNote) -> Any:
        from music21 import note, pitch

        element = note.Note(spelled.music21_name)
        if spelled.accidental == ACCIDENTAL_NATURAL:
            element.pitch.accidental = pitch.Accidental("natural")
            element.pitch.accidental.displayStatus = True
        return element

    def _beam_type(self, items: list[ExerciseItem], index: int) -> str:
        group = items[index].beam_group_index
        starts = index == 0 or items[index - 1].beam_group_index != group
        stops = index == len(items) - 1 or items[index + 1].beam_group_index != group
        if starts:
            return "start"
        if stops:
            return "stop"
        return "continue"

    def _items_to_stream(
        self,
        items: list[ExerciseItem],
        settings: GameSettings,
        active_index: int | None,
    ) -> Any:
        from music21 import chord, clef, key, meter, metadata, stream

        beats, beat_value = time_signature_for(items)
        measure = stream.Measure(number=1)
        measure.append(clef.TrebleClef() if settings.clef == "treble" else clef.BassClef())
        measure.append(key.Key(settings.key_root.replace("b", "-"), settings.key_type))
        measure.append(meter.TimeSignature(f"{beats}/{beat_value}"))

        for index, item in enumerate(items):
            if item.is_chord:
                element = chord.Chord([self._music21_note(n) for n in item.notes])
            else:
                element = self._music21_note(item.notes[0])
            element.quarterLength = float(DURATION_BEATS.get(item.duration, Fraction(1)))
            element.style.color = self._note_color(item, index, active_index)

            beam_level = self._MUSIC21_BEAM_TYPES.get(item.duration)
            if item.is_beam_group and beam_level is not None:
                element.beams.fill(beam_level, type=self._beam_type(items, index))
            measure.append(element)

        part = stream.Part()
        part.append(measure)
        score = stream.Score()
        score.metadata = metadata.Metadata(title=self.title)
        score.insert(0, part)
        return score

    def _score_to_musicxml_bytes(self, score: Any) -> bytes:
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        exporter = GeneralObjectExporter(score)
        return exporter.parse()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_document(
        self,
        items: list[ExerciseItem],
        settings: GameSettings,
        active_index: int | None = 0,
    ) -> ScoreDocument:
        """Build the VexFlow score payload for a round."""
        return self._items_to_document(items, settings, active_index)

    def render(
        self,
        items: list[ExerciseItem],
        settings: GameSettings,
        active_index: int | None = 0,
    ) -> str:
        """
        Render a round in the selected format and return the file content.

        Raises:
            ValueError: If the round is empty or the renderer fails.
        """
        if not items:
            raise ValueError("Cannot render an empty exercise round.")

        subtitle = self._subtitle(settings)
        if self.output_format == "html":
            score = self._items_to_stream(items, settings, active_index)
            return self.renderer.render(
                title=self.title,
                subtitle=subtitle,
                musicxml_bytes=self._score_to_musicxml_bytes(score),
            )
        return self.renderer.render(
            title=self.title,
            subtitle=subtitle,
            score_document=self._items_to_document(items, settings, active_index),
        )

    def export(
        self,
        items: list[ExerciseItem],
        settings: GameSettings,
        output_path: str,
        active_index: int | None = 0,
    ) -> None:
        """
        Render a round and write it to disk.

        Raises:
            ValueError: If rendering fails or the round is empty.
            OSError: If the output file cannot be written.
        """
        content = self.render(items, settings, active_index)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
        logger.info("Wrote %d item(s) as %s to %s", len(items), self.output_format, output_path)
