"""sightreader CLI entry point."""

import json
import logging
import random
import sys
from dataclasses import asdict
from typing import Any, Callable

import click

from sightreader import __version__
from sightreader.exercise_generator import ExerciseGenerator
from sightreader.exercise_models import GAME_MODES, STATUS_CORRECT, ExerciseItem, GameSettings
from sightreader.key_signature import KEY_ROOTS, KEY_TYPES
from sightreader.keyboard import KeyboardLayout, parse_note_label
from sightreader.midi_exporter import MidiExporter
from sightreader.pitch_range import CLEF_RANGES
from sightreader.practice_round import PracticeRound

QUIT_WORDS = {"q", "quit", "exit"}


def _round_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every round-producing command."""
    options = [
        click.option(
            "--clef",
            type=click.Choice(sorted(CLEF_RANGES)),
            default="treble",
            show_default=True,
            help="Staff clef; bounds the pitch range.",
        ),
        click.option(
            "--key",
            "key_root",
            type=click.Choice(KEY_ROOTS),
            default="C",
            show_default=True,
            help="Key signature root.",
        ),
        click.option(
            "--key-type",
            type=click.Choice(KEY_TYPES),
            default="major",
            show_default=True,
            help="Major or natural minor.",
        ),
        click.option(
            "--mode",
            type=click.Choice(GAME_MODES),
            default="single",
            show_default=True,
            help="Single notes, chords, or beamed sixteenth groups.",
        ),
        click.option(
            "--accidentals/--no-accidentals",
            "use_accidentals",
            default=False,
            show_default=True,
            help="Allow notes outside the key signature.",
        ),
        click.option(
            "--seed",
            type=int,
            default=None,
            metavar="INT",
            help="Seed the random generator for a reproducible round.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _settings(clef: str, key_root: str, key_type: str, mode: str, use_accidentals: bool) -> GameSettings:
    return GameSettings(
        clef=clef,
        key_root=key_root,
        key_type=key_type,
        use_accidentals=use_accidentals,
        mode=mode,
    )


def _generator(seed: int | None) -> ExerciseGenerator:
    return ExerciseGenerator(rng=random.Random(seed))


def _describe_item(item: ExerciseItem) -> str:
    return " ".join(note.label for note in item.notes)


def _echo_header(settings: GameSettings) -> None:
    click.echo(f"sightreader v{__version__}")
    click.echo(f"  Key    : {settings.key_root} {settings.key_type}  |  Clef: {settings.clef}")
    click.echo(f"  Mode   : {settings.mode}  |  Accidentals: {'on' if settings.use_accidentals else 'off'}")
    click.echo()


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="sightreader")
@click.option("--verbose", "-v", is_flag=True, help="Log generator and exporter details.")
def main(verbose: bool) -> None:
    """sightreader: piano sight-reading exercise generator and trainer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── generate subcommand ────────────────────────────────────────────────────────

@main.command()
@_round_options
@click.option("--json", "as_json", is_flag=True, help="Print the round as JSON.")
def generate(
    clef: str,
    key_root: str,
    key_type: str,
    mode: str,
    use_accidentals: bool,
    seed: int | None,
    as_json: bool,
) -> None:
    """
    Generate one exercise round and print it.

    \b
    Examples:
      sightreader generate --key D
      sightreader generate --mode chords --key Bb --key-type minor --seed 7
      sightreader generate --mode beams --clef bass --json
    """
    settings = _settings(clef, key_root, key_type, mode, use_accidentals)
    items = _generator(seed).generate(settings)

    if as_json:
        click.echo(json.dumps([asdict(item) for item in items], indent=2))
        return

    _echo_header(settings)
    for index, item in enumerate(items, start=1):
        group = f"  beam {item.beam_group_index}" if item.is_beam_group else ""
        click.echo(f"  {index:>2}. {_describe_item(item):<20} {item.duration:>3}{group}")


# ── practice subcommand ────────────────────────────────────────────────────────

@main.command()
@_round_options
@click.option(
    "--rounds",
    type=click.IntRange(1, 100),
    default=1,
    show_default=True,
    help="Number of rounds to play.",
)
def practice(
    clef: str,
    key_root: str,
    key_type: str,
    mode: str,
    use_accidentals: bool,
    seed: int | None,
    rounds: int,
) -> None:
    """
    Play exercise rounds in the terminal.

    Type each note as a name with octave (F#4, Bb3) or a MIDI number.
    In chord mode type all chord tones on one line, separated by spaces.
    Type q to stop.
    """
    settings = _settings(clef, key_root, key_type, mode, use_accidentals)
    session = PracticeRound(settings, _generator(seed))
    keyboard = KeyboardLayout()

    _echo_header(settings)
    for round_no in range(1, rounds + 1):
        session.start()
        click.echo(f"Round {round_no}/{rounds}")

        while not session.is_complete:
            item = session.current_item
            if item is None:
                break
            prompt = f"  [{session.cursor + 1}/{len(session.items)}] {_describe_item(item)}"
            answer = click.prompt(prompt, prompt_suffix=" > ", default="", show_default=False)
            if answer.strip().lower() in QUIT_WORDS:
                click.echo(f"Stopped. Mistakes: {session.mistakes}")
                return

            try:
                pitches = [parse_note_label(token) for token in answer.split()]
            except ValueError as exc:
                click.echo(f"  ERROR: {exc}", err=True)
                continue
            off_keyboard = [p for p in pitches if not keyboard.contains(p)]
            if not pitches or off_keyboard:
                click.echo(f"  Play keys between {keyboard.lowest} and {keyboard.highest}.", err=True)
                continue
            if len(pitches) > 1 and not session.is_chord_round:
                click.echo("  Play one key at a time.", err=True)
                continue

            if session.is_chord_round:
                session.selected_notes = []
                for pitch in pitches:
                    session.play_note(pitch)
                status = session.submit_chord()
            else:
                status = session.play_note(pitches[0])

            if status == STATUS_CORRECT:
                click.echo("  correct")
            else:
                click.echo(f"  {session.feedback}")

    click.echo()
    click.echo(f"Done!  {session.rounds_completed} round(s), {session.mistakes} mistake(s).")


# ── sheet subcommand ───────────────────────────────────────────────────────────

@main.command()
@_round_options
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file path. Defaults to exercise.html or exercise.md based on --format.",
)
@click.option(
    "--title",
    default="Sight Reading",
    show_default=True,
    metavar="TEXT",
    help="Title shown in the output header.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "md-vexflow"], case_sensitive=False),
    default="md-vexflow",
    show_default=True,
    help="Sheet output format: self-contained HTML (music21 + verovio) or Markdown with VexFlow script.",
)
def sheet(
    clef: str,
    key_root: str,
    key_type: str,
    mode: str,
    use_accidentals: bool,
    seed: int | None,
    output: str | None,
    title: str,
    output_format: str,
) -> None:
    """
    Generate a round and write it as sheet music.

    \b
    Examples:
      sightreader sheet --key D -o d_major.md
      sightreader sheet --mode beams --format html -o beams.html
    """
    from sightreader.sheet_exporter import SheetExporter

    settings = _settings(clef, key_root, key_type, mode, use_accidentals)
    normalized_format = output_format.lower()
    default_name = "exercise.html" if normalized_format == "html" else "exercise.md"
    resolved_output = output if output is not None else default_name

    _echo_header(settings)
    items = _generator(seed).generate(settings)
    click.echo(f"[1/2] Generated {len(items)} item(s)")
    click.echo(f"[2/2] Writing {normalized_format} → '{resolved_output}'...")

    exporter = SheetExporter(title=title, output_format=normalized_format)
    try:
        exporter.export(items, settings, resolved_output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file: {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not render score: {exc}", err=True)
        sys.exit(1)

    click.echo()
    click.echo(f"Done!  Open '{resolved_output}' to read the exercise.")


# ── midi subcommand ────────────────────────────────────────────────────────────

@main.command()
@_round_options
@click.option(
    "--output",
    "-o",
    default="exercise.mid",
    show_default=True,
    metavar="PATH",
    help="Destination MIDI file path.",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=MidiExporter.DEFAULT_TEMPO,
    show_default=True,
    help="Playback tempo in BPM.",
)
def midi(
    clef: str,
    key_root: str,
    key_type: str,
    mode: str,
    use_accidentals: bool,
    seed: int | None,
    output: str,
    tempo: int,
) -> None:
    """Generate a round and write it as a MIDI file for playback."""
    settings = _settings(clef, key_root, key_type, mode, use_accidentals)

    _echo_header(settings)
    items = _generator(seed).generate(settings)
    click.echo(f"[1/2] Generated {len(items)} item(s)")
    click.echo(f"[2/2] Writing MIDI file → '{output}'...")

    try:
        MidiExporter(tempo=tempo).export(items, output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write MIDI file: {exc}", err=True)
        sys.exit(1)

    click.echo()
    click.echo(f"Done!  Open '{output}' in GarageBand, MuseScore, or any MIDI player.")
