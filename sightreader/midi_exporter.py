"""MidiExporter: writes an exercise round to a MIDI file for playback."""

import logging
import math

from midiutil import MIDIFile

from sightreader.exercise_models import ExerciseItem
from sightreader.sheet_exporter import DURATION_BEATS, time_signature_for

logger = logging.getLogger(__name__)

# midiutil writes tempo and time signature to its own conductor track in
# format 1 files, so the exercise is the only declared track.
TRACK_EXERCISE = 0

CHANNEL_PIANO = 0
MIDI_CLOCKS_PER_CLICK = 24


class MidiExporter:
    """
    Writes a round of ExerciseItems as a format 1 MIDI file.

    Items are laid end to end using their notated duration in beats
    (quarter = 1 beat, sixteenth = 0.25). Chord tones share a start time.
    The conductor track carries the tempo and a time signature matching the
    notation, so a player shows the round as a single measure.
    """

    DEFAULT_TEMPO = 80     # BPM
    DEFAULT_VELOCITY = 80  # MIDI velocity (0-127)

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        """
        Args:
            tempo:    Playback tempo in beats per minute.
            velocity: MIDI note-on velocity for every note.
        """
        self.tempo = tempo
        self.velocity = velocity

    def build(self, items: list[ExerciseItem]) -> MIDIFile:
        """Build the in-memory MIDI file for ``items``."""
        midi = MIDIFile(numTracks=1, removeDuplicates=False, deinterleave=False)

        midi.addTempo(TRACK_EXERCISE, 0, self.tempo)
        beats, beat_value = time_signature_for(items)
        # midiutil takes the denominator as a power of two
        midi.addTimeSignature(TRACK_EXERCISE, 0, beats, int(math.log2(beat_value)), MIDI_CLOCKS_PER_CLICK)
        midi.addTrackName(TRACK_EXERCISE, 0, "Exercise")

        time = 0.0
        for item in items:
            duration = float(DURATION_BEATS.get(item.duration, 1))
            for pitch in item.target_pitches:
                midi.addNote(
                    track=TRACK_EXERCISE,
                    channel=CHANNEL_PIANO,
                    pitch=pitch,
                    time=time,
                    duration=duration,
                    volume=self.velocity,
                )
            time += duration

        return midi

    def export(self, items: list[ExerciseItem], output_path: str) -> None:
        """
        Render a round to a Standard MIDI File.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        midi = self.build(items)
        with open(output_path, "wb") as f:
            midi.writeFile(f)
        logger.info("Wrote %d item(s) to %s at %d BPM", len(items), output_path, self.tempo)
