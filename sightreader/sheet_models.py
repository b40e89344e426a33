"""Data models for sheet music rendering outputs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VexflowNote:
    """A single VexFlow note or chord token for one exercise item."""

    keys: list[str]
    duration: str
    beam_group: int | None = None
    color: str = "black"


@dataclass(frozen=True)
class ScoreDocument:
    """Neutral single-stave score consumed by the VexFlow renderer."""

    title: str
    clef: str
    key_signature: str
    time_signature: str
    beats: int
    beat_value: int
    width: int
    notes: list[VexflowNote]
