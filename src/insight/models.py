"""Data models for the insight-acquisition pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class EpisodeReference:
    """What the user is listening to, fully normalised at the pipeline entry."""

    title: str
    show_name: str | None = None
    timestamp_seconds: int = 0
    source_url: str | None = None


@dataclass(frozen=True)
class FlatText:
    """A transcript delivered as one block of text with no timing."""

    text: str


@dataclass(frozen=True)
class TimedSegment:
    """One time-coded piece of a transcript (times in seconds)."""

    start_seconds: float
    end_seconds: float
    text: str


@dataclass(frozen=True)
class TimedSegments:
    """A transcript delivered as ordered, time-coded segments."""

    segments: tuple[TimedSegment, ...]


TranscriptPayload = FlatText | TimedSegments


@dataclass
class EpisodeMatch:
    """A search service's resolution of a reference to a catalog episode."""

    id: str
    canonical_title: str
    canonical_show_name: str | None = None
    audio_url: str | None = None
    thumbnail_url: str | None = None
    has_transcript: bool = False
    embedded_transcript: TranscriptPayload | None = None


class TranscriptOrigin(str, Enum):
    """Where the transcript text for a run came from."""

    EMBEDDED = "embedded"
    TRANSCRIBED = "transcribed"


@dataclass(frozen=True)
class TranscriptSegment:
    """The window of transcript text handed to the summarizer."""

    text: str
    origin: TranscriptOrigin


@dataclass
class AudioSnippet:
    """A short local audio clip cut from a remote episode."""

    local_path: Path
    start_offset_seconds: int
    duration_seconds: int
    byte_size: int


@dataclass
class InsightResult:
    """Outcome of one pipeline run, ready for the response or the Notion writer."""

    episode_title: str
    show_name: str
    timestamp_seconds: int
    thumbnail_url: str | None = None
    transcript: str | None = None
    summary: list[str] | None = None
    manual_mode: bool = False
    transcript_origin: TranscriptOrigin | None = None
    message: str | None = None


@dataclass
class AuditRecord:
    """One row for the audit log sink."""

    title: str
    show_name: str | None
    timestamp_seconds: int
    source_url: str | None = None
    outcome: str = "done"
