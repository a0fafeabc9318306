"""Extraction of the transcript window around a playback timestamp."""

from __future__ import annotations

from src.insight.models import FlatText, TimedSegments, TranscriptPayload

# Flat transcripts carry no timing, so the position is estimated from speech rate.
WORDS_PER_MINUTE = 150
WORDS_BEFORE = 25
WORDS_AFTER = 75

# Grace period applied to both ends of the window for time-coded transcripts.
GRACE_SECONDS = 5


def _extract_flat(text: str, timestamp_seconds: int) -> str:
    words = text.split()
    word_index = int(timestamp_seconds / 60 * WORDS_PER_MINUTE)
    start = max(0, word_index - WORDS_BEFORE)
    end = min(len(words), word_index + WORDS_AFTER)
    return " ".join(words[start:end])


def _extract_timed(payload: TimedSegments, timestamp_seconds: int, window_seconds: int) -> str:
    window_start = timestamp_seconds - GRACE_SECONDS
    window_end = timestamp_seconds + window_seconds + GRACE_SECONDS
    texts = [
        seg.text.strip()
        for seg in payload.segments
        if seg.start_seconds <= window_end and seg.end_seconds > window_start
    ]
    return " ".join(t for t in texts if t)


def extract(
    payload: TranscriptPayload | None,
    timestamp_seconds: int,
    window_seconds: int = 30,
) -> str | None:
    """Return the transcript text around *timestamp_seconds*.

    Flat text is sliced by an estimated word offset (25 words before, 75
    after); time-coded segments are kept when they overlap the window
    widened by five seconds on each side.

    Returns:
        The extracted text (possibly empty), or ``None`` when the payload
        shape is not supported.
    """
    if isinstance(payload, FlatText):
        return _extract_flat(payload.text, timestamp_seconds)
    if isinstance(payload, TimedSegments):
        return _extract_timed(payload, timestamp_seconds, window_seconds)
    return None
