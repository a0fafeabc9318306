"""Normalisation of raw transcript payloads from the podcast search service.

The search service returns transcripts either as a single string or as a
list of time-coded objects whose field names vary between sources::

    [{"start": 10.0, "end": 15.0, "text": "..."}]
    [{"start_time": 10.0, "end_time": 15.0, "words": "..."}]

:func:`normalize_transcript` decides the shape once so the segmenter only
ever sees :class:`FlatText` or :class:`TimedSegments`.
"""

from __future__ import annotations

import logging
from typing import Any

from src.insight.models import FlatText, TimedSegment, TimedSegments, TranscriptPayload

logger = logging.getLogger(__name__)

# Segments without an end time are assumed to last this long
DEFAULT_SEGMENT_SECONDS = 5.0


def _first_number(item: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = item.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                continue
    return None


def _first_text(item: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _parse_segment(item: dict[str, Any]) -> TimedSegment:
    start = _first_number(item, "start_time", "start")
    if start is None:
        start = 0.0
    end = _first_number(item, "end_time", "end")
    if end is None:
        end = start + DEFAULT_SEGMENT_SECONDS
    return TimedSegment(
        start_seconds=start,
        end_seconds=end,
        text=_first_text(item, "text", "words"),
    )


def normalize_transcript(raw: Any) -> TranscriptPayload | None:
    """Convert a raw transcript value into a tagged payload.

    Returns ``None`` for shapes the pipeline does not understand, which makes
    the caller fall back to audio extraction.
    """
    if isinstance(raw, (FlatText, TimedSegments)):
        return raw

    if isinstance(raw, str):
        return FlatText(raw)

    if isinstance(raw, list):
        if not all(isinstance(item, dict) for item in raw):
            logger.warning("Transcript list contains non-object entries; ignoring it")
            return None
        return TimedSegments(tuple(_parse_segment(item) for item in raw))

    if raw is not None:
        logger.warning("Unsupported transcript payload type: %s", type(raw).__name__)
    return None
