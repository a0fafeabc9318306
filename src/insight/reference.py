"""Normalisation of raw capture input into an EpisodeReference."""

from __future__ import annotations

import math

from src.insight.errors import InsightValidationError
from src.insight.models import EpisodeReference


def parse_timestamp(value: int | float | str | None) -> int:
    """Convert a playback position into whole seconds.

    Accepts plain seconds (number or numeric string) and player clock
    strings such as ``"1:23:45"`` or ``"23:45"``. Anything unparseable or
    negative becomes ``0``.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        if not text:
            return 0
        parts = text.split(":")
        if len(parts) > 3:
            return 0
        try:
            numbers = [float(p) for p in parts]
        except ValueError:
            return 0
        seconds = 0.0
        for number in numbers:
            seconds = seconds * 60 + number

    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return 0
    return int(seconds)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_reference(
    title: str | None,
    show_name: str | None = None,
    timestamp: int | float | str | None = None,
    source_url: str | None = None,
) -> EpisodeReference:
    """Build a fully-populated EpisodeReference from request fields.

    Raises:
        InsightValidationError: If *title* is missing or blank.
    """
    clean_title = _clean(title)
    if clean_title is None:
        raise InsightValidationError("Title is required")

    return EpisodeReference(
        title=clean_title,
        show_name=_clean(show_name),
        timestamp_seconds=parse_timestamp(timestamp),
        source_url=_clean(source_url),
    )
