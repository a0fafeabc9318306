"""Tests for timestamp parsing, transcript payload normalisation and segment extraction."""

from __future__ import annotations

import pytest

from src.insight import segmenter
from src.insight.errors import InsightValidationError
from src.insight.models import FlatText, TimedSegment, TimedSegments
from src.insight.payloads import DEFAULT_SEGMENT_SECONDS, normalize_transcript
from src.insight.reference import normalize_reference, parse_timestamp


def numbered_words(n: int) -> FlatText:
    return FlatText(" ".join(f"w{i}" for i in range(n)))


# ---------------------------------------------------------------------------
# Reference normalisation
# ---------------------------------------------------------------------------


class TestParseTimestamp:
    def test_integer_seconds(self) -> None:
        assert parse_timestamp(125) == 125

    def test_float_is_floored(self) -> None:
        assert parse_timestamp(12.9) == 12

    def test_numeric_string(self) -> None:
        assert parse_timestamp("90") == 90

    def test_clock_strings(self) -> None:
        assert parse_timestamp("1:30") == 90
        assert parse_timestamp("1:02:05") == 3725

    @pytest.mark.parametrize("value", [None, "", "abc", "-5", -3, float("nan"), float("inf"), True, "1:2:3:4"])
    def test_unusable_values_become_zero(self, value: object) -> None:
        assert parse_timestamp(value) == 0  # type: ignore[arg-type]


class TestNormalizeReference:
    def test_strips_and_fills_defaults(self) -> None:
        ref = normalize_reference("  My Episode ", "  ", None, "")
        assert ref.title == "My Episode"
        assert ref.show_name is None
        assert ref.timestamp_seconds == 0
        assert ref.source_url is None

    def test_keeps_optional_fields(self) -> None:
        ref = normalize_reference("Ep", "Show", "2:00", "https://open.spotify.com/episode/x")
        assert ref.show_name == "Show"
        assert ref.timestamp_seconds == 120
        assert ref.source_url == "https://open.spotify.com/episode/x"

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_missing_title_rejected(self, title: str | None) -> None:
        with pytest.raises(InsightValidationError) as exc_info:
            normalize_reference(title)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Title is required"


# ---------------------------------------------------------------------------
# Payload normalisation
# ---------------------------------------------------------------------------


class TestNormalizeTranscript:
    def test_string_is_flat(self) -> None:
        assert normalize_transcript("hello world") == FlatText("hello world")

    def test_list_of_objects_is_timed(self) -> None:
        payload = normalize_transcript(
            [
                {"start": 0, "end": 4.5, "text": "first"},
                {"start_time": "5", "end_time": 9, "words": "second"},
            ]
        )
        assert isinstance(payload, TimedSegments)
        assert payload.segments[0] == TimedSegment(0.0, 4.5, "first")
        assert payload.segments[1] == TimedSegment(5.0, 9.0, "second")

    def test_missing_times_get_defaults(self) -> None:
        payload = normalize_transcript([{"text": "untimed"}, {"start": 20, "text": "open"}])
        assert isinstance(payload, TimedSegments)
        assert payload.segments[0].start_seconds == 0.0
        assert payload.segments[0].end_seconds == DEFAULT_SEGMENT_SECONDS
        assert payload.segments[1].end_seconds == 20 + DEFAULT_SEGMENT_SECONDS

    def test_already_normalised_passes_through(self) -> None:
        flat = FlatText("x")
        assert normalize_transcript(flat) is flat

    @pytest.mark.parametrize("raw", [None, 42, {"text": "not a list"}, ["a", "b"]])
    def test_unsupported_shapes(self, raw: object) -> None:
        assert normalize_transcript(raw) is None


# ---------------------------------------------------------------------------
# Segment extraction
# ---------------------------------------------------------------------------


class TestFlatExtraction:
    def test_one_minute_in(self) -> None:
        """150 wpm puts t=60 at word 150: keep words 125..224."""
        text = segmenter.extract(numbered_words(1000), 60)
        assert text is not None
        words = text.split()
        assert len(words) == 100
        assert words[0] == "w125"
        assert words[-1] == "w224"

    def test_clamped_at_start(self) -> None:
        text = segmenter.extract(numbered_words(1000), 0)
        assert text is not None
        words = text.split()
        assert words[0] == "w0"
        assert len(words) == 75

    def test_clamped_at_end(self) -> None:
        text = segmenter.extract(numbered_words(160), 60)
        assert text is not None
        words = text.split()
        assert words[0] == "w125"
        assert words[-1] == "w159"

    def test_past_the_end_is_empty(self) -> None:
        assert segmenter.extract(numbered_words(50), 600) == ""

    def test_result_is_contiguous_run_of_source_words(self) -> None:
        source = numbered_words(500)
        text = segmenter.extract(source, 37)
        assert text is not None
        assert text in source.text

    def test_whitespace_is_collapsed(self) -> None:
        assert segmenter.extract(FlatText("  a\n\nb\t c  "), 0) == "a b c"


class TestTimedExtraction:
    def test_second_segment_beyond_grace_boundary(self) -> None:
        payload = normalize_transcript(
            [{"start": 10, "end": 15, "text": "a"}, {"start": 50, "end": 55, "text": "b"}]
        )
        text = segmenter.extract(payload, 12, 30)
        assert text is not None
        assert "a" in text
        assert "b" not in text

    def test_window_with_grace(self) -> None:
        payload = TimedSegments(
            (
                TimedSegment(0, 50, "A"),
                TimedSegment(55, 70, "B"),
                TimedSegment(70, 95, "C"),
                TimedSegment(96, 120, "D"),
            )
        )
        # t=60, window 30: keep start <= 95 and end > 55
        assert segmenter.extract(payload, 60, 30) == "B C"

    def test_segment_ending_exactly_at_window_start_is_excluded(self) -> None:
        payload = TimedSegments((TimedSegment(40, 55, "early"), TimedSegment(56, 60, "late")))
        assert segmenter.extract(payload, 60, 30) == "late"

    def test_blank_segments_skipped(self) -> None:
        payload = TimedSegments(
            (TimedSegment(0, 5, "  one "), TimedSegment(5, 10, "   "), TimedSegment(10, 15, "two"))
        )
        assert segmenter.extract(payload, 0, 30) == "one two"

    def test_nothing_in_window(self) -> None:
        payload = TimedSegments((TimedSegment(0, 10, "intro"),))
        assert segmenter.extract(payload, 600, 30) == ""

    def test_window_size_is_respected(self) -> None:
        payload = TimedSegments((TimedSegment(100, 110, "far"),))
        assert segmenter.extract(payload, 60, 30) == ""
        assert segmenter.extract(payload, 60, 40) == "far"


class TestExtractPurity:
    def test_unsupported_payload(self) -> None:
        assert segmenter.extract(None, 10) is None

    def test_same_input_same_output(self) -> None:
        payload = numbered_words(400)
        assert segmenter.extract(payload, 90) == segmenter.extract(payload, 90)
