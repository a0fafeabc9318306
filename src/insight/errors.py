"""Error taxonomy for the insight pipeline.

Every stage failure is raised as a subclass of :class:`InsightError`. The
``message`` is safe to show to the user; ``detail`` carries upstream status
codes and bodies and is only ever written to the server log.
"""

from __future__ import annotations


class InsightError(Exception):
    """Base class for failures that end a pipeline run."""

    status_code: int = 500
    kind: str = "internal"

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InsightValidationError(InsightError):
    """Required input is missing; raised before any external call."""

    status_code = 400
    kind = "validation"


class ResolverError(InsightError):
    """The podcast search service was unreachable or returned an error."""

    kind = "resolver_transport"


class NoAudioAvailableError(InsightError):
    """The episode was found but has neither a usable transcript nor audio."""

    status_code = 404
    kind = "no_audio_available"


class AudioExtractionError(InsightError):
    """Downloading or trimming the episode audio failed."""

    kind = "audio_extraction"


class TranscriptionError(InsightError):
    """The speech-to-text service failed."""

    kind = "transcription"


class EmptyTranscriptError(InsightError):
    """A transcript segment was resolved but contains no text."""

    kind = "empty_transcript"


class SummarizationError(InsightError):
    """The language-model call failed or returned nothing."""

    kind = "summarization"
