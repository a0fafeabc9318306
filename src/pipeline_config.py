"""Pipeline configuration: provider/strategy enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AudioFetchStrategy(str, Enum):
    """How the audio snippet is obtained from the remote episode file."""

    DOWNLOAD_THEN_TRIM = "download_then_trim"
    RANGED_SEEK = "ranged_seek"


class SpeechProvider(str, Enum):
    """Available speech-to-text backends."""

    OPENAI = "openai"
    ASSEMBLYAI = "assemblyai"


class LLMProvider(str, Enum):
    """Available language-model backends for summarization."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable tuning for a single insight pipeline run.

    ``window_seconds`` is the span of speech the user cares about; the audio
    snippet adds ``lead_in_seconds`` of context before the timestamp and
    ``padding_seconds`` in total around the window.
    """

    window_seconds: int = 30
    lead_in_seconds: int = 5
    padding_seconds: int = 10
    fetch_strategy: AudioFetchStrategy = AudioFetchStrategy.DOWNLOAD_THEN_TRIM

    # Hosts sometimes answer 200 with an HTML error page; anything this small is not audio.
    min_download_bytes: int = 10_000
    min_snippet_bytes: int = 1_000

    download_timeout: float = 180.0
    trim_timeout: float = 60.0
