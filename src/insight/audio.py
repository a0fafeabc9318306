"""Audio snippet extraction with curl and ffmpeg.

Two strategies are supported (see :class:`AudioFetchStrategy`):

- ``DOWNLOAD_THEN_TRIM`` downloads the whole episode with curl, then cuts
  the snippet out locally with ffmpeg. Slow for long episodes but works with
  hosts that reject anything that does not look like a browser.
- ``RANGED_SEEK`` lets ffmpeg seek in the remote file directly, fetching
  only the byte ranges it needs.

Every file created here is removed again if extraction fails; on success the
caller owns the snippet and must release it (see :meth:`AudioFetcher.snippet`).
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from src.insight.commands import CommandError, CommandExecutor
from src.insight.errors import AudioExtractionError
from src.insight.models import AudioSnippet
from src.pipeline_config import AudioFetchStrategy, PipelineConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

_FAILURE_MESSAGE = "Failed to extract audio snippet"


def remove_files(*paths: Path) -> None:
    """Delete each path if it exists; failures are logged, not raised."""
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.error("Failed to delete temp file %s", path, exc_info=True)


def release(snippet: AudioSnippet) -> None:
    """Delete a snippet's file."""
    remove_files(snippet.local_path)


class AudioFetcher:
    """Obtain a short, local, trimmed audio clip from a remote episode URL."""

    def __init__(
        self,
        executor: CommandExecutor,
        temp_dir: str | Path,
        config: PipelineConfig | None = None,
        curl_binary: str = "curl",
        ffmpeg_binary: str = "ffmpeg",
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._executor = executor
        self._temp_dir = Path(temp_dir)
        self._config = config or PipelineConfig()
        self._curl = curl_binary
        self._ffmpeg = ffmpeg_binary
        self._user_agent = user_agent

    def _new_paths(self) -> tuple[Path, Path]:
        """Per-run file names, unique across concurrent runs sharing the temp dir."""
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        run_id = f"{int(time.time() * 1000)}_{uuid.uuid4().hex}"
        return (
            self._temp_dir / f"full_{run_id}.mp3",
            self._temp_dir / f"snippet_{run_id}.mp3",
        )

    def _encode_args(self, duration: int, output: Path) -> list[str]:
        return [
            "-t", str(duration),
            "-c:a", "libmp3lame",
            "-q:a", "4",
            "-loglevel", "error",
            str(output),
        ]

    def _download(self, audio_url: str, full_path: Path) -> None:
        cmd = [
            self._curl,
            "-L",
            "-sS",
            "-A", self._user_agent,
            "-o", str(full_path),
            "--url", audio_url,
        ]
        logger.info("Downloading audio with curl...")
        self._executor.run(cmd, timeout=self._config.download_timeout)

        size = full_path.stat().st_size
        logger.info("Downloaded: %d bytes", size)
        if size < self._config.min_download_bytes:
            raise AudioExtractionError(
                _FAILURE_MESSAGE,
                detail=f"Downloaded file too small ({size} bytes)",
            )

    def _trim(self, full_path: Path, snippet_path: Path, start: int, duration: int) -> None:
        cmd = [
            self._ffmpeg,
            "-y",
            "-ss", str(start),
            "-i", str(full_path),
            *self._encode_args(duration, snippet_path),
        ]
        logger.info("Extracting snippet with ffmpeg...")
        self._executor.run(cmd, timeout=self._config.trim_timeout)

    def _seek(self, audio_url: str, snippet_path: Path, start: int, duration: int) -> None:
        cmd = [
            self._ffmpeg,
            "-y",
            "-user_agent", self._user_agent,
            "-ss", str(start),
            "-i", audio_url,
            *self._encode_args(duration, snippet_path),
        ]
        logger.info("Extracting snippet from remote stream with ffmpeg...")
        self._executor.run(cmd, timeout=self._config.download_timeout)

    def extract_snippet(
        self,
        audio_url: str,
        timestamp_seconds: int,
        window_seconds: int | None = None,
        strategy: AudioFetchStrategy | None = None,
    ) -> AudioSnippet:
        """Cut ``[t - lead_in, t - lead_in + window + padding)`` out of *audio_url*.

        Raises:
            AudioExtractionError: On download/trim failure or an undersized
                output file. No temp file survives the failure.
        """
        window = self._config.window_seconds if window_seconds is None else window_seconds
        strategy = strategy or self._config.fetch_strategy
        start = max(0, timestamp_seconds - self._config.lead_in_seconds)
        duration = window + self._config.padding_seconds

        full_path, snippet_path = self._new_paths()
        logger.info("Extracting audio from %ds for %ds (%s)", start, duration, strategy.value)
        logger.debug("Audio URL: %s", audio_url[:100])

        succeeded = False
        try:
            if strategy is AudioFetchStrategy.RANGED_SEEK:
                self._seek(audio_url, snippet_path, start, duration)
            else:
                self._download(audio_url, full_path)
                self._trim(full_path, snippet_path, start, duration)
                remove_files(full_path)

            size = snippet_path.stat().st_size
            logger.info("Audio snippet created: %d bytes", size)
            if size < self._config.min_snippet_bytes:
                raise AudioExtractionError(
                    _FAILURE_MESSAGE,
                    detail=f"Audio snippet too small ({size} bytes)",
                )

            succeeded = True
            return AudioSnippet(
                local_path=snippet_path,
                start_offset_seconds=start,
                duration_seconds=duration,
                byte_size=size,
            )
        except (CommandError, OSError) as exc:
            raise AudioExtractionError(_FAILURE_MESSAGE, detail=str(exc)) from exc
        finally:
            if not succeeded:
                remove_files(full_path, snippet_path)

    @contextmanager
    def snippet(
        self,
        audio_url: str,
        timestamp_seconds: int,
        window_seconds: int | None = None,
        strategy: AudioFetchStrategy | None = None,
    ) -> Iterator[AudioSnippet]:
        """Extract a snippet and delete it when the block exits, however it exits."""
        clip = self.extract_snippet(audio_url, timestamp_seconds, window_seconds, strategy)
        try:
            yield clip
        finally:
            release(clip)
