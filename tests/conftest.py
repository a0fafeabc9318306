"""Shared fakes for pipeline tests (no external binaries or API keys required)."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from src.insight.commands import CommandError


class FakeExecutor:
    """Stands in for curl/ffmpeg by writing files of a chosen size.

    curl writes to the path after ``-o``; ffmpeg writes to its last argument.
    """

    def __init__(
        self,
        download_bytes: int = 50_000,
        snippet_bytes: int = 5_000,
        fail_on: str | None = None,
    ) -> None:
        self.download_bytes = download_bytes
        self.snippet_bytes = snippet_bytes
        self.fail_on = fail_on
        self.commands: list[tuple[list[str], float]] = []

    def run(self, command: Sequence[str], timeout: float) -> str:
        cmd = list(command)
        self.commands.append((cmd, timeout))
        binary = cmd[0]
        if binary == "curl":
            Path(cmd[cmd.index("-o") + 1]).write_bytes(b"\x00" * self.download_bytes)
        elif binary == "ffmpeg":
            Path(cmd[-1]).write_bytes(b"\xff" * self.snippet_bytes)
        if binary == self.fail_on:
            raise CommandError(cmd, 1, f"{binary}: simulated failure")
        return ""

    def binaries(self) -> list[str]:
        return [cmd[0] for cmd, _ in self.commands]


class FakeSearch:
    """In-memory PodcastSearch."""

    def __init__(
        self,
        results: list[dict] | None = None,  # type: ignore[type-arg]
        transcript: object = None,
        error: Exception | None = None,
    ) -> None:
        self.results = results or []
        self.transcript = transcript
        self.error = error
        self.queries: list[str] = []
        self.transcript_requests: list[str] = []

    def search(self, query: str) -> list[dict]:  # type: ignore[type-arg]
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.results

    def get_transcript(self, episode_id: str) -> object:
        self.transcript_requests.append(episode_id)
        if isinstance(self.transcript, Exception):
            raise self.transcript
        return self.transcript


@pytest.fixture
def make_executor() -> type[FakeExecutor]:
    return FakeExecutor


@pytest.fixture
def make_search() -> type[FakeSearch]:
    return FakeSearch


@pytest.fixture
def audio_dir(tmp_path: Path) -> Path:
    return tmp_path / "temp"
