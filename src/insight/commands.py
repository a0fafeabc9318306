"""Execution of external command-line tools (curl, ffmpeg).

Commands are always argument lists run without a shell, so URLs and paths
are never interpolated into a command string.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """A command exited non-zero or could not be started."""

    def __init__(self, command: Sequence[str], returncode: int | None, output: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        super().__init__(f"{self.command[0]} failed with code {returncode}: {output.strip()[:500]}")


class CommandTimeoutError(CommandError):
    """A command did not finish within its timeout."""

    def __init__(self, command: Sequence[str], timeout: float) -> None:
        self.timeout = timeout
        super().__init__(command, None, f"timed out after {timeout:g}s")


class CommandExecutor(Protocol):
    """Runs a command to completion and returns its stdout."""

    def run(self, command: Sequence[str], timeout: float) -> str: ...


class SubprocessExecutor:
    """CommandExecutor backed by :func:`subprocess.run`."""

    def run(self, command: Sequence[str], timeout: float) -> str:
        cmd = [str(part) for part in command]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(cmd, timeout) from exc
        except OSError as exc:
            # Binary missing or not executable
            raise CommandError(cmd, None, str(exc)) from exc

        if proc.returncode != 0:
            logger.error("Command failed with code %d: %s", proc.returncode, proc.stderr.strip())
            raise CommandError(cmd, proc.returncode, proc.stderr or proc.stdout)
        return proc.stdout
