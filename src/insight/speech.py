"""Speech-to-text for extracted audio snippets."""

from __future__ import annotations

import logging
from typing import Protocol

from openai import APIError, APIStatusError, OpenAI

from src.insight.errors import TranscriptionError
from src.insight.models import AudioSnippet

logger = logging.getLogger(__name__)

_FAILURE_MESSAGE = "Failed to transcribe audio"


class SpeechToTextService(Protocol):
    """Turns raw audio bytes into plain text."""

    def transcribe(self, audio: bytes, filename: str) -> str: ...


class WhisperSpeechService:
    """Whisper over any OpenAI-compatible endpoint (Groq by default).

    The SDK client is opened per call unless one is injected, so a missing
    key only matters once audio actually needs transcribing.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-large-v3",
        base_url: str | None = "https://api.groq.com/openai/v1",
        timeout: float = 60.0,
        client: OpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client = client
        self._model = model

    def _open_client(self) -> OpenAI:
        if not self._api_key:
            raise TranscriptionError(
                _FAILURE_MESSAGE, detail="No speech-to-text API key configured"
            )
        return OpenAI(api_key=self._api_key, base_url=self._base_url, timeout=self._timeout)

    def transcribe(self, audio: bytes, filename: str) -> str:
        if self._client is not None:
            return self._transcribe(self._client, audio, filename)
        with self._open_client() as client:
            return self._transcribe(client, audio, filename)

    def _transcribe(self, client: OpenAI, audio: bytes, filename: str) -> str:
        try:
            response = client.audio.transcriptions.create(
                model=self._model,
                file=(filename, audio, "audio/mpeg"),
                response_format="text",
            )
        except APIStatusError as exc:
            raise TranscriptionError(
                _FAILURE_MESSAGE,
                detail=f"status={exc.status_code} message={exc.message} body={exc.body}",
            ) from exc
        except APIError as exc:
            raise TranscriptionError(_FAILURE_MESSAGE, detail=exc.message) from exc

        # response_format="text" yields a bare string; older SDKs wrap it
        return response if isinstance(response, str) else str(getattr(response, "text", ""))


class AssemblyAISpeechService:
    """AssemblyAI SDK transcription.

    The SDK accepts bytes directly, no temp file needed.
    """

    def __init__(self, api_key: str, speech_model: str = "universal-3-pro") -> None:
        self._api_key = api_key
        self._speech_model = speech_model

    def transcribe(self, audio: bytes, filename: str) -> str:
        if not self._api_key:
            raise TranscriptionError(_FAILURE_MESSAGE, detail="No AssemblyAI API key configured")

        import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

        aai.settings.api_key = self._api_key
        config = aai.TranscriptionConfig(speech_models=[self._speech_model])
        try:
            transcript = aai.Transcriber().transcribe(audio, config=config)
        except Exception as exc:
            # Invalid API key, network failure or provider outage
            raise TranscriptionError(_FAILURE_MESSAGE, detail=str(exc)) from exc

        if transcript.status == aai.TranscriptStatus.error:
            raise TranscriptionError(
                _FAILURE_MESSAGE,
                detail=str(transcript.error),
            )
        return transcript.text or ""


class SpeechToText:
    """Transcribe a local AudioSnippet through a SpeechToTextService.

    One call, no retry: a failure here ends the run.
    """

    def __init__(self, service: SpeechToTextService) -> None:
        self._service = service

    def transcribe(self, snippet: AudioSnippet) -> str:
        logger.info(
            "Transcribing audio file: %s (%d bytes)", snippet.local_path, snippet.byte_size
        )
        try:
            audio = snippet.local_path.read_bytes()
            text = self._service.transcribe(audio, snippet.local_path.name)
        except TranscriptionError:
            raise
        except Exception as exc:
            raise TranscriptionError(_FAILURE_MESSAGE, detail=str(exc)) from exc

        logger.info("Transcription received: %s...", text[:100])
        return text
