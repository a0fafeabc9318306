"""Three-bullet summarization of a transcript segment."""

from __future__ import annotations

import logging
import re
from typing import Protocol

import anthropic
import openai
from anthropic import Anthropic
from anthropic.types import TextBlock
from openai import OpenAI

from src.insight.errors import SummarizationError

logger = logging.getLogger(__name__)

MAX_BULLETS = 3

SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes podcast insights. "
    "Create exactly 3 concise bullet points that capture the key takeaways "
    "from the transcript. Each bullet should be actionable or insightful. "
    "Keep each bullet under 100 characters. "
    "Format as: - Point one\n- Point two\n- Point three"
)

_BULLET_RE = re.compile(r"^(?:[-•*]|\d+\.)\s+")

_FAILURE_MESSAGE = "Failed to summarize transcript"


class LanguageModelService(Protocol):
    """Single-shot text completion."""

    def complete(self, system: str, prompt: str) -> str: ...


class OpenAICompatibleLanguageModel:
    """Chat completions over any OpenAI-compatible endpoint (Groq by default).

    The SDK client is opened per call unless one is injected.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-8b-instant",
        base_url: str | None = "https://api.groq.com/openai/v1",
        timeout: float = 30.0,
        client: OpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client = client
        self._model = model

    def _open_client(self) -> OpenAI:
        if not self._api_key:
            raise SummarizationError(_FAILURE_MESSAGE, detail="No language-model API key configured")
        return OpenAI(api_key=self._api_key, base_url=self._base_url, timeout=self._timeout)

    def complete(self, system: str, prompt: str) -> str:
        if self._client is not None:
            return self._complete(self._client, system, prompt)
        with self._open_client() as client:
            return self._complete(client, system, prompt)

    def _complete(self, client: OpenAI, system: str, prompt: str) -> str:
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.7,
                max_tokens=300,
            )
        except openai.APIStatusError as exc:
            raise SummarizationError(
                _FAILURE_MESSAGE,
                detail=f"status={exc.status_code} message={exc.message} body={exc.body}",
            ) from exc
        except openai.APIError as exc:
            raise SummarizationError(_FAILURE_MESSAGE, detail=exc.message) from exc

        return response.choices[0].message.content or ""


class AnthropicLanguageModel:
    """Claude messages API; the client is opened per call unless injected."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        timeout: float = 30.0,
        client: Anthropic | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._client = client
        self._model = model

    def _open_client(self) -> Anthropic:
        if not self._api_key:
            raise SummarizationError(_FAILURE_MESSAGE, detail="No Anthropic API key configured")
        return Anthropic(api_key=self._api_key, timeout=self._timeout)

    def complete(self, system: str, prompt: str) -> str:
        if self._client is not None:
            return self._complete(self._client, system, prompt)
        with self._open_client() as client:
            return self._complete(client, system, prompt)

    def _complete(self, client: Anthropic, system: str, prompt: str) -> str:
        try:
            response = client.messages.create(
                model=self._model,
                max_tokens=300,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as exc:
            raise SummarizationError(
                _FAILURE_MESSAGE,
                detail=f"status={exc.status_code} message={exc.message} body={exc.body}",
            ) from exc
        except anthropic.APIError as exc:
            raise SummarizationError(_FAILURE_MESSAGE, detail=exc.message) from exc

        # We always request plain text so the first block should be a TextBlock.
        block = response.content[0] if response.content else None
        if not isinstance(block, TextBlock):
            raise SummarizationError(
                _FAILURE_MESSAGE,
                detail=f"Expected TextBlock from Claude, got {type(block).__name__}",
            )
        return block.text


def parse_bullets(content: str) -> list[str]:
    """Extract up to three bullet lines from free-text model output.

    Lines starting with ``-``, ``•``, ``*`` or ``1.``-style markers followed by
    whitespace are kept with the marker removed. If the model ignored the
    format entirely, the whole response becomes a single bullet.
    """
    bullets: list[str] = []
    for line in content.splitlines():
        line = line.strip()
        match = _BULLET_RE.match(line)
        if not match:
            continue
        text = line[match.end():].strip()
        if text:
            bullets.append(text)

    if not bullets:
        return [content.strip()]
    return bullets[:MAX_BULLETS]


def build_prompt(transcript: str, title: str) -> str:
    return (
        f'Podcast Episode: "{title}"\n\n'
        f"Transcript segment:\n{transcript}\n\n"
        "Provide 3 bullet point takeaways:"
    )


class Summarizer:
    """Condense a transcript segment into at most three takeaways."""

    def __init__(self, model: LanguageModelService) -> None:
        self._model = model

    def summarize(self, transcript_text: str, episode_title: str) -> list[str]:
        """Call the language model once and parse its bullets.

        Raises:
            SummarizationError: If the model call fails or returns nothing.
        """
        logger.info("Summarizing transcript (%d chars)...", len(transcript_text))
        try:
            content = self._model.complete(SYSTEM_PROMPT, build_prompt(transcript_text, episode_title))
        except SummarizationError:
            raise
        except Exception as exc:
            raise SummarizationError(_FAILURE_MESSAGE, detail=str(exc)) from exc

        if not content.strip():
            raise SummarizationError(_FAILURE_MESSAGE, detail="Model returned an empty response")

        logger.info("Summary received: %s...", content[:100])
        return parse_bullets(content)
