"""Episode resolution against the Listen Notes podcast search API."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from src.insight.errors import ResolverError
from src.insight.models import EpisodeMatch, TranscriptPayload
from src.insight.payloads import normalize_transcript

logger = logging.getLogger(__name__)


class PodcastSearch(Protocol):
    """Capability the resolver needs from a podcast catalog."""

    def search(self, query: str) -> list[dict[str, Any]]: ...

    def get_transcript(self, episode_id: str) -> Any: ...


class ListenNotesSearch:
    """Thin httpx client for the Listen Notes v2 API.

    Each call opens and closes its own client, so an instance holds no
    sockets between requests.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://listen-api.listennotes.com/api/v2",
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def _open_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            headers={"X-ListenAPI-Key": self._api_key},
            timeout=self._timeout,
            transport=self._transport,
        )

    def search(self, query: str) -> list[dict[str, Any]]:
        with self._open_client() as client:
            response = client.get(
                "/search",
                params={"q": query, "type": "episode", "len_min": 1, "sort_by_date": 0},
            )
            response.raise_for_status()
            results = response.json().get("results") or []
        return list(results)

    def get_transcript(self, episode_id: str) -> Any:
        with self._open_client() as client:
            response = client.get(f"/episodes/{episode_id}", params={"show_transcript": 1})
            response.raise_for_status()
            return response.json().get("transcript")


def build_query(title: str, show_name: str | None) -> str:
    """Quote the show name so the search favours exact show matches."""
    return f'"{show_name}" {title}' if show_name else title


def _candidate_show(candidate: dict[str, Any]) -> str:
    podcast = candidate.get("podcast") or {}
    return str(podcast.get("title_original") or "")


def pick_candidate(candidates: list[dict[str, Any]], show_name: str | None) -> dict[str, Any]:
    """Choose the candidate whose show best matches *show_name*.

    Falls back to the first (most relevant) candidate when no show name is
    known or none of the candidates match it.
    """
    if not show_name:
        return candidates[0]

    wanted = show_name.lower()
    for candidate in candidates:
        found = _candidate_show(candidate).lower()
        if found and (found in wanted or wanted in found):
            logger.info(
                "Matched episode %r from show %r",
                candidate.get("title_original"),
                _candidate_show(candidate),
            )
            return candidate

    logger.warning(
        "No show match for %r; using best result from %r",
        show_name,
        _candidate_show(candidates[0]),
    )
    return candidates[0]


def _to_match(candidate: dict[str, Any], show_name: str | None) -> EpisodeMatch:
    return EpisodeMatch(
        id=str(candidate.get("id", "")),
        canonical_title=str(candidate.get("title_original") or ""),
        canonical_show_name=_candidate_show(candidate) or show_name,
        audio_url=candidate.get("audio") or None,
        thumbnail_url=candidate.get("thumbnail") or None,
        has_transcript=bool(candidate.get("transcript")),
    )


class EpisodeResolver:
    """Resolve a free-text title/show pair to a catalog episode."""

    def __init__(self, search: PodcastSearch) -> None:
        self._search = search

    def resolve(self, title: str, show_name: str | None = None) -> EpisodeMatch | None:
        """Search once and disambiguate.

        Returns:
            The chosen match, or ``None`` when the search has no results.

        Raises:
            ResolverError: If the search service cannot be reached or errors.
        """
        query = build_query(title, show_name)
        logger.info("Searching podcast catalog for: %s", query)

        try:
            candidates = self._search.search(query)
        except Exception as exc:
            raise ResolverError(
                "Failed to search for podcast episode", detail=str(exc)
            ) from exc

        if not candidates:
            return None

        return _to_match(pick_candidate(candidates, show_name), show_name)

    def fetch_transcript(self, match: EpisodeMatch) -> TranscriptPayload | None:
        """Load the full transcript of a match that advertises one.

        The search result only flags that a transcript exists; the text itself
        comes from the episode endpoint and is stored on *match*. A failure
        here is not fatal: the pipeline can still transcribe audio.
        """
        if match.embedded_transcript is not None:
            return match.embedded_transcript
        if not match.has_transcript:
            return None

        try:
            raw = self._search.get_transcript(match.id)
        except Exception:
            logger.warning("Failed to load transcript for episode %s", match.id, exc_info=True)
            return None
        match.embedded_transcript = normalize_transcript(raw)
        return match.embedded_transcript
