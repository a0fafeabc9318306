"""Notion page writer for saved insights.

Pages are created in a database with these properties: ``Name`` (title),
``Show`` (rich text), ``Spotify URL`` (url), ``Timestamp`` (number) and
``Saved`` (date).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"

# Notion rejects rich_text content longer than 2000 characters
MAX_TEXT_CHARS = 2000
MAX_TITLE_CHARS = 100

UNKNOWN_SHOW = "Unknown Show"
MANUAL_NOTES_PLACEHOLDER = "(Podcast not found in database - add your own notes here!)"


class NotionError(Exception):
    """Saving to Notion failed; ``detail`` holds the upstream response."""

    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


@dataclass
class NotionInsight:
    """Everything needed to render one insight page."""

    title: str
    show_name: str | None = None
    transcript: str | None = None
    summary: list[str] = field(default_factory=list)
    source_url: str | None = None
    thumbnail_url: str | None = None
    timestamp_seconds: int = 0
    manual_mode: bool = False


@dataclass
class NotionPage:
    id: str
    url: str | None = None


def format_time(seconds: int | float) -> str:
    """Format seconds as M:SS."""
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02d}"


def _text(content: str) -> list[dict[str, Any]]:
    return [{"text": {"content": content}}]


def _heading(content: str) -> dict[str, Any]:
    return {"object": "block", "type": "heading_2", "heading_2": {"rich_text": _text(content)}}


def _paragraph(content: str) -> dict[str, Any]:
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": _text(content)}}


def build_blocks(insight: NotionInsight) -> list[dict[str, Any]]:
    """Render the page body: takeaways, transcript (or a notes placeholder), source callout."""
    blocks: list[dict[str, Any]] = []

    if insight.summary:
        summary_text = "\n".join(f"• {bullet}" for bullet in insight.summary)
        blocks.append(_heading("✨ Key Takeaways"))
        blocks.append(_paragraph(summary_text[:MAX_TEXT_CHARS]))
        blocks.append({"object": "block", "type": "divider", "divider": {}})

    if insight.transcript:
        blocks.append(_heading("📝 Transcript"))
        blocks.append(_paragraph(insight.transcript[:MAX_TEXT_CHARS]))
    else:
        blocks.append(_heading("📝 Your Notes"))
        blocks.append(_paragraph(MANUAL_NOTES_PLACEHOLDER))

    show = insight.show_name or UNKNOWN_SHOW
    blocks.append(
        {
            "object": "block",
            "type": "callout",
            "callout": {
                "icon": {"type": "emoji", "emoji": "🎧"},
                "rich_text": _text(f'From "{show}" at {format_time(insight.timestamp_seconds)}'),
            },
        }
    )
    return blocks


def build_page(database_id: str, insight: NotionInsight) -> dict[str, Any]:
    """Build the request body for ``POST /v1/pages``."""
    page: dict[str, Any] = {
        "parent": {"database_id": database_id},
        "icon": {"type": "emoji", "emoji": "✏️" if insight.manual_mode else "💡"},
        "properties": {
            "Name": {"title": _text(insight.title[:MAX_TITLE_CHARS])},
            "Show": {"rich_text": _text(insight.show_name or UNKNOWN_SHOW)},
            "Spotify URL": {"url": insight.source_url or None},
            "Timestamp": {"number": insight.timestamp_seconds or 0},
            "Saved": {"date": {"start": datetime.now(UTC).isoformat()}},
        },
        "children": build_blocks(insight),
    }
    if insight.thumbnail_url:
        page["cover"] = {"type": "external", "external": {"url": insight.thumbnail_url}}
    return page


class NotionWriter:
    """Create insight pages through the Notion REST API.

    A client is opened per save and closed before returning.
    """

    def __init__(
        self,
        api_key: str,
        database_id: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._database_id = database_id
        self._timeout = timeout
        self._transport = transport

    def _open_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=NOTION_API_URL,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Notion-Version": NOTION_VERSION,
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    def save(self, insight: NotionInsight) -> NotionPage:
        """Create the page and return its id and URL.

        Raises:
            NotionError: If no database is configured or the API call fails.
        """
        if not self._database_id:
            raise NotionError("Notion database ID not configured")

        try:
            with self._open_client() as client:
                response = client.post("/pages", json=build_page(self._database_id, insight))
        except httpx.HTTPError as exc:
            raise NotionError("Failed to save to Notion", detail=str(exc)) from exc

        if response.is_error:
            raise NotionError(
                "Failed to save to Notion",
                detail=f"status={response.status_code} body={response.text}",
            )

        data = response.json()
        logger.info("Saved to Notion: %s", data.get("id"))
        return NotionPage(id=str(data.get("id", "")), url=data.get("url"))
