"""Notion endpoint: save a processed insight as a database page."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.api.models import (
    ErrorResponse,
    NotionPageData,
    SaveToNotionRequest,
    SaveToNotionResponse,
    error_body,
)
from src.config import settings
from src.notion.writer import NotionError, NotionInsight, NotionWriter

logger = logging.getLogger(__name__)

router = APIRouter()


def get_notion_writer() -> NotionWriter:
    return NotionWriter(settings.notion_api_key, settings.notion_database_id)


def _summary_list(summary: list[str] | str | None) -> list[str]:
    if summary is None:
        return []
    if isinstance(summary, str):
        return [summary] if summary.strip() else []
    return [s for s in summary if s.strip()]


@router.post(
    "/save-to-notion",
    response_model=SaveToNotionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def save_to_notion(body: SaveToNotionRequest) -> SaveToNotionResponse | JSONResponse:
    """Create a Notion page from an InsightResult and the original reference."""
    if not body.title or not body.title.strip():
        return JSONResponse(status_code=400, content=error_body("Title is required"))

    insight = NotionInsight(
        title=body.title.strip(),
        show_name=body.show_name,
        transcript=body.transcript,
        summary=_summary_list(body.summary),
        source_url=body.spotify_url,
        thumbnail_url=body.thumbnail_url,
        timestamp_seconds=body.timestamp_seconds or 0,
        manual_mode=body.manual_mode,
    )

    try:
        page = await asyncio.to_thread(get_notion_writer().save, insight)
    except NotionError as exc:
        logger.error("Notion save error: %s | detail: %s", exc.message, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))
    except Exception:
        logger.exception("Notion save error for %r", insight.title)
        return JSONResponse(status_code=500, content=error_body("Failed to save to Notion"))

    return SaveToNotionResponse(data=NotionPageData(notion_page_id=page.id, notion_url=page.url))
