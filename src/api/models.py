"""Pydantic request/response schemas for the Wisdom Vault API.

Field names are snake_case in Python and camelCase on the wire, matching
what the browser extension sends and expects.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.insight.models import InsightResult, TranscriptOrigin


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProcessInsightRequest(CamelModel):
    """Request body for POST /process-insight.

    ``title`` is optional here so a missing title yields the API's own 400
    envelope rather than a framework validation error.
    """

    title: str | None = None
    show_name: str | None = None
    timestamp: int | float | str | None = None
    spotify_url: str | None = None


class InsightData(CamelModel):
    """Serialized InsightResult."""

    episode_title: str
    show_name: str
    timestamp_seconds: int
    thumbnail_url: str | None = None
    transcript: str | None = None
    summary: list[str] | None = None
    manual_mode: bool = False
    transcript_origin: TranscriptOrigin | None = None
    message: str | None = None

    @classmethod
    def from_result(cls, result: InsightResult) -> InsightData:
        return cls(
            episode_title=result.episode_title,
            show_name=result.show_name,
            timestamp_seconds=result.timestamp_seconds,
            thumbnail_url=result.thumbnail_url,
            transcript=result.transcript,
            summary=result.summary,
            manual_mode=result.manual_mode,
            transcript_origin=result.transcript_origin,
            message=result.message,
        )


class ProcessInsightResponse(CamelModel):
    success: bool = True
    data: InsightData


class ErrorResponse(CamelModel):
    """Body of every non-2xx response."""

    success: bool = False
    message: str


class SaveToNotionRequest(CamelModel):
    """Request body for POST /save-to-notion: an InsightResult plus the original reference."""

    title: str | None = None
    show_name: str | None = None
    transcript: str | None = None
    summary: list[str] | str | None = None
    spotify_url: str | None = None
    thumbnail_url: str | None = None
    timestamp_seconds: int | None = None
    manual_mode: bool = False


class NotionPageData(CamelModel):
    notion_page_id: str
    notion_url: str | None = None


class SaveToNotionResponse(CamelModel):
    success: bool = True
    data: NotionPageData


class RecentInsightData(CamelModel):
    title: str
    show_name: str | None = None
    timestamp_seconds: int
    spotify_url: str | None = None
    captured_at: str
    insight: InsightData


class RecentInsightsResponse(CamelModel):
    success: bool = True
    data: list[RecentInsightData]


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str


class ServiceInfo(BaseModel):
    name: str
    version: str
    endpoints: list[str]


def error_body(message: str) -> dict[str, Any]:
    return ErrorResponse(message=message).model_dump(by_alias=True)
