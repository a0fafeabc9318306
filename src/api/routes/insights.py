"""Insight endpoints: run the pipeline for a captured moment, list recent results."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse

from src.api.models import (
    ErrorResponse,
    InsightData,
    ProcessInsightRequest,
    ProcessInsightResponse,
    RecentInsightData,
    RecentInsightsResponse,
    error_body,
)
from src.config import settings
from src.insight.audit import SupabaseAuditLog
from src.insight.errors import InsightError, InsightValidationError
from src.insight.models import AuditRecord
from src.insight.orchestrator import AuditCallback, build_pipeline
from src.insight.recent import RecentInsight, RecentInsights
from src.insight.reference import normalize_reference

logger = logging.getLogger(__name__)

router = APIRouter()


def _audit_callback(background_tasks: BackgroundTasks) -> AuditCallback | None:
    """Schedule audit writes to run after the response is sent."""
    if not settings.supabase_url:
        return None
    audit_log = SupabaseAuditLog()

    def schedule(record: AuditRecord) -> None:
        background_tasks.add_task(audit_log.write, record)

    return schedule


def _recent_store(request: Request) -> RecentInsights:
    return request.app.state.recent_insights  # type: ignore[no-any-return]


@router.post(
    "/process-insight",
    response_model=ProcessInsightResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_insight(
    body: ProcessInsightRequest,
    request: Request,
    background_tasks: BackgroundTasks,
) -> ProcessInsightResponse | JSONResponse:
    """Turn a (title, show, timestamp) capture into takeaways plus transcript.

    - Episode not found: 200 with ``manualMode=true`` so the user can add notes.
    - Episode found without transcript or audio: 404.
    - Any other stage failure: 500 with a user-facing message.
    """
    try:
        reference = normalize_reference(
            body.title, body.show_name, body.timestamp, body.spotify_url
        )
    except InsightValidationError as exc:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    logger.info(
        "Processing insight: %r by %r at %ds",
        reference.title,
        reference.show_name,
        reference.timestamp_seconds,
    )

    try:
        pipeline = build_pipeline(settings, audit=_audit_callback(background_tasks))
        # Blocking SDK and subprocess calls; run off the event loop.
        result = await asyncio.to_thread(pipeline.run, reference)
    except InsightError as exc:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))
    except Exception:
        logger.exception("Process insight error for %r", reference.title)
        return JSONResponse(status_code=500, content=error_body("Failed to process insight"))

    _recent_store(request).add(
        RecentInsight(reference=reference, result=result, captured_at=datetime.now(UTC))
    )
    return ProcessInsightResponse(data=InsightData.from_result(result))


@router.get(
    "/recent-insights",
    response_model=RecentInsightsResponse,
    response_model_exclude_none=True,
)
async def recent_insights(request: Request) -> RecentInsightsResponse:
    """Most recent results processed by this server, newest first."""
    return RecentInsightsResponse(
        data=[
            RecentInsightData(
                title=item.reference.title,
                show_name=item.reference.show_name,
                timestamp_seconds=item.reference.timestamp_seconds,
                spotify_url=item.reference.source_url,
                captured_at=item.captured_at.isoformat(),
                insight=InsightData.from_result(item.result),
            )
            for item in _recent_store(request).items()
        ]
    )
