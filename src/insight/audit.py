"""Supabase audit log for captured insights."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from supabase import Client, create_client

from src.config import settings
from src.insight.models import AuditRecord

logger = logging.getLogger(__name__)

AUDIT_TABLE = "wisdom_vault_logs"


def get_supabase_client() -> Client:
    """Create and return a Supabase client from settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseAuditLog:
    """Append-only audit sink. Never raises: logging must not change a run's outcome."""

    def __init__(self, client_factory: Callable[[], Client] = get_supabase_client) -> None:
        self._client_factory = client_factory

    def write(self, record: AuditRecord) -> None:
        try:
            client = self._client_factory()
            client.table(AUDIT_TABLE).insert(
                {
                    "title": record.title,
                    "show_name": record.show_name,
                    "timestamp_seconds": record.timestamp_seconds,
                    "spotify_url": record.source_url,
                    "outcome": record.outcome,
                    "created_at": datetime.now(UTC).isoformat(),
                }
            ).execute()
        except Exception:
            logger.exception("Failed to write audit record for %r", record.title)
