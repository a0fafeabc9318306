"""Bounded in-memory store of the most recent insight results."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime

from src.insight.models import EpisodeReference, InsightResult


@dataclass
class RecentInsight:
    reference: EpisodeReference
    result: InsightResult
    captured_at: datetime


class RecentInsights:
    """Fixed-capacity store; adding beyond capacity evicts the oldest entry."""

    def __init__(self, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._items: deque[RecentInsight] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def add(self, item: RecentInsight) -> None:
        with self._lock:
            self._items.append(item)

    def items(self) -> list[RecentInsight]:
        """Return entries newest first."""
        with self._lock:
            return list(reversed(self._items))

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
