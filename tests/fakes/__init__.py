"""Shared test doubles: memory backends, mock draft source and a fake clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from deskreview.model_providers.mock_provider import MockDraftSource
from deskreview.persistence.memory_backend import (
    MemoryExampleStore,
    MemoryLeaseBackend,
    MemoryNotificationSink,
    MemoryReviewStore,
    MemoryStaffDirectory,
    MemoryWorkItemStore,
)

__all__ = [
    "MemoryExampleStore",
    "MemoryLeaseBackend",
    "MemoryNotificationSink",
    "MemoryReviewStore",
    "MemoryStaffDirectory",
    "MemoryWorkItemStore",
    "FakeClock",
    "MockDraftSource",
]


class FakeClock:
    """Callable clock for services that take ``clock=``; advance it by hand."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
