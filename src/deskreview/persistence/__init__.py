"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from typing import NamedTuple

from deskreview.core.config import AppSettings
from deskreview.persistence.dynamodb_backend import (
    DynamoDBExampleStore,
    DynamoDBReviewStore,
    DynamoDBStaffDirectory,
    DynamoDBWorkItemStore,
)
from deskreview.persistence.redis_backend import RedisLeaseBackend


class Persistence(NamedTuple):
    reviews: DynamoDBReviewStore
    examples: DynamoDBExampleStore
    work_items: DynamoDBWorkItemStore
    staff: DynamoDBStaffDirectory
    lease: RedisLeaseBackend | None


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings.

    The Redis lease is optional; with ``redis.enabled`` off, overlapping
    sweeps rely on the conditional writes alone.
    """
    if settings is None:
        settings = AppSettings()

    ddb = {
        "table_suffix": settings.dynamodb.table_suffix,
        "region": settings.dynamodb.region,
        "endpoint_url": settings.dynamodb.endpoint_url,
    }

    lease = None
    if settings.redis.enabled:
        lease = RedisLeaseBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )

    return Persistence(
        reviews=DynamoDBReviewStore(**ddb),
        examples=DynamoDBExampleStore(**ddb),
        work_items=DynamoDBWorkItemStore(**ddb),
        staff=DynamoDBStaffDirectory(**ddb),
        lease=lease,
    )
