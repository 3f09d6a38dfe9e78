"""Wires services to their backends from application settings."""

from __future__ import annotations

from dataclasses import dataclass

from deskreview.core.config import AppSettings
from deskreview.core.protocols import (
    IDraftSource,
    IExampleStore,
    ILeaseBackend,
    INotificationSink,
    IReviewStore,
    IStaffDirectory,
    IWorkItemStore,
)
from deskreview.core.types import Clock, utcnow
from deskreview.model_providers.mock_provider import MockDraftSource
from deskreview.notifications.sqs_sink import SQSNotificationSink
from deskreview.persistence import create_persistence
from deskreview.services.curator import ExampleCurator
from deskreview.services.drafting import DraftingWorkflow
from deskreview.services.escalation_scheduler import EscalationScheduler
from deskreview.services.review_service import ReviewService


@dataclass
class ServiceContainer:
    settings: AppSettings
    reviews: ReviewService
    curator: ExampleCurator
    scheduler: EscalationScheduler
    drafting: DraftingWorkflow


def build_services(
    settings: AppSettings | None = None,
    *,
    review_store: IReviewStore | None = None,
    example_store: IExampleStore | None = None,
    work_items: IWorkItemStore | None = None,
    staff: IStaffDirectory | None = None,
    notifier: INotificationSink | None = None,
    lease: ILeaseBackend | None = None,
    draft_source: IDraftSource | None = None,
    clock: Clock = utcnow,
) -> ServiceContainer:
    """Build every service. Backends not passed in come from ``create_persistence``."""
    if settings is None:
        settings = AppSettings()

    if None in (review_store, example_store, work_items, staff):
        persistence = create_persistence(settings)
        review_store = review_store or persistence.reviews
        example_store = example_store or persistence.examples
        work_items = work_items or persistence.work_items
        staff = staff or persistence.staff
        lease = lease or persistence.lease

    if notifier is None:
        notifier = SQSNotificationSink(
            queue_url=settings.sqs.escalation_queue_url,
            region=settings.sqs.region,
            endpoint_url=settings.sqs.endpoint_url,
        )

    curator = ExampleCurator(
        example_store, min_quality=settings.review.promotion_min_quality, clock=clock
    )
    reviews = ReviewService(
        review_store,
        curator,
        example_store=example_store,
        clock=clock,
    )
    scheduler = EscalationScheduler(
        work_items,
        staff,
        notifier,
        config=settings.scheduler,
        lease=lease,
        clock=clock,
    )
    drafting = DraftingWorkflow(
        draft_source or MockDraftSource(),
        reviews,
        curator,
        policy=settings.policy,
        review_config=settings.review,
    )
    return ServiceContainer(
        settings=settings,
        reviews=reviews,
        curator=curator,
        scheduler=scheduler,
        drafting=drafting,
    )
