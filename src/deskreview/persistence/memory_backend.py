"""In-memory backends: dict-backed fakes for unit tests.

Each store guards its dict with a lock so conditional writes behave
atomically, matching the DynamoDB condition-expression semantics.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime

from deskreview.core.exceptions import NotificationDeliveryError, StoreError
from deskreview.models.escalation import (
    EscalationNotification,
    EscalationTarget,
    Role,
    StaffMember,
)
from deskreview.models.review import DraftReview, LearningExample, ReviewStatus


class MemoryReviewStore:
    """Dict-backed IReviewStore for unit tests."""

    def __init__(self) -> None:
        self._reviews: dict[str, DraftReview] = {}
        self._lock = threading.Lock()

    def create(self, review: DraftReview) -> None:
        with self._lock:
            if review.id in self._reviews:
                raise StoreError(f"Draft review {review.id} already exists")
            self._reviews[review.id] = review.model_copy()

    def get(self, review_id: str) -> DraftReview | None:
        review = self._reviews.get(review_id)
        return review.model_copy() if review else None

    def complete(self, review: DraftReview) -> bool:
        with self._lock:
            current = self._reviews.get(review.id)
            if current is None or current.status is not ReviewStatus.PENDING:
                return False
            self._reviews[review.id] = review.model_copy()
            return True

    def list_reviews(
        self, status: ReviewStatus | None = None, subject_id: str | None = None
    ) -> list[DraftReview]:
        return [
            r.model_copy()
            for r in self._reviews.values()
            if (status is None or r.status is status)
            and (subject_id is None or r.subject_id == subject_id)
        ]


class MemoryExampleStore:
    """Dict-backed IExampleStore for unit tests."""

    def __init__(self) -> None:
        self._examples: dict[str, LearningExample] = {}
        self._lock = threading.Lock()

    def add_if_absent(self, example: LearningExample) -> tuple[LearningExample, bool]:
        with self._lock:
            existing = self._examples.get(example.id)
            if existing is not None:
                return existing.model_copy(), False
            self._examples[example.id] = example.model_copy()
            return example, True

    def get(self, example_id: str) -> LearningExample | None:
        example = self._examples.get(example_id)
        return example.model_copy() if example else None

    def list_active(self, intent: str | None = None) -> list[LearningExample]:
        return [
            e.model_copy()
            for e in self._examples.values()
            if e.active and (intent is None or e.intent == intent)
        ]

    def deactivate(self, example_id: str) -> bool:
        with self._lock:
            example = self._examples.get(example_id)
            if example is None:
                return False
            self._examples[example_id] = example.model_copy(update={"active": False})
            return True


class MemoryWorkItemStore:
    """Dict-backed IWorkItemStore for unit tests."""

    def __init__(self, items: list[EscalationTarget] | None = None) -> None:
        self._items: dict[str, EscalationTarget] = {i.id: i for i in items or []}
        self._lock = threading.Lock()

    def put(self, item: EscalationTarget) -> None:
        self._items[item.id] = item

    def list_escalation_candidates(self, now: datetime) -> list[EscalationTarget]:
        return [
            i.model_copy()
            for i in self._items.values()
            if i.is_open and i.deadline is not None and i.deadline < now
        ]

    def get(self, target_id: str) -> EscalationTarget | None:
        item = self._items.get(target_id)
        return item.model_copy() if item else None

    def advance_escalation(
        self,
        target_id: str,
        expected_level: int,
        expected_last_escalated_at: datetime | None,
        new_level: int,
        escalated_at: datetime,
    ) -> bool:
        with self._lock:
            item = self._items.get(target_id)
            if item is None:
                return False
            if (
                item.current_escalation_level != expected_level
                or item.last_escalated_at != expected_last_escalated_at
            ):
                return False
            self._items[target_id] = item.model_copy(
                update={"current_escalation_level": new_level, "last_escalated_at": escalated_at}
            )
            return True


class MemoryStaffDirectory:
    """List-backed IStaffDirectory for unit tests; insertion order is rank order."""

    def __init__(self, staff: list[StaffMember] | None = None) -> None:
        self._staff: list[StaffMember] = list(staff or [])

    def add(self, member: StaffMember) -> None:
        self._staff.append(member)

    def list_active_staff(self, role: Role) -> list[StaffMember]:
        return [m for m in self._staff if m.role is role and m.active]


class MemoryNotificationSink:
    """Collects notifications; ``fail_times`` simulates delivery failures."""

    def __init__(self, fail_times: int = 0) -> None:
        self.sent: list[EscalationNotification] = []
        self.attempts = 0
        self._fail_times = fail_times

    def send(self, notification: EscalationNotification) -> None:
        self.attempts += 1
        if self._fail_times > 0:
            self._fail_times -= 1
            raise NotificationDeliveryError(f"simulated delivery failure for {notification.target_id}")
        self.sent.append(notification)


class MemoryLeaseBackend:
    """Dict-backed ILeaseBackend for unit tests. TTLs are not enforced."""

    def __init__(self) -> None:
        self._leases: dict[str, str] = {}
        self._lock = threading.Lock()

    def acquire(self, name: str, ttl_seconds: int) -> str | None:
        with self._lock:
            if name in self._leases:
                return None
            token = uuid.uuid4().hex
            self._leases[name] = token
            return token

    def release(self, name: str, token: str) -> None:
        with self._lock:
            if self._leases.get(name) == token:
                del self._leases[name]
