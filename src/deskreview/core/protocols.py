"""Protocol interfaces for all deskreview abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from deskreview.models.decision import GeneratedDraft
from deskreview.models.escalation import (
    EscalationNotification,
    EscalationTarget,
    Role,
    StaffMember,
)
from deskreview.models.review import DraftReview, LearningExample, ReviewStatus


# ---------------------------------------------------------------------------
# Draft Source
# ---------------------------------------------------------------------------

@runtime_checkable
class IDraftSource(Protocol):
    """Black-box language model that drafts replies. Raises GenerationError."""

    def generate(self, message: str, examples: list[LearningExample]) -> GeneratedDraft: ...


# ---------------------------------------------------------------------------
# Persistence: Review Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IReviewStore(Protocol):
    """Draft reviews keyed by id, with a conditional pending -> reviewed write."""

    def create(self, review: DraftReview) -> None: ...

    def get(self, review_id: str) -> DraftReview | None: ...

    def complete(self, review: DraftReview) -> bool:
        """Persist a reviewed draft only if the stored copy is still pending."""
        ...

    def list_reviews(
        self, status: ReviewStatus | None = None, subject_id: str | None = None
    ) -> list[DraftReview]: ...


# ---------------------------------------------------------------------------
# Persistence: Example Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IExampleStore(Protocol):
    """Learning examples with insert-if-absent semantics."""

    def add_if_absent(self, example: LearningExample) -> tuple[LearningExample, bool]:
        """Store the example unless its id exists; return (stored copy, created?)."""
        ...

    def get(self, example_id: str) -> LearningExample | None: ...

    def list_active(self, intent: str | None = None) -> list[LearningExample]: ...

    def deactivate(self, example_id: str) -> bool: ...


# ---------------------------------------------------------------------------
# Persistence: Work Items
# ---------------------------------------------------------------------------

@runtime_checkable
class IWorkItemStore(Protocol):
    """Tickets and tasks as seen by the escalation sweep."""

    def list_escalation_candidates(self, now: datetime) -> list[EscalationTarget]:
        """Open items whose deadline is set and earlier than ``now``."""
        ...

    def get(self, target_id: str) -> EscalationTarget | None: ...

    def advance_escalation(
        self,
        target_id: str,
        expected_level: int,
        expected_last_escalated_at: datetime | None,
        new_level: int,
        escalated_at: datetime,
    ) -> bool:
        """Compare-and-swap the escalation state. False if it changed since read."""
        ...


@runtime_checkable
class IStaffDirectory(Protocol):
    """Resolves hierarchy roles to staff members."""

    def list_active_staff(self, role: Role) -> list[StaffMember]: ...


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@runtime_checkable
class INotificationSink(Protocol):
    """Staff-facing channel. Raises NotificationDeliveryError on failure."""

    def send(self, notification: EscalationNotification) -> None: ...


# ---------------------------------------------------------------------------
# Leases
# ---------------------------------------------------------------------------

@runtime_checkable
class ILeaseBackend(Protocol):
    """Named, expiring mutual-exclusion lease."""

    def acquire(self, name: str, ttl_seconds: int) -> str | None: ...

    def release(self, name: str, token: str) -> None: ...
