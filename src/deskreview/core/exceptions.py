"""deskreview exception hierarchy."""

from __future__ import annotations


class DeskReviewError(Exception):
    """Base exception for all deskreview errors."""


class ValidationError(DeskReviewError):
    """Malformed input to a creation or mutation call. Nothing was applied."""


class ReviewNotFoundError(DeskReviewError):
    """No draft review exists for the given id."""

    def __init__(self, review_id: str) -> None:
        self.review_id = review_id
        super().__init__(f"Draft review {review_id} not found")


class AlreadyReviewedError(DeskReviewError):
    """Review transition attempted on a draft that is no longer pending."""

    def __init__(self, review_id: str, status: str, reviewed_by: str | None = None) -> None:
        self.review_id = review_id
        self.status = status
        self.reviewed_by = reviewed_by
        who = reviewed_by or "another reviewer"
        super().__init__(f"Draft review {review_id} already reviewed by {who} ({status})")


class ExampleNotFoundError(DeskReviewError):
    """No learning example exists for the given id."""

    def __init__(self, example_id: str) -> None:
        self.example_id = example_id
        super().__init__(f"Learning example {example_id} not found")


class GenerationError(DeskReviewError):
    """The draft source failed to produce a response."""


class EscalationError(DeskReviewError):
    """Error while escalating a single work item."""


class UnresolvableEscalationTargetError(EscalationError):
    """No active staff member holds the role for the next escalation level."""

    def __init__(self, role: str, level: int) -> None:
        self.role = role
        self.level = level
        super().__init__(f"No active staff member with role {role!r} for escalation level {level}")


class NotificationDeliveryError(EscalationError):
    """Escalation notification could not be delivered."""


class StoreError(DeskReviewError):
    """Persistence backend operation failed."""


class LeaseError(DeskReviewError):
    """Redis lease operation failed."""
