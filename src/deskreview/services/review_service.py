"""Review/feedback store: draft review lifecycle and promotion trigger.

Every transition is a conditional write on ``status == pending``. Two
reviewers submitting at once resolve to exactly one winner; the other gets
``AlreadyReviewedError`` naming who handled the draft.

Promotion runs synchronously after the transition commits. It is idempotent on
the review id, so a failed promotion is repaired by ``reconcile_promotions``
without risk of duplicates.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from deskreview.core.exceptions import (
    AlreadyReviewedError,
    DeskReviewError,
    ReviewNotFoundError,
    ValidationError,
)
from deskreview.core.protocols import IExampleStore, IReviewStore
from deskreview.core.types import Clock, utcnow
from deskreview.models.review import DraftReview, ReviewStats, ReviewStatus
from deskreview.services.curator import ExampleCurator

logger = logging.getLogger(__name__)


def _check_quality(quality_score: int) -> None:
    if isinstance(quality_score, bool) or not isinstance(quality_score, int):
        raise ValidationError(f"quality_score must be an integer, got {quality_score!r}")
    if not 1 <= quality_score <= 5:
        raise ValidationError(f"quality_score must be between 1 and 5, got {quality_score}")


def _check_text(name: str, value: Optional[str]) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"{name} must not be empty")


class ReviewService:
    """Create, review and report on AI-drafted replies."""

    def __init__(
        self,
        store: IReviewStore,
        curator: ExampleCurator | None = None,
        *,
        example_store: IExampleStore | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._curator = curator
        self._example_store = example_store
        self._clock = clock

    # ---- creation ----

    def create_draft_review(
        self,
        subject_id: str,
        requester_message: str,
        draft_content: str,
        intent: str = "unknown",
        confidence: float = 0.0,
    ) -> str:
        _check_text("draft_content", draft_content)
        if not 0.0 <= confidence <= 1.0:
            raise ValidationError(f"confidence must be within [0, 1], got {confidence}")

        review = DraftReview(
            id=str(uuid.uuid4()),
            subject_id=subject_id,
            requester_message=requester_message,
            draft_content=draft_content,
            intent=intent or "unknown",
            confidence=confidence,
            created_at=self._clock(),
        )
        self._store.create(review)
        logger.info(
            "Draft review created",
            extra={"review_id": review.id, "subject_id": subject_id, "intent": review.intent},
        )
        return review.id

    # ---- transitions ----

    def approve(self, review_id: str, staff_id: str, quality_score: int) -> DraftReview:
        _check_quality(quality_score)
        current = self._pending(review_id)
        reviewed = self._transition(
            current,
            status=ReviewStatus.APPROVED,
            staff_id=staff_id,
            quality_score=quality_score,
            final_content=current.draft_content,
        )
        self._maybe_promote(reviewed)
        return reviewed

    def edit_and_approve(
        self,
        review_id: str,
        staff_id: str,
        edited_content: str,
        quality_score: int,
        note: Optional[str] = None,
    ) -> DraftReview:
        _check_quality(quality_score)
        _check_text("edited_content", edited_content)
        current = self._pending(review_id)
        reviewed = self._transition(
            current,
            status=ReviewStatus.EDITED,
            staff_id=staff_id,
            quality_score=quality_score,
            final_content=edited_content,
            feedback_note=note,
        )
        self._maybe_promote(reviewed)
        return reviewed

    def reject(self, review_id: str, staff_id: str, note: Optional[str] = None) -> DraftReview:
        current = self._pending(review_id)
        # Rejection counts as minimum quality in aggregate statistics.
        return self._transition(
            current,
            status=ReviewStatus.REJECTED,
            staff_id=staff_id,
            quality_score=1,
            final_content=None,
            feedback_note=note,
        )

    def _pending(self, review_id: str) -> DraftReview:
        current = self._store.get(review_id)
        if current is None:
            raise ReviewNotFoundError(review_id)
        if not current.is_pending:
            raise AlreadyReviewedError(review_id, current.status, current.reviewed_by)
        return current

    def _transition(
        self,
        current: DraftReview,
        *,
        status: ReviewStatus,
        staff_id: str,
        quality_score: int,
        final_content: Optional[str],
        feedback_note: Optional[str] = None,
    ) -> DraftReview:
        reviewed = DraftReview.model_validate(
            {
                **current.model_dump(),
                "status": status,
                "quality_score": quality_score,
                "final_content": final_content,
                "feedback_note": feedback_note,
                "reviewed_by": staff_id,
                "reviewed_at": self._clock(),
            }
        )
        if not self._store.complete(reviewed):
            # Lost the race: somebody else reviewed between our read and write.
            latest = self._store.get(current.id)
            status_now = latest.status if latest else "unknown"
            raise AlreadyReviewedError(current.id, status_now, latest.reviewed_by if latest else None)

        logger.info(
            "Draft review %s",
            status.value,
            extra={"review_id": current.id, "staff_id": staff_id, "quality_score": quality_score},
        )
        return reviewed

    # ---- promotion ----

    def _qualifies(self, review: DraftReview) -> bool:
        return (
            self._curator is not None
            and review.status in (ReviewStatus.APPROVED, ReviewStatus.EDITED)
            and review.quality_score is not None
            and review.quality_score >= self._curator.min_quality
        )

    def _maybe_promote(self, review: DraftReview) -> None:
        if not self._qualifies(review):
            return
        try:
            self._curator.promote(review)  # type: ignore[union-attr]
        except DeskReviewError:
            # The review itself is committed; reconcile_promotions repairs this.
            logger.exception("Promotion failed after review commit", extra={"review_id": review.id})

    def reconcile_promotions(self) -> int:
        """Promote every qualifying review. Safe to repeat; returns reviews promoted.

        A review whose promotion fails is logged and left for the next run.
        """
        if self._curator is None:
            return 0
        promoted = failed = 0
        for status in (ReviewStatus.APPROVED, ReviewStatus.EDITED):
            for review in self._store.list_reviews(status=status):
                if not self._qualifies(review):
                    continue
                try:
                    self._curator.promote(review)
                except DeskReviewError:
                    logger.exception("Promotion repair failed", extra={"review_id": review.id})
                    failed += 1
                    continue
                promoted += 1
        logger.info("Promotion reconciliation finished", extra={"promoted": promoted, "failed": failed})
        return promoted

    # ---- queries ----

    def get(self, review_id: str) -> DraftReview:
        review = self._store.get(review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        return review

    def list_pending(self, subject_id: Optional[str] = None) -> list[DraftReview]:
        reviews = self._store.list_reviews(status=ReviewStatus.PENDING, subject_id=subject_id)
        return sorted(reviews, key=lambda r: r.created_at, reverse=True)

    def stats(self) -> ReviewStats:
        reviews = self._store.list_reviews()
        counts = {status: 0 for status in ReviewStatus}
        scores: list[int] = []
        for review in reviews:
            counts[review.status] += 1
            if review.quality_score is not None:
                scores.append(review.quality_score)
        active = len(self._example_store.list_active()) if self._example_store is not None else 0
        return ReviewStats(
            total=len(reviews),
            pending=counts[ReviewStatus.PENDING],
            approved=counts[ReviewStatus.APPROVED],
            edited=counts[ReviewStatus.EDITED],
            rejected=counts[ReviewStatus.REJECTED],
            average_quality_score=round(sum(scores) / len(scores), 2) if scores else None,
            active_examples=active,
        )
