"""Learning example curator: promotion of reviewed drafts and ranked retrieval."""

from __future__ import annotations

import logging

from deskreview.core.exceptions import ExampleNotFoundError, ValidationError
from deskreview.core.protocols import IExampleStore
from deskreview.core.types import Clock, utcnow
from deskreview.models.review import DraftReview, LearningExample, ReviewStatus

logger = logging.getLogger(__name__)

MIN_EXAMPLE_QUALITY = 4


def rank_examples(examples: list[LearningExample], limit: int) -> list[LearningExample]:
    """Quality descending, then most recent first."""
    ranked = sorted(examples, key=lambda e: (e.quality_score, e.created_at), reverse=True)
    return ranked[: max(0, limit)]


class ExampleCurator:
    """Promotes high-quality reviews and answers few-shot example queries."""

    def __init__(
        self, store: IExampleStore, *, min_quality: int = MIN_EXAMPLE_QUALITY, clock: Clock = utcnow
    ) -> None:
        if min_quality < MIN_EXAMPLE_QUALITY:
            raise ValueError(f"min_quality must be at least {MIN_EXAMPLE_QUALITY}, got {min_quality}")
        self._store = store
        self._min_quality = min_quality
        self._clock = clock

    @property
    def min_quality(self) -> int:
        return self._min_quality

    def promote(self, review: DraftReview) -> LearningExample:
        """Create the example for a review, or return the one already stored."""
        if review.status not in (ReviewStatus.APPROVED, ReviewStatus.EDITED):
            raise ValidationError(f"Review {review.id} is {review.status}; only approved or edited reviews promote")
        if review.quality_score is None or review.quality_score < self._min_quality:
            raise ValidationError(
                f"Review {review.id} has quality {review.quality_score}; promotion requires {self._min_quality}+"
            )

        candidate = LearningExample(
            id=LearningExample.id_for_review(review.id),
            source_review_id=review.id,
            intent=review.intent,
            source_message=review.requester_message,
            response_text=review.final_content or "",
            quality_score=review.quality_score,
            created_at=self._clock(),
        )
        stored, created = self._store.add_if_absent(candidate)
        if created:
            logger.info(
                "Promoted review to learning example",
                extra={"review_id": review.id, "example_id": stored.id, "intent": stored.intent},
            )
        else:
            logger.info(
                "Review already promoted",
                extra={"review_id": review.id, "example_id": stored.id},
            )
        return stored

    def top_examples_for_intent(self, intent: str, limit: int = 5) -> list[LearningExample]:
        return rank_examples(self._store.list_active(intent), limit)

    def all_top_examples(self, limit: int = 10) -> list[LearningExample]:
        return rank_examples(self._store.list_active(), limit)

    def examples_for_prompt(self, intent: str, limit: int = 5) -> list[LearningExample]:
        """Intent-specific examples, or the general pool when the intent has none."""
        examples = self.top_examples_for_intent(intent, limit)
        return examples or self.all_top_examples(limit)

    def deactivate(self, example_id: str) -> None:
        if not self._store.deactivate(example_id):
            raise ExampleNotFoundError(example_id)
        logger.info("Deactivated learning example", extra={"example_id": example_id})


def format_few_shot(examples: list[LearningExample]) -> str:
    """Render examples as a few-shot block for the draft prompt."""
    if not examples:
        return ""
    blocks = ["Examples of approved responses:"]
    for n, example in enumerate(examples, start=1):
        blocks.append(
            f"Example {n} (intent: {example.intent}, quality: {example.quality_score}/5)\n"
            f"Customer: {example.source_message}\n"
            f"Response: {example.response_text}"
        )
    return "\n\n".join(blocks)
