"""Draft to escalation to human edit to learning example, across services."""

from __future__ import annotations

from deskreview.engine.decision import decide
from deskreview.models.decision import DraftSignals, Verdict
from deskreview.models.review import LearningExample, ReviewStatus
from deskreview.services.curator import ExampleCurator
from deskreview.services.review_service import ReviewService
from tests.fakes import FakeClock, MemoryExampleStore, MemoryReviewStore


def test_low_confidence_draft_becomes_top_example():
    clock = FakeClock()
    examples = MemoryExampleStore()
    curator = ExampleCurator(examples, clock=clock)
    reviews = ReviewService(MemoryReviewStore(), curator, example_store=examples, clock=clock)

    # An earlier, quality-4 example for the same intent.
    earlier = reviews.create_draft_review("ticket-0", "Where is order 9?", "Ships Monday.", "order_status", 0.8)
    reviews.approve(earlier, "staff-0", 4)
    clock.advance(hours=1)

    decision = decide(DraftSignals(confidence=0.55, intent="order_status"))
    assert decision.verdict is Verdict.ESCALATE
    assert "low confidence" in decision.reason

    review_id = reviews.create_draft_review(
        "ticket-1", "Where is order 123?", "It might ship.", "order_status", 0.55
    )
    assert reviews.get(review_id).status is ReviewStatus.PENDING

    clock.advance(minutes=10)
    reviews.edit_and_approve(review_id, "staff-1", "Order 123 ships Friday via UPS.", 5)

    top = curator.top_examples_for_intent("order_status")
    assert top[0].id == LearningExample.id_for_review(review_id)
    assert top[0].response_text == "Order 123 ships Friday via UPS."
    assert top[1].id == LearningExample.id_for_review(earlier)
