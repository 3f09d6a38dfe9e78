"""Tests for DraftingWorkflow."""

from __future__ import annotations

import pytest

from deskreview.models.decision import Priority, Sentiment, Verdict
from deskreview.models.review import ReviewStatus
from deskreview.services.curator import ExampleCurator
from deskreview.services.drafting import FALLBACK_REPLY, DraftingWorkflow
from deskreview.services.review_service import ReviewService
from tests.fakes import FakeClock, MemoryExampleStore, MemoryReviewStore, MockDraftSource


@pytest.fixture
def source():
    source = MockDraftSource(default_content="Happy to help!", default_confidence=0.93, default_intent="general")
    source.set_response("invoice", "Invoice attached.", confidence=0.72, intent="invoice_request")
    source.set_response("broken", "Sorry.", confidence=0.4, intent="unknown")
    source.fail_on("timeout")
    return source


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def curator(clock):
    return ExampleCurator(MemoryExampleStore(), clock=clock)


@pytest.fixture
def reviews(curator, clock):
    return ReviewService(MemoryReviewStore(), curator, clock=clock)


@pytest.fixture
def workflow(source, reviews, curator):
    return DraftingWorkflow(source, reviews, curator)


class TestHandleMessage:
    def test_auto_send_stores_nothing(self, workflow, reviews):
        outcome = workflow.handle_message("ticket-1", "hello there")
        assert outcome.decision.verdict is Verdict.AUTO_SEND
        assert outcome.review_id is None
        assert reviews.list_pending() == []

    def test_hold_creates_pending_review(self, workflow, reviews):
        outcome = workflow.handle_message("ticket-2", "need my invoice")
        assert outcome.decision.verdict is Verdict.HOLD_FOR_REVIEW
        review = reviews.get(outcome.review_id)
        assert review.status is ReviewStatus.PENDING
        assert review.intent == "invoice_request"
        assert "Ensure the invoice is attached or linked" in outcome.suggested_actions

    def test_escalate_creates_pending_review(self, workflow, reviews):
        outcome = workflow.handle_message("ticket-3", "broken thing")
        assert outcome.decision.verdict is Verdict.ESCALATE
        assert reviews.get(outcome.review_id).confidence == 0.4

    def test_priority_forces_escalation(self, workflow):
        outcome = workflow.handle_message("ticket-4", "hello", priority=Priority.URGENT)
        assert outcome.decision.rule == "priority_veto"
        assert outcome.review_id is not None

    def test_explicit_sentiment_overrides_draft(self, workflow):
        outcome = workflow.handle_message("ticket-5", "hello", sentiment=Sentiment.ANGRY)
        assert outcome.decision.rule == "angry_sentiment"

    def test_generation_failure_uses_fallback(self, workflow, reviews):
        outcome = workflow.handle_message("ticket-6", "timeout please", intent_hint="order_status")
        assert outcome.decision.verdict is Verdict.ESCALATE
        assert outcome.content == FALLBACK_REPLY
        review = reviews.get(outcome.review_id)
        assert review.draft_content == FALLBACK_REPLY
        assert review.intent == "order_status"

    def test_examples_passed_to_source(self, workflow, reviews, source):
        held = workflow.handle_message("ticket-7", "need my invoice")
        reviews.edit_and_approve(held.review_id, "staff-1", "Invoice INV-1 attached.", 5)
        workflow.handle_message("ticket-8", "another invoice", intent_hint="invoice_request")
        message, examples = source.calls[-1]
        assert [e.response_text for e in examples] == ["Invoice INV-1 attached."]
        assert "Response: Invoice INV-1 attached." in source.prompts[-1]

    def test_blank_draft_treated_as_generation_failure(self, workflow, reviews, source):
        source.set_response("blank", "  ", confidence=0.72, intent="order_status")
        outcome = workflow.handle_message("ticket-9", "blank reply please", intent_hint="order_status")
        assert outcome.decision.verdict is Verdict.ESCALATE
        assert outcome.content == FALLBACK_REPLY
        assert reviews.get(outcome.review_id).draft_content == FALLBACK_REPLY
