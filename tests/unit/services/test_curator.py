"""Tests for ExampleCurator promotion and retrieval."""

from __future__ import annotations

from datetime import timedelta

import pytest

from deskreview.core.exceptions import ExampleNotFoundError, ValidationError
from deskreview.models.review import DraftReview, LearningExample, ReviewStatus
from deskreview.services.curator import ExampleCurator, format_few_shot, rank_examples
from tests.fakes import FakeClock, MemoryExampleStore


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryExampleStore()


@pytest.fixture
def curator(store, clock):
    return ExampleCurator(store, clock=clock)


def _reviewed(clock, review_id="r-1", status=ReviewStatus.EDITED, quality=5, intent="order_status"):
    final = None if status is ReviewStatus.REJECTED else "Ships Friday."
    return DraftReview(
        id=review_id,
        subject_id="ticket-1",
        requester_message="Where is my order?",
        draft_content="Ships soon.",
        intent=intent,
        confidence=0.55,
        status=status,
        quality_score=quality,
        final_content=final,
        reviewed_by="staff-1",
        created_at=clock.now,
        reviewed_at=clock.now,
    )


def _example(clock, example_id, quality, age_minutes=0, intent="order_status", active=True):
    return LearningExample(
        id=example_id,
        source_review_id=f"review-{example_id}",
        intent=intent,
        source_message="m",
        response_text="r",
        quality_score=quality,
        created_at=clock.now - timedelta(minutes=age_minutes),
        active=active,
    )


class TestPromote:
    def test_promotes_edited_review_with_final_content(self, curator, clock):
        example = curator.promote(_reviewed(clock))
        assert example.id == LearningExample.id_for_review("r-1")
        assert example.response_text == "Ships Friday."
        assert example.quality_score == 5
        assert example.active

    def test_second_promotion_returns_existing(self, curator, store, clock):
        first = curator.promote(_reviewed(clock))
        clock.advance(hours=1)
        second = curator.promote(_reviewed(clock))
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert len(store.list_active()) == 1

    def test_low_quality_not_promoted(self, curator, clock):
        with pytest.raises(ValidationError):
            curator.promote(_reviewed(clock, quality=3))

    def test_rejected_not_promoted(self, curator, clock):
        with pytest.raises(ValidationError):
            curator.promote(_reviewed(clock, status=ReviewStatus.REJECTED, quality=1))

    def test_threshold_below_four_refused(self, store, clock):
        with pytest.raises(ValueError):
            ExampleCurator(store, min_quality=3, clock=clock)

    def test_stricter_threshold_refuses_quality_four(self, store, clock):
        strict = ExampleCurator(store, min_quality=5, clock=clock)
        with pytest.raises(ValidationError, match=r"requires 5\+"):
            strict.promote(_reviewed(clock, quality=4))
        assert store.list_active() == []


class TestRanking:
    def test_quality_then_recency(self, clock):
        ranked = rank_examples(
            [
                _example(clock, "old-5", 5, age_minutes=60),
                _example(clock, "new-4", 4, age_minutes=0),
                _example(clock, "new-5", 5, age_minutes=1),
            ],
            limit=10,
        )
        assert [e.id for e in ranked] == ["new-5", "old-5", "new-4"]

    def test_limit(self, clock):
        examples = [_example(clock, str(i), 4, age_minutes=i) for i in range(5)]
        assert len(rank_examples(examples, 2)) == 2
        assert rank_examples(examples, 0) == []

    def test_inactive_excluded(self, curator, store, clock):
        store.add_if_absent(_example(clock, "a", 5))
        store.add_if_absent(_example(clock, "b", 5, active=False))
        assert [e.id for e in curator.top_examples_for_intent("order_status")] == ["a"]

    def test_intent_filter(self, curator, store, clock):
        store.add_if_absent(_example(clock, "a", 5, intent="order_status"))
        store.add_if_absent(_example(clock, "b", 5, intent="invoice_request"))
        assert [e.id for e in curator.top_examples_for_intent("invoice_request")] == ["b"]
        assert len(curator.all_top_examples()) == 2

    def test_prompt_examples_fall_back_to_general_pool(self, curator, store, clock):
        store.add_if_absent(_example(clock, "a", 5, intent="order_status"))
        assert [e.id for e in curator.examples_for_prompt("refund", 3)] == ["a"]


class TestDeactivate:
    def test_deactivated_example_leaves_ranking(self, curator, store, clock):
        store.add_if_absent(_example(clock, "a", 5))
        curator.deactivate("a")
        assert curator.all_top_examples() == []
        assert store.get("a").active is False

    def test_unknown_example(self, curator):
        with pytest.raises(ExampleNotFoundError):
            curator.deactivate("missing")


def test_format_few_shot(clock):
    text = format_few_shot([_example(clock, "a", 5)])
    assert text.startswith("Examples of approved responses:")
    assert "Example 1 (intent: order_status, quality: 5/5)" in text
    assert format_few_shot([]) == ""
