"""Drafting workflow: generate a reply, decide its fate, hold it for review."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from deskreview.core.config import EscalationPolicy, ReviewConfig
from deskreview.core.exceptions import GenerationError
from deskreview.core.protocols import IDraftSource
from deskreview.engine.decision import decide, decide_generation_failure, suggest_actions
from deskreview.models.decision import Decision, DraftSignals, Priority, Sentiment, Verdict
from deskreview.services.curator import ExampleCurator
from deskreview.services.review_service import ReviewService

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "Thanks for reaching out. A member of our team is looking into your message "
    "and will get back to you shortly."
)


class DraftOutcome(BaseModel):
    decision: Decision
    content: str
    intent: str = "unknown"
    review_id: Optional[str] = None
    suggested_actions: list[str] = Field(default_factory=list)


class DraftingWorkflow:
    """Sequences draft source, decision engine and review store for one message."""

    def __init__(
        self,
        source: IDraftSource,
        reviews: ReviewService,
        curator: ExampleCurator,
        *,
        policy: EscalationPolicy | None = None,
        review_config: ReviewConfig | None = None,
    ) -> None:
        self._source = source
        self._reviews = reviews
        self._curator = curator
        self._policy = policy or EscalationPolicy()
        self._example_limit = (review_config or ReviewConfig()).default_example_limit

    def handle_message(
        self,
        subject_id: str,
        message: str,
        *,
        intent_hint: str = "unknown",
        priority: Priority = Priority.NORMAL,
        sentiment: Sentiment | None = None,
        requester_is_vip: bool = False,
    ) -> DraftOutcome:
        examples = self._curator.examples_for_prompt(intent_hint, self._example_limit)
        try:
            draft = self._source.generate(message, examples)
            if not draft.content.strip():
                raise GenerationError("draft source returned empty content")
        except GenerationError as exc:
            logger.warning("Draft generation failed; using fallback reply", extra={"subject_id": subject_id})
            signals = DraftSignals(
                confidence=0.0,
                intent=intent_hint,
                sentiment=sentiment or Sentiment.NEUTRAL,
                priority=priority,
                requester_is_vip=requester_is_vip,
            )
            decision = decide_generation_failure(signals, self._policy, exc)
            content = FALLBACK_REPLY
            confidence = 0.0
            intent = intent_hint
        else:
            signals = DraftSignals(
                confidence=draft.confidence,
                intent=draft.intent,
                sentiment=sentiment or draft.sentiment,
                priority=priority,
                requester_is_vip=requester_is_vip,
            )
            decision = decide(signals, self._policy)
            content = draft.content
            confidence = draft.confidence
            intent = draft.intent

        review_id = None
        if decision.verdict is not Verdict.AUTO_SEND:
            review_id = self._reviews.create_draft_review(
                subject_id, message, content, intent=intent, confidence=confidence
            )

        logger.info(
            "Draft decided",
            extra={"subject_id": subject_id, "verdict": decision.verdict.value, "rule": decision.rule},
        )
        return DraftOutcome(
            decision=decision,
            content=content,
            intent=intent,
            review_id=review_id,
            suggested_actions=suggest_actions(decision, intent),
        )
