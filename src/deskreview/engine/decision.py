"""Escalation decision engine.

Decides whether an AI-drafted reply may be sent automatically, must wait for a
reviewer, or must be escalated. The decision is an ordered table of typed
rules; the first rule that applies wins. Order matters because the checks are
not commutative: a critical ticket escalates even with a 0.99 confidence draft.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from deskreview.core.config import EscalationPolicy
from deskreview.models.decision import Decision, DraftSignals, Priority, Sentiment, Verdict

Predicate = Callable[[DraftSignals, EscalationPolicy], bool]
Reason = Callable[[DraftSignals, EscalationPolicy], str]


@dataclass(frozen=True)
class Rule:
    """One row of the decision table."""

    name: str
    applies: Predicate
    verdict: Verdict
    reason: Reason

    def evaluate(self, signals: DraftSignals, policy: EscalationPolicy) -> Decision | None:
        if not self.applies(signals, policy):
            return None
        return Decision(verdict=self.verdict, reason=self.reason(signals, policy), rule=self.name)


def _pct(confidence: float) -> str:
    return f"{round(confidence * 100)}%"


def _is_unknown_intent(signals: DraftSignals, policy: EscalationPolicy) -> bool:
    return signals.intent.strip().lower() in policy.unknown_intents


PRIORITY_VETO = Rule(
    name="priority_veto",
    applies=lambda s, p: (
        p.escalate_on_critical_or_urgent_priority
        and s.priority in (Priority.CRITICAL, Priority.URGENT)
    ),
    verdict=Verdict.ESCALATE,
    reason=lambda s, p: f"{s.priority.value} priority requires immediate human attention",
)

ANGRY_VETO = Rule(
    name="angry_sentiment",
    applies=lambda s, p: p.escalate_on_angry_sentiment and s.sentiment is Sentiment.ANGRY,
    verdict=Verdict.ESCALATE,
    reason=lambda s, p: "angry customer requires human attention",
)

VIP_VETO = Rule(
    name="vip_requester",
    applies=lambda s, p: p.escalate_on_vip and s.requester_is_vip,
    verdict=Verdict.ESCALATE,
    reason=lambda s, p: "VIP customer requires human attention",
)

LOW_CONFIDENCE = Rule(
    name="low_confidence",
    applies=lambda s, p: p.escalate_on_low_confidence and s.confidence < p.auto_escalate_threshold,
    verdict=Verdict.ESCALATE,
    reason=lambda s, p: f"low confidence ({_pct(s.confidence)}) requires human review",
)

UNKNOWN_INTENT = Rule(
    name="unknown_intent",
    applies=lambda s, p: (
        _is_unknown_intent(s, p) and s.confidence < p.unknown_intent_confidence_floor
    ),
    verdict=Verdict.ESCALATE,
    reason=lambda s, p: (
        f"low confidence on undetermined intent ({_pct(s.confidence)}) requires human review"
    ),
)

NEGATIVE_SENTIMENT = Rule(
    name="negative_sentiment",
    applies=lambda s, p: (
        s.sentiment is Sentiment.NEGATIVE and s.confidence < p.negative_sentiment_confidence_floor
    ),
    verdict=Verdict.ESCALATE,
    reason=lambda s, p: (
        f"negative sentiment with medium confidence ({_pct(s.confidence)}) requires human review"
    ),
)

HIGH_CONFIDENCE = Rule(
    name="high_confidence",
    applies=lambda s, p: s.confidence >= p.min_confidence_for_auto,
    verdict=Verdict.AUTO_SEND,
    reason=lambda s, p: f"high confidence ({_pct(s.confidence)}) with no escalation triggers",
)

DEFAULT_HOLD = Rule(
    name="default_hold",
    applies=lambda s, p: True,
    verdict=Verdict.HOLD_FOR_REVIEW,
    reason=lambda s, p: f"medium confidence ({_pct(s.confidence)}) requires approval before sending",
)

DEFAULT_RULES: tuple[Rule, ...] = (
    PRIORITY_VETO,
    ANGRY_VETO,
    VIP_VETO,
    LOW_CONFIDENCE,
    UNKNOWN_INTENT,
    NEGATIVE_SENTIMENT,
    HIGH_CONFIDENCE,
    DEFAULT_HOLD,
)


def decide(
    signals: DraftSignals,
    policy: EscalationPolicy | None = None,
    rules: Sequence[Rule] = DEFAULT_RULES,
) -> Decision:
    """Return the verdict of the first rule that applies."""
    if policy is None:
        policy = EscalationPolicy()
    for rule in rules:
        decision = rule.evaluate(signals, policy)
        if decision is not None:
            return decision
    raise ValueError("rule table has no catch-all rule")


def decide_generation_failure(
    signals: DraftSignals,
    policy: EscalationPolicy | None = None,
    error: Exception | None = None,
) -> Decision:
    """Decision for a draft that could not be generated: always escalate."""
    decision = decide(signals.model_copy(update={"confidence": 0.0}), policy)
    if decision.verdict is Verdict.ESCALATE:
        return decision
    detail = f": {error}" if error else ""
    return Decision(
        verdict=Verdict.ESCALATE,
        reason=f"draft generation failed{detail}; requires human review",
        rule="generation_failure",
    )


_INTENT_ACTIONS = {
    "order_status": "Verify order status in the commerce system",
    "production_status": "Check the production system for the latest updates",
    "invoice_request": "Ensure the invoice is attached or linked",
}


def suggest_actions(decision: Decision, intent: str = "") -> list[str]:
    """Reviewer hints shown next to a drafted reply."""
    if decision.verdict is Verdict.ESCALATE:
        actions = [
            "Review and edit response before sending",
            "Consider calling the customer for complex issues",
        ]
    elif decision.verdict is Verdict.AUTO_SEND:
        actions = ["Response is ready to send"]
    else:
        actions = ["Review response for accuracy", "Add a personal touch if needed"]
    hint = _INTENT_ACTIONS.get(intent)
    if hint:
        actions.append(hint)
    return actions
