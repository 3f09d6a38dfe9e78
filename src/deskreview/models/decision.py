"""Decision engine vocabularies, inputs and outputs."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Sentiment(StrEnum):
    ANGRY = "angry"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"


class Priority(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
    CRITICAL = "critical"


class Verdict(StrEnum):
    AUTO_SEND = "auto-send"
    HOLD_FOR_REVIEW = "hold-for-review"
    ESCALATE = "escalate"


class DraftSignals(BaseModel):
    """Metadata about a drafted reply that the decision engine evaluates."""

    model_config = ConfigDict(frozen=True)

    confidence: float = Field(ge=0.0, le=1.0)
    intent: str = "unknown"
    sentiment: Sentiment = Sentiment.NEUTRAL
    priority: Priority = Priority.NORMAL
    requester_is_vip: bool = False


class Decision(BaseModel):
    """Verdict plus the human-readable reason and the rule that produced it."""

    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    reason: str
    rule: str


class GeneratedDraft(BaseModel):
    """What the draft source returns for one requester message."""

    content: str
    confidence: float = Field(ge=0.0, le=1.0)
    intent: str = "unknown"
    sentiment: Sentiment = Sentiment.NEUTRAL
