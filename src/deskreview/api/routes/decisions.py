"""Decision engine endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from deskreview.api.deps import get_services
from deskreview.api.schemas import DecisionResponse
from deskreview.engine.decision import decide, suggest_actions
from deskreview.models.decision import DraftSignals
from deskreview.services.container import ServiceContainer

router = APIRouter(tags=["decisions"])


@router.post("/decisions")
def post_decision(
    signals: DraftSignals, services: ServiceContainer = Depends(get_services)
) -> DecisionResponse:
    """Classify a draft as auto-send, hold-for-review or escalate."""
    decision = decide(signals, services.settings.policy)
    return DecisionResponse(decision=decision, suggested_actions=suggest_actions(decision, signals.intent))
