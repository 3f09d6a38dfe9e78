"""Learning example listing and curation."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from deskreview.api.deps import get_services
from deskreview.models.review import LearningExample
from deskreview.services.container import ServiceContainer

router = APIRouter(tags=["examples"])


@router.get("")
def list_examples(
    intent: Optional[str] = None,
    limit: int = Query(default=10, ge=1, le=100),
    services: ServiceContainer = Depends(get_services),
) -> list[LearningExample]:
    """Top active examples, for one intent or across all of them."""
    if intent is None:
        return services.curator.all_top_examples(limit)
    return services.curator.top_examples_for_intent(intent, limit)


@router.post("/{example_id}/deactivate", status_code=204)
def deactivate(example_id: str, services: ServiceContainer = Depends(get_services)) -> None:
    services.curator.deactivate(example_id)
