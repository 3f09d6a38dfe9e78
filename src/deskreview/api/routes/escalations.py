"""Manual trigger for the escalation sweep."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from deskreview.api.deps import get_services
from deskreview.models.escalation import SweepSummary
from deskreview.services.container import ServiceContainer

router = APIRouter(tags=["escalations"])


@router.post("/sweep")
def run_sweep(services: ServiceContainer = Depends(get_services)) -> SweepSummary:
    return services.scheduler.run_sweep()
