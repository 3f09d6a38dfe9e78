"""Draft review queue and reviewer actions."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from deskreview.api.deps import get_services
from deskreview.api.schemas import (
    ApproveRequest,
    CreateReviewRequest,
    CreateReviewResponse,
    EditRequest,
    RejectRequest,
)
from deskreview.models.review import DraftReview, ReviewStats
from deskreview.services.container import ServiceContainer

router = APIRouter(tags=["reviews"])


@router.post("", status_code=201)
def create_review(
    body: CreateReviewRequest, services: ServiceContainer = Depends(get_services)
) -> CreateReviewResponse:
    review_id = services.reviews.create_draft_review(
        body.subject_id,
        body.requester_message,
        body.draft_content,
        intent=body.intent,
        confidence=body.confidence,
    )
    return CreateReviewResponse(id=review_id)


@router.get("")
def list_pending(
    subject_id: Optional[str] = None, services: ServiceContainer = Depends(get_services)
) -> list[DraftReview]:
    """Pending reviews, newest first."""
    return services.reviews.list_pending(subject_id)


@router.get("/stats")
def stats(services: ServiceContainer = Depends(get_services)) -> ReviewStats:
    return services.reviews.stats()


@router.get("/{review_id}")
def get_review(review_id: str, services: ServiceContainer = Depends(get_services)) -> DraftReview:
    return services.reviews.get(review_id)


@router.post("/{review_id}/approve")
def approve(
    review_id: str, body: ApproveRequest, services: ServiceContainer = Depends(get_services)
) -> DraftReview:
    return services.reviews.approve(review_id, body.staff_id, body.quality_score)


@router.post("/{review_id}/edit")
def edit(
    review_id: str, body: EditRequest, services: ServiceContainer = Depends(get_services)
) -> DraftReview:
    return services.reviews.edit_and_approve(
        review_id, body.staff_id, body.edited_content, body.quality_score, note=body.note
    )


@router.post("/{review_id}/reject")
def reject(
    review_id: str, body: RejectRequest, services: ServiceContainer = Depends(get_services)
) -> DraftReview:
    return services.reviews.reject(review_id, body.staff_id, note=body.note)
