"""Draft review lifecycle and learning example models."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Learning example ids are derived from the source review id, so a review maps
# to exactly one possible example id.
EXAMPLE_NAMESPACE = uuid.UUID("6f1c8a52-3d4e-4b8f-9a61-2f0d7c5e9b13")


class ReviewStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    EDITED = "edited"
    REJECTED = "rejected"


class DraftReview(BaseModel):
    """An AI-generated reply awaiting, or having received, human judgment."""

    id: str
    subject_id: str
    requester_message: str
    draft_content: str = Field(min_length=1)
    intent: str = "unknown"
    confidence: float = Field(ge=0.0, le=1.0)
    status: ReviewStatus = ReviewStatus.PENDING
    quality_score: Optional[int] = Field(default=None, ge=1, le=5)
    final_content: Optional[str] = None
    feedback_note: Optional[str] = None
    reviewed_by: Optional[str] = None
    created_at: datetime
    reviewed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_lifecycle(self) -> DraftReview:
        reviewed = self.status is not ReviewStatus.PENDING
        for name in ("quality_score", "reviewed_at", "reviewed_by"):
            if (getattr(self, name) is not None) != reviewed:
                raise ValueError(f"{name} must be set iff status is not pending (status={self.status})")
        has_final = self.status in (ReviewStatus.APPROVED, ReviewStatus.EDITED)
        if (self.final_content is not None) != has_final:
            raise ValueError(f"final_content must be set iff status is approved or edited (status={self.status})")
        return self

    @property
    def is_pending(self) -> bool:
        return self.status is ReviewStatus.PENDING


class LearningExample(BaseModel):
    """A staff-approved (request, response) pair reused for few-shot prompting."""

    id: str
    source_review_id: str
    intent: str
    source_message: str
    response_text: str
    quality_score: int = Field(ge=4, le=5)
    created_at: datetime
    active: bool = True

    @staticmethod
    def id_for_review(review_id: str) -> str:
        return str(uuid.uuid5(EXAMPLE_NAMESPACE, review_id))


class ReviewStats(BaseModel):
    """Aggregate review counts for operational dashboards."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    edited: int = 0
    rejected: int = 0
    average_quality_score: Optional[float] = None
    active_examples: int = 0
