"""Request and response bodies for the HTTP surface."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from deskreview.models.decision import Decision


class DecisionResponse(BaseModel):
    decision: Decision
    suggested_actions: list[str] = Field(default_factory=list)


class CreateReviewRequest(BaseModel):
    subject_id: str
    requester_message: str
    draft_content: str
    intent: str = "unknown"
    confidence: float = 0.0


class CreateReviewResponse(BaseModel):
    id: str


# quality_score range is checked by ReviewService.
class ApproveRequest(BaseModel):
    staff_id: str
    quality_score: int


class EditRequest(BaseModel):
    staff_id: str
    edited_content: str
    quality_score: int
    note: Optional[str] = None


class RejectRequest(BaseModel):
    staff_id: str
    note: Optional[str] = None
