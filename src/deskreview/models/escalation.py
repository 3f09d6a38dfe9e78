"""Hierarchical escalation models."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class Role(StrEnum):
    TEAM_LEAD = "team_lead"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class WorkItemKind(StrEnum):
    TICKET = "ticket"
    TASK = "task"


class EscalationTarget(BaseModel):
    """A ticket or task as seen by the escalation sweep."""

    id: str
    kind: WorkItemKind = WorkItemKind.TASK
    title: str = ""
    priority: str = "normal"
    deadline: Optional[datetime] = None
    current_escalation_level: int = Field(default=0, ge=0)
    last_escalated_at: Optional[datetime] = None
    assignee: Optional[str] = None
    is_open: bool = True


class StaffMember(BaseModel):
    id: str
    display_name: str
    role: Role
    email: str = ""
    active: bool = True


class EscalationNotification(BaseModel):
    """Payload delivered to the staff-facing channel on each escalation."""

    target_id: str
    level: int
    level_name: str
    escalated_to: str
    assignee: Optional[str] = None
    overdue_duration: timedelta
    message: str


class SweepError(BaseModel):
    target_id: str
    error_type: str
    message: str


class SweepSummary(BaseModel):
    """Outcome of one escalation sweep."""

    escalated: int = 0
    skipped: int = 0
    scanned: int = 0
    lease_acquired: bool = True
    errors: list[SweepError] = Field(default_factory=list)
