"""Hierarchical escalation scheduler.

A periodic sweep over overdue tickets and tasks. Each eligible item is raised
one level up the staff hierarchy per sweep, at most once per re-escalation
interval and never past ``max_level``.

Ordering per item is commit-then-notify-with-retry: the level transition is a
compare-and-swap on ``(current_escalation_level, last_escalated_at)`` and
happens exactly once even with overlapping sweeps; the notification that
follows is retried but is not guaranteed exactly-once.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from deskreview.core.config import SchedulerConfig
from deskreview.core.exceptions import (
    LeaseError,
    NotificationDeliveryError,
    UnresolvableEscalationTargetError,
)
from deskreview.core.protocols import (
    ILeaseBackend,
    INotificationSink,
    IStaffDirectory,
    IWorkItemStore,
)
from deskreview.core.types import Clock, utcnow
from deskreview.models.escalation import (
    EscalationNotification,
    EscalationTarget,
    Role,
    StaffMember,
    SweepError,
    SweepSummary,
)

logger = logging.getLogger(__name__)


def resolve_role(directory: IStaffDirectory, role: Role, level: int) -> StaffMember:
    """First active staff member holding ``role``."""
    for member in directory.list_active_staff(role):
        if member.active:
            return member
    raise UnresolvableEscalationTargetError(role.value, level)


def format_overdue(overdue: timedelta) -> str:
    days = overdue.days
    if days >= 1:
        return f"{days} day{'s' if days != 1 else ''}"
    hours = int(overdue.total_seconds() // 3600)
    return f"{hours} hour{'s' if hours != 1 else ''}"


def build_escalation_message(
    target: EscalationTarget,
    escalated_to: StaffMember,
    level: int,
    overdue: timedelta,
) -> str:
    lines = [
        f"@{escalated_to.display_name} ESCALATION LEVEL {level} ({escalated_to.role.label})",
        "",
        f"{target.kind.value.title()} {target.id} is OVERDUE by {format_overdue(overdue)}",
    ]
    if target.title:
        lines += ["", f'"{target.title}"']
    lines += [
        "",
        f"Assigned to: {target.assignee or 'Unassigned'}",
        f"Priority: {target.priority}",
        "",
        "This item requires immediate attention.",
    ]
    return "\n".join(lines)


class EscalationScheduler:
    """Walks overdue work items up the escalation hierarchy."""

    def __init__(
        self,
        work_items: IWorkItemStore,
        directory: IStaffDirectory,
        notifier: INotificationSink,
        *,
        config: SchedulerConfig | None = None,
        lease: ILeaseBackend | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._items = work_items
        self._directory = directory
        self._notifier = notifier
        self._config = config or SchedulerConfig()
        self._lease = lease
        self._clock = clock

    @property
    def grace_window(self) -> timedelta:
        return timedelta(minutes=self._config.grace_window_minutes)

    @property
    def re_escalation_interval(self) -> timedelta:
        return timedelta(minutes=self._config.re_escalation_interval_minutes)

    def is_due(self, target: EscalationTarget, now: datetime) -> bool:
        """Whether ``target`` should move up one level at ``now``."""
        if not target.is_open or target.deadline is None:
            return False
        if now <= target.deadline + self.grace_window:
            return False
        level = target.current_escalation_level
        if level >= self._config.max_level:
            return False
        if level == 0:
            return True
        if target.last_escalated_at is None:
            # Escalated before the timestamp was tracked; treat as due.
            return True
        return now - target.last_escalated_at > self.re_escalation_interval

    def run_sweep(self) -> SweepSummary:
        """Process every candidate once; per-item failures never stop the sweep."""
        token: str | None = None
        if self._lease is not None:
            try:
                token = self._lease.acquire(self._config.lease_name, self._config.lease_ttl_seconds)
            except LeaseError:
                logger.warning("Lease backend unavailable; sweeping without lease", exc_info=True)
            else:
                if token is None:
                    logger.info("Escalation sweep already running elsewhere; skipping")
                    return SweepSummary(lease_acquired=False)
        try:
            return self._sweep()
        finally:
            if token is not None:
                self._release(token)

    def _release(self, token: str) -> None:
        try:
            self._lease.release(self._config.lease_name, token)  # type: ignore[union-attr]
        except LeaseError:
            logger.warning(
                "Failed to release escalation lease; it expires after its TTL",
                exc_info=True,
                extra={"lease": self._config.lease_name},
            )

    def _sweep(self) -> SweepSummary:
        now = self._clock()
        summary = SweepSummary()
        candidates = self._items.list_escalation_candidates(now)
        summary.scanned = len(candidates)
        logger.info("Escalation sweep started", extra={"candidates": len(candidates)})

        for target in candidates:
            try:
                outcome = self._process(target, now, summary)
            except Exception as exc:
                logger.exception("Escalation failed", extra={"target_id": target.id})
                summary.errors.append(
                    SweepError(target_id=target.id, error_type=type(exc).__name__, message=str(exc))
                )
                continue
            if outcome:
                summary.escalated += 1
            else:
                summary.skipped += 1

        logger.info(
            "Escalation sweep finished",
            extra={
                "escalated": summary.escalated,
                "skipped": summary.skipped,
                "errors": len(summary.errors),
            },
        )
        return summary

    def _process(self, target: EscalationTarget, now: datetime, summary: SweepSummary) -> bool:
        level = target.current_escalation_level
        if level >= self._config.max_level:
            logger.info("Item at max escalation level", extra={"target_id": target.id, "level": level})
            return False
        if not self.is_due(target, now):
            return False

        next_level = level + 1
        role = self._config.hierarchy[next_level - 1]
        escalated_to = resolve_role(self._directory, role, next_level)

        committed = self._items.advance_escalation(
            target.id,
            expected_level=level,
            expected_last_escalated_at=target.last_escalated_at,
            new_level=next_level,
            escalated_at=now,
        )
        if not committed:
            logger.info("Item changed since read; another sweep escalated it", extra={"target_id": target.id})
            return False

        overdue = now - target.deadline  # type: ignore[operator]
        notification = EscalationNotification(
            target_id=target.id,
            level=next_level,
            level_name=role.label,
            escalated_to=escalated_to.id,
            assignee=target.assignee,
            overdue_duration=overdue,
            message=build_escalation_message(target, escalated_to, next_level, overdue),
        )
        try:
            self._notify(notification)
        except NotificationDeliveryError as exc:
            # The level transition stands; delivery is best-effort.
            logger.error(
                "Escalation committed but notification failed",
                extra={"target_id": target.id, "level": next_level, "error": str(exc)},
            )
            summary.errors.append(
                SweepError(target_id=target.id, error_type=type(exc).__name__, message=str(exc))
            )

        logger.info(
            "Escalated item",
            extra={"target_id": target.id, "level": next_level, "escalated_to": escalated_to.id},
        )
        return True

    def _notify(self, notification: EscalationNotification) -> None:
        attempts = self._config.notification_attempts
        for attempt in range(1, attempts + 1):
            try:
                self._notifier.send(notification)
                return
            except NotificationDeliveryError:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Notification attempt failed; retrying",
                    extra={"target_id": notification.target_id, "attempt": attempt},
                )
