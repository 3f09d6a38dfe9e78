"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from deskreview.core.config import AppSettings, EscalationPolicy, ReviewConfig, SchedulerConfig
from deskreview.models.escalation import Role


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.log_level == "INFO"
    assert settings.redis.enabled is True


def test_policy_defaults():
    policy = EscalationPolicy()
    assert policy.min_confidence_for_auto == 0.85
    assert policy.auto_escalate_threshold == 0.60
    assert policy.escalate_on_critical_or_urgent_priority is True
    assert "fallback" in policy.unknown_intents


def test_scheduler_defaults():
    config = SchedulerConfig()
    assert config.max_level == 3
    assert config.hierarchy == [Role.TEAM_LEAD, Role.MANAGER, Role.ADMIN]
    assert config.re_escalation_interval_minutes == 240


def test_policy_env_override(monkeypatch):
    monkeypatch.setenv("DESKREVIEW_POLICY_MIN_CONFIDENCE_FOR_AUTO", "0.9")
    monkeypatch.setenv("DESKREVIEW_POLICY_ESCALATE_ON_VIP", "false")
    policy = EscalationPolicy()
    assert policy.min_confidence_for_auto == 0.9
    assert policy.escalate_on_vip is False


def test_scheduler_env_override(monkeypatch):
    monkeypatch.setenv("DESKREVIEW_SCHEDULER_GRACE_WINDOW_MINUTES", "15")
    assert SchedulerConfig().grace_window_minutes == 15


class TestSchedulerValidation:
    def test_max_level_cannot_exceed_hierarchy(self):
        with pytest.raises(PydanticValidationError, match="exceeds hierarchy"):
            SchedulerConfig(max_level=4)

    def test_max_level_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            SchedulerConfig(max_level=0)

    def test_shorter_hierarchy_allows_lower_max(self):
        config = SchedulerConfig(max_level=2, hierarchy=[Role.TEAM_LEAD, Role.MANAGER])
        assert config.max_level == 2

    def test_notification_attempts_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            SchedulerConfig(notification_attempts=0)


class TestReviewValidation:
    def test_promotion_floor_is_four(self):
        with pytest.raises(PydanticValidationError):
            ReviewConfig(promotion_min_quality=3)

    def test_promotion_can_be_stricter(self):
        assert ReviewConfig(promotion_min_quality=5).promotion_min_quality == 5
