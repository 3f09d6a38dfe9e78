"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from deskreview.models.escalation import Role


class EscalationPolicy(BaseSettings):
    """Thresholds and vetoes for the draft decision engine."""

    model_config = {"env_prefix": "DESKREVIEW_POLICY_"}

    min_confidence_for_auto: float = 0.85
    auto_escalate_threshold: float = 0.60
    escalate_on_low_confidence: bool = True
    escalate_on_angry_sentiment: bool = True
    escalate_on_vip: bool = True
    escalate_on_critical_or_urgent_priority: bool = True
    unknown_intent_confidence_floor: float = 0.70
    negative_sentiment_confidence_floor: float = 0.75
    unknown_intents: frozenset[str] = frozenset({"unknown", "fallback", ""})


class ReviewConfig(BaseSettings):
    """Review store and promotion configuration."""

    model_config = {"env_prefix": "DESKREVIEW_REVIEW_"}

    promotion_min_quality: int = Field(default=4, ge=4, le=5)
    default_example_limit: int = 5


class SchedulerConfig(BaseSettings):
    """Hierarchical escalation sweep configuration."""

    model_config = {"env_prefix": "DESKREVIEW_SCHEDULER_"}

    max_level: int = 3
    grace_window_minutes: int = 60
    re_escalation_interval_minutes: int = 240
    hierarchy: list[Role] = [Role.TEAM_LEAD, Role.MANAGER, Role.ADMIN]
    notification_attempts: int = 3
    lease_name: str = "deskreview:escalation-sweep"
    lease_ttl_seconds: int = 300

    @model_validator(mode="after")
    def _check_levels(self) -> SchedulerConfig:
        if self.max_level < 1:
            raise ValueError("max_level must be at least 1")
        if self.max_level > len(self.hierarchy):
            raise ValueError(
                f"max_level={self.max_level} exceeds hierarchy length {len(self.hierarchy)}"
            )
        if self.notification_attempts < 1:
            raise ValueError("notification_attempts must be at least 1")
        return self


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "DESKREVIEW_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis lease configuration."""

    model_config = {"env_prefix": "DESKREVIEW_REDIS_"}

    enabled: bool = True
    host: str = "localhost"
    port: int = 6379
    db: int = 0


class SQSConfig(BaseSettings):
    """SQS notification queue configuration."""

    model_config = {"env_prefix": "DESKREVIEW_SQS_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    escalation_queue_url: str = ""


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "DESKREVIEW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = True

    policy: EscalationPolicy = EscalationPolicy()
    review: ReviewConfig = ReviewConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    sqs: SQSConfig = SQSConfig()
