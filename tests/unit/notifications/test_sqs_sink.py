"""Unit tests for SQSNotificationSink using moto."""

from __future__ import annotations

import json
from datetime import timedelta

import boto3
import pytest
from moto import mock_aws

from deskreview.core.exceptions import NotificationDeliveryError
from deskreview.models.escalation import EscalationNotification
from deskreview.notifications.sqs_sink import SQSNotificationSink

REGION = "us-east-1"


@pytest.fixture
def queue_url():
    with mock_aws():
        sqs = boto3.client("sqs", region_name=REGION)
        yield sqs.create_queue(QueueName="deskreview-escalations-test")["QueueUrl"]


def _notification() -> EscalationNotification:
    return EscalationNotification(
        target_id="task-1",
        level=2,
        level_name="Manager",
        escalated_to="mgr-1",
        assignee="lead-1",
        overdue_duration=timedelta(days=1, hours=2),
        message="@Priya ESCALATION LEVEL 2 (Manager)",
    )


class TestSend:
    def test_posts_json_body(self, queue_url):
        SQSNotificationSink(queue_url, region=REGION).send(_notification())
        sqs = boto3.client("sqs", region_name=REGION)
        messages = sqs.receive_message(QueueUrl=queue_url, MessageAttributeNames=["All"])["Messages"]
        body = json.loads(messages[0]["Body"])
        assert body["target_id"] == "task-1"
        assert body["level"] == 2
        assert body["overdue_seconds"] == 93600
        assert messages[0]["MessageAttributes"]["level"]["StringValue"] == "2"

    def test_missing_queue_raises_delivery_error(self, queue_url):
        sink = SQSNotificationSink(queue_url.replace("escalations-test", "nope"), region=REGION)
        with pytest.raises(NotificationDeliveryError):
            sink.send(_notification())
