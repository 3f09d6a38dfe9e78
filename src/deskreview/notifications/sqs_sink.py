"""SQS notification sink: posts escalation notices to the human-review queue."""

from __future__ import annotations

import json

import boto3
from botocore.exceptions import ClientError

from deskreview.core.exceptions import NotificationDeliveryError
from deskreview.models.escalation import EscalationNotification


def notification_body(notification: EscalationNotification) -> str:
    payload = notification.model_dump(mode="json")
    payload["overdue_seconds"] = int(notification.overdue_duration.total_seconds())
    payload.pop("overdue_duration", None)
    return json.dumps(payload, sort_keys=True)


class SQSNotificationSink:
    """Production INotificationSink backed by an SQS queue."""

    def __init__(self, queue_url: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._queue_url = queue_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sqs", **kwargs)

    def send(self, notification: EscalationNotification) -> None:
        try:
            self._client.send_message(
                QueueUrl=self._queue_url,
                MessageBody=notification_body(notification),
                MessageAttributes={
                    "target_id": {"DataType": "String", "StringValue": notification.target_id},
                    "level": {"DataType": "Number", "StringValue": str(notification.level)},
                },
            )
        except ClientError as exc:
            raise NotificationDeliveryError(
                f"SQS send failed for target={notification.target_id!r}: {exc}"
            ) from exc
