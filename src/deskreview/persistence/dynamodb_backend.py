"""DynamoDB backends for reviews, learning examples, work items and staff.

Every mutation is a single conditional write, which gives the review
transition and the escalation level change their compare-and-swap semantics.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from botocore.exceptions import ClientError

from deskreview.core.exceptions import StoreError
from deskreview.core.types import from_iso, to_iso
from deskreview.models.escalation import EscalationTarget, Role, StaffMember
from deskreview.models.review import DraftReview, LearningExample, ReviewStatus

REVIEWS_TABLE = "deskreview-draft-reviews"
EXAMPLES_TABLE = "deskreview-learning-examples"
WORK_ITEMS_TABLE = "deskreview-work-items"
STAFF_TABLE = "deskreview-staff"

_KEY_ATTRS = ("PK", "SK")


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, Decimal):
            out[k] = int(v) if v == int(v) else float(v)
        elif isinstance(v, dict):
            out[k] = _decode_decimals(v)
        else:
            out[k] = v
    return out


def _encode(values: dict[str, Any]) -> dict[str, Any]:
    """Floats to Decimal, None values dropped (absent attribute means unset)."""
    out: dict[str, Any] = {}
    for k, v in values.items():
        if v is None:
            continue
        out[k] = Decimal(str(v)) if isinstance(v, float) else v
    return out


def _strip_keys(item: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in _decode_decimals(item).items() if k not in _KEY_ATTRS}


def _is_condition_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class _DynamoTable:
    """Shared resource/table plumbing."""

    TABLE: str = ""

    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)
        self._tbl = self._ddb.Table(f"{self.TABLE}{table_suffix}")

    def _get_item(self, pk: str, sk: str) -> dict[str, Any] | None:
        try:
            resp = self._tbl.get_item(Key={"PK": pk, "SK": sk})
        except ClientError as exc:
            raise StoreError(f"DynamoDB get failed for {pk!r}: {exc}") from exc
        item = resp.get("Item")
        return _strip_keys(item) if item else None

    def _scan(self, condition: ConditionBase | None = None) -> list[dict[str, Any]]:
        kwargs: dict[str, Any] = {}
        if condition is not None:
            kwargs["FilterExpression"] = condition
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = self._tbl.scan(**kwargs)
                items.extend(_strip_keys(i) for i in resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    return items
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise StoreError(f"DynamoDB scan failed on {self._tbl.name}: {exc}") from exc


def _and(conditions: list[ConditionBase]) -> ConditionBase | None:
    combined: ConditionBase | None = None
    for cond in conditions:
        combined = cond if combined is None else combined & cond
    return combined


class DynamoDBReviewStore(_DynamoTable):
    """Production IReviewStore."""

    TABLE = REVIEWS_TABLE

    @staticmethod
    def _pk(review_id: str) -> str:
        return f"REVIEW#{review_id}"

    def _item(self, review: DraftReview) -> dict[str, Any]:
        return {
            "PK": self._pk(review.id),
            "SK": "REVIEW",
            **_encode(review.model_dump(mode="json")),
        }

    def create(self, review: DraftReview) -> None:
        try:
            self._tbl.put_item(Item=self._item(review), ConditionExpression=Attr("PK").not_exists())
        except ClientError as exc:
            if _is_condition_failure(exc):
                raise StoreError(f"Draft review {review.id} already exists") from exc
            raise StoreError(f"DynamoDB put failed for review {review.id}: {exc}") from exc

    def get(self, review_id: str) -> DraftReview | None:
        item = self._get_item(self._pk(review_id), "REVIEW")
        return DraftReview.model_validate(item) if item else None

    def complete(self, review: DraftReview) -> bool:
        try:
            self._tbl.put_item(
                Item=self._item(review),
                ConditionExpression=Attr("status").eq(ReviewStatus.PENDING.value),
            )
        except ClientError as exc:
            if _is_condition_failure(exc):
                return False
            raise StoreError(f"DynamoDB put failed for review {review.id}: {exc}") from exc
        return True

    def list_reviews(
        self, status: ReviewStatus | None = None, subject_id: str | None = None
    ) -> list[DraftReview]:
        conditions: list[ConditionBase] = []
        if status is not None:
            conditions.append(Attr("status").eq(status.value))
        if subject_id is not None:
            conditions.append(Attr("subject_id").eq(subject_id))
        return [DraftReview.model_validate(i) for i in self._scan(_and(conditions))]


class DynamoDBExampleStore(_DynamoTable):
    """Production IExampleStore."""

    TABLE = EXAMPLES_TABLE

    @staticmethod
    def _pk(example_id: str) -> str:
        return f"EXAMPLE#{example_id}"

    def add_if_absent(self, example: LearningExample) -> tuple[LearningExample, bool]:
        item = {"PK": self._pk(example.id), "SK": "EXAMPLE", **_encode(example.model_dump(mode="json"))}
        try:
            self._tbl.put_item(Item=item, ConditionExpression=Attr("PK").not_exists())
        except ClientError as exc:
            if not _is_condition_failure(exc):
                raise StoreError(f"DynamoDB put failed for example {example.id}: {exc}") from exc
            existing = self.get(example.id)
            if existing is None:
                raise StoreError(f"Example {example.id} vanished after conflicting write") from exc
            return existing, False
        return example, True

    def get(self, example_id: str) -> LearningExample | None:
        item = self._get_item(self._pk(example_id), "EXAMPLE")
        return LearningExample.model_validate(item) if item else None

    def list_active(self, intent: str | None = None) -> list[LearningExample]:
        conditions: list[ConditionBase] = [Attr("active").eq(True)]
        if intent is not None:
            conditions.append(Attr("intent").eq(intent))
        return [LearningExample.model_validate(i) for i in self._scan(_and(conditions))]

    def deactivate(self, example_id: str) -> bool:
        try:
            self._tbl.update_item(
                Key={"PK": self._pk(example_id), "SK": "EXAMPLE"},
                UpdateExpression="SET active = :inactive",
                ConditionExpression=Attr("PK").exists(),
                ExpressionAttributeValues={":inactive": False},
            )
        except ClientError as exc:
            if _is_condition_failure(exc):
                return False
            raise StoreError(f"DynamoDB update failed for example {example_id}: {exc}") from exc
        return True


class DynamoDBWorkItemStore(_DynamoTable):
    """Production IWorkItemStore over the escalation view of tickets and tasks.

    Timestamps are stored with ``to_iso`` so string comparison in filter and
    condition expressions matches chronological order.
    """

    TABLE = WORK_ITEMS_TABLE

    @staticmethod
    def _pk(target_id: str) -> str:
        return f"ITEM#{target_id}"

    @staticmethod
    def _to_model(item: dict[str, Any]) -> EscalationTarget:
        item = dict(item)
        for field in ("deadline", "last_escalated_at"):
            item[field] = from_iso(item.get(field))
        return EscalationTarget.model_validate(item)

    def put(self, target: EscalationTarget) -> None:
        values = target.model_dump(mode="json")
        for field in ("deadline", "last_escalated_at"):
            value = getattr(target, field)
            values[field] = to_iso(value) if value is not None else None
        try:
            self._tbl.put_item(Item={"PK": self._pk(target.id), "SK": "ESCALATION", **_encode(values)})
        except ClientError as exc:
            raise StoreError(f"DynamoDB put failed for work item {target.id}: {exc}") from exc

    def get(self, target_id: str) -> EscalationTarget | None:
        item = self._get_item(self._pk(target_id), "ESCALATION")
        return self._to_model(item) if item else None

    def list_escalation_candidates(self, now: datetime) -> list[EscalationTarget]:
        condition = (
            Attr("is_open").eq(True)
            & Attr("deadline").exists()
            & Attr("deadline").lt(to_iso(now))
        )
        return [self._to_model(i) for i in self._scan(condition)]

    def advance_escalation(
        self,
        target_id: str,
        expected_level: int,
        expected_last_escalated_at: datetime | None,
        new_level: int,
        escalated_at: datetime,
    ) -> bool:
        condition = Attr("current_escalation_level").eq(expected_level)
        if expected_last_escalated_at is None:
            condition = condition & Attr("last_escalated_at").not_exists()
        else:
            condition = condition & Attr("last_escalated_at").eq(to_iso(expected_last_escalated_at))
        try:
            self._tbl.update_item(
                Key={"PK": self._pk(target_id), "SK": "ESCALATION"},
                UpdateExpression="SET current_escalation_level = :level, last_escalated_at = :at",
                ConditionExpression=condition,
                ExpressionAttributeValues={":level": new_level, ":at": to_iso(escalated_at)},
            )
        except ClientError as exc:
            if _is_condition_failure(exc):
                return False
            raise StoreError(f"DynamoDB update failed for work item {target_id}: {exc}") from exc
        return True


class DynamoDBStaffDirectory(_DynamoTable):
    """Production IStaffDirectory. Staff rows live under ``ROLE#<role>``."""

    TABLE = STAFF_TABLE

    def put(self, member: StaffMember, rank: int = 0) -> None:
        item = {
            "PK": f"ROLE#{member.role.value}",
            "SK": f"STAFF#{member.id}",
            "rank": rank,
            **_encode(member.model_dump(mode="json")),
        }
        try:
            self._tbl.put_item(Item=item)
        except ClientError as exc:
            raise StoreError(f"DynamoDB put failed for staff {member.id}: {exc}") from exc

    def list_active_staff(self, role: Role) -> list[StaffMember]:
        try:
            resp = self._tbl.query(
                KeyConditionExpression=Key("PK").eq(f"ROLE#{role.value}"),
                FilterExpression=Attr("active").eq(True),
            )
        except ClientError as exc:
            raise StoreError(f"DynamoDB query failed for role {role.value!r}: {exc}") from exc
        items = sorted(
            (_decode_decimals(i) for i in resp.get("Items", [])),
            key=lambda i: (i.get("rank", 0), i["SK"]),
        )
        return [
            StaffMember.model_validate({k: v for k, v in i.items() if k not in (*_KEY_ATTRS, "rank")})
            for i in items
        ]
