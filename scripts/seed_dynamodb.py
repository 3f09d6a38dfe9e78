"""Create deskreview DynamoDB tables and seed a sample staff hierarchy.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from datetime import timedelta
from typing import Any

import boto3

from deskreview.core.types import utcnow
from deskreview.models.escalation import EscalationTarget, Role, StaffMember, WorkItemKind
from deskreview.persistence.dynamodb_backend import (
    EXAMPLES_TABLE,
    REVIEWS_TABLE,
    STAFF_TABLE,
    WORK_ITEMS_TABLE,
    DynamoDBStaffDirectory,
    DynamoDBWorkItemStore,
)

TABLE_NAMES = [REVIEWS_TABLE, EXAMPLES_TABLE, WORK_ITEMS_TABLE, STAFF_TABLE]

SAMPLE_STAFF = [
    StaffMember(id="staff-lead-1", display_name="Jordan Lee", role=Role.TEAM_LEAD, email="jordan@example.com"),
    StaffMember(id="staff-lead-2", display_name="Sam Ortiz", role=Role.TEAM_LEAD, email="sam@example.com"),
    StaffMember(id="staff-mgr-1", display_name="Priya Nair", role=Role.MANAGER, email="priya@example.com"),
    StaffMember(id="staff-admin-1", display_name="Alex Kim", role=Role.ADMIN, email="alex@example.com"),
]


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create all deskreview tables. Skips if table already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for name in TABLE_NAMES:
        table_name = f"{name}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"  Created table {table_name}")


def seed_sample_data(
    suffix: str = "", region: str = "us-east-1", endpoint_url: str | None = None,
    *, with_work_items: bool = False,
) -> None:
    """Seed the staff hierarchy and, optionally, a pair of overdue tasks."""
    staff = DynamoDBStaffDirectory(table_suffix=suffix, region=region, endpoint_url=endpoint_url)
    for rank, member in enumerate(SAMPLE_STAFF):
        staff.put(member, rank=rank)
    print(f"  Seeded {len(SAMPLE_STAFF)} staff members")

    if not with_work_items:
        return
    now = utcnow()
    items = DynamoDBWorkItemStore(table_suffix=suffix, region=region, endpoint_url=endpoint_url)
    samples = [
        EscalationTarget(
            id="task-demo-1", kind=WorkItemKind.TASK, title="Refund follow-up",
            priority="high", deadline=now - timedelta(days=2), assignee="staff-lead-1",
        ),
        EscalationTarget(
            id="ticket-demo-1", kind=WorkItemKind.TICKET, title="Login failure",
            deadline=now - timedelta(hours=3),
        ),
    ]
    for item in samples:
        items.put(item)
    print(f"  Seeded {len(samples)} overdue work items")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for deskreview")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--with-work-items", action="store_true", help="Also seed overdue demo tasks")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding data...")
    seed_sample_data(
        args.table_suffix, args.region, args.endpoint_url, with_work_items=args.with_work_items,
    )

    print("Done!")


if __name__ == "__main__":
    main()
