"""Tests for the DynamoDB seed script."""

from __future__ import annotations

import sys
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from deskreview.models.escalation import Role
from deskreview.persistence.dynamodb_backend import DynamoDBStaffDirectory, DynamoDBWorkItemStore

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from seed_dynamodb import TABLE_NAMES, create_tables, seed_sample_data  # noqa: E402


@pytest.fixture
def ddb():
    with mock_aws():
        yield boto3.resource("dynamodb", region_name="us-east-1")


class TestCreateTables:
    def test_creates_all_tables(self, ddb):
        create_tables(ddb, suffix="-test")
        client = boto3.client("dynamodb", region_name="us-east-1")
        tables = client.list_tables()["TableNames"]
        assert len(tables) == len(TABLE_NAMES)
        assert "deskreview-draft-reviews-test" in tables

    def test_idempotent_skips_existing(self, ddb):
        create_tables(ddb, suffix="-test")
        create_tables(ddb, suffix="-test")  # should not raise
        client = boto3.client("dynamodb", region_name="us-east-1")
        assert len(client.list_tables()["TableNames"]) == len(TABLE_NAMES)


class TestSeedSampleData:
    def test_seeds_full_hierarchy(self, ddb):
        create_tables(ddb, suffix="-test")
        seed_sample_data("-test")
        staff = DynamoDBStaffDirectory(table_suffix="-test")
        assert [m.id for m in staff.list_active_staff(Role.TEAM_LEAD)] == ["staff-lead-1", "staff-lead-2"]
        assert staff.list_active_staff(Role.MANAGER)
        assert staff.list_active_staff(Role.ADMIN)

    def test_work_items_optional(self, ddb):
        create_tables(ddb, suffix="-test")
        seed_sample_data("-test")
        items = DynamoDBWorkItemStore(table_suffix="-test")
        assert items.get("task-demo-1") is None
        seed_sample_data("-test", with_work_items=True)
        assert items.get("task-demo-1").current_escalation_level == 0
