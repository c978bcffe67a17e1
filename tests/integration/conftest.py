"""Integration test fixtures for LocalStack DynamoDB."""

from __future__ import annotations

import os
import sys

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
TABLE_SUFFIX = "-inttest"
SEEDED_QUARTER = "Q4_2025"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client(
            "dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL,
            aws_access_key_id="test", aws_secret_access_key="test",
        )
        client.list_tables()
        return True
    except (BotoCoreError, ClientError):
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_ddb():
    """DynamoDB resource pointing at LocalStack."""
    return boto3.resource("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture(scope="session")
def seeded_tables(localstack_ddb):
    """Create and seed DynamoDB tables via the seed script."""
    sys.path.insert(0, str(os.path.join(os.path.dirname(__file__), "..", "..", "scripts")))
    from seed_dynamodb import create_tables, seed_defaults

    from salescomp.persistence.dynamodb_backend import DynamoDBConfigStore

    create_tables(localstack_ddb, suffix=TABLE_SUFFIX)
    store = DynamoDBConfigStore(
        table_suffix=TABLE_SUFFIX, region="us-east-1", endpoint_url=LOCALSTACK_URL,
    )
    seed_defaults(store, [SEEDED_QUARTER])
    return TABLE_SUFFIX
