"""Create the SalesComp DynamoDB tables and seed the default configuration.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566 --quarter Q1_2026
"""

from __future__ import annotations

import argparse
from datetime import date
from typing import Any

import boto3

from salescomp.core.periods import quarter_containing
from salescomp.models.defaults import (
    DEFAULT_COMMISSION_RULES,
    DEFAULT_ROLE_SCALES,
    default_quarterly_config,
    default_rate_matrix,
)
from salescomp.persistence.dynamodb_backend import ALL_TABLES, DynamoDBConfigStore


def create_tables(ddb: Any, suffix: str = "") -> list[str]:
    """Create all SalesComp tables. Skips tables that already exist.

    Returns the names of the tables created by this call.
    """
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    created: list[str] = []
    for base in ALL_TABLES:
        table_name = f"{base}{suffix}"
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
        created.append(table_name)
        print(f"  Created table {table_name}")
    return created


def seed_defaults(store: DynamoDBConfigStore, quarters: list[str]) -> None:
    """Seed quarterly configs, one rate matrix per title and the commission rules."""
    for quarter_id in quarters:
        config = default_quarterly_config(quarter_id)
        store.put_quarterly_config(config)
        print(f"  Seeded quarterly configuration {config.key}")

    for scale in DEFAULT_ROLE_SCALES:
        store.put_rate_matrix(default_rate_matrix(scale.role))
    print(f"  Seeded {len(DEFAULT_ROLE_SCALES)} rate matrices")

    store.put_commission_rules(DEFAULT_COMMISSION_RULES)
    print("  Seeded commission rules")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for SalesComp")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument(
        "--quarter", action="append", dest="quarters", default=None,
        help="Quarter to seed a default configuration for (repeatable, default: the current quarter)",
    )
    args = parser.parse_args(argv)

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding configuration...")
    store = DynamoDBConfigStore(
        table_suffix=args.table_suffix,
        region=args.region,
        endpoint_url=args.endpoint_url,
    )
    seed_defaults(store, args.quarters or [quarter_containing(date.today())])

    print("Done!")


if __name__ == "__main__":
    main()
