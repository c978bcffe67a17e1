"""DynamoDB backends implementing IConfigStore and IRecordStore.

Every table uses a ``PK``/``SK`` composite key:

==========================  ====================  ==========================
table                       PK                    SK
==========================  ====================  ==========================
``salescomp-settings``      ``QUARTER#Q4_2025``   ``CONFIG``
                            ``RATES``             ``TITLE#<title>``
                            ``RULES``             ``COMMISSION``
                            ``SPIFFS``            ``SPIFF#<spiff_id>``
``salescomp-directory``     ``REPS``              ``REP#<rep_id>``
                            ``CUSTOMERS``         ``CUSTOMER#<customer_id>``
``salescomp-orders``        ``MONTH#2025-05``     ``LINE#<date>#<line_id>``
``salescomp-actuals``       ``QUARTER#Q4_2025``   ``REP#<rep_id>``
``salescomp-results``       ``QUARTER#Q4_2025``   ``ENTRY#`` / ``BONUS#`` / ``RUN[#REP#<rep_id>]``
                            ``MONTH#2025-05``     ``RECORD#`` / ``REP#`` / ``RUN[#REP#<sales_person>]``
==========================  ====================  ==========================
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, TypeVar

import boto3
from boto3.dynamodb.conditions import Key
from botocore.config import Config
from botocore.exceptions import ClientError
from pydantic import BaseModel, TypeAdapter

from salescomp.core.exceptions import CacheError, ConfigNotFoundError, StoreError
from salescomp.core.periods import quarter_key, shift_months
from salescomp.core.protocols import ICacheBackend
from salescomp.core.types import JsonDict
from salescomp.models.config import CommissionRules, MonthlyRateMatrix, QuarterlyConfig, Spiff
from salescomp.models.defaults import DEFAULT_COMMISSION_RULES
from salescomp.models.outputs import (
    CommissionEntry,
    MonthlyCommissionRecord,
    MonthlyRunSummary,
    QuarterlyRunSummary,
    RepBonusResult,
    RepMonthlySummary,
)
from salescomp.models.records import Customer, OrderLineItem, RepQuarterActuals, SalesRep

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "salescomp-settings"
DIRECTORY_TABLE = "salescomp-directory"
ORDERS_TABLE = "salescomp-orders"
ACTUALS_TABLE = "salescomp-actuals"
RESULTS_TABLE = "salescomp-results"

ALL_TABLES = (SETTINGS_TABLE, DIRECTORY_TABLE, ORDERS_TABLE, ACTUALS_TABLE, RESULTS_TABLE)

T = TypeVar("T")


def to_item(value: Any) -> Any:
    """Convert a ``model_dump()`` structure into DynamoDB-storable values."""
    if isinstance(value, dict):
        return {
            (k.value if isinstance(k, Enum) else str(k)): to_item(v)
            for k, v in value.items()
            if v is not None
        }
    if isinstance(value, (list, tuple)):
        return [to_item(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


class _DynamoDBTables:
    """Table access, pagination and error wrapping shared by both stores."""

    def __init__(
        self,
        table_suffix: str = "",
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        max_attempts: int = 5,
    ) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {
            "region_name": region,
            "config": Config(retries={"max_attempts": max_attempts, "mode": "standard"}),
        }
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    @contextmanager
    def _errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except ClientError as exc:
            raise StoreError(f"DynamoDB {action} failed: {exc}") from exc

    def _get_item(self, table_base: str, pk: str, sk: str) -> JsonDict | None:
        with self._errors(f"get {table_base} {pk}/{sk}"):
            resp = self._table(table_base).get_item(Key={"PK": pk, "SK": sk})
        return resp.get("Item")

    def _query(self, table_base: str, pk: str, sk_prefix: str | None = None) -> list[JsonDict]:
        """Query every item under a partition key, following pagination."""
        condition = Key("PK").eq(pk)
        if sk_prefix:
            condition = condition & Key("SK").begins_with(sk_prefix)
        kwargs: dict[str, Any] = {"KeyConditionExpression": condition}
        items: list[JsonDict] = []
        with self._errors(f"query {table_base} {pk}"):
            table = self._table(table_base)
            while True:
                resp = table.query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        return items

    def _put(self, table_base: str, pk: str, sk: str, model: BaseModel) -> None:
        with self._errors(f"put {table_base} {pk}/{sk}"):
            self._table(table_base).put_item(Item={"PK": pk, "SK": sk, **to_item(model.model_dump())})

    def _put_many(self, table_base: str, rows: Iterable[tuple[str, str, BaseModel]]) -> None:
        with self._errors(f"batch write {table_base}"):
            with self._table(table_base).batch_writer() as batch:
                for pk, sk, model in rows:
                    batch.put_item(Item={"PK": pk, "SK": sk, **to_item(model.model_dump())})

    def _replace(
        self,
        table_base: str,
        pk: str,
        sk_prefix: str,
        fresh: dict[str, BaseModel],
        in_scope: Callable[[JsonDict], bool],
    ) -> int:
        """Upsert ``fresh`` (keyed by SK) and delete in-scope items it no longer has.

        Returns the number of stale items deleted.
        """
        existing = self._query(table_base, pk, sk_prefix)
        stale = [item["SK"] for item in existing if item["SK"] not in fresh and in_scope(item)]
        with self._errors(f"replace {table_base} {pk}"):
            with self._table(table_base).batch_writer() as batch:
                for sk, model in fresh.items():
                    batch.put_item(Item={"PK": pk, "SK": sk, **to_item(model.model_dump())})
                for sk in stale:
                    batch.delete_item(Key={"PK": pk, "SK": sk})
        return len(stale)


class DynamoDBConfigStore(_DynamoDBTables):
    """Production IConfigStore backed by DynamoDB + optional Redis cache."""

    CACHE_PREFIX = "salescomp:config"

    def __init__(
        self,
        table_suffix: str = "",
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        max_attempts: int = 5,
        cache: ICacheBackend | None = None,
        cache_ttl: int = 300,
    ) -> None:
        super().__init__(table_suffix, region, endpoint_url, max_attempts)
        self._cache = cache
        self._cache_ttl = cache_ttl

    # ---- cache helpers ----

    def _cached(self, name: str, adapter: TypeAdapter[T], load: Callable[[], T]) -> T:
        key = f"{self.CACHE_PREFIX}:{name}"
        if self._cache is not None:
            try:
                cached = self._cache.get(key)
            except CacheError as exc:
                logger.warning("Cache read failed, falling back to DynamoDB: %s", exc)
                cached = None
            if cached is not None:
                return adapter.validate_json(cached)

        value = load()

        if self._cache is not None:
            try:
                self._cache.setex(key, self._cache_ttl, adapter.dump_json(value).decode())
            except CacheError as exc:
                logger.warning("Cache write failed for %s: %s", key, exc)
        return value

    def _invalidate(self, name: str) -> None:
        if self._cache is None:
            return
        try:
            self._cache.delete(f"{self.CACHE_PREFIX}:{name}")
        except CacheError as exc:
            logger.warning("Cache invalidation failed for %s: %s", name, exc)

    # ---- IConfigStore reads ----

    def get_quarterly_config(self, quarter_id: str) -> QuarterlyConfig:
        key = quarter_key(quarter_id)

        def load() -> QuarterlyConfig:
            item = self._get_item(SETTINGS_TABLE, f"QUARTER#{key}", "CONFIG")
            if item is None:
                raise ConfigNotFoundError(f"No quarterly configuration for {key}")
            return QuarterlyConfig.model_validate(item)

        return self._cached(f"quarter:{key}", TypeAdapter(QuarterlyConfig), load)

    def list_rate_matrices(self) -> list[MonthlyRateMatrix]:
        return self._cached(
            "rates",
            TypeAdapter(list[MonthlyRateMatrix]),
            lambda: [MonthlyRateMatrix.model_validate(i) for i in self._query(SETTINGS_TABLE, "RATES")],
        )

    def get_commission_rules(self) -> CommissionRules:
        def load() -> CommissionRules:
            item = self._get_item(SETTINGS_TABLE, "RULES", "COMMISSION")
            if item is None:
                logger.info("No commission rules stored, using defaults")
                return DEFAULT_COMMISSION_RULES
            return CommissionRules.model_validate(item)

        return self._cached("rules", TypeAdapter(CommissionRules), load)

    def list_spiffs(self) -> list[Spiff]:
        return self._cached(
            "spiffs",
            TypeAdapter(list[Spiff]),
            lambda: [Spiff.model_validate(i) for i in self._query(SETTINGS_TABLE, "SPIFFS")],
        )

    def list_reps(self) -> list[SalesRep]:
        return self._cached(
            "reps",
            TypeAdapter(list[SalesRep]),
            lambda: [SalesRep.model_validate(i) for i in self._query(DIRECTORY_TABLE, "REPS")],
        )

    # ---- administrative writes ----

    def put_quarterly_config(self, config: QuarterlyConfig) -> None:
        self._put(SETTINGS_TABLE, f"QUARTER#{config.key}", "CONFIG", config)
        self._invalidate(f"quarter:{config.key}")

    def put_rate_matrix(self, matrix: MonthlyRateMatrix) -> None:
        self._put(SETTINGS_TABLE, "RATES", f"TITLE#{matrix.title}", matrix)
        self._invalidate("rates")

    def put_commission_rules(self, rules: CommissionRules) -> None:
        self._put(SETTINGS_TABLE, "RULES", "COMMISSION", rules)
        self._invalidate("rules")

    def put_spiff(self, spiff: Spiff) -> None:
        self._put(SETTINGS_TABLE, "SPIFFS", f"SPIFF#{spiff.spiff_id}", spiff)
        self._invalidate("spiffs")

    def put_rep(self, rep: SalesRep) -> None:
        self._put(DIRECTORY_TABLE, "REPS", f"REP#{rep.rep_id}", rep)
        self._invalidate("reps")


class DynamoDBRecordStore(_DynamoDBTables):
    """Production IRecordStore backed by DynamoDB."""

    # ---- inputs ----

    def list_customers(self) -> list[Customer]:
        return [Customer.model_validate(i) for i in self._query(DIRECTORY_TABLE, "CUSTOMERS")]

    def list_line_items(self, start: date, end: date) -> list[OrderLineItem]:
        items: list[OrderLineItem] = []
        month = date(start.year, start.month, 1)
        while month <= end:
            for raw in self._query(ORDERS_TABLE, f"MONTH#{_month_key(month)}", "LINE#"):
                item = OrderLineItem.model_validate(raw)
                if start <= item.order_date <= end:
                    items.append(item)
            month = shift_months(month, 1)
        return items

    def list_quarter_actuals(self, quarter_id: str) -> list[RepQuarterActuals]:
        return [
            RepQuarterActuals.model_validate(i)
            for i in self._query(ACTUALS_TABLE, f"QUARTER#{quarter_id}", "REP#")
        ]

    def put_customer(self, customer: Customer) -> None:
        self._put(DIRECTORY_TABLE, "CUSTOMERS", f"CUSTOMER#{customer.customer_id}", customer)

    def put_line_items(self, items: Iterable[OrderLineItem]) -> None:
        self._put_many(ORDERS_TABLE, (
            (f"MONTH#{_month_key(i.order_date)}", f"LINE#{i.order_date.isoformat()}#{i.line_id}", i)
            for i in items
        ))

    def put_quarter_actuals(self, actuals: RepQuarterActuals) -> None:
        self._put(ACTUALS_TABLE, f"QUARTER#{actuals.quarter_id}", f"REP#{actuals.rep_id}", actuals)

    # ---- quarterly outputs ----

    def replace_commission_entries(
        self, quarter_id: str, entries: Iterable[CommissionEntry], rep_ids: set[str] | None = None
    ) -> None:
        fresh = {f"ENTRY#{e.entry_id}": e for e in entries}
        deleted = self._replace(
            RESULTS_TABLE, f"QUARTER#{quarter_id}", "ENTRY#", fresh,
            lambda item: rep_ids is None or item.get("rep_id") in rep_ids,
        )
        logger.debug("Quarter %s: wrote %d entries, removed %d stale", quarter_id, len(fresh), deleted)

    def list_commission_entries(self, quarter_id: str) -> list[CommissionEntry]:
        return [
            CommissionEntry.model_validate(i)
            for i in self._query(RESULTS_TABLE, f"QUARTER#{quarter_id}", "ENTRY#")
        ]

    def replace_bonus_results(
        self, quarter_id: str, results: Iterable[RepBonusResult], rep_ids: set[str] | None = None
    ) -> None:
        fresh = {f"BONUS#{r.rep_id}": r for r in results}
        deleted = self._replace(
            RESULTS_TABLE, f"QUARTER#{quarter_id}", "BONUS#", fresh,
            lambda item: rep_ids is None or item.get("rep_id") in rep_ids,
        )
        logger.debug("Quarter %s: wrote %d bonus totals, removed %d stale", quarter_id, len(fresh), deleted)

    # ---- monthly outputs ----

    def replace_monthly_records(
        self, commission_month: str, records: Iterable[MonthlyCommissionRecord],
        sales_person: str | None = None,
    ) -> None:
        fresh = {f"RECORD#{r.record_id}": r for r in records}
        deleted = self._replace(
            RESULTS_TABLE, f"MONTH#{commission_month}", "RECORD#", fresh,
            lambda item: sales_person is None or item.get("sales_person") == sales_person,
        )
        logger.debug(
            "Month %s: wrote %d records, removed %d stale", commission_month, len(fresh), deleted
        )

    def list_monthly_records(self, commission_month: str) -> list[MonthlyCommissionRecord]:
        return [
            MonthlyCommissionRecord.model_validate(i)
            for i in self._query(RESULTS_TABLE, f"MONTH#{commission_month}", "RECORD#")
        ]

    def replace_rep_summaries(
        self, commission_month: str, summaries: Iterable[RepMonthlySummary],
        sales_person: str | None = None,
    ) -> None:
        fresh = {f"REP#{s.sales_person}": s for s in summaries}
        deleted = self._replace(
            RESULTS_TABLE, f"MONTH#{commission_month}", "REP#", fresh,
            lambda item: sales_person is None or item.get("sales_person") == sales_person,
        )
        logger.debug(
            "Month %s: wrote %d rep summaries, removed %d stale", commission_month, len(fresh), deleted
        )

    def put_run_summary(self, summary: QuarterlyRunSummary | MonthlyRunSummary) -> None:
        if isinstance(summary, QuarterlyRunSummary):
            pk, scope = f"QUARTER#{summary.quarter_id}", summary.rep_id
        else:
            pk, scope = f"MONTH#{summary.commission_month}", summary.sales_person
        self._put(RESULTS_TABLE, pk, f"RUN#REP#{scope}" if scope else "RUN", summary)
