"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from salescomp.core.config import AppSettings
from salescomp.persistence.dynamodb_backend import DynamoDBConfigStore, DynamoDBRecordStore
from salescomp.persistence.redis_backend import RedisCacheBackend
from salescomp.persistence.s3_backend import S3FileStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (config_store, record_store, file_store).
    """
    if settings is None:
        settings = AppSettings()

    cache = None
    if settings.redis.enabled:
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )

    dynamo = settings.dynamodb
    config_store = DynamoDBConfigStore(
        table_suffix=dynamo.table_suffix,
        region=dynamo.region,
        endpoint_url=dynamo.endpoint_url,
        max_attempts=dynamo.max_attempts,
        cache=cache,
        cache_ttl=settings.redis.config_ttl,
    )
    record_store = DynamoDBRecordStore(
        table_suffix=dynamo.table_suffix,
        region=dynamo.region,
        endpoint_url=dynamo.endpoint_url,
        max_attempts=dynamo.max_attempts,
    )

    file_store = S3FileStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    return config_store, record_store, file_store
