"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "SALESCOMP_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    max_attempts: int = 5  # botocore standard retry mode


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "SALESCOMP_REDIS_"}

    enabled: bool = True
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    config_ttl: int = 300


class S3Config(BaseSettings):
    """S3 export storage configuration."""

    model_config = {"env_prefix": "SALESCOMP_S3_"}

    bucket: str = "salescomp-exports"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    export_prefix: str = "exports"


class CalculationConfig(BaseSettings):
    """Tunables for the calculation engine."""

    model_config = {"env_prefix": "SALESCOMP_CALC_"}

    weight_tolerance: Decimal = Decimal("0.001")
    history_lookback_months: int = 24
    default_inactivity_threshold: int = 12


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "SALESCOMP_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
    calculation: CalculationConfig = CalculationConfig()
