"""S3 file storage backend implementing IFileStore."""

from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from salescomp.core.exceptions import StoreError


class S3FileStore:
    """Production IFileStore backed by S3; holds the CSV exports."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=path, Body=data, ContentType=content_type,
            )
        except ClientError as exc:
            raise StoreError(f"S3 write failed for {path!r}: {exc}") from exc
        return path
