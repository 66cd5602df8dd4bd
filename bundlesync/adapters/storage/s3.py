"""
S3 catalog — containers are buckets, packages are object keys.

Retries and timeouts are delegated to botocore: the client is built
with a bounded retry policy (100 attempts by default) and a read
timeout measured in minutes, so every call here is one blocking
operation that either succeeds or raises CatalogError.
"""

from __future__ import annotations

import logging
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bundlesync.adapters.base import RemoteCatalog
from bundlesync.core.config.loader import ConnectionSettings
from bundlesync.core.errors import CatalogError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


def create_client(settings: ConnectionSettings) -> Any:
    """Create an S3 client from connection settings.

    Credentials fall back to the standard boto3 chain (environment,
    profile, instance role) when not given explicitly.
    """
    session = boto3.Session(
        profile_name=settings.profile_name,
        region_name=settings.region_name,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
    )
    config = Config(
        retries={"max_attempts": settings.max_attempts, "mode": settings.retry_mode},
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
    )
    return session.client("s3", endpoint_url=settings.endpoint_url, config=config)


class S3Catalog(RemoteCatalog):
    """Remote catalog backed by an S3-compatible object store."""

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> S3Catalog:
        return cls(create_client(settings))

    @property
    def name(self) -> str:
        return "s3"

    def list_objects(self, container: str) -> list[str]:
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=container):
                for item in page.get("Contents", []):
                    keys.append(item["Key"])
        except (ClientError, BotoCoreError) as e:
            raise CatalogError(f"Failed to list objects in bucket '{container}': {e}") from e

        logger.debug("Listed %d objects in %s", len(keys), container)
        return keys

    def get_last_modified(self, container: str, name: str) -> datetime:
        try:
            response = self._client.head_object(Bucket=container, Key=name)
        except (ClientError, BotoCoreError) as e:
            raise CatalogError(f"Failed to describe s3://{container}/{name}: {e}") from e

        last_modified = response.get("LastModified")
        if not isinstance(last_modified, datetime):
            raise CatalogError(f"No LastModified for s3://{container}/{name}")
        if last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=UTC)
        return last_modified.astimezone(UTC)

    def fetch_to(self, container: str, name: str, destination: Path) -> None:
        logger.info("Downloading s3://%s/%s to %s", container, name, destination)
        try:
            response = self._client.get_object(Bucket=container, Key=name)
            body = response["Body"]
            try:
                with destination.open("wb") as f:
                    shutil.copyfileobj(body, f, _CHUNK_SIZE)
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise CatalogError(f"Failed to fetch s3://{container}/{name}: {e}") from e
        except OSError as e:
            raise CatalogError(f"Failed to write s3://{container}/{name} to {destination}: {e}") from e
