# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
S3-compatible storage - bucket listing and download via aiobotocore.

A delimited ``list_objects_v2`` gives the same single-level view as the
Supabase list endpoint: common prefixes become folder entries and keys
become object entries.
"""

from typing import Any, List, Sequence, Tuple

import structlog

from tenant_backup.exceptions import ListingError, StorageError
from tenant_backup.sources.base import StorageEntry

logger = structlog.get_logger()


class S3Storage:
    """BlobStorage backed by an aiobotocore S3 client."""

    def __init__(self, s3_client: Any, page_size: int = 1000):
        self._client = s3_client
        self._page_size = page_size

    async def list_folder(self, bucket: str, folder: str) -> Sequence[StorageEntry] | None:
        prefix = f"{folder}/" if folder else ""
        entries: List[StorageEntry] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            async for page in paginator.paginate(
                Bucket=bucket,
                Prefix=prefix,
                Delimiter="/",
                MaxKeys=self._page_size,
            ):
                for common in page.get("CommonPrefixes", []):
                    name = common["Prefix"][len(prefix):].rstrip("/")
                    if name:
                        entries.append(StorageEntry(name=name, id=None))
                for obj in page.get("Contents", []):
                    name = obj["Key"][len(prefix):]
                    # Zero-byte "folder/" placeholder objects are not leaves
                    if name and not name.endswith("/"):
                        entries.append(StorageEntry(name=name, id=obj.get("ETag") or obj["Key"]))
        except Exception as exc:
            raise ListingError(
                f"Failed to list {bucket}/{folder}: {exc}",
                details={"bucket": bucket, "folder": folder},
            ) from exc

        logger.debug("storage_folder_listed", bucket=bucket, folder=folder, entries=len(entries))
        return entries

    async def download(self, bucket: str, path: str) -> Tuple[bytes, str]:
        try:
            response = await self._client.get_object(Bucket=bucket, Key=path)
            async with response["Body"] as stream:
                content = await stream.read()
        except Exception as exc:
            raise StorageError(
                f"Failed to download {bucket}/{path}: {exc}",
                details={"bucket": bucket, "path": path},
            ) from exc

        return content, response.get("ContentType") or "application/octet-stream"
