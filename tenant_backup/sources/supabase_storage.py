# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Supabase Storage - bucket listing and download over the Storage REST API.

The list endpoint returns one level of a bucket. Sub-folders appear as
entries with a null ``id``; real objects carry one.
"""

from typing import List, Sequence, Tuple
from urllib.parse import quote

import httpx
import structlog

from tenant_backup.exceptions import ListingError, StorageError
from tenant_backup.sources.base import StorageEntry
from tenant_backup.sources.postgrest import provider_message, service_role_headers

logger = structlog.get_logger()


class SupabaseStorage:
    """BlobStorage backed by Supabase Storage (``/storage/v1``)."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        admin_key: str,
        page_size: int = 1000,
    ):
        self._http = http
        self._storage_url = f"{base_url.rstrip('/')}/storage/v1"
        self._headers = service_role_headers(admin_key)
        self._page_size = page_size

    async def _list_page(self, bucket: str, folder: str, offset: int) -> list | None:
        try:
            response = await self._http.post(
                f"{self._storage_url}/object/list/{quote(bucket, safe='')}",
                headers=self._headers,
                json={
                    "prefix": folder,
                    "limit": self._page_size,
                    "offset": offset,
                    "sortBy": {"column": "name", "order": "asc"},
                },
            )
        except httpx.HTTPError as exc:
            raise ListingError(
                f"Failed to list {bucket}/{folder}: {exc}",
                details={"bucket": bucket, "folder": folder},
            ) from exc

        if response.is_error:
            raise ListingError(
                f"Failed to list {bucket}/{folder}: {provider_message(response)}",
                details={"bucket": bucket, "folder": folder, "status": response.status_code},
            )
        return response.json()

    async def list_folder(self, bucket: str, folder: str) -> Sequence[StorageEntry] | None:
        entries: List[StorageEntry] = []
        offset = 0
        while True:
            page = await self._list_page(bucket, folder, offset)
            if not page:
                break
            entries.extend(StorageEntry(name=item["name"], id=item.get("id")) for item in page)
            if len(page) < self._page_size:
                break
            offset += len(page)

        logger.debug("storage_folder_listed", bucket=bucket, folder=folder, entries=len(entries))
        return entries

    async def download(self, bucket: str, path: str) -> Tuple[bytes, str]:
        url = f"{self._storage_url}/object/{quote(bucket, safe='')}/{quote(path, safe='/')}"
        try:
            response = await self._http.get(url, headers=self._headers)
        except httpx.HTTPError as exc:
            raise StorageError(
                f"Failed to download {bucket}/{path}: {exc}",
                details={"bucket": bucket, "path": path},
            ) from exc

        if response.is_error:
            raise StorageError(
                f"Failed to download {bucket}/{path}: {provider_message(response)}",
                details={"bucket": bucket, "path": path, "status": response.status_code},
            )

        content_type = response.headers.get("content-type", "application/octet-stream")
        return response.content, content_type.split(";")[0].strip()
