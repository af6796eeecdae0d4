# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Source capability protocols: relational rows and blob storage.

Both sources are read-only from the backup's point of view.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence, Tuple

# Rows are read generically; no schema is assumed
Row = Dict[str, Any]


@dataclass(frozen=True)
class StorageEntry:
    """One entry of a single-level bucket listing."""

    name: str
    id: str | None  # None marks a folder

    @property
    def is_folder(self) -> bool:
        return self.id is None


class DataStore(Protocol):
    """Relational data store queried with service-role privilege."""

    async def fetch_rows(self, table: str) -> List[Row]:
        """Return every row of table; raises DataStoreError."""
        ...


class BlobStorage(Protocol):
    """Blob storage service organised as buckets of folders and objects."""

    async def list_folder(self, bucket: str, folder: str) -> Sequence[StorageEntry] | None:
        """List one level of bucket/folder; raises ListingError."""
        ...

    async def download(self, bucket: str, path: str) -> Tuple[bytes, str]:
        """Return (content, content_type) of one object; raises StorageError."""
        ...
