# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Recursive object lister - flattens a bucket's folder tree into leaf paths.

Traversal uses an explicit stack instead of recursion so arbitrarily deep
buckets cannot exhaust the call stack. Results come out in the same
depth-first order a recursive walk would produce: a folder's contents are
spliced in at the folder's position.
"""

from typing import Iterator, List, Tuple

import structlog

from tenant_backup.exceptions import ListingError
from tenant_backup.sources.base import BlobStorage, StorageEntry

logger = structlog.get_logger()


def join_path(folder: str, name: str) -> str:
    return f"{folder}/{name}" if folder else name


async def _list_level(storage: BlobStorage, bucket: str, folder: str) -> Iterator[StorageEntry]:
    try:
        entries = await storage.list_folder(bucket, folder)
    except ListingError:
        raise
    except Exception as e:
        raise ListingError(
            f"Failed to list {bucket}/{folder}: {e}",
            details={"bucket": bucket, "folder": folder},
        ) from e
    return iter(entries or ())


async def list_objects_recursively(
    storage: BlobStorage,
    bucket: str,
    folder: str = "",
) -> List[str]:
    """
    List every leaf object path beneath bucket/folder.

    A listing failure at any depth raises ListingError; a partial inventory
    is never returned.

    Args:
        storage: Blob storage to list
        bucket: Bucket name
        folder: Optional sub-path to start from ("" = bucket root)

    Returns:
        Object paths relative to the bucket root, e.g. ["a.png", "folder/b.png"]
    """
    paths: List[str] = []
    pending: List[Tuple[str, Iterator[StorageEntry]]] = [
        (folder, await _list_level(storage, bucket, folder))
    ]

    while pending:
        current, entries = pending[-1]
        entry = next(entries, None)
        if entry is None:
            pending.pop()
            continue

        item_path = join_path(current, entry.name)
        if entry.is_folder:
            pending.append((item_path, await _list_level(storage, bucket, item_path)))
        else:
            paths.append(item_path)

    logger.debug("bucket_listed", bucket=bucket, folder=folder, objects=len(paths))
    return paths
