# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Local-disk storage crawler.

Downloads every object of each bucket to
``<output_dir>/storage/<bucket>/<path>``, keeping the bucket's nesting.
"""

import uuid
from pathlib import Path
from typing import List, Sequence

import aiofiles
import structlog

from tenant_backup.exceptions import ListingError, StorageError
from tenant_backup.export.lister import list_objects_recursively
from tenant_backup.export.outcomes import BucketOutcome, gather_limited
from tenant_backup.sources.base import BlobStorage

logger = structlog.get_logger()


def local_object_path(output_dir: Path, bucket: str, path: str) -> Path:
    """
    Resolve where an object is written, rejecting paths that escape the
    bucket directory.
    """
    bucket_dir = (output_dir / "storage" / bucket).resolve()
    target = (bucket_dir / path).resolve()
    if path.startswith("/") or not target.is_relative_to(bucket_dir):
        raise StorageError(
            f"Unsafe object path: {path}",
            details={"bucket": bucket, "path": path},
        )
    return target


async def write_object_file(target: Path, content: bytes) -> None:
    """
    Write atomically: unique temp file in the target directory -> rename.

    The temp name is unique per write and opened exclusively, so a sibling
    object such as ``x.tmp`` is never clobbered while ``x`` is written.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.partial")

    created = False
    try:
        async with aiofiles.open(temp_path, "xb") as f:
            created = True
            await f.write(content)
        temp_path.replace(target)
    finally:
        if created and temp_path.exists():
            temp_path.unlink()


async def mirror_object(
    storage: BlobStorage,
    output_dir: Path,
    bucket: str,
    path: str,
) -> bool:
    try:
        target = local_object_path(output_dir, bucket, path)
        content, _ = await storage.download(bucket, path)
        await write_object_file(target, content)
    except (StorageError, OSError) as e:
        logger.warning("storage_object_skipped", bucket=bucket, path=path, error=str(e))
        return False

    logger.debug("storage_object_written", bucket=bucket, path=str(target))
    return True


async def mirror_buckets_to_disk(
    storage: BlobStorage,
    output_dir: Path,
    buckets: Sequence[str],
    max_concurrency: int = 1,
) -> List[BucketOutcome]:
    """
    Back up all files from all buckets to output_dir.

    Args:
        storage: Blob storage to read from
        output_dir: Directory receiving ``storage/<bucket>/...``
        buckets: Bucket names, processed in order
        max_concurrency: Objects in flight per bucket

    Returns:
        One outcome per bucket
    """
    outcomes: List[BucketOutcome] = []

    for bucket in buckets:
        outcome = BucketOutcome(bucket=bucket)
        outcomes.append(outcome)

        try:
            paths = await list_objects_recursively(storage, bucket)
        except ListingError as e:
            outcome.error = str(e)
            logger.warning("bucket_mirror_failed", bucket=bucket, error=str(e))
            continue

        if not paths:
            logger.info("bucket_empty", bucket=bucket)
            continue

        async def worker(path: str, outcome: BucketOutcome = outcome, bucket: str = bucket) -> None:
            if await mirror_object(storage, output_dir, bucket, path):
                outcome.files_exported += 1
            else:
                outcome.files_failed += 1
                outcome.failed_paths.append(path)

        await gather_limited(paths, worker, max_concurrency)

        logger.info(
            "bucket_mirrored",
            bucket=bucket,
            exported=outcome.files_exported,
            failed=outcome.files_failed,
        )

    return outcomes
