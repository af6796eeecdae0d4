# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Storage archiver - copies every object of each bucket into the archive.

For each bucket a same-named folder is created under the run's
``storage`` folder, the bucket is listed recursively, and each object is
downloaded and uploaded under its flattened name.

Failure scopes:
- Bucket folder creation or listing failure aborts that bucket only
- Download or upload failure of one object skips that object only
"""

from typing import List, Sequence, Tuple

import structlog

from tenant_backup.archive.base import ArchiveClient
from tenant_backup.export.lister import list_objects_recursively
from tenant_backup.export.naming import (
    DEFAULT_SUBSTITUTE,
    MANIFEST_NAME,
    ArchiveNamer,
)
from tenant_backup.export.outcomes import BackupProgress, BucketOutcome, gather_limited
from tenant_backup.sources.base import BlobStorage

logger = structlog.get_logger()


async def archive_object(
    storage: BlobStorage,
    archive: ArchiveClient,
    bucket: str,
    path: str,
    archived_name: str,
    bucket_folder_id: str,
) -> bool:
    """Copy one object; returns False (after logging) when it fails."""
    try:
        content, content_type = await storage.download(bucket, path)
    except Exception as e:
        logger.warning(
            "storage_object_skipped",
            bucket=bucket,
            path=path,
            stage="download",
            error=str(e),
        )
        return False

    try:
        await archive.upload_object(archived_name, content, content_type, bucket_folder_id)
    except Exception as e:
        logger.warning(
            "storage_object_skipped",
            bucket=bucket,
            path=path,
            stage="upload",
            error=str(e),
        )
        return False

    logger.debug("storage_object_archived", bucket=bucket, path=path, name=archived_name)
    return True


async def archive_bucket(
    storage: BlobStorage,
    archive: ArchiveClient,
    storage_folder_id: str,
    bucket: str,
    *,
    max_concurrency: int = 1,
    write_manifest: bool = True,
    substitute: str = DEFAULT_SUBSTITUTE,
    outcome: BucketOutcome | None = None,
) -> BucketOutcome:
    """
    Archive one bucket.

    Raises:
        ArchiveError: If the bucket folder cannot be created
        ListingError: If any level of the bucket cannot be listed
    """
    if outcome is None:
        outcome = BucketOutcome(bucket=bucket)

    bucket_folder_id = await archive.create_folder(bucket, storage_folder_id)
    paths = await list_objects_recursively(storage, bucket)

    if not paths:
        logger.info("bucket_empty", bucket=bucket)
        return outcome

    namer = ArchiveNamer(substitute, reserved={MANIFEST_NAME} if write_manifest else None)
    planned: List[Tuple[str, str]] = [(path, namer.name_for(path)) for path in paths]

    async def worker(item: Tuple[str, str]) -> None:
        path, name = item
        if await archive_object(storage, archive, bucket, path, name, bucket_folder_id):
            outcome.files_exported += 1
        else:
            outcome.files_failed += 1
            outcome.failed_paths.append(path)
            namer.forget(name)

    await gather_limited(planned, worker, max_concurrency)

    if write_manifest and namer.manifest:
        try:
            await archive.upload_object(
                MANIFEST_NAME,
                namer.manifest_bytes(bucket),
                "application/json",
                bucket_folder_id,
            )
        except Exception as e:
            logger.warning("bucket_manifest_skipped", bucket=bucket, error=str(e))

    logger.info(
        "bucket_archived",
        bucket=bucket,
        exported=outcome.files_exported,
        failed=outcome.files_failed,
    )
    return outcome


async def archive_buckets(
    storage: BlobStorage,
    archive: ArchiveClient,
    storage_folder_id: str,
    buckets: Sequence[str],
    *,
    max_concurrency: int = 1,
    write_manifest: bool = True,
    substitute: str = DEFAULT_SUBSTITUTE,
    progress: BackupProgress | None = None,
) -> List[BucketOutcome]:
    """
    Archive buckets one after another.

    A bucket whose folder cannot be created or which cannot be listed is
    recorded with an error and contributes no files; the remaining buckets
    still run. Any other failure raised while setting up a bucket is
    treated the same way.
    """
    outcomes: List[BucketOutcome] = []

    for bucket in buckets:
        outcome = BucketOutcome(bucket=bucket)
        outcomes.append(outcome)
        if progress is not None:
            progress.buckets.append(outcome)

        try:
            await archive_bucket(
                storage,
                archive,
                storage_folder_id,
                bucket,
                max_concurrency=max_concurrency,
                write_manifest=write_manifest,
                substitute=substitute,
                outcome=outcome,
            )
        except Exception as e:
            outcome.error = str(e)
            logger.warning("bucket_archive_failed", bucket=bucket, error=str(e))

        if progress is not None:
            if outcome.error:
                progress.errors.append(f"bucket {bucket}: {outcome.error}")
            for path in outcome.failed_paths:
                progress.errors.append(f"object {bucket}/{path}")

    return outcomes
