# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tenant Backup Core - orchestrates one backup run.

A run creates a dated root folder with ``database`` and ``storage``
sub-folders in the archive, exports every configured table, archives
every configured bucket, uploads any caller-supplied artifacts, and
returns a BackupResult.

Folder creation is fatal: nothing has been exported yet and every later
upload depends on those folders. Everything after that favours a partial
backup over no backup.
"""

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, List, Mapping, TypedDict

import structlog

from tenant_backup.config import BackupConfig, DataStoreBackend, StorageBackend
from tenant_backup.errors import explain_missing_env
from tenant_backup.exceptions import ArchiveError, ConfigurationError
from tenant_backup.export.naming import guess_mime_type
from tenant_backup.export.outcomes import BackupProgress, BucketOutcome, TableExportOutcome
from tenant_backup.export.storage import archive_buckets
from tenant_backup.export.tables import export_tables
from tenant_backup.identifier import Clock, build_backup_id, utc_now

logger = structlog.get_logger()

DATABASE_FOLDER = "database"
STORAGE_FOLDER = "storage"


@dataclass
class BackupResult:
    """Result of a backup run."""

    backup_id: str
    archive_folder_url: str
    tables_exported: int
    storage_files_exported: int
    artifacts_uploaded: int = 0
    duration_seconds: float = 0.0
    timed_out: bool = False
    table_outcomes: List[TableExportOutcome] = field(default_factory=list)
    bucket_outcomes: List[BucketOutcome] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class BackupClients(TypedDict):
    """Clients a run talks to, constructed once per process."""

    archive: Any  # ArchiveClient, None for storage-only runs
    data_store: Any  # DataStore, None for storage-only runs
    storage: Any  # BlobStorage
    exit_stack: AsyncExitStack | None


async def initialize_backup_clients(
    config: BackupConfig,
    *,
    storage_only: bool = False,
) -> BackupClients:
    """
    Construct the archive, data store and storage clients.

    Args:
        config: Backup configuration
        storage_only: Only build the storage client (local-disk variant)

    Returns:
        Initialized BackupClients; release with shutdown_backup_clients()
    """
    import httpx

    from tenant_backup.archive.drive import DEFAULT_TIMEOUT, create_drive_client
    from tenant_backup.sources import (
        PostgrestDataStore,
        S3Storage,
        SupabaseStorage,
        connect_postgres,
    )

    stack = AsyncExitStack()
    try:
        http = await stack.enter_async_context(httpx.AsyncClient(timeout=DEFAULT_TIMEOUT))

        archive = None
        data_store = None
        if not storage_only:
            archive = create_drive_client(config.archive_credential, http=http)

            if config.data_store_backend == DataStoreBackend.POSTGRES:
                data_store = await connect_postgres(config.data_store_url)
                stack.push_async_callback(data_store.aclose)
            else:
                data_store = PostgrestDataStore(
                    http, config.data_store_url, config.data_store_admin_key
                )

        if config.storage_backend == StorageBackend.S3:
            from aiobotocore.session import get_session

            s3_client = await stack.enter_async_context(
                get_session().create_client(
                    "s3",
                    region_name=config.region,
                    endpoint_url=config.storage_endpoint_url,
                )
            )
            storage = S3Storage(s3_client, config.list_page_size)
        else:
            storage = SupabaseStorage(
                http,
                config.resolved_storage_url,
                config.data_store_admin_key,
                config.list_page_size,
            )
    except BaseException:
        await stack.aclose()
        raise

    return BackupClients(
        archive=archive,
        data_store=data_store,
        storage=storage,
        exit_stack=stack,
    )


async def shutdown_backup_clients(clients: BackupClients) -> None:
    """Close every connection opened by initialize_backup_clients()."""
    stack = clients["exit_stack"]
    if stack is None:
        return
    try:
        await stack.aclose()
    except Exception as e:
        logger.warning("backup_clients_close_failed", error=str(e))


async def _upload_artifacts(
    archive: Any,
    root_folder_id: str,
    artifacts: Mapping[str, bytes],
    progress: BackupProgress,
) -> None:
    for name, content in artifacts.items():
        try:
            await archive.upload_object(name, content, guess_mime_type(name), root_folder_id)
        except Exception as e:
            progress.errors.append(f"artifact {name}: {e}")
            logger.warning("artifact_upload_failed", name=name, error=str(e))
            continue

        progress.artifacts_uploaded += 1
        logger.info("artifact_uploaded", name=name, size=len(content))


async def run_backup(
    config: BackupConfig,
    clients: BackupClients,
    extra_artifacts: Mapping[str, bytes] | None = None,
    clock: Clock = utc_now,
) -> BackupResult:
    """
    Run a complete backup.

    This is the main entry point. It:
    1. Creates ``<backup_id>/``, ``database/`` and ``storage/`` folders
    2. Exports every configured table into ``database/``
    3. Archives every configured bucket into ``storage/<bucket>/``
    4. Uploads extra artifacts (e.g. a pg_dump file) into the root folder

    Args:
        config: Backup configuration
        clients: Archive, data store and storage clients
        extra_artifacts: Optional {file name: content} uploaded into the root
        clock: Source of the run's start time

    Returns:
        BackupResult with the backup id, folder URL and counts

    Raises:
        ConfigurationError: If no archive root folder or client is configured
        ArchiveError: If a required folder cannot be created
    """
    if not config.archive_root_folder_id:
        raise ConfigurationError(explain_missing_env("ARCHIVE_ROOT_FOLDER_ID"))
    archive = clients["archive"]
    data_store = clients["data_store"]
    if archive is None or data_store is None:
        raise ConfigurationError("Archive and data store clients are required for a backup run")

    backup_id = build_backup_id(clock)
    start_time = datetime.now(UTC)

    logger.info(
        "backup_started",
        backup_id=backup_id,
        tables=len(config.tables),
        buckets=len(config.buckets),
    )

    try:
        root_folder_id = await archive.create_folder(backup_id, config.archive_root_folder_id)
        database_folder_id = await archive.create_folder(DATABASE_FOLDER, root_folder_id)
        storage_folder_id = await archive.create_folder(STORAGE_FOLDER, root_folder_id)
    except ArchiveError as e:
        logger.error("backup_failed", backup_id=backup_id, stage="folders", error=str(e))
        raise

    progress = BackupProgress()
    timed_out = False
    deadline = asyncio.timeout(config.timeout_seconds)

    try:
        async with deadline:
            await export_tables(
                data_store,
                archive,
                database_folder_id,
                config.tables,
                max_concurrency=config.max_concurrency,
                progress=progress,
            )
            await archive_buckets(
                clients["storage"],
                archive,
                storage_folder_id,
                config.buckets,
                max_concurrency=config.max_concurrency,
                write_manifest=config.write_manifest,
                substitute=config.path_substitute,
                progress=progress,
            )
            if extra_artifacts:
                await _upload_artifacts(archive, root_folder_id, extra_artifacts, progress)
    except TimeoutError:
        if not deadline.expired():
            raise
        timed_out = True
        progress.errors.append(f"deadline of {config.timeout_seconds}s exceeded")
        logger.warning(
            "backup_deadline_exceeded",
            backup_id=backup_id,
            timeout_seconds=config.timeout_seconds,
        )

    duration = (datetime.now(UTC) - start_time).total_seconds()

    result = BackupResult(
        backup_id=backup_id,
        archive_folder_url=archive.folder_url(root_folder_id),
        tables_exported=progress.tables_exported,
        storage_files_exported=progress.storage_files_exported,
        artifacts_uploaded=progress.artifacts_uploaded,
        duration_seconds=duration,
        timed_out=timed_out,
        table_outcomes=list(progress.tables),
        bucket_outcomes=list(progress.buckets),
        errors=list(progress.errors),
    )

    logger.info(
        "backup_completed",
        backup_id=backup_id,
        tables_exported=result.tables_exported,
        storage_files_exported=result.storage_files_exported,
        artifacts_uploaded=result.artifacts_uploaded,
        errors=len(result.errors),
        timed_out=timed_out,
        duration=duration,
    )
    return result
