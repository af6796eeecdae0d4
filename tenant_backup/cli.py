# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Command-line entry points, invoked by the backup scheduler.

    tenant-backup [ARTIFACT]          Full backup to the remote archive
    tenant-backup-storage OUTPUT_DIR  Storage buckets to local disk

Both read their configuration from the environment (see env.py) and exit
with status 1 on any fatal error.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Sequence

import aiofiles
import structlog

from tenant_backup.core import (
    BackupResult,
    initialize_backup_clients,
    run_backup,
    shutdown_backup_clients,
)
from tenant_backup.env import create_config_from_env
from tenant_backup.exceptions import ConfigurationError, TenantBackupError
from tenant_backup.export.local import mirror_buckets_to_disk
from tenant_backup.export.outcomes import BucketOutcome

logger = structlog.get_logger()


def build_backup_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tenant-backup",
        description="Export tables and storage buckets into a dated archive folder.",
    )
    parser.add_argument(
        "artifact",
        nargs="?",
        help="Local file (e.g. a pg_dump .sql.gz) uploaded into the backup folder",
    )
    return parser


def build_storage_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tenant-backup-storage",
        description="Download every storage bucket to OUTPUT_DIR/storage/<bucket>/.",
    )
    parser.add_argument("output_dir", metavar="OUTPUT_DIR", help="Directory receiving the storage backup")
    return parser


async def read_artifact(path: Path) -> Dict[str, bytes]:
    """Load an extra artifact, keyed by its base name."""
    if not path.is_file():
        raise ConfigurationError(f"Extra artifact not found: {path}")

    async with aiofiles.open(path, "rb") as f:
        content = await f.read()
    return {path.name: content}


async def _run_backup(artifact: str | None) -> BackupResult:
    config = create_config_from_env()
    extra_artifacts = await read_artifact(Path(artifact)) if artifact else None

    clients = await initialize_backup_clients(config)
    try:
        return await run_backup(config, clients, extra_artifacts)
    finally:
        await shutdown_backup_clients(clients)


async def _run_storage_backup(output_dir: Path) -> List[BucketOutcome]:
    config = create_config_from_env(require_archive=False)

    clients = await initialize_backup_clients(config, storage_only=True)
    try:
        return await mirror_buckets_to_disk(
            clients["storage"],
            output_dir,
            config.buckets,
            max_concurrency=config.max_concurrency,
        )
    finally:
        await shutdown_backup_clients(clients)


def _parse_args(parser: argparse.ArgumentParser, argv: Sequence[str] | None) -> argparse.Namespace | int:
    """Parse argv; usage errors return exit status 1 after argparse prints usage."""
    try:
        return parser.parse_args(argv)
    except SystemExit as e:
        return 1 if e.code else 0


def _fail(e: Exception) -> int:
    if not isinstance(e, TenantBackupError):
        logger.exception("backup_crashed")
    print(f"Backup failed: {e}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(build_backup_parser(), argv)
    if isinstance(args, int):
        return args

    try:
        result = asyncio.run(_run_backup(args.artifact))
    except Exception as e:
        return _fail(e)

    print(f"Backup ID:       {result.backup_id}")
    print(f"Archive folder:  {result.archive_folder_url}")
    print(f"Tables:          {result.tables_exported}")
    print(f"Storage files:   {result.storage_files_exported}")
    if result.artifacts_uploaded:
        print(f"Artifacts:       {result.artifacts_uploaded}")
    if result.timed_out:
        print("Deadline exceeded: backup is partial")
    return 0


def storage_main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(build_storage_parser(), argv)
    if isinstance(args, int):
        return args
    output_dir = Path(args.output_dir)

    try:
        outcomes = asyncio.run(_run_storage_backup(output_dir))
    except Exception as e:
        return _fail(e)

    for outcome in outcomes:
        if outcome.error:
            print(f"  {outcome.bucket}: failed ({outcome.error})")
        else:
            print(f"  {outcome.bucket}: {outcome.files_exported} file(s)")

    total = sum(o.files_exported for o in outcomes if o.succeeded)
    print(f"Storage backup complete: {total} file(s) -> {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
