# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Table exporter - snapshots each configured table as a JSON file.

Each table is read in full (no pagination) and uploaded as
``<table>.json`` into the run's ``database`` folder. A table that cannot be
read or uploaded is logged and skipped; it never aborts the run.
"""

import json
from typing import List, Sequence

import structlog

from tenant_backup.archive.base import ArchiveClient
from tenant_backup.export.outcomes import BackupProgress, TableExportOutcome, gather_limited
from tenant_backup.sources.base import DataStore, Row

logger = structlog.get_logger()

RECORD_EXTENSION = "json"
RECORD_MIME_TYPE = "application/json"


def serialize_rows(rows: List[Row]) -> bytes:
    """
    Serialize rows as pretty-printed JSON.

    Field order follows the query result. Values JSON cannot represent
    natively (timestamps, UUIDs, decimals) are written with str().
    """
    return json.dumps(rows, indent=2, ensure_ascii=False, default=str).encode("utf-8")


async def export_table(
    data_store: DataStore,
    archive: ArchiveClient,
    database_folder_id: str,
    table: str,
) -> TableExportOutcome:
    """Export one table; failures are returned, not raised."""
    try:
        rows = await data_store.fetch_rows(table)
    except Exception as e:
        logger.warning("table_export_skipped", table=table, stage="query", error=str(e))
        return TableExportOutcome(table=table, succeeded=False, error=str(e))

    try:
        await archive.upload_object(
            f"{table}.{RECORD_EXTENSION}",
            serialize_rows(rows),
            RECORD_MIME_TYPE,
            database_folder_id,
        )
    except Exception as e:
        logger.warning("table_export_skipped", table=table, stage="upload", error=str(e))
        return TableExportOutcome(table=table, succeeded=False, error=str(e))

    logger.info("table_exported", table=table, records=len(rows))
    return TableExportOutcome(table=table, succeeded=True, record_count=len(rows))


async def export_tables(
    data_store: DataStore,
    archive: ArchiveClient,
    database_folder_id: str,
    tables: Sequence[str],
    max_concurrency: int = 1,
    progress: BackupProgress | None = None,
) -> List[TableExportOutcome]:
    """
    Export every table in order into the database folder.

    Args:
        data_store: Source of table rows
        archive: Archive to upload into
        database_folder_id: Id of the run's ``database`` folder
        tables: Table names, exported in this order
        max_concurrency: Tables in flight at once (1 = sequential)
        progress: Optional run progress to record outcomes into

    Returns:
        One outcome per table, in table order
    """

    async def worker(table: str) -> TableExportOutcome:
        outcome = await export_table(data_store, archive, database_folder_id, table)
        if progress is not None:
            progress.tables.append(outcome)
            if outcome.error:
                progress.errors.append(f"table {table}: {outcome.error}")
        return outcome

    outcomes = await gather_limited(tables, worker, max_concurrency)

    logger.info(
        "tables_export_complete",
        exported=sum(1 for o in outcomes if o.succeeded),
        skipped=sum(1 for o in outcomes if not o.succeeded),
    )
    return outcomes

