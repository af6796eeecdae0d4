# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Postgres data store - reads tables over a direct asyncpg connection.
"""

from typing import Any, List

import structlog

from tenant_backup.exceptions import DataStoreError
from tenant_backup.sources.base import Row

logger = structlog.get_logger()


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class PostgresDataStore:
    """DataStore backed by an asyncpg connection."""

    def __init__(self, conn: Any):
        self._conn = conn

    async def fetch_rows(self, table: str) -> List[Row]:
        import asyncpg

        try:
            records = await self._conn.fetch(f"SELECT * FROM {_quote_identifier(table)}")
        except (asyncpg.PostgresError, OSError) as exc:
            raise DataStoreError(
                f"Failed to read table {table}: {exc}",
                details={"table": table},
            ) from exc

        return [dict(record) for record in records]

    async def aclose(self) -> None:
        await self._conn.close()


async def connect_postgres(url: str) -> PostgresDataStore:
    """Open a connection and wrap it as a DataStore."""
    import asyncpg

    try:
        conn = await asyncpg.connect(url)
    except (asyncpg.PostgresError, OSError) as exc:
        raise DataStoreError(f"Failed to connect to data store: {exc}") from exc

    logger.debug("postgres_connected")
    return PostgresDataStore(conn)
