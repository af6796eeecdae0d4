# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Per-item outcomes and run progress.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TableExportOutcome:
    """Result of exporting one table."""

    table: str
    succeeded: bool
    record_count: int | None = None
    error: str | None = None


@dataclass
class BucketOutcome:
    """Result of archiving one bucket."""

    bucket: str
    files_exported: int = 0
    files_failed: int = 0
    # Set when the whole bucket was aborted (folder or listing failure)
    error: str | None = None
    failed_paths: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class BackupProgress:
    """
    Running totals for one backup run.

    Exporters record outcomes here as each item finishes, so a run cut
    short by its deadline still reports what was completed.
    """

    tables: List[TableExportOutcome] = field(default_factory=list)
    buckets: List[BucketOutcome] = field(default_factory=list)
    artifacts_uploaded: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def tables_exported(self) -> int:
        return sum(1 for t in self.tables if t.succeeded)

    @property
    def storage_files_exported(self) -> int:
        return sum(b.files_exported for b in self.buckets if b.succeeded)


async def gather_limited(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
) -> List[R]:
    """
    Run worker over items with at most limit in flight, preserving order.

    With limit == 1 items run strictly one after another. Workers are
    expected to handle their own errors; nothing here cancels siblings.
    """
    if limit <= 1:
        return [await worker(item) for item in items]

    semaphore = asyncio.Semaphore(limit)

    async def bounded(item: T) -> R:
        async with semaphore:
            return await worker(item)

    return list(await asyncio.gather(*[bounded(item) for item in items]))
