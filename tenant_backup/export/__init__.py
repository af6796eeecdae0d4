# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Export Engine - table snapshots, bucket crawls and archive naming.
"""

from tenant_backup.export.lister import list_objects_recursively
from tenant_backup.export.local import mirror_buckets_to_disk
from tenant_backup.export.naming import (
    ArchiveNamer,
    flatten_object_path,
    guess_mime_type,
)
from tenant_backup.export.outcomes import (
    BackupProgress,
    BucketOutcome,
    TableExportOutcome,
)
from tenant_backup.export.storage import archive_bucket, archive_buckets
from tenant_backup.export.tables import export_tables, serialize_rows

__all__ = [
    # Listing and naming
    "list_objects_recursively",
    "flatten_object_path",
    "guess_mime_type",
    "ArchiveNamer",
    # Exporters
    "export_tables",
    "serialize_rows",
    "archive_bucket",
    "archive_buckets",
    "mirror_buckets_to_disk",
    # Outcomes
    "BackupProgress",
    "BucketOutcome",
    "TableExportOutcome",
]
