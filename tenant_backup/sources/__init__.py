# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup sources - the relational data store and the blob storage service.
"""

from tenant_backup.sources.base import (
    BlobStorage,
    DataStore,
    Row,
    StorageEntry,
)
from tenant_backup.sources.postgres import PostgresDataStore, connect_postgres
from tenant_backup.sources.postgrest import PostgrestDataStore
from tenant_backup.sources.s3 import S3Storage
from tenant_backup.sources.supabase_storage import SupabaseStorage

__all__ = [
    "BlobStorage",
    "DataStore",
    "Row",
    "StorageEntry",
    "PostgresDataStore",
    "PostgrestDataStore",
    "S3Storage",
    "SupabaseStorage",
    "connect_postgres",
]
