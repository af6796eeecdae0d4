# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tenant Backup - full-tenant backup/export pipeline.

Snapshots a data store's tables and a blob storage service's buckets into
a single dated folder on a remote archive (Google Drive), isolating
per-table and per-object failures so one bad item never costs the whole
backup. Package name: tenant_backup.
"""

__version__ = "0.1.0"

# Configuration
from tenant_backup.config import BackupConfig, StorageBackend
from tenant_backup.env import create_config_from_env

# Core functions
from tenant_backup.core import (
    BackupClients,
    BackupResult,
    initialize_backup_clients,
    run_backup,
    shutdown_backup_clients,
)
from tenant_backup.identifier import build_backup_id

__all__ = [
    # Version
    "__version__",
    # Configuration
    "BackupConfig",
    "StorageBackend",
    "create_config_from_env",
    # Core orchestration
    "BackupClients",
    "BackupResult",
    "build_backup_id",
    "initialize_backup_clients",
    "run_backup",
    "shutdown_backup_clients",
]
