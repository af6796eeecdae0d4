# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration for scheduled backup runs.

The scheduler invokes the CLI with a handful of well-known environment
variables; this module turns them into a validated BackupConfig. Missing
required variables raise ConfigurationError naming the variable, before
any client is constructed.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Tuple

from tenant_backup.config import (
    DEFAULT_BUCKETS,
    DEFAULT_TABLES,
    BackupConfig,
    DataStoreBackend,
    StorageBackend,
    infer_data_store_backend,
)
from tenant_backup.errors import (
    explain_invalid_bool_env,
    explain_invalid_credential,
    explain_invalid_positive_int_env,
    explain_invalid_storage_backend_env,
    explain_invalid_timeout_env,
    explain_missing_env,
    explain_missing_storage_url,
    explain_unsupported_data_store_url,
)
from tenant_backup.exceptions import ConfigurationError


def require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(explain_missing_env(name))
    return value


def parse_credential(value: str) -> Dict[str, Any]:
    """Parse a JSON-encoded service account credential."""
    try:
        credential = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(explain_invalid_credential("not valid JSON")) from exc
    if not isinstance(credential, dict):
        raise ConfigurationError(explain_invalid_credential("expected a JSON object"))
    for key in ("client_email", "private_key"):
        if not credential.get(key):
            raise ConfigurationError(explain_invalid_credential(f"missing {key!r}"))
    return credential


def _parse_names(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    return tuple(n.strip() for n in value.split(",") if n.strip())


def _parse_storage_backend(value: str | None) -> StorageBackend:
    if not value:
        return StorageBackend.SUPABASE
    try:
        return StorageBackend(value.lower())
    except ValueError as exc:
        raise ConfigurationError(explain_invalid_storage_backend_env(value)) from exc


def _parse_positive_int(name: str, value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_positive_int_env(name, value)) from exc
    if number < 1:
        raise ConfigurationError(explain_invalid_positive_int_env(name, value))
    return number


def _parse_timeout(value: str | None) -> float | None:
    if not value:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_timeout_env(value)) from exc
    if seconds <= 0:
        raise ConfigurationError(explain_invalid_timeout_env(value))
    return seconds


def _parse_bool(name: str, value: str | None, default: bool) -> bool:
    if not value:
        return default
    lower = value.strip().lower()
    if lower in ("1", "true", "yes", "on"):
        return True
    if lower in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(explain_invalid_bool_env(name, value))


def create_config_from_env(*, require_archive: bool = True) -> BackupConfig:
    """
    Create a BackupConfig from environment variables.

    Required:
        - DATA_STORE_URL: https://<project> or postgres://... URL
        - DATA_STORE_ADMIN_KEY: service-role key (http(s) URLs and supabase storage)
        - ARCHIVE_ROOT_FOLDER_ID: Drive parent folder (when require_archive)
        - ARCHIVE_SERVICE_CREDENTIAL: service account JSON (when require_archive)

    Optional environment variables:
        - STORAGE_BACKEND: 'supabase' | 's3' (default: supabase)
        - STORAGE_URL: Supabase project URL for storage
        - STORAGE_ENDPOINT_URL: S3-compatible endpoint for the s3 backend
        - AWS_REGION: region for the s3 backend (default: us-east-1)
        - BACKUP_TABLES: comma-separated table names
        - BACKUP_BUCKETS: comma-separated bucket names
        - BACKUP_MAX_CONCURRENCY: positive integer (default: 1)
        - BACKUP_TIMEOUT_SECONDS: positive number (default: no deadline)
        - BACKUP_WRITE_MANIFEST: 'true' | 'false' (default: true)
    """

    archive_root_folder_id = None
    archive_credential = None
    if require_archive:
        archive_root_folder_id = require_env("ARCHIVE_ROOT_FOLDER_ID")
        archive_credential = parse_credential(require_env("ARCHIVE_SERVICE_CREDENTIAL"))

    data_store_url = require_env("DATA_STORE_URL")
    data_store_backend = infer_data_store_backend(data_store_url)
    if data_store_backend is None:
        raise ConfigurationError(explain_unsupported_data_store_url(data_store_url))

    storage_backend = _parse_storage_backend(os.getenv("STORAGE_BACKEND"))
    storage_url = os.getenv("STORAGE_URL")

    admin_key = os.getenv("DATA_STORE_ADMIN_KEY")
    needs_key = (
        data_store_backend == DataStoreBackend.POSTGREST
        or storage_backend == StorageBackend.SUPABASE
    )
    if needs_key and not admin_key:
        raise ConfigurationError(explain_missing_env("DATA_STORE_ADMIN_KEY"))

    if (
        storage_backend == StorageBackend.SUPABASE
        and not storage_url
        and data_store_backend != DataStoreBackend.POSTGREST
    ):
        raise ConfigurationError(explain_missing_storage_url())

    return BackupConfig(
        data_store_url=data_store_url,
        data_store_admin_key=admin_key,
        archive_root_folder_id=archive_root_folder_id,
        archive_credential=archive_credential,
        tables=_parse_names(os.getenv("BACKUP_TABLES"), DEFAULT_TABLES),
        buckets=_parse_names(os.getenv("BACKUP_BUCKETS"), DEFAULT_BUCKETS),
        storage_backend=storage_backend,
        storage_url=storage_url,
        storage_endpoint_url=os.getenv("STORAGE_ENDPOINT_URL"),
        region=os.getenv("AWS_REGION", "us-east-1"),
        max_concurrency=_parse_positive_int(
            "BACKUP_MAX_CONCURRENCY", os.getenv("BACKUP_MAX_CONCURRENCY"), 1
        ),
        timeout_seconds=_parse_timeout(os.getenv("BACKUP_TIMEOUT_SECONDS")),
        write_manifest=_parse_bool(
            "BACKUP_WRITE_MANIFEST", os.getenv("BACKUP_WRITE_MANIFEST"), True
        ),
    )
