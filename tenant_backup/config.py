# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tenant Backup Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation so a running backup
always sees the same table list, bucket list and limits.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class StorageBackend(str, Enum):
    """Blob storage service the buckets are read from."""

    SUPABASE = "supabase"  # Supabase Storage REST API
    S3 = "s3"  # Any S3-compatible endpoint


class DataStoreBackend(str, Enum):
    """Relational data store the tables are read from."""

    POSTGREST = "postgrest"  # http(s):// project URL, service-role key
    POSTGRES = "postgres"  # Direct postgres:// connection


# Student-related tables; course structure and platform config are excluded
DEFAULT_TABLES: Tuple[str, ...] = (
    "profiles",
    "enrollments",
    "enrollment_modules",
    "lesson_progress",
    "test_attempts",
    "test_grades",
    "certificates",
    "certificate_requests",
    "tcc_submissions",
    "student_grade_overrides",
    "student_schedules",
    "activity_logs",
)

DEFAULT_BUCKETS: Tuple[str, ...] = (
    "certificates",
    "avatars",
    "templates",
    "excel_templates",
)


def infer_data_store_backend(url: str) -> DataStoreBackend | None:
    """Infer the data store backend from the URL scheme."""

    lower = url.lower()
    if lower.startswith(("http://", "https://")):
        return DataStoreBackend.POSTGREST
    if lower.startswith(("postgres://", "postgresql://")):
        return DataStoreBackend.POSTGRES
    return None


def _validate_names(kind: str, names: Tuple[str, ...]) -> List[str]:
    errors: List[str] = []
    seen = set()
    for name in names:
        if not isinstance(name, str) or not name.strip():
            errors.append(f"Empty {kind} name")
            continue
        if "/" in name:
            errors.append(f"{kind} name must not contain '/': {name}")
        if name in seen:
            errors.append(f"Duplicate {kind} name: {name}")
        seen.add(name)
    return errors


@dataclass(frozen=True)
class BackupConfig:
    """
    Immutable configuration for a tenant backup run.

    The archive fields are optional so that the local-disk variant can be
    configured without Drive credentials; run_backup() checks them before
    making any remote call.
    """

    # Data store URL: https://<project> (PostgREST) or postgres://...
    data_store_url: str

    # Service-role key for PostgREST / Supabase Storage
    data_store_admin_key: str | None = field(default=None, repr=False)

    # Drive folder under which dated backup folders are created
    archive_root_folder_id: str | None = None

    # Parsed service account credential (never logged)
    archive_credential: Dict[str, Any] | None = field(default=None, repr=False)

    # Tables exported, in order
    tables: Tuple[str, ...] = DEFAULT_TABLES

    # Buckets archived, in order
    buckets: Tuple[str, ...] = DEFAULT_BUCKETS

    storage_backend: StorageBackend = StorageBackend.SUPABASE

    # Supabase project URL for storage (defaults to data_store_url)
    storage_url: str | None = None

    # S3-compatible endpoint (None = AWS)
    storage_endpoint_url: str | None = None

    # AWS region for the s3 backend
    region: str = "us-east-1"

    # Maximum concurrent tables / objects in flight
    max_concurrency: int = 1

    # Deadline for the export phases, None = no deadline
    timeout_seconds: float | None = None

    # Upload a name -> path manifest per bucket
    write_manifest: bool = True

    # Page size for single-level storage listings
    list_page_size: int = 1000

    # Replacement for '/' in archived file names
    path_substitute: str = "__"

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        backend = infer_data_store_backend(self.data_store_url or "")
        if not self.data_store_url:
            errors.append("data_store_url is required")
        elif backend is None:
            errors.append(f"Unsupported data_store_url: {self.data_store_url.split('://', 1)[0]}")
        elif backend == DataStoreBackend.POSTGREST and not self.data_store_admin_key:
            errors.append("data_store_admin_key required for an http(s) data_store_url")

        errors.extend(_validate_names("table", self.tables))
        errors.extend(_validate_names("bucket", self.buckets))

        if self.storage_backend == StorageBackend.SUPABASE and self.buckets:
            if not self.resolved_storage_url:
                errors.append("storage_url required for the supabase storage backend")
            if not self.data_store_admin_key:
                errors.append("data_store_admin_key required for the supabase storage backend")

        if self.max_concurrency < 1:
            errors.append(f"max_concurrency must be >= 1, got {self.max_concurrency}")

        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            errors.append(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

        if self.list_page_size < 1:
            errors.append(f"list_page_size must be >= 1, got {self.list_page_size}")

        if not self.path_substitute or "/" in self.path_substitute:
            errors.append(f"Invalid path_substitute: {self.path_substitute!r}")

        # Raise all errors at once
        if errors:
            from tenant_backup.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    @property
    def data_store_backend(self) -> DataStoreBackend:
        backend = infer_data_store_backend(self.data_store_url)
        assert backend is not None  # validated in __post_init__
        return backend

    @property
    def resolved_storage_url(self) -> str | None:
        """Storage project URL, falling back to an http(s) data store URL."""
        if self.storage_url:
            return self.storage_url.rstrip("/")
        if infer_data_store_backend(self.data_store_url or "") == DataStoreBackend.POSTGREST:
            return self.data_store_url.rstrip("/")
        return None

    def with_updates(self, **kwargs) -> "BackupConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return BackupConfig(**current)
