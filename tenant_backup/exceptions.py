# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tenant Backup Exceptions - Custom exceptions for the tenant_backup package.
"""


class TenantBackupError(Exception):
    """Base exception for all tenant backup errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TenantBackupError):
    """Raised when configuration is missing or invalid."""

    pass


class ArchiveError(TenantBackupError):
    """Raised when the remote archive rejects a folder or upload request."""

    pass


class DataStoreError(TenantBackupError):
    """Raised when a table cannot be read from the data store."""

    pass


class StorageError(TenantBackupError):
    """Raised when blob storage operations fail."""

    pass


class ListingError(StorageError):
    """Raised when a bucket folder cannot be listed."""

    pass
