# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Remote archive - folder-based storage that receives backup output.
"""

from tenant_backup.archive.base import ArchiveClient
from tenant_backup.archive.drive import (
    DRIVE_FILE_SCOPE,
    DriveArchiveClient,
    create_drive_client,
)

__all__ = [
    "ArchiveClient",
    "DRIVE_FILE_SCOPE",
    "DriveArchiveClient",
    "create_drive_client",
]
