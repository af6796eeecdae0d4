# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive client protocol.
"""

from typing import Protocol


class ArchiveClient(Protocol):
    """
    Write-only, append-only view of a folder-based archive provider.

    Implementations raise ArchiveError when the provider rejects a request.
    """

    async def create_folder(self, name: str, parent_folder_id: str) -> str:
        """Create a folder under parent_folder_id and return its id."""
        ...

    async def upload_object(
        self,
        name: str,
        content: bytes,
        mime_type: str,
        parent_folder_id: str,
    ) -> str:
        """Upload content as a file named name and return its web URL."""
        ...

    def folder_url(self, folder_id: str) -> str:
        """Return the browser URL of a folder."""
        ...
