# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive naming - flat file names for nested object paths.

Each bucket lands in a single archive folder, so nested object paths are
flattened by replacing every "/" with a substitute ("__" by default).
Flattening alone is not injective ("a/b" and "a__b" both map to "a__b");
ArchiveNamer detects such collisions within a bucket and disambiguates
with a short hash of the original path. The manifest uploaded next to the
files records the name -> path mapping.
"""

import hashlib
import json
import mimetypes
import os
from typing import Dict, Set

MANIFEST_NAME = "_manifest.json"
DEFAULT_SUBSTITUTE = "__"


def flatten_object_path(path: str, substitute: str = DEFAULT_SUBSTITUTE) -> str:
    """Replace every path separator in path with substitute."""
    return path.strip("/").replace("/", substitute)


def _path_hash(path: str) -> str:
    return hashlib.sha256(path.encode("utf-8")).hexdigest()[:8]


class ArchiveNamer:
    """Assigns unique archived file names within one bucket folder."""

    def __init__(self, substitute: str = DEFAULT_SUBSTITUTE, reserved: Set[str] | None = None):
        self._substitute = substitute
        self._used: Set[str] = set(reserved or ())
        self.manifest: Dict[str, str] = {}

    def name_for(self, path: str) -> str:
        name = flatten_object_path(path, self._substitute)
        if name in self._used:
            stem, ext = os.path.splitext(name)
            name = f"{stem}_{_path_hash(path)}{ext}"
            counter = 1
            while name in self._used:
                name = f"{stem}_{_path_hash(path)}_{counter}{ext}"
                counter += 1

        self._used.add(name)
        self.manifest[name] = path
        return name

    def forget(self, name: str) -> None:
        """Drop a name from the manifest after its upload failed."""
        self.manifest.pop(name, None)

    def manifest_bytes(self, bucket: str) -> bytes:
        return json.dumps(
            {"bucket": bucket, "files": dict(sorted(self.manifest.items()))},
            indent=2,
        ).encode("utf-8")


def guess_mime_type(name: str) -> str:
    """
    Get a MIME type for a file name based on its extension.

    Compressed files (e.g. ``database.sql.gz``) are reported by their
    compression format rather than the inner file type.
    """
    mime_type, encoding = mimetypes.guess_type(name)
    if encoding == "gzip":
        return "application/gzip"
    if encoding is not None:
        return "application/octet-stream"
    return mime_type or "application/octet-stream"
