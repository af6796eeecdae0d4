# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tests for archive file naming.
"""

import json

from tenant_backup.export.naming import (
    MANIFEST_NAME,
    ArchiveNamer,
    flatten_object_path,
    guess_mime_type,
)


def test_flatten_replaces_every_separator():
    assert flatten_object_path("a.png") == "a.png"
    assert flatten_object_path("folder/b.png") == "folder__b.png"
    assert flatten_object_path("2024/03/05/cert.pdf") == "2024__03__05__cert.pdf"


def test_flatten_with_custom_substitute():
    assert flatten_object_path("folder/b.png", "--") == "folder--b.png"


def test_namer_keeps_plain_flattened_names_when_unique():
    namer = ArchiveNamer()

    assert namer.name_for("a.png") == "a.png"
    assert namer.name_for("folder/b.png") == "folder__b.png"
    assert namer.manifest == {"a.png": "a.png", "folder__b.png": "folder/b.png"}


def test_namer_disambiguates_colliding_paths():
    namer = ArchiveNamer()

    first = namer.name_for("a/b.png")
    second = namer.name_for("a__b.png")

    assert first == "a__b.png"
    assert second != first
    assert second.startswith("a__b_") and second.endswith(".png")
    assert namer.manifest[first] == "a/b.png"
    assert namer.manifest[second] == "a__b.png"


def test_namer_never_reuses_reserved_manifest_name():
    namer = ArchiveNamer(reserved={MANIFEST_NAME})

    name = namer.name_for(MANIFEST_NAME)

    assert name != MANIFEST_NAME
    assert namer.manifest[name] == MANIFEST_NAME


def test_forget_removes_failed_upload_from_manifest():
    namer = ArchiveNamer()
    name = namer.name_for("x/y.png")

    namer.forget(name)

    assert name not in namer.manifest


def test_manifest_bytes_is_sorted_json():
    namer = ArchiveNamer()
    namer.name_for("z.png")
    namer.name_for("folder/b.png")

    manifest = json.loads(namer.manifest_bytes("avatars"))

    assert manifest["bucket"] == "avatars"
    assert list(manifest["files"]) == ["folder__b.png", "z.png"]


def test_guess_mime_type():
    assert guess_mime_type("profiles.json") == "application/json"
    assert guess_mime_type("database.sql.gz") == "application/gzip"
    assert guess_mime_type("no-extension") == "application/octet-stream"
