# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tests for the local-disk storage crawler.
"""

import pytest

from tenant_backup.exceptions import StorageError
from tenant_backup.export.local import local_object_path, mirror_buckets_to_disk, write_object_file


@pytest.mark.asyncio
async def test_buckets_mirrored_with_nesting_preserved(temp_dir, make_storage):
    storage = make_storage(
        {
            "avatars": {"a.png": b"A", "folder": {"b.png": b"B"}},
            "templates": {"t.docx": b"T"},
        }
    )

    outcomes = await mirror_buckets_to_disk(storage, temp_dir, ["avatars", "templates"])

    assert [o.files_exported for o in outcomes] == [2, 1]
    assert (temp_dir / "storage" / "avatars" / "a.png").read_bytes() == b"A"
    assert (temp_dir / "storage" / "avatars" / "folder" / "b.png").read_bytes() == b"B"
    assert (temp_dir / "storage" / "templates" / "t.docx").read_bytes() == b"T"
    assert not list(temp_dir.rglob("*.partial"))


@pytest.mark.asyncio
async def test_download_failure_skips_object(temp_dir, make_storage):
    storage = make_storage(
        {"avatars": {"a.png": b"A", "b.png": b"B"}},
        download_errors={("avatars", "a.png")},
    )

    [outcome] = await mirror_buckets_to_disk(storage, temp_dir, ["avatars"], max_concurrency=2)

    assert outcome.files_exported == 1
    assert outcome.failed_paths == ["a.png"]
    assert not (temp_dir / "storage" / "avatars" / "a.png").exists()


@pytest.mark.asyncio
async def test_listing_failure_recorded_and_next_bucket_runs(temp_dir, make_storage):
    storage = make_storage(
        {"avatars": {"a.png": b"A"}, "templates": {"t.docx": b"T"}},
        list_errors={("avatars", ""): "permission denied"},
    )

    outcomes = await mirror_buckets_to_disk(storage, temp_dir, ["avatars", "templates"])

    assert "permission denied" in outcomes[0].error
    assert outcomes[1].files_exported == 1


def test_object_path_cannot_escape_bucket_directory(temp_dir):
    assert local_object_path(temp_dir, "avatars", "folder/b.png") == (
        temp_dir / "storage" / "avatars" / "folder" / "b.png"
    ).resolve()

    with pytest.raises(StorageError):
        local_object_path(temp_dir, "avatars", "../../etc/passwd")

    with pytest.raises(StorageError):
        local_object_path(temp_dir, "avatars", "/etc/passwd")


@pytest.mark.asyncio
async def test_traversing_object_is_skipped(temp_dir, make_storage):
    storage = make_storage({"avatars": {"..": {"evil.txt": b"x"}, "ok.png": b"O"}})

    [outcome] = await mirror_buckets_to_disk(storage, temp_dir, ["avatars"])

    assert outcome.files_exported == 1
    assert outcome.failed_paths == ["../evil.txt"]
    assert not (temp_dir / "storage" / "evil.txt").exists()


@pytest.mark.asyncio
async def test_sibling_named_like_a_temp_file_survives(temp_dir, make_storage):
    storage = make_storage({"avatars": {"x.tmp": b"REAL-TMP", "x": b"X"}})

    [outcome] = await mirror_buckets_to_disk(storage, temp_dir, ["avatars"])

    bucket_dir = temp_dir / "storage" / "avatars"
    assert outcome.files_exported == 2
    assert (bucket_dir / "x.tmp").read_bytes() == b"REAL-TMP"
    assert (bucket_dir / "x").read_bytes() == b"X"
    assert sorted(p.name for p in bucket_dir.iterdir()) == ["x", "x.tmp"]


@pytest.mark.asyncio
async def test_concurrent_writes_to_one_directory_do_not_collide(temp_dir, make_storage):
    objects = {f"f{i}": f"content-{i}".encode() for i in range(10)}
    objects.update({f"f{i}.tmp": f"tmp-{i}".encode() for i in range(10)})
    storage = make_storage({"docs": objects})

    [outcome] = await mirror_buckets_to_disk(storage, temp_dir, ["docs"], max_concurrency=8)

    bucket_dir = temp_dir / "storage" / "docs"
    assert outcome.files_exported == 20
    assert {p.name: p.read_bytes() for p in bucket_dir.iterdir()} == objects


@pytest.mark.asyncio
async def test_failed_write_leaves_no_partial_file(temp_dir):
    target = temp_dir / "blocked"
    target.mkdir()
    (target / "child").write_bytes(b"keep")

    with pytest.raises(OSError):
        await write_object_file(target, b"data")

    assert sorted(p.name for p in temp_dir.iterdir()) == ["blocked"]
