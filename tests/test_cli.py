# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tests for the command-line entry points.
"""

import pytest

from tenant_backup import cli
from tenant_backup.core import BackupClients


@pytest.fixture
def fake_clients(monkeypatch, archive, make_data_store, make_storage):
    """Route client construction to in-memory fakes."""
    clients = BackupClients(
        archive=archive,
        data_store=make_data_store({"profiles": [{"id": 1}], "courses": []}),
        storage=make_storage({"avatars": {"a.png": b"A", "folder": {"b.png": b"B"}}}),
        exit_stack=None,
    )
    calls = []

    async def fake_initialize(config, *, storage_only=False):
        calls.append(storage_only)
        return clients

    monkeypatch.setattr(cli, "initialize_backup_clients", fake_initialize)
    return calls


def test_backup_prints_summary(backup_env, fake_clients, capsys):
    backup_env.setenv("BACKUP_TABLES", "profiles,courses")
    backup_env.setenv("BACKUP_BUCKETS", "avatars")

    exit_code = cli.main([])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert fake_clients == [False]
    assert "Backup ID:       backup_" in out
    assert "Archive folder:  https://drive.test/folders/" in out
    assert "Tables:          2" in out
    assert "Storage files:   2" in out


def test_backup_uploads_artifact(backup_env, fake_clients, archive, temp_dir, capsys):
    backup_env.setenv("BACKUP_TABLES", "profiles")
    backup_env.setenv("BACKUP_BUCKETS", "avatars")
    dump = temp_dir / "database.sql.gz"
    dump.write_bytes(b"\x1f\x8bdump")

    exit_code = cli.main([str(dump)])

    assert exit_code == 0
    assert "Artifacts:       1" in capsys.readouterr().out
    assert any(key.endswith("/database.sql.gz") for key in archive.tree())


def test_missing_artifact_fails_before_any_client(backup_env, fake_clients, temp_dir, capsys):
    exit_code = cli.main([str(temp_dir / "nope.sql.gz")])

    assert exit_code == 1
    assert fake_clients == []
    assert "Extra artifact not found" in capsys.readouterr().err


def test_missing_environment_variable_exits_nonzero(backup_env, fake_clients, capsys):
    backup_env.delenv("ARCHIVE_ROOT_FOLDER_ID")

    exit_code = cli.main([])

    assert exit_code == 1
    assert fake_clients == []
    assert "ARCHIVE_ROOT_FOLDER_ID" in capsys.readouterr().err


def test_fatal_archive_failure_exits_nonzero(backup_env, monkeypatch, make_archive, make_data_store, make_storage, capsys):
    clients = BackupClients(
        archive=make_archive(fail_folders={"database"}),
        data_store=make_data_store({}),
        storage=make_storage({}),
        exit_stack=None,
    )

    async def fake_initialize(config, *, storage_only=False):
        return clients

    monkeypatch.setattr(cli, "initialize_backup_clients", fake_initialize)

    assert cli.main([]) == 1
    assert "Backup failed: quota exceeded creating database" in capsys.readouterr().err


def test_storage_backup_to_disk(backup_env, fake_clients, temp_dir, capsys):
    backup_env.delenv("ARCHIVE_ROOT_FOLDER_ID")
    backup_env.delenv("ARCHIVE_SERVICE_CREDENTIAL")
    backup_env.setenv("BACKUP_BUCKETS", "avatars")

    exit_code = cli.storage_main([str(temp_dir)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert fake_clients == [True]
    assert (temp_dir / "storage" / "avatars" / "folder" / "b.png").read_bytes() == b"B"
    assert "avatars: 2 file(s)" in out
    assert f"Storage backup complete: 2 file(s) -> {temp_dir}" in out


def test_storage_backup_requires_output_dir(fake_clients, capsys):
    exit_code = cli.storage_main([])

    assert exit_code == 1
    assert fake_clients == []
    assert "usage: tenant-backup-storage" in capsys.readouterr().err


def test_unknown_backup_option_exits_one(fake_clients):
    assert cli.main(["--bogus"]) == 1
    assert fake_clients == []


def test_help_exits_zero(capsys):
    assert cli.storage_main(["--help"]) == 0
    assert "OUTPUT_DIR" in capsys.readouterr().out
