# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup identifiers derived from the run's start time.
"""

from datetime import datetime, UTC
from typing import Callable

Clock = Callable[[], datetime]

BACKUP_ID_FORMAT = "backup_%Y%m%d_%H%M%S"


def utc_now() -> datetime:
    return datetime.now(UTC)


def build_backup_id(clock: Clock = utc_now) -> str:
    """
    Build the root folder name for a run, e.g. ``backup_20240305_060708``.

    Args:
        clock: Returns the run's start time; inject a fixed clock in tests

    Returns:
        Zero-padded identifier string
    """
    return clock().strftime(BACKUP_ID_FORMAT)
