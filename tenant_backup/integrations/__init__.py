# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tenant Backup Integrations - Framework integrations.

Available integrations:
- FastAPI: backup_lifespan(), register_backup_routes()
"""

from tenant_backup.integrations.fastapi import (
    backup_lifespan,
    get_backup_clients,
    register_backup_routes,
)

__all__ = ["backup_lifespan", "get_backup_clients", "register_backup_routes"]
