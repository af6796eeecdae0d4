# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Tenant Backup FastAPI Integration - trigger backups over HTTP.

This module provides:
- Lifespan management (client startup/shutdown)
- A protected endpoint that runs a backup
- A status endpoint summarising the last run
"""

import asyncio
import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, UTC
from typing import Any, Dict

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tenant_backup.config import BackupConfig
from tenant_backup.core import (
    BackupClients,
    BackupResult,
    initialize_backup_clients,
    run_backup,
    shutdown_backup_clients,
)
from tenant_backup.exceptions import ArchiveError, ConfigurationError

logger = structlog.get_logger()

# Security
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> bool:
    """
    Verify API key from Authorization header.

    The API key is read from the BACKUP_ADMIN_API_KEY environment variable.
    Requests must include: Authorization: Bearer <api_key>

    Raises:
        HTTPException: If API key is missing or invalid
    """
    api_key = os.getenv("BACKUP_ADMIN_API_KEY")

    if not api_key:
        raise HTTPException(
            status_code=500,
            detail="BACKUP_ADMIN_API_KEY environment variable not set",
        )

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Authorization header required",
        )

    if credentials.credentials != api_key:
        raise HTTPException(
            status_code=403,
            detail="Invalid API key",
        )

    return True


def _summary(result: BackupResult) -> Dict[str, Any]:
    return {
        "backup_id": result.backup_id,
        "archive_folder_url": result.archive_folder_url,
        "tables_exported": result.tables_exported,
        "storage_files_exported": result.storage_files_exported,
        "errors": len(result.errors),
        "timed_out": result.timed_out,
    }


def register_backup_routes(
    app: FastAPI,
    config: BackupConfig,
    clients: BackupClients,
    prefix: str = "/admin/backup",
) -> None:
    """
    Register backup admin endpoints on a FastAPI app.

    All endpoints require Bearer token authentication. Only one backup runs
    at a time; a second trigger while one is in progress gets a 409.

    Args:
        app: FastAPI application
        config: Backup configuration
        clients: Initialized backup clients
        prefix: URL prefix for endpoints (default: /admin/backup)
    """
    run_lock = asyncio.Lock()
    status: Dict[str, Any] = {
        "total_runs": 0,
        "last_run_at": None,
        "last_result": None,
        "last_error": None,
    }

    @app.post(f"{prefix}/run", dependencies=[Depends(verify_api_key)])
    async def trigger_backup() -> dict:
        """
        Run a backup now.

        Returns the full backup result including per-table and per-bucket outcomes.
        """
        if run_lock.locked():
            raise HTTPException(status_code=409, detail="A backup is already running")

        async with run_lock:
            status["last_run_at"] = datetime.now(UTC).isoformat()
            try:
                result = await run_backup(config, clients)
            except ConfigurationError as e:
                status["last_error"] = str(e)
                raise HTTPException(status_code=500, detail=e.message)
            except ArchiveError as e:
                status["last_error"] = str(e)
                logger.error("backup_trigger_failed", error=str(e))
                raise HTTPException(status_code=502, detail=e.message)

            status["total_runs"] += 1
            status["last_result"] = _summary(result)
            status["last_error"] = None
            return asdict(result)

    @app.get(f"{prefix}/status", dependencies=[Depends(verify_api_key)])
    async def get_status() -> dict:
        """
        Get backup status.

        Returns whether a run is in progress and a summary of the last run.
        """
        return {
            "running": run_lock.locked(),
            "tables": list(config.tables),
            "buckets": list(config.buckets),
            **status,
        }


@asynccontextmanager
async def backup_lifespan(app: FastAPI, config: BackupConfig, prefix: str = "/admin/backup"):
    """
    Lifespan context manager for FastAPI.

        app = FastAPI(lifespan=lambda app: backup_lifespan(app, config))

    Args:
        app: FastAPI application
        config: Backup configuration
        prefix: URL prefix for admin endpoints
    """
    logger.info("backup_lifespan_starting")

    clients = await initialize_backup_clients(config)
    app.state.backup_clients = clients
    app.state.backup_config = config

    register_backup_routes(app, config, clients, prefix)

    logger.info("backup_lifespan_started")

    try:
        yield
    finally:
        logger.info("backup_lifespan_stopping")
        await shutdown_backup_clients(clients)
        logger.info("backup_lifespan_stopped")


def get_backup_clients(app: FastAPI) -> BackupClients:
    """
    Get backup clients from a FastAPI app.

    Raises:
        RuntimeError: If the backup lifespan has not run
    """
    clients = getattr(app.state, "backup_clients", None)
    if not clients:
        raise RuntimeError("Tenant backup not initialized. Use backup_lifespan first.")
    return clients
