# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PostgREST data store - reads tables through a Supabase project's REST API.

The service-role key bypasses row-level security, so every configured
table is read in full.
"""

from typing import Dict, List
from urllib.parse import quote

import httpx
import structlog

from tenant_backup.exceptions import DataStoreError
from tenant_backup.sources.base import Row

logger = structlog.get_logger()


def service_role_headers(admin_key: str) -> Dict[str, str]:
    """Headers authenticating as the project's service role."""
    return {
        "apikey": admin_key,
        "Authorization": f"Bearer {admin_key}",
    }


def provider_message(response: httpx.Response) -> str:
    """Extract the provider's error text from a Supabase error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "error_description", "error", "msg"):
            if body.get(key):
                return str(body[key])
    return str(body)


class PostgrestDataStore:
    """DataStore backed by PostgREST (``/rest/v1``)."""

    def __init__(self, http: httpx.AsyncClient, base_url: str, admin_key: str):
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = service_role_headers(admin_key)

    async def fetch_rows(self, table: str) -> List[Row]:
        url = f"{self._base_url}/rest/v1/{quote(table, safe='')}"
        try:
            response = await self._http.get(
                url,
                params={"select": "*"},
                headers={**self._headers, "Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise DataStoreError(
                f"Failed to read table {table}: {exc}",
                details={"table": table},
            ) from exc

        if response.is_error:
            raise DataStoreError(
                f"Failed to read table {table}: {provider_message(response)}",
                details={"table": table, "status": response.status_code},
            )

        rows = response.json()
        if not isinstance(rows, list):
            raise DataStoreError(
                f"Unexpected response for table {table}",
                details={"table": table},
            )

        logger.debug("table_fetched", table=table, rows=len(rows))
        return rows
