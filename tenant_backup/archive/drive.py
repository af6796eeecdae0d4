# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Google Drive archive client.

Talks to the Drive v3 REST API over httpx. The service account is scoped
to drive.file only: it can create and write the files it owns, and has no
read access to the rest of the drive.
"""

import asyncio
import json
import uuid
from typing import Any, Awaitable, Callable, Dict, Tuple

import httpx
import structlog

from tenant_backup.errors import explain_invalid_credential
from tenant_backup.exceptions import ArchiveError, ConfigurationError

logger = structlog.get_logger()

DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)

TokenProvider = Callable[[], Awaitable[str]]


def service_account_token_provider(credential: Dict[str, Any]) -> TokenProvider:
    """
    Build an access-token provider from a service account credential.

    Tokens are refreshed lazily in a worker thread (google-auth transports
    are blocking) and reused until they expire.
    """
    from google.auth.exceptions import GoogleAuthError
    from google.auth.transport.requests import Request
    from google.oauth2 import service_account

    try:
        credentials = service_account.Credentials.from_service_account_info(
            credential, scopes=[DRIVE_FILE_SCOPE]
        )
    except (ValueError, KeyError) as exc:
        raise ConfigurationError(explain_invalid_credential(str(exc))) from exc

    lock = asyncio.Lock()

    async def get_token() -> str:
        async with lock:
            if not credentials.valid:
                try:
                    await asyncio.to_thread(credentials.refresh, Request())
                except GoogleAuthError as exc:
                    raise ArchiveError(
                        f"Failed to authenticate with Drive: {exc}",
                        details={"client_email": credential.get("client_email")},
                    ) from exc
                logger.debug("drive_token_refreshed", expiry=str(credentials.expiry))
            return credentials.token

    return get_token


def _multipart_related(
    metadata: Dict[str, Any], content: bytes, mime_type: str
) -> Tuple[bytes, str]:
    """Encode a Drive multipart upload body (metadata part + media part)."""
    boundary = f"tenant_backup_{uuid.uuid4().hex}"
    head = (
        f"--{boundary}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{json.dumps(metadata)}\r\n"
        f"--{boundary}\r\n"
        f"Content-Type: {mime_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + content + tail, f"multipart/related; boundary={boundary}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or str(error)
    return str(error or body)


class DriveArchiveClient:
    """ArchiveClient backed by Google Drive."""

    def __init__(self, http: httpx.AsyncClient, token_provider: TokenProvider):
        self._http = http
        self._token_provider = token_provider

    async def _request(self, url: str, *, name: str, **kwargs: Any) -> Dict[str, Any]:
        token = await self._token_provider()
        headers = {"Authorization": f"Bearer {token}", **kwargs.pop("headers", {})}
        try:
            response = await self._http.post(url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise ArchiveError(
                f"Drive request failed for {name}: {exc}",
                details={"name": name},
            ) from exc

        if response.is_error:
            raise ArchiveError(
                f"Drive rejected {name}: {_error_message(response)}",
                details={"name": name, "status": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ArchiveError(
                f"Drive returned an invalid response for {name}",
                details={"name": name, "status": response.status_code},
            ) from exc
        if not isinstance(data, dict):
            raise ArchiveError(
                f"Drive returned an invalid response for {name}",
                details={"name": name, "status": response.status_code},
            )
        return data

    async def create_folder(self, name: str, parent_folder_id: str) -> str:
        data = await self._request(
            DRIVE_FILES_URL,
            name=name,
            params={"fields": "id", "supportsAllDrives": "true"},
            json={
                "name": name,
                "mimeType": FOLDER_MIME_TYPE,
                "parents": [parent_folder_id],
            },
        )
        folder_id = data.get("id")
        if not folder_id:
            raise ArchiveError(
                f"Failed to create Drive folder: {name}",
                details={"parent_folder_id": parent_folder_id},
            )

        logger.debug("drive_folder_created", name=name, folder_id=folder_id)
        return folder_id

    async def upload_object(
        self,
        name: str,
        content: bytes,
        mime_type: str,
        parent_folder_id: str,
    ) -> str:
        body, content_type = _multipart_related(
            {"name": name, "parents": [parent_folder_id]}, content, mime_type
        )
        data = await self._request(
            DRIVE_UPLOAD_URL,
            name=name,
            params={
                "uploadType": "multipart",
                "fields": "id,webViewLink",
                "supportsAllDrives": "true",
            },
            content=body,
            headers={"Content-Type": content_type},
        )

        logger.debug("drive_file_uploaded", name=name, size=len(content))
        return data.get("webViewLink") or f"https://drive.google.com/file/d/{data.get('id')}"

    def folder_url(self, folder_id: str) -> str:
        return f"https://drive.google.com/drive/folders/{folder_id}"


def create_drive_client(
    credential: Dict[str, Any] | None,
    http: httpx.AsyncClient | None = None,
) -> DriveArchiveClient:
    """
    Create an authenticated Drive archive client.

    Args:
        credential: Parsed service account JSON
        http: Optional pre-built httpx client (tests pass a MockTransport)

    Raises:
        ConfigurationError: If the credential is missing or malformed
    """
    if not credential:
        raise ConfigurationError(
            "ARCHIVE_SERVICE_CREDENTIAL environment variable is not set"
        )

    token_provider = service_account_token_provider(credential)
    return DriveArchiveClient(
        http or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT),
        token_provider,
    )
