# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for Tenant Backup.

These helpers centralize wording for common configuration errors so that
the CLI, the environment loader and the HTTP trigger all present the same
actionable messages.
"""


def explain_missing_env(name: str) -> str:
    """
    Explain that a required environment variable is missing.
    """

    return f"Missing required environment variable: {name}"


def explain_invalid_credential(reason: str) -> str:
    """
    Explain that the archive service credential could not be parsed.
    """

    return (
        f"ARCHIVE_SERVICE_CREDENTIAL is not a valid service account credential: {reason}. "
        "Set it to the JSON-encoded key of a service account."
    )


def explain_unsupported_data_store_url(url: str) -> str:
    """
    Explain that DATA_STORE_URL has an unsupported scheme.
    """

    scheme = url.split("://", 1)[0] if "://" in url else url
    return (
        f"Unsupported DATA_STORE_URL scheme: {scheme!r}. "
        "Expected an http(s):// project URL or a postgres:// connection URL."
    )


def explain_invalid_storage_backend_env(value: str | None) -> str:
    """
    Explain that STORAGE_BACKEND is invalid.
    """

    return (
        f"Invalid STORAGE_BACKEND value: {value!r}. "
        "Expected 'supabase' or 's3'."
    )


def explain_invalid_positive_int_env(name: str, value: str | None) -> str:
    """
    Explain that an integer environment variable is invalid.
    """

    return f"Invalid {name} value: {value!r}. It must be a positive integer."


def explain_invalid_timeout_env(value: str | None) -> str:
    """
    Explain that BACKUP_TIMEOUT_SECONDS is invalid.
    """

    return (
        f"Invalid BACKUP_TIMEOUT_SECONDS value: {value!r}. "
        "It must be a positive number of seconds, or unset for no deadline."
    )


def explain_invalid_bool_env(name: str, value: str | None) -> str:
    """
    Explain that a boolean environment variable is invalid.
    """

    return f"Invalid {name} value: {value!r}. Expected 'true' or 'false'."


def explain_missing_storage_url() -> str:
    """
    Explain that the Supabase storage backend has no project URL.
    """

    return (
        "Storage URL is not configured. "
        "Set STORAGE_URL to the project URL, or use an http(s):// DATA_STORE_URL."
    )
