"""
Async download module.

Provides:
    - download_url: single-attempt in-memory HTTP GET with aiohttp
    - create_session: pooled aiohttp ClientSession factory
    - DownloadResponse / DownloadError: result types

Example usage:
    from core.download import create_session, download_url

    async with create_session() as session:
        response, error = await download_url("https://example.com/a.webp", session)

    if error:
        print(f"Failed: {error.error_message}")
    else:
        print(f"Downloaded {len(response.content)} bytes")
"""

from core.download.http_client import (
    DEFAULT_TIMEOUT_SECONDS,
    DownloadError,
    DownloadResponse,
    create_session,
    download_url,
)

__all__ = [
    "download_url",
    "create_session",
    "DownloadResponse",
    "DownloadError",
    "DEFAULT_TIMEOUT_SECONDS",
]
