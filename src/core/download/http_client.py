"""
Core HTTP download client using aiohttp.

Provides basic async HTTP download functionality without domain-specific
coupling. Handles timeouts, connection pooling and error classification.

No retries happen here: a failed download is reported once and the caller
decides what to do with it.
"""

from dataclasses import dataclass

import aiohttp

from core.errors.exceptions import (
    ErrorCategory,
    classify_http_status,
)

DEFAULT_TIMEOUT_SECONDS = 30


@dataclass
class DownloadResponse:
    """Response from HTTP download operation with content and metadata."""

    content: bytes
    status_code: int
    content_length: int | None = None
    content_type: str | None = None


@dataclass
class DownloadError:
    """Error result from failed HTTP download with classification."""

    status_code: int | None
    error_message: str
    error_category: ErrorCategory


async def download_url(
    url: str,
    session: aiohttp.ClientSession,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    allow_redirects: bool = True,
) -> tuple[DownloadResponse | None, DownloadError | None]:
    """
    Low-level HTTP GET of a URL into memory, single attempt.

    Args:
        url: URL to download
        session: aiohttp ClientSession (caller manages lifecycle)
        timeout: Total timeout in seconds for the whole request
        allow_redirects: Whether to follow redirects

    Returns:
        Tuple of (DownloadResponse, None) on success or (None, DownloadError)
    """
    try:
        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=allow_redirects,
        ) as response:
            if response.status != 200:
                return None, DownloadError(
                    status_code=response.status,
                    error_message=f"HTTP {response.status}",
                    error_category=classify_http_status(response.status),
                )

            content = await response.read()
            return (
                DownloadResponse(
                    content=content,
                    status_code=response.status,
                    content_length=response.content_length,
                    content_type=response.headers.get("Content-Type"),
                ),
                None,
            )

    except TimeoutError:
        return None, DownloadError(
            status_code=None,
            error_message=f"Download timeout after {timeout}s",
            error_category=ErrorCategory.TRANSIENT,
        )
    except aiohttp.ServerTimeoutError as e:
        return None, DownloadError(
            status_code=None,
            error_message=f"Server timeout: {str(e)}",
            error_category=ErrorCategory.TRANSIENT,
        )
    except aiohttp.ClientError as e:
        return None, DownloadError(
            status_code=None,
            error_message=f"Connection error: {str(e)}",
            error_category=ErrorCategory.TRANSIENT,
        )


def create_session(
    max_connections: int = 100,
    max_connections_per_host: int = 16,
    timeout_total: int = 300,
    timeout_connect: int = 30,
) -> aiohttp.ClientSession:
    """
    Create aiohttp ClientSession with connection pooling and timeouts.

    Per-request timeouts passed to download_url() take precedence over the
    session-wide ``timeout_total``.

    Note:
        Caller is responsible for session lifecycle management.
        Use async context manager for automatic cleanup:

        async with create_session() as session:
            response, error = await download_url(url, session)
    """
    connector = aiohttp.TCPConnector(
        limit=max_connections,
        limit_per_host=max_connections_per_host,
        ttl_dns_cache=300,
    )

    timeout = aiohttp.ClientTimeout(
        total=timeout_total,
        connect=timeout_connect,
    )

    return aiohttp.ClientSession(connector=connector, timeout=timeout)


__all__ = [
    "DownloadResponse",
    "DownloadError",
    "download_url",
    "create_session",
    "DEFAULT_TIMEOUT_SECONDS",
]
