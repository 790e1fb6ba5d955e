"""Telegram Bot API client for sticker set metadata and file lookups."""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from core.errors.exceptions import UpstreamError, classify_http_status
from core.logging.context import get_log_context

logger = logging.getLogger(__name__)


class TelegramApiError(UpstreamError):
    """Bot API call answered with ok=false or a non-JSON/non-200 response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        description: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, status_code=status_code, cause=cause)
        self.description = description or ""
        if status_code is not None:
            self.category = classify_http_status(status_code)


class TelegramBotClient:
    """Async client for the Telegram Bot API (getStickerSet, getFile, file download URLs)."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.telegram.org",
        timeout_seconds: float = 30,
        max_concurrent: int = 16,
        session: aiohttp.ClientSession | None = None,
    ):
        if not token:
            raise ValueError(
                "TelegramBotClient requires 'token'. "
                "Set TELEGRAM_API_KEY environment variable or configure telegram.token in config."
            )

        self.base_url = base_url.rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"TelegramBotClient base_url must start with http:// or https://, got: {self.base_url!r}"
            )

        self._token = token
        self.timeout_seconds = timeout_seconds
        self.max_concurrent = max_concurrent

        self._session = session
        self._owns_session = session is None
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._closed = False

        logger.info(
            "TelegramBotClient initialized",
            extra={
                "http_url": self.base_url,
                "concurrency_limit": self.max_concurrent,
            },
        )

    async def __aenter__(self) -> "TelegramBotClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError("TelegramBotClient is closed, cannot create new session")
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_concurrent,
                limit_per_host=self.max_concurrent,
            )
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        self._closed = True
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    @staticmethod
    def _get_context_ids() -> dict[str, str]:
        return {k: v for k, v in get_log_context().items() if v}

    def _method_url(self, method: str) -> str:
        return f"{self.base_url}/bot{self._token}/{method}"

    def file_url(self, file_path: str) -> str:
        """Download URL for a file_path returned by getFile."""
        return f"{self.base_url}/file/bot{self._token}/{quote(file_path)}"

    async def _call(self, method: str, params: dict[str, Any]) -> Any:
        """Invoke a Bot API method and return its ``result`` payload."""
        session = await self._ensure_session()
        url = self._method_url(method)
        ctx = self._get_context_ids()

        async with self._semaphore:
            start_time = asyncio.get_running_loop().time()
            try:
                async with session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    duration = asyncio.get_running_loop().time() - start_time
                    try:
                        body = await response.json(content_type=None)
                    except ValueError as e:
                        raise TelegramApiError(
                            f"Non-JSON response from {method} (HTTP {response.status})",
                            status_code=response.status,
                            cause=e,
                        ) from e

            except TimeoutError as e:
                logger.warning(
                    "Bot API request timeout",
                    extra={**ctx, "api_endpoint": method, "duration_ms": self.timeout_seconds * 1000},
                )
                raise TelegramApiError(f"Timeout after {self.timeout_seconds}s calling {method}", cause=e) from e

            except aiohttp.ClientError as e:
                logger.error(
                    "Bot API connection error",
                    exc_info=True,
                    extra={**ctx, "api_endpoint": method},
                )
                raise TelegramApiError(f"Connection error calling {method}: {e}", cause=e) from e

        if not isinstance(body, dict) or not body.get("ok"):
            description = body.get("description", "") if isinstance(body, dict) else ""
            error_code = body.get("error_code") if isinstance(body, dict) else None
            status = error_code or response.status
            logger.warning(
                "Bot API request failed",
                extra={
                    **ctx,
                    "api_endpoint": method,
                    "http_status": status,
                    "error_message": description,
                    "duration_ms": round(duration * 1000, 1),
                },
            )
            raise TelegramApiError(
                f"{method} failed: {description or f'HTTP {status}'}",
                status_code=status,
                description=description,
            )

        logger.debug(
            "Bot API request succeeded",
            extra={
                **ctx,
                "api_endpoint": method,
                "http_status": response.status,
                "duration_ms": round(duration * 1000, 1),
            },
        )
        return body.get("result")

    async def get_sticker_set(self, name: str) -> dict[str, Any]:
        """getStickerSet: set metadata including the ordered ``stickers`` list."""
        result = await self._call("getStickerSet", {"name": name})
        return result if isinstance(result, dict) else {}

    async def get_file(self, file_id: str) -> dict[str, Any]:
        """getFile: file metadata including the downloadable ``file_path``."""
        result = await self._call("getFile", {"file_id": file_id})
        return result if isinstance(result, dict) else {}
