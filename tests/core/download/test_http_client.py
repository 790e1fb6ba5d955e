"""
Tests for core.download.http_client module.

Tests cover:
- Successful HTTP downloads
- HTTP error status codes (4xx, 5xx)
- Timeout scenarios
- Connection errors
- Session creation and configuration
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.download.http_client import create_session, download_url
from core.errors.exceptions import ErrorCategory
from tests_support import make_response


class TestDownloadUrl:
    """Tests for download_url function."""

    @pytest.mark.asyncio
    async def test_successful_download(self):
        """Test successful file download returns content and metadata."""
        mock_response = make_response(200, b"RIFF....WEBP", headers={"Content-Type": "image/webp"})
        mock_session = AsyncMock()
        mock_session.get = MagicMock(return_value=mock_response)

        response, error = await download_url(
            "https://example.com/sticker.webp", mock_session, timeout=30
        )

        assert error is None
        assert response is not None
        assert response.content == b"RIFF....WEBP"
        assert response.status_code == 200
        assert response.content_length == 12
        assert response.content_type == "image/webp"

        mock_session.get.assert_called_once()
        call_args = mock_session.get.call_args
        assert call_args[0][0] == "https://example.com/sticker.webp"
        assert call_args[1]["allow_redirects"] is True

    @pytest.mark.asyncio
    async def test_http_404_error(self):
        """Test 404 response is classified as PERMANENT."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(return_value=make_response(404))

        response, error = await download_url("https://example.com/missing.webp", mock_session)

        assert response is None
        assert error.status_code == 404
        assert error.error_category == ErrorCategory.PERMANENT
        assert "404" in error.error_message

    @pytest.mark.asyncio
    async def test_http_500_error(self):
        """Test 500 response is classified as TRANSIENT."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(return_value=make_response(500))

        response, error = await download_url("https://example.com/error.webp", mock_session)

        assert response is None
        assert error.status_code == 500
        assert error.error_category == ErrorCategory.TRANSIENT

    @pytest.mark.asyncio
    async def test_http_429_rate_limit(self):
        """Test 429 response is classified as TRANSIENT."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(return_value=make_response(429))

        response, error = await download_url("https://example.com/limited.webp", mock_session)

        assert response is None
        assert error.status_code == 429
        assert error.error_category == ErrorCategory.TRANSIENT

    @pytest.mark.asyncio
    async def test_non_200_success_status_is_an_error(self):
        """Only 200 carries a payload."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(return_value=make_response(204))

        response, error = await download_url("https://example.com/empty", mock_session)

        assert response is None
        assert error.status_code == 204

    @pytest.mark.asyncio
    async def test_timeout_error(self):
        """Test timeout is classified as TRANSIENT."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=asyncio.TimeoutError("Connection timeout"))

        response, error = await download_url("https://example.com/slow.webp", mock_session, timeout=5)

        assert response is None
        assert error.status_code is None
        assert error.error_category == ErrorCategory.TRANSIENT
        assert "timeout" in error.error_message.lower()

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test connection error is classified as TRANSIENT."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("Connection refused"))

        response, error = await download_url("https://unreachable.example/file.webp", mock_session)

        assert response is None
        assert error.status_code is None
        assert error.error_category == ErrorCategory.TRANSIENT
        assert "connection error" in error.error_message.lower()

    @pytest.mark.asyncio
    async def test_timeout_parameter(self):
        """Test timeout parameter is passed to aiohttp."""
        mock_session = AsyncMock()
        mock_session.get = MagicMock(return_value=make_response(200, b"content"))

        await download_url("https://example.com/file.webp", mock_session, timeout=120)

        timeout_arg = mock_session.get.call_args[1]["timeout"]
        assert isinstance(timeout_arg, aiohttp.ClientTimeout)
        assert timeout_arg.total == 120


class TestCreateSession:
    """Tests for create_session function."""

    @pytest.mark.asyncio
    async def test_create_session_default_config(self):
        session = create_session()
        try:
            assert isinstance(session, aiohttp.ClientSession)
            assert isinstance(session.connector, aiohttp.TCPConnector)
            assert session.connector.limit == 100
            assert session.connector.limit_per_host == 16
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_create_session_custom_config(self):
        session = create_session(max_connections=50, max_connections_per_host=5)
        try:
            assert session.connector.limit == 50
            assert session.connector.limit_per_host == 5
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_session_context_manager(self):
        async with create_session() as session:
            assert not session.closed
        assert session.closed
