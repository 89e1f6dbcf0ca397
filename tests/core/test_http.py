"""Tests for core/http.py (shared HTTP client)."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

import fixturecast.core.http
from fixturecast.config.settings import Config
from fixturecast.config.settings import HttpConfig
from fixturecast.core.http import cleanup
from fixturecast.core.http import get_http_client
from fixturecast.core.http import get_timeout_config


class TestGetTimeoutConfig:
    """Tests for get_timeout_config function."""

    def test_uses_config_timeout_value(self):
        """The configured timeout is the read timeout; connect is fixed."""
        with patch("fixturecast.core.http.get_config") as mock_get_config:
            mock_get_config.return_value = Config(http=HttpConfig(timeout=45.0))

            timeout = get_timeout_config()

            assert timeout.read == 45.0
            assert timeout.write == 45.0
            assert timeout.connect == 10.0

    def test_default_timeout(self):
        timeout = get_timeout_config()

        assert timeout.read == 60.0


class TestGetHttpClient:
    """Tests for get_http_client context manager."""

    @pytest.mark.asyncio
    async def test_reuses_existing_client(self):
        fixturecast.core.http._client = None

        async with get_http_client() as client1:
            pass
        async with get_http_client() as client2:
            assert client2 is client1
            assert isinstance(client2, httpx.AsyncClient)
            assert client2.is_closed is False

        await cleanup()

    @pytest.mark.asyncio
    async def test_cleanup_closes_client(self):
        fixturecast.core.http._client = None

        async with get_http_client() as client:
            pass

        await cleanup()

        assert client.is_closed is True
        assert fixturecast.core.http._client is None

    @pytest.mark.asyncio
    async def test_cleanup_without_client(self):
        fixturecast.core.http._client = None

        await cleanup()

        assert fixturecast.core.http._client is None
