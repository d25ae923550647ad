"""Tests for services.youtube.auth: access token providers."""

from __future__ import annotations

import pytest

from services.youtube.auth import EnvTokenProvider, StaticTokenProvider, YouTubeAuthError


class TestStaticTokenProvider:
    @pytest.mark.asyncio
    async def test_returns_token(self) -> None:
        assert await StaticTokenProvider("abc").get_access_token() == "abc"

    def test_empty_token_rejected(self) -> None:
        with pytest.raises(YouTubeAuthError):
            StaticTokenProvider("")


class TestEnvTokenProvider:
    @pytest.mark.asyncio
    async def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YTLIVE_TEST_TOKEN", "  tok  ")
        assert await EnvTokenProvider("YTLIVE_TEST_TOKEN").get_access_token() == "tok"

    @pytest.mark.asyncio
    async def test_missing_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("YTLIVE_TEST_TOKEN", raising=False)
        with pytest.raises(YouTubeAuthError, match="NOT FOUND"):
            await EnvTokenProvider("YTLIVE_TEST_TOKEN").get_access_token()

    @pytest.mark.asyncio
    async def test_empty_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YTLIVE_TEST_TOKEN", "   ")
        with pytest.raises(YouTubeAuthError, match="EMPTY"):
            await EnvTokenProvider("YTLIVE_TEST_TOKEN").get_access_token()
