"""
Credentials providers for the YouTube Data API.

The OAuth consent flow and token storage live outside this runtime; a
provider only hands out a bearer access token for the next request batch.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from dotenv import load_dotenv

from shared.logging.logger import get_logger

log = get_logger("youtube.auth")


class YouTubeAuthError(RuntimeError):
    """Raised when no usable access token is available."""


class CredentialsProvider(ABC):
    """
    Source of OAuth access tokens.

    Implementations may refresh tokens on their own; callers ask for a token
    every time they build an authenticated client.
    """

    @abstractmethod
    async def get_access_token(self) -> str:
        raise NotImplementedError


class StaticTokenProvider(CredentialsProvider):
    def __init__(self, token: str):
        if not token:
            raise YouTubeAuthError("Access token is required")
        self._token = token

    async def get_access_token(self) -> str:
        return self._token


class EnvTokenProvider(CredentialsProvider):
    """
    Reads the access token from an environment variable.

    `.env` is loaded on first use so local setups work without exporting
    the variable by hand.
    """

    def __init__(self, env_key: str = "YOUTUBE_ACCESS_TOKEN"):
        if not env_key:
            raise YouTubeAuthError("Access token env key is required")
        self.env_key = env_key
        self._dotenv_loaded = False

    async def get_access_token(self) -> str:
        if not self._dotenv_loaded:
            load_dotenv()
            self._dotenv_loaded = True

        raw = os.getenv(self.env_key)
        if raw is None:
            raise YouTubeAuthError(f"ENV VAR NOT FOUND: {self.env_key}")

        token = raw.strip()
        if not token:
            raise YouTubeAuthError(f"ENV VAR EMPTY: {self.env_key}")

        log.debug(f"Access token loaded from {self.env_key}")
        return token
