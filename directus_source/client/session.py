"""Authenticated session against one Directus instance."""

import asyncio
import inspect
import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable

import httpx

from directus_source import DEFAULT_RETRIES, LOG_TAG
from directus_source.client._client import DirectusAsyncClient
from directus_source.client.exceptions import AuthError, ConfigError
from directus_source.client.retry import fetch_with_retry
from directus_source.types.auth_tokens import AuthTokens
from directus_source.types.endpoints import Endpoints
from directus_source.types.file_record import FileRecord
from directus_source.types.plugin_options import AuthOptions, HeadersSource

logger = logging.getLogger(__name__)

# Login tokens this close to expiry are refreshed before use
TOKEN_REFRESH_MARGIN = timedelta(seconds=30)

AUTH_EXCHANGE_ERRORS = (httpx.HTTPError, KeyError, TypeError, ValueError)


class DirectusSession:
    """Holds the credential state and endpoints for one build run.

    The session is established once. Calling :meth:`establish` again with the
    same credential returns the session untouched; a different credential is a
    logic error.
    """

    def __init__(
        self,
        endpoints: Endpoints,
        *,
        retries: int = DEFAULT_RETRIES,
        headers: HeadersSource | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        **client_kwargs: Any,
    ):
        self.endpoints = endpoints
        self.retries = retries
        self.extra_headers = headers
        self.sleep = sleep
        self.client = DirectusAsyncClient(
            base_url=endpoints.root, token_provider=self.token, **client_kwargs
        )

        self.credential: AuthOptions | None = None
        self.established: bool = False
        self._static_token: str | None = None
        self._tokens: AuthTokens | None = None
        self._refresh_lock = asyncio.Lock()

    async def establish(self, credential: AuthOptions | None) -> "DirectusSession":
        if self.established:
            if credential != self.credential:
                raise ConfigError(
                    "session is already established with a different credential"
                )
            return self

        if credential is None:
            logger.warning(
                f'{LOG_TAG}: no "auth" option were defined. '
                + "Resources will be fetched with public role"
            )
        elif credential.kind == "token":
            self._static_token = credential.token
        else:
            try:
                self._tokens = await self.client.login(
                    credential.email, credential.password  # type: ignore[arg-type]
                )
            except AUTH_EXCHANGE_ERRORS as e:
                raise AuthError(
                    f"authentication failed with: {e}\nAre credentials valid?"
                ) from e
            logger.info(f"Authenticated against {self.endpoints.root}")

        self.credential = credential
        self.established = True
        return self

    async def token(self) -> str | None:
        """Return the current access token, refreshing a login token near expiry."""
        if self._static_token is not None:
            return self._static_token
        if self._tokens is None:
            return None

        if self._tokens.refresh_token and self._tokens.is_expiring(
            TOKEN_REFRESH_MARGIN
        ):
            async with self._refresh_lock:
                # Another request may have refreshed while we waited
                tokens = self._tokens
                if tokens.refresh_token and tokens.is_expiring(TOKEN_REFRESH_MARGIN):
                    try:
                        self._tokens = await self.client.refresh(tokens.refresh_token)
                    except AUTH_EXCHANGE_ERRORS as e:
                        raise AuthError(
                            f"token refresh failed with: {e}\nAre credentials valid?"
                        ) from e

        return self._tokens.access_token

    async def auth_headers(self) -> dict[str, str]:
        if token := await self.token():
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def headers(self) -> dict[str, str]:
        """User supplied headers merged with the current ``Authorization`` header."""
        headers: dict[str, str] = {}

        extra = self.extra_headers
        if callable(extra):
            extra = extra()
            if inspect.isawaitable(extra):
                extra = await extra
        headers.update(extra or {})

        headers.update(await self.auth_headers())
        return headers

    async def fetch(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await fetch_with_retry(
            self.client, url, retries=self.retries, sleep=self.sleep, **kwargs
        )

    async def read_files(self, *, page: int, limit: int) -> list[FileRecord]:
        return await self.client.read_files(page=page, limit=limit, fetch=self.fetch)

    async def aclose(self) -> None:
        await self.client.aclose()
