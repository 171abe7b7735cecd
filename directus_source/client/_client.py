import logging
from typing import Any, AsyncGenerator, Awaitable, Callable

import httpx

from directus_source.types.auth_tokens import AuthTokens
from directus_source.types.file_record import FileRecord

logger = logging.getLogger(__name__)

FILE_FIELDS: tuple[str, ...] = ("id", "type", "filename_download")


class BearerAuth(httpx.Auth):
    """Attach the current bearer token, resolved again for every request."""

    def __init__(self, token_provider: Callable[[], Awaitable[str | None]]):
        self.token_provider = token_provider

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if token := await self.token_provider():
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


class DirectusAsyncClient(httpx.AsyncClient):
    def __init__(
        self,
        *,
        base_url: httpx.URL | str,
        token_provider: Callable[[], Awaitable[str | None]] | None = None,
        **kwargs: Any,
    ):
        auth = BearerAuth(token_provider) if token_provider is not None else None
        headers = dict(kwargs.pop("headers", None) or {})

        # Set default timeout for asset downloads (5 minutes total, 30s connect, 60s read)
        default_timeout = httpx.Timeout(timeout=300.0, connect=30.0, read=60.0)
        timeout = kwargs.pop("timeout", default_timeout)

        super().__init__(
            base_url=base_url, auth=auth, headers=headers, timeout=timeout, **kwargs
        )

    async def login(self, email: str, password: str) -> AuthTokens:
        """Exchange an email and password for an access token."""

        logger.debug(f"Logging in to {self.base_url} as {email}")

        # The token provider is bypassed: there is no token yet
        response = await self.post(
            "/auth/login", json={"email": email, "password": password}, auth=None
        )
        response.raise_for_status()
        return AuthTokens.model_validate(response.json()["data"])

    async def refresh(self, refresh_token: str) -> AuthTokens:
        """Trade a refresh token for a new token pair."""

        logger.debug(f"Refreshing access token for {self.base_url}")

        response = await self.post(
            "/auth/refresh",
            json={"refresh_token": refresh_token, "mode": "json"},
            auth=None,
        )
        response.raise_for_status()
        return AuthTokens.model_validate(response.json()["data"])

    async def read_files(
        self,
        *,
        page: int,
        limit: int,
        fetch: Callable[..., Awaitable[httpx.Response]],
    ) -> list[FileRecord]:
        """Read one page of file records, sorted by id.

        ``fetch`` performs the request, so callers decide on the retry policy.
        """
        response = await fetch(
            "/files",
            params={
                "fields": ",".join(FILE_FIELDS),
                "sort": "id",
                "limit": limit,
                "page": page,
            },
        )
        response.raise_for_status()
        data = response.json().get("data") or []
        return [FileRecord.model_validate(item) for item in data]
