"""Shared async HTTP client for outbound integrations (email transports)."""

from typing import Any, Optional

import httpx

_USER_AGENT = "quire/1.0"


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient.

    The app owns one instance for its lifetime and closes it on shutdown.
    """

    def __init__(
        self, timeout: float = 10.0, headers: Optional[dict[str, str]] = None
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": _USER_AGENT, **(headers or {})},
        )

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
