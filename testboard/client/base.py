from __future__ import annotations

from types import TracebackType

import httpx

DEFAULT_TIMEOUT = 10.0


class BaseClient:
    """
    Thin read-only wrapper around an `httpx.AsyncClient`.

    Pass either a `base_url` (the wrapper then owns and closes its client) or an
    existing `client`. Non-2xx answers raise `httpx.HTTPStatusError`; there are no
    retries and nothing is cached.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if client is None and base_url is None:
            raise ValueError('Either base_url or client is required.')
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(base_url=base_url or '', timeout=timeout)

    async def _get(self, url: str) -> httpx.Response:
        response = await self._client.get(url)
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> BaseClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
