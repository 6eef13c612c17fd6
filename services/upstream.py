"""HTTP proxying utilities for origin requests."""

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError


class UpstreamClient:
    """Send requests to the named origin with streaming support.

    Public URLs (the host the client asked for) are reduced to their path and
    query. The request is sent to the origin base URL; the public host travels
    in the ``Host`` header built by the caller.
    """

    def __init__(self, client: httpx.AsyncClient, name: str = "origin") -> None:
        self._client = client
        self.name = name

    async def open(self, url: str, headers: httpx.Headers) -> httpx.Response:
        """Send a GET and return the response with its body still unread.

        ``url`` is either a public URL or an origin-relative path with query.
        The caller owns the response and must close it.
        """
        try:
            request = self._client.build_request("GET", self._origin_path(url), headers=headers)
        except httpx.InvalidURL as e:
            raise UpstreamError(f"Invalid upstream URL {url!r}: {e}", provider=self.name) from e
        try:
            return await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}", provider=self.name) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}", provider=self.name) from e

    async def warm(self, url: str, headers: httpx.Headers) -> int:
        """Fetch ``url`` for its cache side effect and return the status.

        A 200 body is drained and discarded; anything else is closed unread.
        """
        response = await self.open(url, headers)
        try:
            if response.status_code == 200:
                async for _ in response.aiter_raw():
                    pass
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"Failed draining {url}: {e}",
                status_code=response.status_code,
                provider=self.name,
            ) from e
        finally:
            await response.aclose()
        return response.status_code

    async def aclose(self) -> None:
        await self._client.aclose()

    def _origin_path(self, url: str) -> str:
        """Keep path and query of ``url``; the client's base URL picks the origin."""
        if url.startswith("/"):
            # A leading "//" would be read as a network-path reference to another host.
            return "/" + url.lstrip("/")
        raw_path = httpx.URL(url).raw_path.decode("ascii")
        return "/" + raw_path.lstrip("/")
