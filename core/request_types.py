"""Shared request data types."""

from dataclasses import dataclass

import httpx
from starlette.requests import Request


@dataclass(frozen=True)
class RequestTarget:
    """Components of the inbound URL that hints are resolved against."""

    scheme: str
    host: str
    path: str
    query: str = ""

    @classmethod
    def from_request(cls, request: Request) -> "RequestTarget":
        """Build from the ASGI scope, keeping the path as the client encoded it."""
        url = request.url
        raw_path = request.scope.get("raw_path")
        path = raw_path.partition(b"?")[0].decode("latin-1") if raw_path else url.path
        return cls(scheme=url.scheme, host=url.netloc, path=path or "/", query=url.query)

    @property
    def origin_path(self) -> str:
        """Path and query, without the client-supplied host."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}{self.origin_path}"


@dataclass(frozen=True)
class RelayContext:
    """Per-request state shared by the relay phases."""

    method: str
    target: RequestTarget
    origin_headers: httpx.Headers
    debug: bool = False
