"""Header construction for origin requests and client responses."""

from collections.abc import Iterable

import httpx

PREFETCH_ENABLED_HEADER = "CDN-Origin-Assist-Prefetch-Enabled"
PREFETCH_PATH_HEADER = "CDN-Origin-Assist-Prefetch-Path"
PROTOCOL_HEADERS = frozenset({PREFETCH_ENABLED_HEADER.lower(), PREFETCH_PATH_HEADER.lower()})

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


class HeaderBuilder:
    """Build headers crossing the relay in either direction."""

    def build_origin_headers(
        self,
        headers: Iterable[tuple[bytes, bytes]],
        host: str | None = None,
    ) -> httpx.Headers:
        """Pass through raw client headers and ask the origin for prefetch hints."""
        upstream = httpx.Headers(
            [
                (key, value)
                for key, value in headers
                if key.lower().decode("latin-1") not in HOP_BY_HOP_HEADERS
                and key.lower() not in (b"host", b"content-length")
            ]
        )
        if host:
            upstream["Host"] = host
        upstream[PREFETCH_ENABLED_HEADER] = "1"
        return upstream

    def build_client_headers(
        self,
        headers: httpx.Headers,
        *,
        debug: bool = False,
    ) -> list[tuple[bytes, bytes]]:
        """Copy origin headers for the client, keeping repeated instances.

        Protocol headers stay visible only when diagnostics are enabled.
        """
        raw: list[tuple[bytes, bytes]] = []
        for key, value in headers.raw:
            key_lower = key.lower()
            name = key_lower.decode("latin-1")
            if name in HOP_BY_HOP_HEADERS:
                continue
            if name in PROTOCOL_HEADERS and not debug:
                continue
            raw.append((key_lower, value))
        return raw
