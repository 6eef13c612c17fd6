"""Resolve prefetch hints into absolute URLs on the requested host."""

import posixpath

import httpx

from core.exceptions import HintParseError
from core.protocols import RequestLogger
from core.request_types import RequestTarget


def resolve_hint(target: RequestTarget, hint: str) -> str:
    """Resolve a single trimmed hint against the inbound request.

    Absolute hints (leading ``/``) hang off the host, relative ones off the
    directory of the requested path. The hint only ever names a path: its own
    query and fragment are dropped and the inbound query string is reused.

    Raises:
        ValueError: If ``hint`` is empty.
        HintParseError: If the built string is not a well-formed URL.
    """
    if not hint:
        raise ValueError("hint must be non-empty")

    base = f"{target.scheme}://{target.host}"
    if hint.startswith("/"):
        candidate = f"{base}{hint}"
    else:
        # Cleaned like a path directory: "/a//b/./c.m3u8" -> "/a/b"
        directory = "/" + posixpath.normpath(posixpath.dirname(target.path) or "/").lstrip("/")
        directory = directory.rstrip("/")
        candidate = f"{base}{directory}/{hint}"

    try:
        url = httpx.URL(candidate)
    except httpx.InvalidURL as e:
        raise HintParseError(hint, candidate) from e
    if not url.scheme or not url.host:
        raise HintParseError(hint, candidate)

    path = url.raw_path.partition(b"?")[0].decode("ascii")
    resolved = f"{url.scheme}://{url.netloc.decode('ascii')}{path}"
    if target.query:
        resolved = f"{resolved}?{target.query}"
    return resolved


class PathResolver:
    """Resolve hint lists, dropping the ones that do not parse."""

    def __init__(self, logger: RequestLogger) -> None:
        self._logger = logger

    def resolve_all(self, target: RequestTarget, hints: list[str]) -> list[str]:
        """Resolve ``hints`` in order; unparseable entries are logged and skipped."""
        resolved: list[str] = []
        for hint in hints:
            try:
                resolved.append(resolve_hint(target, hint))
            except HintParseError as e:
                self._logger.log_error("prefetch", 0, str(e))
        return resolved
