from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest

from _helpers_streams import TrackingStream
from core.config import Config, OriginSettings
from ui import log_utils

ORIGIN_URL = "http://origin.test"


class RecordingLogger:
    """RequestLogger double that keeps every call for assertions."""

    def __init__(self) -> None:
        self.relays: list[tuple[str, str, int, int]] = []
        self.prefetches: list[tuple[str, int | None]] = []
        self.errors: list[tuple[str, int, str]] = []
        self.debug: list[tuple[str, dict[str, Any]]] = []

    def log_relay(self, method: str, path: str, status: int, *, hints: int = 0) -> None:
        self.relays.append((method, path, status, hints))

    def log_prefetch(self, url: str, status: int | None) -> None:
        self.prefetches.append((url, status))

    def log_error(self, route: str, status: int, message: str) -> None:
        self.errors.append((route, status, message))

    def log_debug(self, message: str, **extra: Any) -> None:
        self.debug.append((message, extra))


class OriginRecorder:
    """httpx.MockTransport handler that records requests and replays canned answers."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, dict[str, Any]] = {}
        self.streams: dict[str, TrackingStream] = {}

    def route(
        self,
        path: str,
        status: int = 200,
        *,
        headers: list[tuple[str, str]] | None = None,
        content: bytes = b"",
        error: Exception | None = None,
    ) -> None:
        self.routes[path] = {"status": status, "headers": headers, "content": content, "error": error}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get(
            request.url.path,
            {"status": 200, "headers": None, "content": b"origin body", "error": None},
        )
        if answer["error"] is not None:
            raise answer["error"]
        stream = TrackingStream(answer["content"])
        self.streams[request.url.path] = stream
        return httpx.Response(answer["status"], headers=answer["headers"], stream=stream)

    @property
    def paths(self) -> list[str]:
        return [r.url.raw_path.decode("ascii") for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep log files written during tests out of the working tree."""
    log_root = tmp_path / "logs"
    monkeypatch.setattr(log_utils, "LOG_ROOT", log_root)
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", log_root / "relay.log")
    return log_root


@pytest.fixture
def config() -> Config:
    return Config(origin=OriginSettings(base_url=ORIGIN_URL))


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def origin() -> OriginRecorder:
    return OriginRecorder()
