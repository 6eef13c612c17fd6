"""Prefetch hint extraction from origin response headers."""

import httpx

from core.headers import PREFETCH_PATH_HEADER


def split_hint_value(value: str) -> list[str]:
    """Split one header value on commas, trimming and dropping empty entries."""
    return [part.strip() for part in value.split(",") if part.strip()]


def extract_hints(headers: httpx.Headers) -> list[str]:
    """Return every hint from all prefetch-path header instances.

    Order follows header occurrence, then left to right within each value.
    That order is the fetch order, so it decides what gets warmed first
    when the budget runs out.
    """
    hints: list[str] = []
    for value in headers.get_list(PREFETCH_PATH_HEADER):
        hints.extend(split_hint_value(value))
    return hints
