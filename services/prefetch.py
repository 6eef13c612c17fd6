"""Post-response prefetch: hint collection and bounded cache warming."""

import httpx

from core.budget import PrefetchBudget
from core.config import DEFAULT_MAX_PREFETCH
from core.exceptions import UpstreamError
from core.hints import extract_hints
from core.protocols import RequestLogger
from core.request_types import RequestTarget
from core.resolver import PathResolver
from services.upstream import UpstreamClient


class PrefetchService:
    """Turn origin hints into sequential, budgeted follow-up fetches.

    Nothing fetched here is returned to the client. Failures are logged and
    absorbed; hints carried by follow-up responses are never read, so warming
    stays one level deep.
    """

    def __init__(
        self,
        upstream: UpstreamClient,
        logger: RequestLogger,
        resolver: PathResolver | None = None,
        max_fetches: int = DEFAULT_MAX_PREFETCH,
    ) -> None:
        self._upstream = upstream
        self._logger = logger
        self._resolver = resolver or PathResolver(logger)
        self._max_fetches = max_fetches

    def new_budget(self) -> PrefetchBudget:
        return PrefetchBudget(limit=self._max_fetches)

    def collect(
        self,
        target: RequestTarget,
        headers: httpx.Headers,
        *,
        debug: bool = False,
    ) -> list[str]:
        """Extract hints from the primary response and resolve them in order."""
        hints = extract_hints(headers)
        if hints and debug:
            self._logger.log_debug("Prefetching", hints=", ".join(hints))
        return self._resolver.resolve_all(target, hints)

    async def run(
        self,
        urls: list[str],
        headers: httpx.Headers,
        budget: PrefetchBudget,
        *,
        debug: bool = False,
    ) -> int:
        """Fetch ``urls`` one at a time until done or the budget is spent.

        Returns the number of attempted fetches.
        """
        for url in urls:
            if budget.exhausted:
                if debug:
                    self._logger.log_debug(
                        "Backend limit reached, terminating gracefully",
                        fetched=budget.fetched,
                        skipped=len(urls) - budget.fetched,
                    )
                break

            if debug:
                self._logger.log_debug("Fetching", url=url)

            status: int | None = None
            try:
                status = await self._upstream.warm(url, headers)
            except UpstreamError as e:
                self._logger.log_error(self._upstream.name, e.status_code or 502, str(e))

            # Errors and non-200 answers count against the budget too
            budget.record()
            self._logger.log_prefetch(url, status)
            if debug:
                self._logger.log_debug("Got response", status=status, url=url)

        return budget.fetched
