"""Per-invocation cap on follow-up fetches."""

from dataclasses import dataclass

from core.config import DEFAULT_MAX_PREFETCH


@dataclass
class PrefetchBudget:
    """Counter gating follow-up fetches for a single relayed request."""

    limit: int = DEFAULT_MAX_PREFETCH
    fetched: int = 0

    @property
    def exhausted(self) -> bool:
        return self.fetched >= self.limit

    def record(self) -> None:
        """Count one attempt, whatever its outcome."""
        self.fetched += 1
