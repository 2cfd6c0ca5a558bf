"""Counter hooks for Readloop's failure paths."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class MetricsClient:
    """Basic counter interface."""

    def increment(self, metric: str, value: int = 1) -> None:
        raise NotImplementedError


@dataclass
class InMemoryMetricsClient(MetricsClient):
    """Counter sink kept for the life of the process."""

    counters: defaultdict[str, int] = field(default_factory=lambda: defaultdict(int))

    def increment(self, metric: str, value: int = 1) -> None:
        self.counters[metric] += value
        logger.debug("metrics_increment %s +%d", metric, value)


_metrics_singleton: InMemoryMetricsClient | None = None


def get_metrics_client() -> MetricsClient:
    """Return the shared metrics client."""
    global _metrics_singleton
    if _metrics_singleton is None:
        _metrics_singleton = InMemoryMetricsClient()
    return _metrics_singleton
