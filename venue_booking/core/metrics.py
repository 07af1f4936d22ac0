"""
Prometheus metrics for entity mutations and asset store calls
"""

import time
import logging
from contextlib import asynccontextmanager

from prometheus_client import Counter, Histogram

from venue_booking.core.exceptions import VenueBookingException

logger = logging.getLogger(__name__)

MUTATIONS_TOTAL = Counter(
    "venue_booking_mutations_total",
    "Entity mutations by outcome",
    ["entity", "operation", "outcome"]
)
MUTATION_DURATION = Histogram(
    "venue_booking_mutation_duration_seconds",
    "Entity mutation duration",
    ["entity", "operation"]
)
ASSET_STORE_FAILURES = Counter(
    "venue_booking_asset_store_failures_total",
    "Asset store calls that failed or timed out",
    ["operation", "best_effort"]
)


class MetricsCollector:
    """Records mutation outcomes; the outcome label is the error code or 'committed'"""

    @asynccontextmanager
    async def track_mutation(self, entity: str, operation: str):
        start_time = time.perf_counter()
        outcome = "committed"
        try:
            yield
        except VenueBookingException as e:
            outcome = e.code.lower()
            raise
        except Exception:
            outcome = "error"
            raise
        finally:
            MUTATIONS_TOTAL.labels(entity=entity, operation=operation, outcome=outcome).inc()
            MUTATION_DURATION.labels(entity=entity, operation=operation).observe(
                time.perf_counter() - start_time
            )

    def record_asset_failure(self, operation: str, best_effort: bool) -> None:
        ASSET_STORE_FAILURES.labels(operation=operation, best_effort=str(best_effort).lower()).inc()


metrics_collector = MetricsCollector()
