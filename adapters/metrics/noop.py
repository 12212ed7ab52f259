from __future__ import annotations

from adapters.metrics.base import Metrics, QueryOutcome


class NoOpMetrics(Metrics):
    def observe_query_duration_ms(self, *, validator: str, dt_ms: float) -> None:
        return

    def inc_query(self, *, validator: str, outcome: QueryOutcome) -> None:
        return

    def inc_validation(self, *, validator: str, valid: bool) -> None:
        return

    def inc_query_error(self, *, validator: str, error_type: str) -> None:
        return
