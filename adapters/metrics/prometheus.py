from __future__ import annotations

from prometheus_client import Counter, Histogram
from dbvalidator.prom import REGISTRY

from adapters.metrics.base import Metrics, QueryOutcome

# -----------------------------------------------------------------------------
# Query metrics
# -----------------------------------------------------------------------------
query_duration_ms = Histogram(
    "dbvalidator_query_duration_ms",
    "Duration (ms) of record lookup queries",
    ["validator"],
    buckets=(1, 2, 5, 10, 20, 50, 100, 200, 500, 1000, 2000, 5000),
    registry=REGISTRY,
)

queries_total = Counter(
    "dbvalidator_queries_total",
    "Count of record lookup queries labeled by validator and outcome",
    ["validator", "outcome"],  # found | not_found | error
    registry=REGISTRY,
)

query_errors_total = Counter(
    "dbvalidator_query_errors_total",
    "Count of failed lookup queries labeled by validator and exception type",
    ["validator", "error_type"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Validation metrics
# -----------------------------------------------------------------------------
validations_total = Counter(
    "dbvalidator_validations_total",
    "Count of validator calls labeled by validator and result",
    ["validator", "valid"],  # "true" | "false"
    registry=REGISTRY,
)


class PrometheusMetrics(Metrics):
    def observe_query_duration_ms(self, *, validator: str, dt_ms: float) -> None:
        query_duration_ms.labels(validator=validator).observe(float(dt_ms))

    def inc_query(self, *, validator: str, outcome: QueryOutcome) -> None:
        queries_total.labels(validator=validator, outcome=outcome).inc()

    def inc_validation(self, *, validator: str, valid: bool) -> None:
        validations_total.labels(
            validator=validator, valid=("true" if valid else "false")
        ).inc()

    def inc_query_error(self, *, validator: str, error_type: str) -> None:
        query_errors_total.labels(validator=validator, error_type=str(error_type)).inc()


# -----------------------------------------------------------------------------
# Label priming to keep /metrics stable
# -----------------------------------------------------------------------------
for validator in ("RecordExists", "NoRecordExists"):
    for valid in ("true", "false"):
        validations_total.labels(validator=validator, valid=valid).inc(0)
    for outcome in ("found", "not_found", "error"):
        queries_total.labels(validator=validator, outcome=outcome).inc(0)
