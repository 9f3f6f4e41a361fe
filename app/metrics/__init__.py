"""Application wide metrics."""
from .base import CounterMetric, DistributionMetric, track_duration
from .exporters import PrometheusExporter
from .registry import MetricsRegistry

VERIFICATIONS_TOTAL = "ticket_verifications_total"
VERIFICATION_DURATION = "ticket_verification_duration_seconds"

metrics_registry = MetricsRegistry()


def register_default_metrics(registry: MetricsRegistry | None = None) -> MetricsRegistry:
    """Ensure the verification metrics exist in ``registry``."""
    target = registry or metrics_registry
    target.counter(
        VERIFICATIONS_TOTAL,
        description="Ticket verification attempts by outcome.",
        label_names=("outcome",),
    )
    target.distribution(
        VERIFICATION_DURATION,
        description="Duration of ticket verification attempts in seconds.",
    )
    return target


register_default_metrics()

__all__ = [
    "CounterMetric",
    "DistributionMetric",
    "MetricsRegistry",
    "PrometheusExporter",
    "VERIFICATIONS_TOTAL",
    "VERIFICATION_DURATION",
    "metrics_registry",
    "register_default_metrics",
    "track_duration",
]
