"""OEE percentage computation: availability, performance, quality and oee."""

from typing import NamedTuple


class OeeMetrics(NamedTuple):
    availability: float
    performance: float
    quality: float
    oee: float


def compute_metrics(
    target: float,
    actual: float,
    failure_total: float,
    downtime_total: float,
    working_minutes: float,
) -> OeeMetrics:
    """All four values are on a 0-100 scale; a zero denominator gives 0.

    Inputs are passed through unclamped.
    """
    performance = actual * 100 / target if target > 0 else 0
    quality = (actual - failure_total) * 100 / actual if actual > 0 else 0
    availability = (working_minutes - downtime_total) * 100 / working_minutes if working_minutes > 0 else 0
    oee = performance * availability * quality / 10000
    return OeeMetrics(
        availability=availability,
        performance=performance,
        quality=quality,
        oee=oee,
    )


def round_metrics(metrics: OeeMetrics, ndigits: int = 2) -> OeeMetrics:
    return OeeMetrics(*(round(float(value), ndigits) for value in metrics))
