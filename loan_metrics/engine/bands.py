"""Traffic-light bands for DSCR and LTV figures."""

from decimal import Decimal

from loan_metrics.models.results import MetricStatus

DSCR_GOOD = Decimal("1.20")
DSCR_FAIR = Decimal("1.00")
LTV_GOOD = Decimal("70")
LTV_FAIR = Decimal("80")


def dscr_status(dscr_ratio: Decimal) -> MetricStatus:
    """>= 1.20 good, >= 1.00 fair, otherwise below minimum."""
    if dscr_ratio >= DSCR_GOOD:
        return MetricStatus.GOOD
    if dscr_ratio >= DSCR_FAIR:
        return MetricStatus.FAIR
    return MetricStatus.RISK


def ltv_status(ltv_ratio: Decimal) -> MetricStatus:
    """<= 70% conservative, <= 80% acceptable, otherwise elevated."""
    if ltv_ratio <= LTV_GOOD:
        return MetricStatus.GOOD
    if ltv_ratio <= LTV_FAIR:
        return MetricStatus.FAIR
    return MetricStatus.RISK
