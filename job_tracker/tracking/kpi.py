"""KPI aggregation over the full application collection."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .models import STATUS_ORDER, ApplicationRecord, KPISummary


def percentage(count: int, total: int) -> int:
    """Share of total as a whole percentage, rounding halves up."""
    if not total:
        return 0
    return int((Decimal(count * 100) / Decimal(total)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def summarize(records: Sequence[ApplicationRecord]) -> KPISummary:
    """Compute totals and per-status counts.

    Always computed over the whole collection, independent of any active
    filter. Every status appears in the result, with zero when unused.
    """
    total = len(records)
    counts = {status: 0 for status in STATUS_ORDER}
    for record in records:
        counts[record.status] += 1

    percentages = {status: percentage(counts[status], total) for status in STATUS_ORDER}
    return KPISummary(total=total, counts=counts, percentages=percentages)
