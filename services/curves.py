"""
Collection Curves

Recovery rate by months since origination, per provider.

Only final repaid totals are stored, so each case's repaid amount is spread
linearly across its elapsed months: by month m of an n-month case, m/n of the
repaid amount counts as recovered. Cases without a repayment date are still
ongoing and use ``as_of`` (default: now) as their end date.

Note: ``cumulative_recovery`` is the running sum of monthly recovery *rates*,
not a rate recomputed from cumulative totals. Values can exceed 100.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Iterable, Any
import math
import logging

import pandas as pd

from services.records import Record

logger = logging.getLogger(__name__)

MAX_CURVE_MONTHS = 36
SECONDS_PER_MONTH = 30 * 24 * 60 * 60

VIEW_CUMULATIVE = "cumulative"
VIEW_MONTHLY = "monthly"


@dataclass
class CurvePoint:
    provider: str
    month: int
    recovery_rate: float
    cumulative_recovery: float
    cases: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _MonthTotals:
    total_invested: float = 0.0
    total_recovered: float = 0.0
    case_count: int = 0


def months_since_origination(record: Record, as_of: datetime) -> int:
    """Whole 30-day months from origination to repayment (or ``as_of``)"""
    end = record.repayment_date or as_of
    elapsed = end - record.origination_date
    return math.floor(elapsed.total_seconds() / SECONDS_PER_MONTH)


def build_curves(
    records: Sequence[Record],
    as_of: Optional[datetime] = None
) -> List[CurvePoint]:
    """
    Bucket records into per-provider monthly recovery curves.

    Args:
        records: Fund records
        as_of: End date for ongoing cases (default: now)

    Returns:
        List[CurvePoint]: Grouped by provider in first-encounter order, months
        ascending within each provider
    """
    as_of = as_of or datetime.now()
    curves: Dict[str, Dict[int, _MonthTotals]] = {}

    for record in records:
        if not record.provider or record.origination_date is None:
            continue

        months_since = months_since_origination(record, as_of)
        provider_curve = curves.setdefault(record.provider, {})

        for month in range(min(months_since, MAX_CURVE_MONTHS) + 1):
            totals = provider_curve.setdefault(month, _MonthTotals())
            totals.total_invested += record.amount_sent
            if record.amount_repaid and months_since > 0:
                progress = min(month / months_since, 1)
                totals.total_recovered += record.amount_repaid * progress
            totals.case_count += 1

    points: List[CurvePoint] = []
    for provider, provider_curve in curves.items():
        cumulative = 0.0
        for month in sorted(provider_curve):
            totals = provider_curve[month]
            recovery_rate = (
                totals.total_recovered / totals.total_invested * 100
                if totals.total_invested > 0 else 0.0
            )
            cumulative += recovery_rate
            points.append(CurvePoint(
                provider=provider,
                month=month,
                recovery_rate=recovery_rate,
                cumulative_recovery=cumulative,
                cases=totals.case_count,
            ))

    logger.debug(f"Built {len(points)} curve points for {len(curves)} providers")
    return points


def curve_providers(points: Iterable[CurvePoint]) -> List[str]:
    """Sorted unique provider names"""
    return sorted({point.provider for point in points})


def default_providers(points: Iterable[CurvePoint], n: int = 5) -> List[str]:
    return curve_providers(points)[:n]


def filter_curves(
    points: Iterable[CurvePoint],
    providers: Optional[Sequence[str]] = None,
    max_month: Optional[int] = None
) -> List[CurvePoint]:
    """
    Keep points for the selected providers up to ``max_month``.

    An empty/None provider selection keeps every provider; None max_month
    keeps every month.
    """
    selected = set(providers) if providers else None
    return [
        point for point in points
        if (selected is None or point.provider in selected)
        and (max_month is None or point.month <= max_month)
    ]


def _view_value(point: CurvePoint, view: str) -> float:
    if view == VIEW_CUMULATIVE:
        return point.cumulative_recovery
    return point.recovery_rate


def curves_frame(points: Sequence[CurvePoint], view: str = VIEW_CUMULATIVE) -> pd.DataFrame:
    """
    Long-format frame for line charts.

    Returns:
        pd.DataFrame: month, provider, value
    """
    rows = [
        {"month": point.month, "provider": point.provider, "value": _view_value(point, view)}
        for point in points
    ]
    df = pd.DataFrame(rows, columns=["month", "provider", "value"])
    return df.sort_values(["month", "provider"], kind="stable").reset_index(drop=True)


def average_curve(points: Sequence[CurvePoint], view: str = VIEW_CUMULATIVE) -> pd.DataFrame:
    """
    Mean, min and max across providers for each month.

    Returns:
        pd.DataFrame: month, average, min, max (months ascending)
    """
    df = curves_frame(points, view)
    if df.empty:
        return pd.DataFrame(columns=["month", "average", "min", "max"])
    summary = df.groupby("month")["value"].agg(["mean", "min", "max"]).reset_index()
    summary.columns = ["month", "average", "min", "max"]
    return summary
