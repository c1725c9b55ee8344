"""
Provider Scoring & Investment Grades
====================================

Turns a ProviderAggregate into risk, performance, velocity, consistency and
efficiency scores plus an A-F investment grade.

Score definitions (all 0-100 unless noted):
- Risk: half unrecovered share, half recovery time (capped at one year)
- Performance: recovery rate (40), case volume saturating at 10 cases (20),
  inverse risk (40)
- Recovery velocity: percent recovered per 30-day month (uncapped)
- Consistency: 100 minus 100x the std dev of monthly recovery rates
- Efficiency: velocity x10 + consistency x0.3 + performance x0.6, capped at 100

Every function here is pure. Empty inputs resolve to documented defaults and
never raise.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Any

import numpy as np
import pandas as pd

from services.aggregation import ProviderAggregate, aggregate
from services.records import Record

# Assume slow recovery when no case has both dates
DEFAULT_RECOVERY_DAYS = 365
DAYS_PER_MONTH = 30
VOLUME_SATURATION_CASES = 10

# Lower bound of each band, evaluated top-down
GRADE_BANDS = [
    (90.0, "A"),
    (80.0, "B"),
    (70.0, "C"),
    (60.0, "D"),
    (50.0, "E"),
]
FAILING_GRADE = "F"
ALL_GRADES = ["A", "B", "C", "D", "E", "F"]

RECOMMENDATION_BANDS = [
    (80.0, "STRONG BUY"),
    (60.0, "HOLD"),
]
DEFAULT_RECOMMENDATION = "REDUCE"


@dataclass
class ScoreResult:
    """Scores for one provider"""
    provider: str
    risk_score: float
    performance_score: float
    recovery_velocity: float
    consistency: float
    efficiency: float
    grade: str
    volume: float
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def grade_for(performance_score: float) -> str:
    """Six-band letter grade; a band includes its lower bound"""
    for lower_bound, grade in GRADE_BANDS:
        if performance_score >= lower_bound:
            return grade
    return FAILING_GRADE


def recommendation_for(performance_score: float) -> str:
    for lower_bound, label in RECOMMENDATION_BANDS:
        if performance_score >= lower_bound:
            return label
    return DEFAULT_RECOMMENDATION


def consistency_score(monthly_rates: Sequence[float]) -> float:
    """
    100 - 100 * population std dev of monthly recovery rates, floored at 0.

    With zero or one monthly bucket there is no observed variance, so the
    result is 100.
    """
    if len(monthly_rates) == 0:
        return 100.0
    spread = float(np.std(np.asarray(monthly_rates, dtype=float)))
    return max(0.0, 100.0 - spread * 100.0)


def score(
    aggregate: ProviderAggregate,
    recovery_days: Optional[Sequence[float]] = None
) -> ScoreResult:
    """
    Score one provider.

    Args:
        aggregate: Finished ProviderAggregate
        recovery_days: Per-case recovery durations in days; defaults to the
            durations collected on the aggregate

    Returns:
        ScoreResult
    """
    if recovery_days is None:
        recovery_days = aggregate.recovery_days

    recovery_rate = (
        aggregate.total_repaid / aggregate.total_sent if aggregate.total_sent > 0 else 0.0
    )
    avg_recovery_days = (
        sum(recovery_days) / len(recovery_days) if len(recovery_days) > 0 else DEFAULT_RECOVERY_DAYS
    )

    risk_score = min(100.0, max(0.0,
        (1 - recovery_rate) * 50
        + min(avg_recovery_days / 365, 1) * 50
    ))

    performance_score = min(100.0,
        recovery_rate * 40
        + min(aggregate.case_count / VOLUME_SATURATION_CASES, 1) * 20
        + (1 - risk_score / 100) * 40
    )

    recovery_velocity = (
        (recovery_rate * 100) / (avg_recovery_days / DAYS_PER_MONTH)
        if avg_recovery_days > 0 else 0.0
    )

    consistency = consistency_score([bucket.rate for bucket in aggregate.monthly.values()])

    efficiency = min(100.0,
        recovery_velocity * 10
        + consistency * 0.3
        + performance_score * 0.6
    )

    return ScoreResult(
        provider=aggregate.provider,
        risk_score=risk_score,
        performance_score=performance_score,
        recovery_velocity=recovery_velocity,
        consistency=consistency,
        efficiency=efficiency,
        grade=grade_for(performance_score),
        volume=aggregate.total_sent,
        recommendation=recommendation_for(performance_score),
    )


def score_providers(records: Sequence[Record]) -> List[ScoreResult]:
    """Aggregate records and score every provider"""
    return [score(bucket) for bucket in aggregate(records).values()]


def filter_by_timeframe(
    records: Sequence[Record],
    days: int,
    as_of: Optional[datetime] = None
) -> List[Record]:
    """Records originated within the last ``days`` days (undated records are dropped)"""
    as_of = as_of or datetime.now()
    cutoff = as_of - timedelta(days=days)
    return [
        record for record in records
        if record.origination_date is not None and cutoff <= record.origination_date <= as_of
    ]


def top_performers(results: Sequence[ScoreResult], n: int = 10) -> List[ScoreResult]:
    return sorted(results, key=lambda result: result.performance_score, reverse=True)[:n]


def grade_distribution(results: Sequence[ScoreResult]) -> pd.DataFrame:
    """
    Count and share of providers per grade, sorted by grade.

    Returns:
        pd.DataFrame: grade, count, percentage
    """
    counts: Dict[str, int] = {}
    for result in results:
        counts[result.grade] = counts.get(result.grade, 0) + 1

    total = len(results)
    rows = [
        {"grade": grade, "count": count, "percentage": count / total * 100}
        for grade, count in sorted(counts.items())
    ]
    return pd.DataFrame(rows, columns=["grade", "count", "percentage"])


def radar_frame(results: Sequence[ScoreResult], n: int = 5) -> pd.DataFrame:
    """
    Long-format comparison of the top ``n`` providers on a common 0-100 scale.

    Risk is inverted so higher is better on every axis, and velocity is
    scaled x10 and capped at 100.
    """
    rows = []
    for result in top_performers(results, n):
        axes = {
            "Risk (Inverted)": 100 - result.risk_score,
            "Performance": result.performance_score,
            "Velocity": min(result.recovery_velocity * 10, 100),
            "Consistency": result.consistency,
            "Efficiency": result.efficiency,
        }
        for metric, value in axes.items():
            rows.append({"provider": result.provider[:15], "metric": metric, "value": value})
    return pd.DataFrame(rows, columns=["provider", "metric", "value"])


def scores_frame(results: Sequence[ScoreResult]) -> pd.DataFrame:
    columns = list(ScoreResult.__dataclass_fields__.keys())
    return pd.DataFrame([result.to_dict() for result in results], columns=columns)
