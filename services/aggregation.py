"""
Provider Aggregation
====================

Single-pass grouping of fund records by provider, plus the portfolio-level
totals shown on the overview and provider pages.

Aggregates are recomputed on every call and never shared between calls.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Any
import math
import logging

import pandas as pd

from services.records import Record

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
UNKNOWN_GRADE = "Unknown"

PROVIDER_SORT_KEYS = ("name", "invested", "repaid", "multiple")


@dataclass
class MonthlyBucket:
    """Invested/recovered totals for cases originated in one calendar month"""
    invested: float = 0.0
    recovered: float = 0.0

    @property
    def rate(self) -> float:
        return self.recovered / self.invested if self.invested > 0 else 0.0


@dataclass
class ProviderAggregate:
    """
    Running totals for one provider.

    Attributes:
        provider: Provider identifier
        case_count: Number of cases attributed to the provider
        total_sent: Sum of amounts sent
        total_repaid: Sum of amounts repaid
        pending_cases: Cases with status "pending"
        closed_cases: Non-pending cases marked repaid
        total_multiple: Running sum of per-case multiples (cases with sent > 0)
        recovery_days: Per-case origination-to-repayment durations in days
        monthly: Origination month ("YYYY-MM") -> MonthlyBucket
    """
    provider: str
    case_count: int = 0
    total_sent: float = 0.0
    total_repaid: float = 0.0
    pending_cases: int = 0
    closed_cases: int = 0
    total_multiple: float = 0.0
    recovery_days: List[int] = field(default_factory=list)
    monthly: Dict[str, MonthlyBucket] = field(default_factory=dict)

    @property
    def avg_multiple(self) -> float:
        return self.total_multiple / self.case_count if self.case_count > 0 else 0.0

    @property
    def recovery_rate(self) -> float:
        """Repaid over sent, as a percentage"""
        return self.total_repaid / self.total_sent * 100 if self.total_sent > 0 else 0.0

    def add(self, record: Record) -> None:
        self.total_sent += record.amount_sent
        self.total_repaid += record.amount_repaid
        self.case_count += 1

        if record.is_pending:
            self.pending_cases += 1
        elif record.is_repaid:
            self.closed_cases += 1

        if record.amount_sent > 0:
            self.total_multiple += record.amount_repaid / record.amount_sent

        days = recovery_days(record)
        if days is not None:
            self.recovery_days.append(days)

        if record.origination_date is not None:
            month = record.origination_date.strftime("%Y-%m")
            bucket = self.monthly.setdefault(month, MonthlyBucket())
            bucket.invested += record.amount_sent
            bucket.recovered += record.amount_repaid

    def to_dict(self) -> Dict[str, Any]:
        """Flat row for DataFrame construction"""
        return {
            "provider": self.provider,
            "case_count": self.case_count,
            "total_sent": self.total_sent,
            "total_repaid": self.total_repaid,
            "pending_cases": self.pending_cases,
            "closed_cases": self.closed_cases,
            "avg_multiple": self.avg_multiple,
            "recovery_rate": self.recovery_rate,
        }


@dataclass
class PortfolioSummary:
    """Headline figures for the portfolio overview"""
    total_invested: float
    current_value: float
    avg_multiple: float
    count: int
    provider_count: int
    grade_distribution: Dict[str, int]


def recovery_days(record: Record) -> Optional[int]:
    """Whole days from origination to repayment, None unless both dates exist"""
    if record.origination_date is None or record.repayment_date is None:
        return None
    delta = record.repayment_date - record.origination_date
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


def aggregate(records: Sequence[Record]) -> Dict[str, ProviderAggregate]:
    """
    Group records by provider in one pass.

    Records without a provider are skipped. Insertion order follows first
    encounter.
    """
    aggregates: Dict[str, ProviderAggregate] = {}
    skipped = 0

    for record in records:
        if not record.provider:
            skipped += 1
            continue
        bucket = aggregates.get(record.provider)
        if bucket is None:
            bucket = ProviderAggregate(provider=record.provider)
            aggregates[record.provider] = bucket
        bucket.add(record)

    if skipped:
        logger.debug(f"Skipped {skipped} records without a provider")

    return aggregates


def portfolio_totals(aggregates: Dict[str, ProviderAggregate]) -> Dict[str, float]:
    """Invested/repaid/cases summed over every provider bucket"""
    totals = {"invested": 0.0, "repaid": 0.0, "cases": 0}
    for bucket in aggregates.values():
        totals["invested"] += bucket.total_sent
        totals["repaid"] += bucket.total_repaid
        totals["cases"] += bucket.case_count
    return totals


def summarize_portfolio(records: Sequence[Record]) -> PortfolioSummary:
    """
    Overview metrics across all records, including those without a provider.

    Reads the fund-side columns (``amount_invested``, ``current_balance``,
    ``fund_provider``). A record without a net multiple counts as 0 in the
    average.
    """
    total_invested = 0.0
    current_value = 0.0
    multiple_sum = 0.0
    grades: Dict[str, int] = {}
    providers = set()

    for record in records:
        total_invested += record.amount_invested
        current_value += record.current_balance
        multiple_sum += record.multiple or 0.0
        grade = record.letter_grade or UNKNOWN_GRADE
        grades[grade] = grades.get(grade, 0) + 1
        if record.fund_provider:
            providers.add(record.fund_provider)

    count = len(records)
    return PortfolioSummary(
        total_invested=total_invested,
        current_value=current_value,
        avg_multiple=multiple_sum / count if count > 0 else 0.0,
        count=count,
        provider_count=len(providers),
        grade_distribution=grades,
    )


def provider_performance(records: Sequence[Record], limit: int = 10) -> pd.DataFrame:
    """
    Top fund providers by amount invested.

    Groups on ``fund_provider`` and sums the fund-side columns; records
    without a fund provider are left out.

    Returns:
        pd.DataFrame: provider, investments, invested, current, multiple
    """
    columns = ["provider", "investments", "invested", "current", "multiple"]
    funds = [r for r in records if r.fund_provider]
    if not funds:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame({
        "provider": [r.fund_provider for r in funds],
        "invested": [r.amount_invested for r in funds],
        "current": [r.current_balance for r in funds],
    })
    grouped = df.groupby("provider", sort=False).agg(
        investments=("invested", "size"),
        invested=("invested", "sum"),
        current=("current", "sum"),
    ).reset_index()
    grouped["multiple"] = [
        current / invested if invested > 0 else 0.0
        for invested, current in zip(grouped["invested"], grouped["current"])
    ]
    grouped = grouped[columns]
    return grouped.sort_values("invested", ascending=False, kind="stable").head(limit).reset_index(drop=True)


def providers_frame(
    aggregates: Dict[str, ProviderAggregate],
    search: str = "",
    sort_by: str = "invested"
) -> pd.DataFrame:
    """
    Provider table filtered by a case-insensitive name search and sorted.

    Args:
        aggregates: Output of aggregate()
        search: Substring to match against provider names
        sort_by: "name" (ascending) or "invested" | "repaid" | "multiple" (descending)

    Returns:
        pd.DataFrame: One row per provider
    """
    if sort_by not in PROVIDER_SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {sort_by}")

    columns = list(ProviderAggregate(provider="").to_dict().keys())
    df = pd.DataFrame([bucket.to_dict() for bucket in aggregates.values()], columns=columns)
    if df.empty:
        return df

    if search:
        df = df[df["provider"].str.lower().str.contains(search.lower(), regex=False)]

    if sort_by == "name":
        return df.sort_values(
            "provider", key=lambda names: names.str.lower(), kind="stable"
        ).reset_index(drop=True)

    sort_column, ascending = {
        "invested": ("total_sent", False),
        "repaid": ("total_repaid", False),
        "multiple": ("avg_multiple", False),
    }[sort_by]

    return df.sort_values(sort_column, ascending=ascending, kind="stable").reset_index(drop=True)
