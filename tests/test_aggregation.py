"""
Unit tests for provider aggregation and portfolio totals.
"""

from datetime import datetime

import pytest

from services.records import Record, STATUS_PENDING, STATUS_CLOSED, STATUS_OTHER
from services.aggregation import (
    aggregate,
    recovery_days,
    portfolio_totals,
    summarize_portfolio,
    provider_performance,
    providers_frame,
)


@pytest.fixture
def example_records():
    return [
        Record(provider="X", amount_sent=1000, amount_repaid=500, status=STATUS_CLOSED),
        Record(provider="X", amount_sent=500, amount_repaid=500, status=STATUS_PENDING),
    ]


@pytest.fixture
def mixed_records():
    return [
        Record(provider="Alpha", amount_sent=1000, amount_repaid=1200, status=STATUS_CLOSED,
               origination_date=datetime(2024, 1, 5), repayment_date=datetime(2024, 3, 5)),
        Record(provider="beta", amount_sent=3000, amount_repaid=1500, status=STATUS_PENDING,
               origination_date=datetime(2024, 2, 10)),
        Record(provider=None, amount_sent=9999, amount_repaid=1),
        Record(provider="Alpha", amount_sent=0, amount_repaid=50, status=STATUS_OTHER),
        Record(provider="Gamma", amount_sent=2000, amount_repaid=2600, status=STATUS_OTHER, repaid=True),
    ]


class TestAggregate:
    """Test single-pass grouping"""

    def test_example_from_two_records(self, example_records):
        """Test the closed + pending example"""
        result = aggregate(example_records)
        bucket = result["X"]
        assert bucket.total_sent == 1500
        assert bucket.total_repaid == 1000
        assert bucket.case_count == 2
        assert bucket.pending_cases == 1
        assert bucket.closed_cases == 1
        assert bucket.total_repaid / bucket.total_sent == pytest.approx(0.667, abs=1e-3)
        assert bucket.recovery_rate == pytest.approx(66.667, abs=1e-3)
        assert bucket.avg_multiple == pytest.approx(0.75)

    def test_empty_input(self):
        """Test empty input yields an empty mapping"""
        assert aggregate([]) == {}

    def test_records_without_provider_skipped(self, mixed_records):
        """Test unattributed records create no bucket"""
        result = aggregate(mixed_records)
        assert set(result.keys()) == {"Alpha", "beta", "Gamma"}
        assert None not in result

    def test_totals_match_attributed_records(self, mixed_records):
        """Test sum of bucket totals equals sum over records with a provider"""
        result = aggregate(mixed_records)
        expected_sent = sum(r.amount_sent for r in mixed_records if r.provider)
        expected_repaid = sum(r.amount_repaid for r in mixed_records if r.provider)
        assert sum(b.total_sent for b in result.values()) == expected_sent
        assert sum(b.total_repaid for b in result.values()) == expected_repaid
        assert sum(b.case_count for b in result.values()) == 4

    def test_first_encounter_order(self, mixed_records):
        assert list(aggregate(mixed_records).keys()) == ["Alpha", "beta", "Gamma"]

    def test_multiple_ignores_zero_sent(self, mixed_records):
        """Test cases with nothing sent add no multiple but still count as cases"""
        alpha = aggregate(mixed_records)["Alpha"]
        assert alpha.total_multiple == pytest.approx(1.2)
        assert alpha.avg_multiple == pytest.approx(0.6)

    def test_repaid_flag_counts_closed(self, mixed_records):
        gamma = aggregate(mixed_records)["Gamma"]
        assert gamma.closed_cases == 1
        assert gamma.pending_cases == 0

    def test_pending_takes_precedence_over_repaid(self):
        """Test a pending case is never also counted closed"""
        result = aggregate([Record(provider="X", status=STATUS_PENDING, repaid=True)])
        assert result["X"].pending_cases == 1
        assert result["X"].closed_cases == 0

    def test_recovery_days_and_monthly_buckets(self, mixed_records):
        result = aggregate(mixed_records)
        assert result["Alpha"].recovery_days == [60]
        assert list(result["Alpha"].monthly.keys()) == ["2024-01"]
        assert result["beta"].recovery_days == []
        assert result["beta"].monthly["2024-02"].rate == pytest.approx(0.5)
        assert result["Gamma"].monthly == {}

    def test_idempotent(self, mixed_records):
        """Test repeated runs give identical results and leave input untouched"""
        snapshot = list(mixed_records)
        first = {k: v.to_dict() for k, v in aggregate(mixed_records).items()}
        second = {k: v.to_dict() for k, v in aggregate(mixed_records).items()}
        assert first == second
        assert mixed_records == snapshot

    def test_zero_sent_provider_rates(self):
        bucket = aggregate([Record(provider="Z", amount_repaid=10)])["Z"]
        assert bucket.recovery_rate == 0.0
        assert bucket.avg_multiple == 0.0


class TestRecoveryDays:
    """Test per-case recovery duration"""

    def test_whole_days(self):
        record = Record(provider="X", origination_date=datetime(2024, 1, 1),
                        repayment_date=datetime(2024, 1, 31, 23, 0))
        assert recovery_days(record) == 30

    def test_missing_dates(self):
        assert recovery_days(Record(provider="X", origination_date=datetime(2024, 1, 1))) is None
        assert recovery_days(Record(provider="X", repayment_date=datetime(2024, 1, 1))) is None


class TestPortfolioTotals:
    """Test portfolio level summaries"""

    def test_portfolio_totals(self, mixed_records):
        totals = portfolio_totals(aggregate(mixed_records))
        assert totals == {"invested": 6000, "repaid": 5350, "cases": 4}

    def test_summarize_portfolio(self):
        """Test a missing net multiple counts as 0 in the average"""
        records = [
            Record(provider=None, fund_provider="A", amount_invested=1000, current_balance=1200,
                   multiple=1.3, letter_grade="A"),
            Record(provider=None, amount_invested=500, current_balance=250),
        ]
        summary = summarize_portfolio(records)
        assert summary.total_invested == 1500
        assert summary.current_value == 1450
        assert summary.avg_multiple == pytest.approx(0.65)
        assert summary.count == 2
        assert summary.provider_count == 1
        assert summary.grade_distribution == {"A": 1, "Unknown": 1}

    def test_overview_reads_fund_columns(self):
        """Test rows carrying both column sets are summarized from the fund side"""
        row = {
            "total_invested": 1000,
            "total_sent": 800,
            "total_balance_today": 1500,
            "total_repaid": 200,
            "provider_name": "Fund A",
            "provider_name_per_tbr": "Servicer X",
            "net_multiple": None,
        }
        records = [Record.from_row(row)]

        summary = summarize_portfolio(records)
        assert summary.total_invested == 1000
        assert summary.current_value == 1500
        assert summary.avg_multiple == 0.0
        assert summary.provider_count == 1

        df = provider_performance(records)
        assert df["provider"].tolist() == ["Fund A"]
        assert df.loc[0, "invested"] == 1000
        assert df.loc[0, "current"] == 1500
        assert df.loc[0, "multiple"] == pytest.approx(1.5)

    def test_summarize_empty(self):
        summary = summarize_portfolio([])
        assert summary.count == 0
        assert summary.avg_multiple == 0.0
        assert summary.grade_distribution == {}

    def test_provider_performance_sorted_and_limited(self):
        records = [
            Record(provider=None, fund_provider="Alpha", amount_invested=1000, current_balance=1200),
            Record(provider=None, fund_provider="beta", amount_invested=3000, current_balance=1500),
            Record(provider=None, fund_provider=None, amount_invested=9999, current_balance=1),
            Record(provider=None, fund_provider="Alpha", amount_invested=1500, current_balance=100),
            Record(provider=None, fund_provider="Gamma", amount_invested=2000, current_balance=2600),
        ]
        df = provider_performance(records, limit=2)
        assert df["provider"].tolist() == ["beta", "Alpha"]
        assert df.loc[0, "multiple"] == pytest.approx(0.5)
        assert df.loc[1, "investments"] == 2
        assert df.loc[1, "invested"] == 2500
        assert df.loc[1, "current"] == 1300

    def test_provider_performance_ignores_servicer_columns(self, mixed_records):
        """Test servicer-only records have no fund provider to group on"""
        assert provider_performance(mixed_records).empty

    def test_provider_performance_empty(self):
        assert provider_performance([]).empty


class TestProvidersFrame:
    """Test provider table search and sorting"""

    def test_sort_by_invested(self, mixed_records):
        df = providers_frame(aggregate(mixed_records), sort_by="invested")
        assert df["provider"].tolist() == ["beta", "Gamma", "Alpha"]

    def test_sort_by_name_case_insensitive(self, mixed_records):
        df = providers_frame(aggregate(mixed_records), sort_by="name")
        assert df["provider"].tolist() == ["Alpha", "beta", "Gamma"]

    def test_sort_by_multiple(self, mixed_records):
        df = providers_frame(aggregate(mixed_records), sort_by="multiple")
        assert df["provider"].tolist() == ["Gamma", "Alpha", "beta"]

    def test_search_is_case_insensitive(self, mixed_records):
        df = providers_frame(aggregate(mixed_records), search="ALP")
        assert df["provider"].tolist() == ["Alpha"]

    def test_unknown_sort_key(self, mixed_records):
        with pytest.raises(ValueError):
            providers_frame(aggregate(mixed_records), sort_by="volume")

    def test_empty_aggregates(self):
        df = providers_frame({})
        assert df.empty
        assert "total_sent" in df.columns
