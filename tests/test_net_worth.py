from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, create_engine, select
from sqlmodel.pool import StaticPool

from app.constants.timeframes import TIMEFRAME_BUCKETS, Timeframe
from app.core.exceptions import AggregationFailed
from app.models.enums import AccountType
from app.models.net_worth_snapshot import NetWorthSnapshot
from app.schemas.net_worth import SourceKind
from app.utils.net_worth import (
    bucket_dates,
    classify_balances,
    compute_series,
    compute_series_many,
    record_snapshot,
)

TODAY = date(2025, 6, 15)


class TestBuckets:
    @pytest.mark.parametrize("timeframe", list(Timeframe))
    def test_bucket_count_and_order(self, timeframe):
        dates = bucket_dates(timeframe, TODAY)
        assert len(dates) == TIMEFRAME_BUCKETS[timeframe].count
        assert dates == sorted(dates)
        assert len(set(dates)) == len(dates)
        assert dates[-1] == TODAY

    def test_daily_buckets(self):
        assert bucket_dates(Timeframe.week, TODAY)[0] == date(2025, 6, 9)
        assert bucket_dates(Timeframe.month, TODAY)[0] == date(2025, 5, 17)

    def test_weekly_buckets(self):
        dates = bucket_dates(Timeframe.quarter, TODAY)
        assert dates[0] == TODAY - timedelta(weeks=12)
        assert dates[-2] == TODAY - timedelta(weeks=1)

    def test_monthly_buckets_end_on_month_end(self):
        dates = bucket_dates(Timeframe.year, TODAY)
        assert dates[0] == date(2024, 7, 31)
        assert dates[7] == date(2025, 2, 28)
        assert dates[-2] == date(2025, 5, 31)

    def test_two_year_buckets_cross_years(self):
        dates = bucket_dates(Timeframe.two_years, TODAY)
        assert dates[0] == date(2023, 7, 31)


class TestClassification:
    def test_assets_and_liabilities(self, session, make_user, add_account):
        user = make_user()
        accounts = [
            add_account(user.id, AccountType.checking, "1000.00"),
            add_account(user.id, AccountType.depository, "250.00"),
            add_account(user.id, AccountType.credit, "-400.00"),
            add_account(user.id, AccountType.loan, "600.00"),
            add_account(user.id, AccountType.other, "99999.00"),
            add_account(user.id, AccountType.savings, None),
        ]
        assets, liabilities = classify_balances(accounts)
        assert assets == Decimal("1250.00")
        assert liabilities == Decimal("1000.00")


class TestComputeSeries:
    def test_flat_fallback_scenario(self, session, funded_user):
        series = compute_series(session, funded_user.id, Timeframe.month, TODAY)

        assert series.source == SourceKind.live_fallback
        assert series.has_any_account is True
        assert len(series.points) == 30
        for point in series.points:
            assert point.assets == 15000
            assert point.liabilities == 3000
            assert point.net_worth == 12000

    @pytest.mark.parametrize("timeframe", list(Timeframe))
    def test_zero_accounts_gives_zero_points(self, session, make_user, timeframe):
        user = make_user()
        series = compute_series(session, user.id, timeframe, TODAY)

        assert series.has_any_account is False
        assert len(series.points) == TIMEFRAME_BUCKETS[timeframe].count
        assert all(p.assets == p.liabilities == p.net_worth == 0 for p in series.points)

    def test_net_worth_is_exact_after_rounding(self, session, make_user, add_account):
        user = make_user()
        add_account(user.id, AccountType.checking, "100.50")
        add_account(user.id, AccountType.savings, "0.49")
        add_account(user.id, AccountType.credit, "0.50")

        for timeframe in Timeframe:
            series = compute_series(session, user.id, timeframe, TODAY)
            for point in series.points:
                assert point.net_worth == point.assets - point.liabilities
        last = series.points[-1]
        assert (last.assets, last.liabilities, last.net_worth) == (101, 1, 100)

    def test_inactive_accounts_are_ignored(self, session, make_user, add_account):
        user = make_user()
        add_account(user.id, AccountType.checking, "500.00")
        add_account(user.id, AccountType.savings, "9000.00", is_active=False)

        series = compute_series(session, user.id, Timeframe.week, TODAY)
        assert series.points[-1].assets == 500

    def test_only_inactive_accounts_means_no_account(self, session, make_user, add_account):
        user = make_user()
        add_account(user.id, AccountType.checking, "500.00", is_active=False)

        series = compute_series(session, user.id, Timeframe.week, TODAY)
        assert series.has_any_account is False

    def test_other_users_accounts_do_not_leak(self, session, make_user, add_account, funded_user):
        user = make_user()
        add_account(user.id, AccountType.checking, "10.00")

        series = compute_series(session, user.id, Timeframe.week, TODAY)
        assert series.points[-1].assets == 10

    def test_historical_snapshots_are_preferred(self, session, funded_user, add_snapshot):
        add_snapshot(funded_user.id, date(2025, 6, 1), "10000", "2000")
        add_snapshot(funded_user.id, date(2025, 6, 10), "12000", "2500")

        series = compute_series(session, funded_user.id, Timeframe.week, TODAY)

        assert series.source == SourceKind.historical_snapshot
        assert [p.net_worth for p in series.points] == [8000, 9500, 9500, 9500, 9500, 9500, 12000]
        assert not any(p.estimated for p in series.points)
        assert series.points[0].date == date(2025, 6, 9)
        assert series.points[0].period == "Jun 9"

    def test_buckets_before_first_snapshot_use_live_balances(self, session, funded_user, add_snapshot):
        add_snapshot(funded_user.id, date(2025, 6, 12), "11000", "1000")

        series = compute_series(session, funded_user.id, Timeframe.week, TODAY)

        assert series.source == SourceKind.historical_snapshot
        assert [p.net_worth for p in series.points] == [12000, 12000, 12000, 10000, 10000, 10000, 12000]
        assert [p.estimated for p in series.points] == [True, True, True, False, False, False, False]

    def test_live_fallback_points_are_estimated_except_today(self, session, funded_user):
        series = compute_series(session, funded_user.id, Timeframe.month, TODAY)

        assert all(p.estimated for p in series.points[:-1])
        assert series.points[-1].estimated is False

    def test_future_snapshots_are_ignored(self, session, funded_user, add_snapshot):
        add_snapshot(funded_user.id, TODAY + timedelta(days=3), "1", "0")

        series = compute_series(session, funded_user.id, Timeframe.week, TODAY)
        assert series.source == SourceKind.live_fallback

    def test_last_point_is_always_live(self, session, funded_user, add_snapshot):
        add_snapshot(funded_user.id, TODAY, "1", "0")

        series = compute_series(session, funded_user.id, Timeframe.year, TODAY)
        assert series.points[-1].net_worth == 12000
        assert series.points[-1].period == "Jun"

    def test_compute_many_shares_one_read(self, session, funded_user):
        result = compute_series_many(session, funded_user.id, [Timeframe.week, Timeframe.year], TODAY)
        assert set(result) == {Timeframe.week, Timeframe.year}
        assert len(result[Timeframe.year].points) == 12

    def test_two_year_labels_include_year(self, session, funded_user):
        series = compute_series(session, funded_user.id, Timeframe.two_years, TODAY)
        assert series.points[0].period == "Jul 2023"

    def test_storage_failure_raises_aggregation_failed(self, funded_user):
        # no tables created on this engine
        broken = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        with Session(broken) as session:
            with pytest.raises(AggregationFailed):
                compute_series(session, funded_user.id, Timeframe.week, TODAY)


class TestRecordSnapshot:
    def test_records_live_totals(self, session, funded_user):
        snapshot = record_snapshot(session, funded_user.id, TODAY)

        assert snapshot.total_assets == Decimal("15000.00")
        assert snapshot.total_liabilities == Decimal("3000.00")
        assert snapshot.net_worth == Decimal("12000.00")
        assert snapshot.account_breakdown["account_count"] == 4
        assert snapshot.account_breakdown["by_type"]["credit"] == 3000.0

    def test_same_day_overwrites(self, session, funded_user, add_account):
        first = record_snapshot(session, funded_user.id, TODAY)
        add_account(funded_user.id, AccountType.savings, "500.00")
        second = record_snapshot(session, funded_user.id, TODAY)

        rows = session.exec(
            select(NetWorthSnapshot).where(NetWorthSnapshot.user_id == funded_user.id)
        ).all()
        assert len(rows) == 1
        assert second.id == first.id
        assert rows[0].net_worth == Decimal("12500.00")

    def test_recorded_snapshot_feeds_the_series(self, session, funded_user):
        record_snapshot(session, funded_user.id, TODAY - timedelta(days=3))

        series = compute_series(session, funded_user.id, Timeframe.week, TODAY)
        assert series.source == SourceKind.historical_snapshot

    def test_read_failure_raises_aggregation_failed(self, funded_user):
        broken = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        with Session(broken) as session:
            with pytest.raises(AggregationFailed):
                record_snapshot(session, funded_user.id, TODAY)

    def test_failed_commit_rolls_back(self, session, funded_user, add_account, monkeypatch):
        record_snapshot(session, funded_user.id, TODAY)
        add_account(funded_user.id, AccountType.savings, "500.00")

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "commit", failing_commit)
        with pytest.raises(AggregationFailed):
            record_snapshot(session, funded_user.id, TODAY)
        monkeypatch.undo()

        [row] = session.exec(
            select(NetWorthSnapshot).where(NetWorthSnapshot.user_id == funded_user.id)
        ).all()
        assert row.net_worth == Decimal("12000.00")
