"""
Net worth aggregation.

Rolls a user's active account balances (and, when present, their daily
net worth snapshots) up into time-bucketed assets / liabilities / net worth
series for the dashboard and for public shares.
"""

import bisect
import calendar
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.constants.timeframes import TIMEFRAME_BUCKETS, Granularity, Timeframe
from app.core.exceptions import AggregationFailed
from app.models.account import Account
from app.models.enums import AccountType
from app.models.net_worth_snapshot import NetWorthSnapshot
from app.schemas.net_worth import NetWorthPoint, NetWorthSeries, SourceKind

logger = logging.getLogger(__name__)

ASSET_ACCOUNT_TYPES = {
    AccountType.checking,
    AccountType.savings,
    AccountType.investment,
    AccountType.depository,
}
LIABILITY_ACCOUNT_TYPES = {AccountType.credit, AccountType.loan}

ZERO = Decimal("0")
WHOLE_UNIT = Decimal("1")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _whole(amount: Decimal) -> int:
    return int(amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def classify_balances(accounts: Iterable[Account]) -> Tuple[Decimal, Decimal]:
    """Return ``(assets, liabilities)`` with liabilities as a positive magnitude."""
    assets = ZERO
    liabilities = ZERO
    for account in accounts:
        balance = Decimal(account.current_balance or 0)
        if account.account_type in ASSET_ACCOUNT_TYPES:
            assets += balance
        elif account.account_type in LIABILITY_ACCOUNT_TYPES:
            liabilities += abs(balance)
    return assets, liabilities


def make_point(
    bucket: date,
    label: str,
    assets: Decimal,
    liabilities: Decimal,
    estimated: bool = False,
) -> NetWorthPoint:
    assets_whole = _whole(assets)
    liabilities_whole = _whole(liabilities)
    return NetWorthPoint(
        period=label,
        date=bucket,
        assets=assets_whole,
        liabilities=liabilities_whole,
        net_worth=assets_whole - liabilities_whole,
        estimated=estimated,
    )


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def bucket_dates(timeframe: Timeframe, today: date) -> List[date]:
    """Bucket boundaries, oldest first. The last one is always ``today``."""
    buckets = TIMEFRAME_BUCKETS[timeframe]
    dates = []
    for back in range(buckets.count - 1, -1, -1):
        if back == 0:
            dates.append(today)
        elif buckets.granularity == Granularity.day:
            dates.append(today - timedelta(days=back))
        elif buckets.granularity == Granularity.week:
            dates.append(today - timedelta(weeks=back))
        else:
            month_index = today.year * 12 + (today.month - 1) - back
            dates.append(_month_end(month_index // 12, month_index % 12 + 1))
    return dates


def bucket_label(bucket: date, timeframe: Timeframe) -> str:
    buckets = TIMEFRAME_BUCKETS[timeframe]
    if buckets.granularity != Granularity.month:
        return f"{bucket:%b} {bucket.day}"
    if buckets.count > 12:
        return f"{bucket:%b %Y}"
    return f"{bucket:%b}"


class BalanceHistory:
    """One consistent read of a user's live balances and stored snapshots."""

    def __init__(self, accounts: Sequence[Account], snapshots: Sequence[NetWorthSnapshot]):
        self.has_any_account = len(accounts) > 0
        self.live_assets, self.live_liabilities = classify_balances(accounts)
        self.snapshots = sorted(snapshots, key=lambda s: s.snapshot_date)
        self._snapshot_dates = [s.snapshot_date for s in self.snapshots]

    @property
    def source(self) -> SourceKind:
        if self.snapshots:
            return SourceKind.historical_snapshot
        return SourceKind.live_fallback

    def totals_at(self, bucket: date) -> Tuple[Decimal, Decimal, bool]:
        """Totals as of ``bucket`` and whether they are live balances standing in for history."""
        index = bisect.bisect_right(self._snapshot_dates, bucket) - 1
        if index < 0:
            # nothing recorded on or before this day
            return self.live_assets, self.live_liabilities, True
        snapshot = self.snapshots[index]
        return Decimal(snapshot.total_assets), Decimal(snapshot.total_liabilities), False

    def series(self, timeframe: Timeframe, today: date) -> NetWorthSeries:
        boundaries = bucket_dates(timeframe, today)
        points = []
        for bucket in boundaries[:-1]:
            assets, liabilities, estimated = self.totals_at(bucket)
            points.append(make_point(bucket, bucket_label(bucket, timeframe), assets, liabilities, estimated))
        current = boundaries[-1]
        points.append(
            make_point(current, bucket_label(current, timeframe), self.live_assets, self.live_liabilities)
        )
        return NetWorthSeries(
            timeframe=timeframe,
            source=self.source,
            has_any_account=self.has_any_account,
            points=points,
        )


def load_balance_history(session: Session, user_id: UUID, today: date) -> BalanceHistory:
    try:
        accounts = session.exec(
            select(Account).where(Account.user_id == user_id, Account.is_active == True)  # noqa: E712
        ).all()
        snapshots = session.exec(
            select(NetWorthSnapshot)
            .where(NetWorthSnapshot.user_id == user_id, NetWorthSnapshot.snapshot_date <= today)
            .order_by(NetWorthSnapshot.snapshot_date)
        ).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to read balances for user %s", user_id)
        raise AggregationFailed() from exc
    return BalanceHistory(accounts, snapshots)


def compute_series_many(
    session: Session,
    user_id: UUID,
    timeframes: Iterable[Timeframe],
    today: Optional[date] = None,
) -> Dict[Timeframe, NetWorthSeries]:
    today = today or utc_today()
    history = load_balance_history(session, user_id, today)
    return {timeframe: history.series(timeframe, today) for timeframe in timeframes}


def compute_series(
    session: Session,
    user_id: UUID,
    timeframe: Timeframe,
    today: Optional[date] = None,
) -> NetWorthSeries:
    return compute_series_many(session, user_id, [timeframe], today)[timeframe]


def _breakdown(accounts: Iterable[Account]) -> dict:
    by_type: Dict[str, Decimal] = defaultdict(Decimal)
    count = 0
    for account in accounts:
        by_type[account.account_type.value] += Decimal(account.current_balance or 0)
        count += 1
    return {
        "account_count": count,
        "by_type": {key: float(value) for key, value in sorted(by_type.items())},
    }


def record_snapshot(
    session: Session,
    user_id: UUID,
    snapshot_date: Optional[date] = None,
) -> NetWorthSnapshot:
    """
    Store today's live totals for the user. A second call for the same day
    overwrites that day's row instead of adding another one.
    """
    snapshot_date = snapshot_date or utc_today()
    try:
        accounts = session.exec(
            select(Account).where(Account.user_id == user_id, Account.is_active == True)  # noqa: E712
        ).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to read balances for user %s", user_id)
        raise AggregationFailed() from exc
    assets, liabilities = classify_balances(accounts)
    values = {
        "total_assets": assets,
        "total_liabilities": liabilities,
        "net_worth": assets - liabilities,
        "account_breakdown": _breakdown(accounts),
    }

    def _existing() -> Optional[NetWorthSnapshot]:
        return session.exec(
            select(NetWorthSnapshot).where(
                NetWorthSnapshot.user_id == user_id,
                NetWorthSnapshot.snapshot_date == snapshot_date,
            )
        ).first()

    def _overwrite(existing: NetWorthSnapshot) -> None:
        for key, value in values.items():
            setattr(existing, key, value)
        existing.updated_at = datetime.now(timezone.utc)
        session.add(existing)

    try:
        snapshot = _existing()
        if snapshot is None:
            snapshot = NetWorthSnapshot(user_id=user_id, snapshot_date=snapshot_date, **values)
            try:
                with session.begin_nested():
                    session.add(snapshot)
            except IntegrityError:
                # another writer stored the same day first
                snapshot = _existing()
                _overwrite(snapshot)
        else:
            _overwrite(snapshot)

        session.commit()
        session.refresh(snapshot)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to save net worth snapshot for user %s", user_id)
        raise AggregationFailed("Could not save net worth snapshot") from exc
    logger.info("Recorded net worth snapshot for user %s on %s", user_id, snapshot_date)
    return snapshot
