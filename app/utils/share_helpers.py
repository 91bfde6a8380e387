import logging
import secrets
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.constants.timeframes import DEFAULT_TIMEFRAME, SHARE_TIMEFRAMES, Timeframe
from app.core.config import FRONTEND_URL
from app.core.exceptions import (
    InvalidTimeframe,
    NoDataToShare,
    ShareExpired,
    ShareForbidden,
    ShareNotFound,
    ShareSaveFailed,
)
from app.models.enums import ChartType
from app.models.shared_chart import SharedChart
from app.schemas.net_worth import NetWorthPoint
from app.schemas.share import (
    ChartSettings,
    ShareCreateResponse,
    SharedChartPublic,
    SharedChartSummary,
)
from app.utils.net_worth import compute_series_many

logger = logging.getLogger(__name__)

DEFAULT_SHARE_TITLE = "My Net Worth Growth"
SHARE_TOKEN_BYTES = 12
MAX_TOKEN_ATTEMPTS = 5
MAX_UPSERT_ATTEMPTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(chart: SharedChart, now: Optional[datetime] = None) -> bool:
    if chart.expires_at is None:
        return False
    return _as_utc(chart.expires_at) <= (now or _utcnow())


def generate_share_token() -> str:
    return secrets.token_urlsafe(SHARE_TOKEN_BYTES)


def build_share_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/share/{token}"


def mint_share_token(session: Session) -> str:
    """Generate a token no existing share uses, regenerating on collision."""
    for _ in range(MAX_TOKEN_ATTEMPTS):
        token = generate_share_token()
        taken = session.exec(
            select(SharedChart.id).where(SharedChart.share_token == token)
        ).first()
        if taken is None:
            return token
        logger.warning("Share token collision, generating a new one")
    raise ShareSaveFailed("Could not generate a unique share token")


def build_chart_payload(session: Session, user_id: UUID, today: Optional[date] = None) -> dict:
    series_by_timeframe = compute_series_many(session, user_id, SHARE_TIMEFRAMES, today)
    if not any(series.has_data for series in series_by_timeframe.values()):
        raise NoDataToShare()
    return {
        timeframe.value: [point.model_dump(mode="json", by_alias=True) for point in series.points]
        for timeframe, series in series_by_timeframe.items()
    }


def create_or_update_share(
    session: Session,
    user_id: UUID,
    chart_type: ChartType = ChartType.net_worth,
    title: Optional[str] = None,
    default_timeframe: Timeframe = DEFAULT_TIMEFRAME,
    expires_in_days: Optional[int] = None,
    today: Optional[date] = None,
) -> ShareCreateResponse:
    """
    Freeze the user's current net worth series into their public share.

    Each user has at most one active share per chart type: the first call
    creates it with a fresh token, later calls overwrite its payload, title,
    settings and expiration in place and keep the token.
    """
    if default_timeframe not in SHARE_TIMEFRAMES:
        raise InvalidTimeframe(
            f"Default timeframe must be one of {', '.join(t.value for t in SHARE_TIMEFRAMES)}"
        )

    chart_data = build_chart_payload(session, user_id, today)
    now = _utcnow()
    values = {
        "title": title or DEFAULT_SHARE_TITLE,
        "chart_data": chart_data,
        "settings": ChartSettings(default_timeframe=default_timeframe).model_dump(mode="json", by_alias=True),
        "expires_at": now + timedelta(days=expires_in_days) if expires_in_days else None,
        "updated_at": now,
    }

    try:
        for _ in range(MAX_UPSERT_ATTEMPTS):
            # Update the active share in place when there is one
            result = session.execute(
                update(SharedChart)
                .where(
                    SharedChart.user_id == user_id,
                    SharedChart.chart_type == chart_type,
                    SharedChart.is_active == True,  # noqa: E712
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                token = session.exec(
                    select(SharedChart.share_token).where(
                        SharedChart.user_id == user_id,
                        SharedChart.chart_type == chart_type,
                        SharedChart.is_active == True,  # noqa: E712
                    )
                ).one()
                session.commit()
                logger.info("Updated shared chart for user %s", user_id)
                return ShareCreateResponse(
                    share_token=token,
                    share_url=build_share_url(token),
                    title=values["title"],
                    expires_at=values["expires_at"],
                    is_existing=True,
                    message="Share link updated with latest data",
                )

            token = mint_share_token(session)
            chart = SharedChart(
                user_id=user_id,
                share_token=token,
                chart_type=chart_type,
                created_at=now,
                **values,
            )
            try:
                with session.begin_nested():
                    session.add(chart)
            except IntegrityError:
                # a concurrent request created the share, or took this token
                logger.warning("Share insert for user %s conflicted, retrying", user_id)
                continue

            session.commit()
            logger.info("Created shared chart for user %s", user_id)
            return ShareCreateResponse(
                share_token=token,
                share_url=build_share_url(token),
                title=values["title"],
                expires_at=values["expires_at"],
                is_existing=False,
                message="Shareable chart created successfully",
            )
    except (SQLAlchemyError, ShareSaveFailed):
        session.rollback()
        logger.exception("Failed to save shared chart for user %s", user_id)
        raise

    session.rollback()
    logger.error("Shared chart for user %s kept conflicting, giving up", user_id)
    raise ShareSaveFailed()


def get_shared_chart(session: Session, token: str, now: Optional[datetime] = None) -> SharedChartPublic:
    chart = session.exec(select(SharedChart).where(SharedChart.share_token == token)).first()
    if not chart or not chart.is_active:
        raise ShareNotFound()
    if is_expired(chart, now):
        raise ShareExpired()

    response = SharedChartPublic(
        title=chart.title,
        chart_type=chart.chart_type,
        chart_data={
            Timeframe(key): [NetWorthPoint.model_validate(point) for point in points]
            for key, points in chart.chart_data.items()
        },
        settings=ChartSettings.model_validate(chart.settings or {}),
        view_count=chart.view_count,
        created_at=chart.created_at,
    )

    # Single atomic increment; a failed count never fails the read
    try:
        session.execute(
            update(SharedChart)
            .where(SharedChart.id == chart.id)
            .values(view_count=SharedChart.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        session.commit()
        response.view_count += 1
    except SQLAlchemyError:
        session.rollback()
        logger.warning("Could not increment view count for shared chart %s", chart.id, exc_info=True)

    return response


def list_shares(session: Session, user_id: UUID, now: Optional[datetime] = None) -> List[SharedChartSummary]:
    charts = session.exec(
        select(SharedChart)
        .where(SharedChart.user_id == user_id)
        .order_by(SharedChart.created_at.desc())
    ).all()
    return [
        SharedChartSummary(
            share_token=chart.share_token,
            share_url=build_share_url(chart.share_token),
            title=chart.title,
            chart_type=chart.chart_type,
            is_active=chart.is_active,
            is_expired=is_expired(chart, now),
            view_count=chart.view_count,
            expires_at=chart.expires_at,
            created_at=chart.created_at,
        )
        for chart in charts
    ]


def revoke_share(session: Session, user_id: UUID, token: str) -> None:
    chart = session.exec(select(SharedChart).where(SharedChart.share_token == token)).first()
    if not chart:
        raise ShareNotFound()
    if chart.user_id != user_id:
        raise ShareForbidden()

    result = session.execute(
        update(SharedChart)
        .where(SharedChart.id == chart.id, SharedChart.is_active == True)  # noqa: E712
        .values(is_active=False, updated_at=_utcnow())
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        session.rollback()
        raise ShareNotFound("Shared chart is already revoked")
    session.commit()
    logger.info("Revoked shared chart %s for user %s", chart.id, user_id)
