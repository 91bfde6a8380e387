from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from typing import List
from uuid import UUID

from app.constants.timeframes import DEFAULT_TIMEFRAME, Timeframe
from app.core.security import get_current_user
from app.database import get_session
from app.models.net_worth_snapshot import NetWorthSnapshot
from app.schemas.net_worth import NetWorthSeries, NetWorthSnapshotRead
from app.utils.net_worth import compute_series, record_snapshot

router = APIRouter(prefix="/net-worth", tags=["net_worth"])

@router.get("", response_model=NetWorthSeries)
@router.get("/", response_model=NetWorthSeries)
def get_net_worth_series(
    timeframe: Timeframe = Query(DEFAULT_TIMEFRAME),
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    return compute_series(session, user_id, timeframe)

@router.post("/snapshots", response_model=NetWorthSnapshotRead, status_code=status.HTTP_201_CREATED)
def create_snapshot(
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    return record_snapshot(session, user_id)

@router.get("/snapshots", response_model=List[NetWorthSnapshotRead])
def list_snapshots(
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    return session.exec(
        select(NetWorthSnapshot)
        .where(NetWorthSnapshot.user_id == user_id)
        .order_by(NetWorthSnapshot.snapshot_date)
    ).all()
