from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session
from uuid import UUID

from app.core.security import get_current_user
from app.database import get_session
from app.models.enums import ChartType
from app.schemas.share import ShareCreate, ShareCreateResponse, SharedChartList, SharedChartPublic
from app.utils.share_helpers import create_or_update_share, get_shared_chart, list_shares, revoke_share

router = APIRouter(prefix="/shares", tags=["shares"])

# Create a shareable chart, or refresh the one the user already has
@router.post("/charts", response_model=ShareCreateResponse, status_code=status.HTTP_201_CREATED)
def create_share(
    share_data: ShareCreate,
    response: Response,
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    result = create_or_update_share(
        session,
        user_id,
        chart_type=ChartType.net_worth,
        title=share_data.title,
        default_timeframe=share_data.timeframe,
        expires_in_days=share_data.expires_in_days,
    )
    if result.is_existing:
        response.status_code = status.HTTP_200_OK
    return result

@router.get("/user/charts", response_model=SharedChartList)
def list_my_shares(
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    return SharedChartList(shared_charts=list_shares(session, user_id))

# Public route: the token is the only credential
@router.get("/{token}", response_model=SharedChartPublic)
def read_shared_chart(token: str, session: Session = Depends(get_session)):
    return get_shared_chart(session, token)

@router.delete("/{token}")
def delete_share(
    token: str,
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    revoke_share(session, user_id, token)
    return {"success": True, "message": "Shared chart deleted successfully"}
