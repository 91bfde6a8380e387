# app/schemas/share.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.constants.timeframes import DEFAULT_TIMEFRAME, Timeframe
from app.models.enums import ChartType
from app.schemas.base import CamelModel
from app.schemas.net_worth import ChartData

class ShareCreate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=200)
    timeframe: Timeframe = DEFAULT_TIMEFRAME
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=365)

class ChartSettings(CamelModel):
    default_timeframe: Timeframe = DEFAULT_TIMEFRAME

class ShareCreateResponse(CamelModel):
    success: bool = True
    share_token: str
    share_url: str
    title: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_existing: bool
    message: str

class SharedChartPublic(CamelModel):
    success: bool = True
    title: Optional[str] = None
    chart_type: ChartType
    chart_data: ChartData
    settings: ChartSettings
    view_count: int
    created_at: datetime

class SharedChartSummary(CamelModel):
    share_token: str
    share_url: str
    title: Optional[str] = None
    chart_type: ChartType
    is_active: bool
    is_expired: bool
    view_count: int
    expires_at: Optional[datetime] = None
    created_at: datetime

class SharedChartList(CamelModel):
    success: bool = True
    shared_charts: List[SharedChartSummary]
