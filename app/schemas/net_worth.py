# app/schemas/net_worth.py

from datetime import date as date_type, datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator

from app.constants.timeframes import Timeframe
from app.schemas.base import CamelModel

class SourceKind(str, Enum):
    historical_snapshot = "historical_snapshot"
    live_fallback = "live_fallback"

class NetWorthPoint(CamelModel):
    period: str
    date: date_type
    assets: int
    liabilities: int  # positive magnitude
    net_worth: int
    # live balances standing in for a day with no recorded history
    estimated: bool = False

    @model_validator(mode="after")
    def check_net_worth(self):
        if self.net_worth != self.assets - self.liabilities:
            raise ValueError("net_worth must equal assets - liabilities")
        return self

class NetWorthSeries(CamelModel):
    timeframe: Timeframe
    source: SourceKind
    has_any_account: bool
    points: List[NetWorthPoint]

    @property
    def has_data(self) -> bool:
        return self.has_any_account or self.source == SourceKind.historical_snapshot

# Frozen multi-timeframe payload stored on a share
ChartData = Dict[Timeframe, List[NetWorthPoint]]

class NetWorthSnapshotRead(BaseModel):
    id: UUID
    snapshot_date: date_type
    total_assets: float
    total_liabilities: float
    net_worth: float
    account_breakdown: Optional[dict] = None
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
