# app/models/shared_chart.py

from sqlalchemy import JSON, Column, DateTime, Index, text
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from typing import Optional
from datetime import datetime, timezone

from app.models.enums import ChartType

class SharedChart(SQLModel, table=True):
    __tablename__ = "shared_chart"
    # at most one active share per user and chart type
    __table_args__ = (
        Index(
            "uq_shared_chart_active_user_chart_type",
            "user_id",
            "chart_type",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    share_token: str = Field(unique=True, index=True)
    chart_type: ChartType = Field(default=ChartType.net_worth)
    title: Optional[str] = None
    # timeframe key -> list of serialized net worth points
    chart_data: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    settings: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    is_active: bool = Field(default=True, index=True)
    expires_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    view_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
