# app/models/net_worth_snapshot.py

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from typing import Optional
from decimal import Decimal
from datetime import date, datetime, timezone

class NetWorthSnapshot(SQLModel, table=True):
    __tablename__ = "net_worth_snapshot"
    # one snapshot per user per day
    __table_args__ = (
        UniqueConstraint("user_id", "snapshot_date", name="uq_net_worth_snapshot_user_date"),
    )

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    snapshot_date: date = Field(index=True)
    total_assets: Decimal = Field(max_digits=15, decimal_places=2)
    total_liabilities: Decimal = Field(max_digits=15, decimal_places=2)
    net_worth: Decimal = Field(max_digits=15, decimal_places=2)
    account_breakdown: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
