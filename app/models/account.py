# app/models/account.py

from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from typing import Optional
from decimal import Decimal
from datetime import datetime, timezone

from app.models.enums import AccountType

class Account(SQLModel, table=True):
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    # id assigned by the account-aggregation provider
    external_account_id: Optional[str] = Field(default=None, unique=True, index=True)
    institution_name: Optional[str] = None
    name: str
    account_type: AccountType = Field(default=AccountType.other, index=True)
    account_subtype: Optional[str] = None
    mask: Optional[str] = None  # last 4 digits
    current_balance: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    available_balance: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    currency: str = Field(default="USD", max_length=3)
    # disconnected accounts are deactivated, never deleted
    is_active: bool = Field(default=True, index=True)
    last_synced: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
