# app/schemas/account.py

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Dict, List, Optional
from app.models.enums import AccountType

class AccountRead(BaseModel):
    id: UUID
    name: str
    institution_name: Optional[str] = None
    account_type: AccountType
    account_subtype: Optional[str] = None
    mask: Optional[str] = None
    current_balance: Optional[float] = None
    available_balance: Optional[float] = None
    currency: str
    is_active: bool
    last_synced: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    account_type: AccountType
    current_balance: Decimal = Decimal("0")
    institution_name: str = "Manual Account"
    currency: str = Field(default="USD", min_length=3, max_length=3)

class AccountUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    current_balance: Optional[Decimal] = None
    is_active: Optional[bool] = None

class RecentChanges(BaseModel):
    total_change: float
    income: float
    expenses: float

class AccountsSummary(BaseModel):
    total_accounts: int
    total_balance: float
    balance_by_type: Dict[AccountType, float]
    recent_changes: RecentChanges
    accounts: List[AccountRead]

class BalanceHistoryPeriod(str, Enum):
    day = "day"
    month = "month"
    year = "year"

class BalanceHistoryEntry(BaseModel):
    period: date
    balance_change: float
    transaction_count: int
