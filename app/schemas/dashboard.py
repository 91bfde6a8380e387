# app/schemas/dashboard.py

from datetime import date as date_type, datetime
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID

from app.constants.timeframes import Timeframe
from app.models.enums import AccountType
from app.schemas.net_worth import NetWorthPoint, SourceKind

class DashboardSummary(BaseModel):
    total_balance: float
    balance_change: float
    income: float
    income_change: float
    expenses: float
    expenses_change: float
    net_growth: float

class DashboardAccount(BaseModel):
    id: UUID
    name: str
    type: AccountType
    balance: float
    change: float

class DashboardTransaction(BaseModel):
    id: UUID
    description: str
    category: str
    amount: float
    date: date_type
    type: str  # income | expense
    merchant: Optional[str] = None
    account: str

class CategorySpending(BaseModel):
    name: str
    value: float
    color: str

class DashboardResponse(BaseModel):
    summary: DashboardSummary
    accounts: List[DashboardAccount]
    transactions: List[DashboardTransaction]
    spending_by_category: List[CategorySpending]
    net_worth_data: List[NetWorthPoint]
    has_any_account: bool
    net_worth_source: SourceKind
    timeframe: Timeframe
    last_updated: datetime
