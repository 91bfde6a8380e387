from uuid import UUID, uuid4
from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
from datetime import date as date_type, datetime, timezone

class Transaction(SQLModel, table=True):
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    account_id: UUID = Field(foreign_key="account.id", index=True, ondelete="CASCADE")
    external_transaction_id: Optional[str] = Field(default=None, unique=True, index=True)
    name: str
    # positive = money in, negative = money out
    amount: Decimal = Field(max_digits=15, decimal_places=2)
    currency: str = Field(default="USD", max_length=3)
    date: date_type = Field(index=True)
    category_primary: Optional[str] = Field(default=None, index=True)
    merchant_name: Optional[str] = None
    pending: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
