from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case
from sqlmodel import Session, select, func
from uuid import UUID
from typing import List
import logging

from app.core.exceptions import AccountNotFound
from app.core.security import get_current_user
from app.database import get_session
from app.models.account import Account
from app.models.transaction import Transaction
from app.schemas.account import (
    AccountCreate,
    AccountRead,
    AccountsSummary,
    AccountUpdate,
    BalanceHistoryEntry,
    BalanceHistoryPeriod,
    RecentChanges,
)
from app.utils.net_worth import utc_today

router = APIRouter(prefix="/accounts", tags=["accounts"])

logger = logging.getLogger(__name__)

RECENT_CHANGES_DAYS = 30
BALANCE_HISTORY_PERIODS = 12


def _get_owned_account(session: Session, account_id: UUID, user_id: UUID) -> Account:
    account = session.exec(
        select(Account).where(Account.id == account_id, Account.user_id == user_id)
    ).first()
    if not account:
        raise AccountNotFound()
    return account


def _period_start(day: date, period: BalanceHistoryPeriod) -> date:
    if period == BalanceHistoryPeriod.day:
        return day
    if period == BalanceHistoryPeriod.year:
        return day.replace(month=1, day=1)
    return day.replace(day=1)


@router.get("", response_model=List[AccountRead])
@router.get("/", response_model=List[AccountRead])
def list_accounts(
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    return session.exec(
        select(Account)
        .where(Account.user_id == user_id, Account.is_active == True)  # noqa: E712
        .order_by(Account.created_at.desc())
    ).all()


# Manually tracked account, for balances that are not synced from a bank
@router.post("", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: AccountCreate,
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    account = Account(
        user_id=user_id,
        name=account_data.name,
        account_type=account_data.account_type,
        institution_name=account_data.institution_name,
        current_balance=account_data.current_balance,
        available_balance=account_data.current_balance,
        currency=account_data.currency.upper(),
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    logger.info("Manual account %s created for user %s", account.id, user_id)
    return account


@router.get("/summary", response_model=AccountsSummary)
def get_accounts_summary(
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    accounts = session.exec(
        select(Account)
        .where(Account.user_id == user_id, Account.is_active == True)  # noqa: E712
        .order_by(Account.created_at.desc())
    ).all()

    by_type = defaultdict(Decimal)
    for account in accounts:
        by_type[account.account_type] += Decimal(account.current_balance or 0)

    since = utc_today() - timedelta(days=RECENT_CHANGES_DAYS)
    total_change, income, expenses = session.exec(
        select(
            func.sum(Transaction.amount),
            func.sum(case((Transaction.amount > 0, Transaction.amount), else_=0)),
            func.sum(case((Transaction.amount < 0, -Transaction.amount), else_=0)),
        ).where(Transaction.user_id == user_id, Transaction.date >= since)
    ).one()

    return AccountsSummary(
        total_accounts=len(accounts),
        total_balance=float(sum(by_type.values(), Decimal(0))),
        balance_by_type={account_type: float(total) for account_type, total in by_type.items()},
        recent_changes=RecentChanges(
            total_change=float(total_change or 0),
            income=float(income or 0),
            expenses=float(expenses or 0),
        ),
        accounts=[AccountRead.model_validate(account) for account in accounts],
    )


@router.get("/{account_id}", response_model=AccountRead)
def get_account(
    account_id: UUID,
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    return _get_owned_account(session, account_id, user_id)


@router.put("/{account_id}", response_model=AccountRead)
def update_account(
    account_id: UUID,
    account_data: AccountUpdate,
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    account = _get_owned_account(session, account_id, user_id)

    if account_data.name is not None:
        account.name = account_data.name
    if account_data.current_balance is not None:
        account.current_balance = account_data.current_balance
        account.available_balance = account_data.current_balance
    if account_data.is_active is not None:
        account.is_active = account_data.is_active

    account.updated_at = datetime.now(timezone.utc)
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


# Net transaction flow per period, newest first
@router.get("/{account_id}/balance-history", response_model=List[BalanceHistoryEntry])
def get_balance_history(
    account_id: UUID,
    period: BalanceHistoryPeriod = Query(BalanceHistoryPeriod.month),
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    _get_owned_account(session, account_id, user_id)

    rows = session.exec(
        select(Transaction.date, Transaction.amount).where(Transaction.account_id == account_id)
    ).all()

    changes = defaultdict(Decimal)
    counts = defaultdict(int)
    for day, amount in rows:
        start = _period_start(day, period)
        changes[start] += Decimal(amount)
        counts[start] += 1

    periods = sorted(changes, reverse=True)[:BALANCE_HISTORY_PERIODS]
    return [
        BalanceHistoryEntry(period=start, balance_change=float(changes[start]), transaction_count=counts[start])
        for start in periods
    ]


# Disconnect: the row stays because transactions still reference it
@router.delete("/{account_id}")
def disconnect_account(
    account_id: UUID,
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    account = _get_owned_account(session, account_id, user_id)
    if not account.is_active:
        raise AccountNotFound("Account is already disconnected")

    account.is_active = False
    account.updated_at = datetime.now(timezone.utc)
    session.add(account)
    session.commit()
    logger.info("Disconnected account %s for user %s", account_id, user_id)
    return {"success": True, "message": "Account disconnected"}
