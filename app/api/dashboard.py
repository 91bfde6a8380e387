# app/api/dashboard.py

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select, func
from sqlalchemy import case
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from app.constants.timeframes import DEFAULT_TIMEFRAME, TIMEFRAME_BUCKETS, Timeframe
from app.core.security import get_current_user
from app.database import get_session
from app.models.account import Account
from app.models.transaction import Transaction
from app.schemas.dashboard import (
    CategorySpending,
    DashboardAccount,
    DashboardResponse,
    DashboardSummary,
    DashboardTransaction,
)
from app.utils.net_worth import compute_series, utc_today

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

CATEGORY_COLORS = ["#4F46E5", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#6B7280"]
RECENT_TRANSACTIONS = 10


def _percentage_change(current: float, previous: float) -> float:
    if not previous:
        return 0.0
    return (current - previous) / previous * 100


def _income_and_expenses(session: Session, user_id: UUID, start: date, end: date):
    income, expenses = session.exec(
        select(
            func.sum(case((Transaction.amount > 0, Transaction.amount), else_=0)),
            func.sum(case((Transaction.amount < 0, -Transaction.amount), else_=0)),
        ).where(
            Transaction.user_id == user_id,
            Transaction.date > start,
            Transaction.date <= end,
        )
    ).one()
    return float(income or 0), float(expenses or 0)


@router.get("", response_model=DashboardResponse)
@router.get("/", response_model=DashboardResponse)
def get_dashboard(
    timeframe: Timeframe = Query(DEFAULT_TIMEFRAME),
    session: Session = Depends(get_session),
    user_id: UUID = Depends(get_current_user),
):
    today = utc_today()
    window = timedelta(days=TIMEFRAME_BUCKETS[timeframe].days)
    start = today - window
    previous_start = start - window

    net_worth = compute_series(session, user_id, timeframe, today)

    accounts = session.exec(
        select(Account).where(Account.user_id == user_id, Account.is_active == True)  # noqa: E712
    ).all()

    changes = dict(
        session.exec(
            select(Transaction.account_id, func.sum(Transaction.amount))
            .where(Transaction.user_id == user_id, Transaction.date > start)
            .group_by(Transaction.account_id)
        ).all()
    )

    income, expenses = _income_and_expenses(session, user_id, start, today)
    previous_income, previous_expenses = _income_and_expenses(session, user_id, previous_start, start)

    recent = session.exec(
        select(Transaction, Account.name)
        .join(Account, Transaction.account_id == Account.id)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc())
        .limit(RECENT_TRANSACTIONS)
    ).all()

    spent = func.sum(-Transaction.amount).label("total")
    spending = session.exec(
        select(Transaction.category_primary, spent)
        .where(
            Transaction.user_id == user_id,
            Transaction.date > start,
            Transaction.amount < 0,
        )
        .group_by(Transaction.category_primary)
        .order_by(spent.desc())
        .limit(len(CATEGORY_COLORS))
    ).all()

    return DashboardResponse(
        summary=DashboardSummary(
            total_balance=sum(float(a.current_balance or 0) for a in accounts),
            balance_change=float(sum(changes.values(), 0)),
            income=income,
            income_change=_percentage_change(income, previous_income),
            expenses=expenses,
            expenses_change=_percentage_change(expenses, previous_expenses),
            net_growth=income - expenses,
        ),
        accounts=[
            DashboardAccount(
                id=a.id,
                name=a.name,
                type=a.account_type,
                balance=float(a.current_balance or 0),
                change=float(changes.get(a.id) or 0),
            )
            for a in accounts
        ],
        transactions=[
            DashboardTransaction(
                id=tx.id,
                description=tx.name,
                category=tx.category_primary or "Other",
                amount=float(tx.amount),
                date=tx.date,
                type="income" if tx.amount >= 0 else "expense",
                merchant=tx.merchant_name,
                account=account_name,
            )
            for tx, account_name in recent
        ],
        spending_by_category=[
            CategorySpending(name=name or "Other", value=float(total or 0), color=CATEGORY_COLORS[i])
            for i, (name, total) in enumerate(spending)
        ],
        net_worth_data=net_worth.points,
        has_any_account=net_worth.has_any_account,
        net_worth_source=net_worth.source,
        timeframe=timeframe,
        last_updated=datetime.now(timezone.utc),
    )
