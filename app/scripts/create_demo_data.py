"""Seed a demo user with linked accounts, transactions and 90 days of snapshots."""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlmodel import Session, select

from app.core.security import get_password_hash
from app.database import create_db_and_tables, engine
from app.models.account import Account
from app.models.enums import AccountType
from app.models.net_worth_snapshot import NetWorthSnapshot
from app.models.transaction import Transaction
from app.models.user import User
from app.utils.net_worth import classify_balances, record_snapshot, utc_today

DEMO_EMAIL = "demo@finarro.com"
DEMO_PASSWORD = "demo-password"

DEMO_ACCOUNTS = [
    {"name": "Everyday Checking", "account_type": AccountType.checking, "balance": "4250.18"},
    {"name": "High Yield Savings", "account_type": AccountType.savings, "balance": "12800.00"},
    {"name": "Brokerage", "account_type": AccountType.investment, "balance": "23115.42"},
    {"name": "Rewards Card", "account_type": AccountType.credit, "balance": "1843.77"},
]

DEMO_CATEGORIES = ["Food and Drink", "Shopping", "Transportation", "Bills", "Entertainment"]


def create_demo_data():
    create_db_and_tables()
    with Session(engine) as session:
        if session.exec(select(User).where(User.email == DEMO_EMAIL)).first():
            print(f"Demo user {DEMO_EMAIL} already exists, nothing to do.")
            return

        user = User(
            email=DEMO_EMAIL,
            hashed_password=get_password_hash(DEMO_PASSWORD),
            first_name="Demo",
            last_name="User",
        )
        session.add(user)
        session.commit()
        session.refresh(user)

        accounts = []
        for i, data in enumerate(DEMO_ACCOUNTS):
            account = Account(
                user_id=user.id,
                external_account_id=f"demo-{user.id}-{i}",
                institution_name="Demo Bank",
                name=data["name"],
                account_type=data["account_type"],
                mask=f"{1000 + i * 111}",
                current_balance=Decimal(data["balance"]),
                available_balance=Decimal(data["balance"]),
                last_synced=datetime.now(timezone.utc),
            )
            session.add(account)
            accounts.append(account)
        session.commit()

        today = utc_today()
        rng = random.Random(42)
        for day in range(60):
            account = rng.choice(accounts[:1] + accounts[3:])
            session.add(Transaction(
                user_id=user.id,
                account_id=account.id,
                name=f"Purchase #{day}",
                amount=-Decimal(rng.randint(500, 15000)) / 100,
                date=today - timedelta(days=day),
                category_primary=rng.choice(DEMO_CATEGORIES),
            ))
            if day % 14 == 0:
                session.add(Transaction(
                    user_id=user.id,
                    account_id=accounts[0].id,
                    name="Payroll",
                    amount=Decimal("3200.00"),
                    date=today - timedelta(days=day),
                    category_primary="Income",
                ))
        session.commit()

        # Past snapshots drift up towards today's balances
        assets, liabilities = classify_balances(accounts)
        for days_back in range(90, 0, -1):
            drift = Decimal(1) - Decimal(days_back) / Decimal(1000)
            day_assets = (assets * drift).quantize(Decimal("0.01"))
            session.add(NetWorthSnapshot(
                user_id=user.id,
                snapshot_date=today - timedelta(days=days_back),
                total_assets=day_assets,
                total_liabilities=liabilities,
                net_worth=day_assets - liabilities,
            ))
        session.commit()
        record_snapshot(session, user.id, today)

    print(f"✅ Demo user created: {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    create_demo_data()
