from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.security import create_access_token
from app.database import get_session
from app.main import app
from app.models.account import Account
from app.models.enums import AccountType
from app.models.net_worth_snapshot import NetWorthSnapshot
from app.models.user import User


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(engine):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(email=None) -> User:
        counter["n"] += 1
        user = User(email=email or f"user{counter['n']}@example.com", hashed_password="not-a-real-hash")
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def add_account(session):
    def _add_account(user_id: UUID, account_type: AccountType, balance, is_active=True, name=None) -> Account:
        account = Account(
            user_id=user_id,
            name=name or f"{account_type.value} account",
            account_type=account_type,
            current_balance=Decimal(str(balance)) if balance is not None else None,
            is_active=is_active,
        )
        session.add(account)
        session.commit()
        session.refresh(account)
        return account

    return _add_account


@pytest.fixture
def add_snapshot(session):
    def _add_snapshot(user_id: UUID, snapshot_date: date, assets, liabilities) -> NetWorthSnapshot:
        snapshot = NetWorthSnapshot(
            user_id=user_id,
            snapshot_date=snapshot_date,
            total_assets=Decimal(str(assets)),
            total_liabilities=Decimal(str(liabilities)),
            net_worth=Decimal(str(assets)) - Decimal(str(liabilities)),
        )
        session.add(snapshot)
        session.commit()
        session.refresh(snapshot)
        return snapshot

    return _add_snapshot


@pytest.fixture
def funded_user(make_user, add_account):
    """User with $15,000 of assets and $3,000 of card debt."""
    user = make_user()
    add_account(user.id, AccountType.checking, "5000.00")
    add_account(user.id, AccountType.savings, "7000.00")
    add_account(user.id, AccountType.investment, "3000.00")
    add_account(user.id, AccountType.credit, "3000.00")
    return user


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: UUID) -> dict:
        token = create_access_token(data={"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
