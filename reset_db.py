from sqlmodel import SQLModel

from app.database import create_db_and_tables, engine
from app.models import account, net_worth_snapshot, shared_chart, transaction, user  # noqa: F401

SQLModel.metadata.drop_all(engine)
create_db_and_tables()

print("✅ Database reset (all tables dropped and recreated).")
