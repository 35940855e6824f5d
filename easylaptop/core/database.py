from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from easylaptop.core.config import get_settings

settings = get_settings()

# Render provides 'postgres://', but SQLAlchemy requires 'postgresql://'
db_url = settings.database_url
if db_url and db_url.startswith("postgres://"):
    db_url = db_url.replace("postgres://", "postgresql://", 1)

engine_kwargs: dict = {}
if db_url.startswith("sqlite"):
    # "check_same_thread" is ONLY for SQLite
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    # an in-memory database lives on a single connection; share it across threads
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(db_url, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# largest value a signed 64-bit INTEGER primary key can hold
MAX_ROW_ID = 2**63 - 1


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_row_id(raw) -> Optional[int]:
    """Return raw as a usable primary key, or None if it cannot be one."""
    try:
        row_id = int(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if not 0 < row_id <= MAX_ROW_ID:
        return None
    return row_id
