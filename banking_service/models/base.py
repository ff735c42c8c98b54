"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets its own
session from get_db(); sessions are never shared between
requests or threads.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from banking_service.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping checks a pooled connection before handing it
# out, so a database restart doesn't surface as a failed
# deposit on the first request afterwards.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# --- Session Factory ---
# autocommit=False: the ledger service decides when a unit of
# work is committed. A transaction record and the balance it
# produced must land in the same commit.
# autoflush=False: nothing is sent to the database until the
# services flush explicitly.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The session is always closed when the request finishes,
    even on error, so connections go back to the pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
