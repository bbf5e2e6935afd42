"""
Database engine and sessions (SQLAlchemy).

Postgres is the production backend; a sqlite:// DATABASE_URL is accepted
for local demos.
"""
from contextlib import contextmanager
from typing import Iterator

import psycopg
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from app.config import get_settings


class Base(DeclarativeBase):
    """Declarative base of all SpendIQ tables"""
    pass


_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _is_postgres(url: str) -> bool:
    return url.startswith("postgresql")


def get_engine() -> Engine:
    """Process-wide engine, created on first use"""
    global _engine
    if _engine is None:
        url = get_settings().get_sqlalchemy_url()
        if _is_postgres(url):
            _engine = create_engine(url, pool_pre_ping=True)
        else:
            _engine = create_engine(url, connect_args={"check_same_thread": False})
    return _engine


def get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: one session per request, closed afterwards

    Usage:
        @router.get("/budgets/{user_id}")
        def list_budgets(user_id: int, db: Session = Depends(get_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for background jobs and scripts; uncommitted work is rolled back."""
    db = get_session_factory()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Readiness probe. Postgres is pinged with a raw psycopg connection so a
    broken pool cannot mask an outage.

    Raises:
        psycopg.OperationalError: Postgres is unreachable
        sqlalchemy.exc.OperationalError: any other backend is unreachable
    """
    settings = get_settings()
    if _is_postgres(settings.DATABASE_URL):
        with psycopg.connect(settings.DATABASE_URL, connect_timeout=3) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return

    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))
