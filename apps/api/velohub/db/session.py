# velohub/db/session.py
from __future__ import annotations

from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from velohub.core.config import settings


def build_engine(url: str) -> Engine:
    """Postgres in production, SQLite for local runs."""
    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        # request handlers run on FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        echo=settings.LOG_LEVEL.upper() == "DEBUG",
        pool_pre_ping=not url.startswith("sqlite"),
        connect_args=connect_args,
    )


engine = build_engine(settings.sqlalchemy_database_url)

# rows stay readable after commit; handlers return them as responses
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
