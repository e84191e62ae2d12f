from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from papyros.app.core.config import settings


def make_engine(url: str, **kwargs):
    connect_args = {}
    if url.startswith("sqlite"):
        # TestClient and the dev server serve requests from worker threads
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=settings.SQL_ECHO,
        connect_args=connect_args,
        **kwargs,
    )


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
