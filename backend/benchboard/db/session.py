# backend/benchboard/db/session.py
"""
SQLAlchemy engine/session bootstrap.
- `Database` owns one pooled engine and its sessionmaker.
- It is constructed explicitly (see main.create_app) and passed around;
  there is no module-level engine.
- Exposes: Base, Database.session_scope(), Database.new_session().
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ..core.config import DEFAULT_OPTIONS

logger = logging.getLogger(__name__)

# --- SQLAlchemy base ---------------------------------------------------------

class Base(DeclarativeBase):
    pass

# --- engine & session --------------------------------------------------------

class Database:
    """Pooled connection handle. One per app; each request borrows a session."""

    def __init__(self, url: str, pool_size: Optional[int] = None, echo: bool = False) -> None:
        self.url = url
        kwargs = {"echo": echo, "pool_pre_ping": True, "future": True}
        if not url.startswith("sqlite"):
            kwargs["pool_size"] = pool_size or DEFAULT_OPTIONS["pool_size"]
            kwargs["max_overflow"] = 0
        self.engine: Engine = create_engine(url, **kwargs)
        self.SessionLocal: sessionmaker[Session] = sessionmaker(
            bind=self.engine, class_=Session, autoflush=False, expire_on_commit=False
        )
        logger.info("Database engine created (dialect=%s)", self.engine.dialect.name)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def new_session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Context manager for a DB session.
        Example:
            with db.session_scope() as s:
                s.add(obj)
        Commits on success, rolls back on error, always closes.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Base", "Database"]
