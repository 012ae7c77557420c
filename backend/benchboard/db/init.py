# backend/benchboard/db/init.py
"""
Schema bootstrap for the four BenchBoard tables.

`SchemaManager.ensure_initialized()` is cheap and idempotent, so API handlers
call it on every request path that touches the database. It is not a
migration system: tables are only ever created if absent.
"""

from __future__ import annotations

import logging
from typing import Callable, List, TypeVar

from sqlalchemy import Table, inspect
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import SchemaInitError
from . import models  # noqa: F401  (registers tables on Base.metadata)
from .crud import dialect_insert
from .models import BENCHBOARD_TABLES, DashboardMetrics
from .session import Base, Database

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING_RELATION_MARKERS = ("does not exist", "no such table", "undefined table", "invalid object name")


def is_missing_relation(exc: BaseException) -> bool:
    """True when a DB error says a table is missing (PostgreSQL, SQLite, SQL Server wording)."""
    msg = str(exc).lower()
    return any(m in msg for m in _MISSING_RELATION_MARKERS)


class SchemaManager:
    PRIMARY_TABLE = "resources"

    def __init__(self, database: Database) -> None:
        self.database = database

    def initialize(self) -> None:
        """
        Create every table and index if absent, then seed the metrics row.
        Safe to run from several workers at once: a table another worker
        created in the meantime counts as created, and the seed is
        INSERT ... ON CONFLICT (id) DO NOTHING.
        """
        try:
            for table in Base.metadata.sorted_tables:
                self._create_table(table)
            self._seed_metrics()
        except SQLAlchemyError as exc:
            logger.error("Database schema initialization failed: %s", exc)
            raise SchemaInitError(str(exc)) from exc
        logger.info("Database schema initialized")

    def _create_table(self, table: Table) -> None:
        engine = self.database.engine
        try:
            table.create(bind=engine, checkfirst=True)
        except DBAPIError:
            # lost the race between the existence check and CREATE TABLE
            if not inspect(engine).has_table(table.name):
                raise
            logger.debug("Table %s was created concurrently", table.name)

    def _seed_metrics(self) -> None:
        insert = dialect_insert(self.database.dialect)
        stmt = insert(DashboardMetrics.__table__).values(id=1).on_conflict_do_nothing(index_elements=["id"])
        with self.database.session_scope() as s:
            s.execute(stmt)

    def ensure_initialized(self) -> bool:
        """
        Run the DDL only when the primary table is missing.
        Returns True if initialization ran, False if the schema was already there.
        """
        try:
            exists = inspect(self.database.engine).has_table(self.PRIMARY_TABLE)
        except DBAPIError as exc:
            if not is_missing_relation(exc):
                raise
            logger.warning("Table check failed (%s), attempting initialization", exc)
            self.initialize()
            return True

        if exists:
            logger.debug("Database tables already exist")
            return False
        logger.info("Database tables not found, initializing")
        self.initialize()
        return True

    def run(self, fn: Callable[[Session], T]) -> T:
        """
        Run `fn` in a session. If it fails because a table is missing,
        initialize the schema once and retry once; a second failure propagates.
        """
        try:
            with self.database.session_scope() as s:
                return fn(s)
        except DBAPIError as exc:
            if not is_missing_relation(exc):
                raise
            logger.warning("Query hit a missing table, re-initializing schema and retrying once")
            self.initialize()
        with self.database.session_scope() as s:
            return fn(s)

    def tables(self) -> List[str]:
        present = set(inspect(self.database.engine).get_table_names())
        return [t for t in sorted(BENCHBOARD_TABLES) if t in present]


__all__ = ["SchemaManager", "is_missing_relation"]
