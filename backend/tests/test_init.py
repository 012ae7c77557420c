"""Tests for lazy schema bootstrap and the missing-table retry."""

from __future__ import annotations

import threading

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from benchboard.db import crud
from benchboard.db.init import SchemaManager, is_missing_relation
from benchboard.db.models import BENCHBOARD_TABLES, RRF, DashboardMetrics


def test_ensure_initialized_runs_ddl_once(schema):
    assert schema.ensure_initialized() is True
    assert schema.ensure_initialized() is False
    assert schema.tables() == sorted(BENCHBOARD_TABLES)


def test_initialize_seeds_single_metrics_row(database, schema):
    schema.initialize()
    schema.initialize()
    with database.session_scope() as s:
        metrics = crud.get_dashboard_metrics(s)
        assert metrics.id == 1
        assert metrics.total_bench == 0


def test_run_reinitializes_after_missing_table(database, schema):
    schema.ensure_initialized()
    RRF.__table__.drop(database.engine)
    assert "rrfs" not in schema.tables()

    assert schema.run(lambda s: len(crud.list_rrfs(s))) == 0
    assert "rrfs" in schema.tables()


def test_run_propagates_other_errors(schema):
    schema.ensure_initialized()

    def _boom(s):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    with pytest.raises(OperationalError):
        schema.run(_boom)


def test_missing_relation_wording():
    assert is_missing_relation(Exception('relation "resources" does not exist'))
    assert is_missing_relation(Exception("no such table: resources"))
    assert not is_missing_relation(Exception("connection refused"))


def test_fresh_manager_sees_existing_schema(database, schema):
    schema.ensure_initialized()
    assert SchemaManager(database).ensure_initialized() is False


def test_concurrent_first_requests_all_succeed(database):
    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def _first_request():
        barrier.wait()
        try:
            SchemaManager(database).ensure_initialized()
        except Exception as exc:  # collected and asserted below
            errors.append(exc)

    threads = [threading.Thread(target=_first_request) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert SchemaManager(database).tables() == sorted(BENCHBOARD_TABLES)
    with database.session_scope() as s:
        assert s.execute(select(func.count()).select_from(DashboardMetrics)).scalar_one() == 1


def test_initialize_tolerates_existing_tables(database, schema):
    schema.initialize()
    RRF.__table__.drop(database.engine)
    schema.initialize()
    assert schema.tables() == sorted(BENCHBOARD_TABLES)
