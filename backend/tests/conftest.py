"""Shared fixtures: a file-backed SQLite database per test and an app wired to a FakeMatcher."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from benchboard.db.init import SchemaManager
from benchboard.db.session import Database
from benchboard.main import create_app
from fakes import FakeMatcher


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'benchboard.db'}")
    yield db
    db.dispose()


@pytest.fixture
def schema(database):
    return SchemaManager(database)


@pytest.fixture
def session(database, schema):
    """Session on an initialized schema."""
    schema.ensure_initialized()
    s = database.new_session()
    yield s
    s.close()


@pytest.fixture
def matcher():
    return FakeMatcher()


@pytest.fixture
def app(database, matcher):
    return create_app(database=database, matcher=matcher, batch_size=100)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
