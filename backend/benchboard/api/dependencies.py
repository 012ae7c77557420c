# backend/benchboard/api/dependencies.py
"""
Shared dependencies for API routers.

The Database, SchemaManager and Matcher are built once in main.create_app and
kept on app.state; handlers reach them through these functions.
"""

from __future__ import annotations

from fastapi import Request

from ..db.init import SchemaManager
from ..db.session import Database
from ..pipeline.matcher import Matcher


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_schema(request: Request) -> SchemaManager:
    return request.app.state.schema


def get_matcher(request: Request) -> Matcher:
    return request.app.state.matcher


def get_batch_size(request: Request) -> int:
    return request.app.state.batch_size
