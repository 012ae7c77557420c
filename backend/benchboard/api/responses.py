# backend/benchboard/api/responses.py
"""
Standard response bodies for API endpoints.

Errors are raised as HTTPException(detail=error_response(...)), so clients see
{"detail": {"success": false, "error": "...", "details": ...}}.
Upstream error text goes into "details" only outside production.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException

from ..core.config import is_production

logger = logging.getLogger(__name__)


def success_response(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """
    {"success": true, "message": "...", "data": ..., **extra}
    message and data are omitted when not given.
    """
    response: Dict[str, Any] = {"success": True}
    if message:
        response["message"] = message
    if data is not None:
        response["data"] = data
    response.update(extra)
    return response


def error_response(message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    response: Dict[str, Any] = {"success": False, "error": message}
    if details is not None:
        response["details"] = details
    return response


def bad_request(message: str, details: Optional[Any] = None) -> HTTPException:
    return HTTPException(status_code=400, detail=error_response(message, details))


def not_found(message: str, details: Optional[Any] = None) -> HTTPException:
    return HTTPException(status_code=404, detail=error_response(message, details))


def server_error(message: str, exc: BaseException) -> HTTPException:
    """Log the upstream failure and hide its text in production."""
    logger.error("%s: %s", message, exc, exc_info=exc)
    details = None if is_production() else str(exc)
    return HTTPException(status_code=500, detail=error_response(message, details))
