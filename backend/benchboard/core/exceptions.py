# backend/benchboard/core/exceptions.py
"""BenchBoard exception hierarchy."""

from __future__ import annotations


class BenchBoardError(Exception):
    """Base exception for all BenchBoard errors."""


class ConfigurationError(BenchBoardError):
    """A required setting is missing or malformed."""


class SchemaInitError(BenchBoardError):
    """Creating the database schema failed."""


class IngestError(BenchBoardError):
    """An uploaded workbook could not be read or has an unknown kind."""


class MatcherError(BenchBoardError):
    """The generative model call failed."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class MatcherParseError(MatcherError):
    """The model answered, but not with JSON matching the declared schema."""

    def __init__(self, operation: str, message: str, raw: str = "") -> None:
        self.raw = raw
        super().__init__(operation, message)
