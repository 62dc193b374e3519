"""Base exception for labor engine failures.

Every precondition failure raised by the services carries a stable,
machine-readable ``code`` so callers can branch on it (and the API can map
it to an HTTP status) without parsing messages. Compliance rule failures
are never raised; they are returned as ``fail`` results.
"""

from __future__ import annotations


class LaborEngineError(Exception):
    """Base class for typed labor engine errors."""

    code: str = "LABOR_ENGINE_ERROR"

    def __init__(self, message: str, code: str | None = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)
