"""
Screening Errors.

Every failure the core surfaces carries a machine-readable ``kind`` and a
human-readable message, so an outer layer can map it to a response without
inspecting the exception class. Missing parameter data is not an error and
has no exception here.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ScreeningError(Exception):
    """Base class for all screening failures."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(ScreeningError):
    """Raised when a referenced company, portfolio, criteria set or result does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, identifier: Any, message: Optional[str] = None) -> None:
        super().__init__(message or f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class ForbiddenError(ScreeningError):
    """Raised when a client-owned criteria set is used outside its client."""

    kind = "forbidden"


class ExpressionValidationError(ScreeningError):
    """Raised when a rule expression is structurally invalid."""

    kind = "validation"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class RequestValidationError(ScreeningError):
    """Raised when a screening request fails validation."""

    kind = "validation"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceError(ScreeningError):
    """Raised when the screening result could not be stored."""

    kind = "persistence"
