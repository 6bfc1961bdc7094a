"""Domain errors raised by the relief services.

Each error carries a machine-readable ``code`` and a ``details`` dict; the
core blueprint renders them as ``{"ok": false, "errors": [...]}`` with the
class' HTTP status.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class ReliefError(Exception):
    status_code = 400

    def __init__(self, code: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "details": self.details}


class NotFoundError(ReliefError):
    status_code = 404


class ConflictError(ReliefError):
    """Covering teacher or slot is already taken for that date/period."""
    status_code = 409


class UnprocessableError(ReliefError):
    status_code = 422


class InvalidAssignmentError(UnprocessableError):
    """Slot does not belong to the absence being covered."""
