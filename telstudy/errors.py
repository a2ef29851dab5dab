"""
Error taxonomy shared by the orchestration boundary and the quiz runner.

Each error carries a stable ``code`` matching the API error envelope
``{"error": {"code": ..., "message": ...}}``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class TelStudyError(Exception):
    """Base class for all TelStudy errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API error envelope."""
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(TelStudyError, ValueError):
    """
    Malformed input: bad indices, malformed question-set JSON, wrong option count.

    Attributes:
        errors: Individual problems, one human-readable string each
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "", errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [self.message]

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["error"]["details"] = self.errors
        return payload


class NotFoundError(TelStudyError):
    """Resource is missing or not owned by the caller."""

    code = "NOT_FOUND"


class ForbiddenError(TelStudyError):
    """Resource exists but belongs to another user."""

    code = "FORBIDDEN"


class StorageError(TelStudyError):
    """Blob storage read/write failed."""

    code = "STORAGE_ERROR"


class InternalError(TelStudyError):
    """Row store failure or any other unexpected server-side problem."""

    code = "INTERNAL_ERROR"


class RateLimitedError(TelStudyError):
    """Upload frequency cap exceeded."""

    code = "RATE_LIMITED"

    def __init__(self, message: str = "", retry_after_seconds: float = 0.0):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds
