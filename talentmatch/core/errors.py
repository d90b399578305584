# talentmatch/core/errors.py
"""
Error types for the matching engine.

Only two of these ever reach a caller: InvalidCandidatePool (top-level
contract violation) and InvalidCandidateRecord (single record, and only when
the caller builds a profile directly). The enhancement errors are raised and
swallowed inside the adapter.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TalentMatchError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class InvalidCandidateRecord(TalentMatchError, ValueError):
    """A candidate snapshot that cannot be used at all (e.g. no identifier)."""
    pass


class InvalidCandidatePool(TalentMatchError, TypeError):
    """Raised when the pool handed to the engine is None or not iterable."""
    pass


class EnhancementError(TalentMatchError):
    """Base class for semantic-service failures."""
    pass


class ExternalServiceTimeout(EnhancementError):
    pass


class ExternalServiceError(EnhancementError):
    pass


class MalformedEnhancementResponse(EnhancementError):
    """Payload was not JSON or did not have the expected shape/types."""
    pass
