"""
Service exceptions.

Only failures the caller has to act on are raised. Recoverable
conditions (unparsable transcripts, fields with no match) are logged
and degrade locally instead.
"""

from __future__ import annotations


class FieldExtractionServiceError(Exception):
    """Base class for every error raised by this service."""


class ExtractionError(FieldExtractionServiceError):
    """
    The extraction pipeline failed as a whole.

    No partial field map is produced; callers fall back to storing the
    raw summary.
    """


class UnknownFieldError(FieldExtractionServiceError, KeyError):
    """A field key was looked up that the catalog does not define."""


class CRMError(FieldExtractionServiceError):
    """A CRM API request failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
