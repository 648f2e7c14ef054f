"""
Exceptions raised by wyziesubs.

Malformed subtitle blocks are never an error; they are skipped by the
normalizer. Only request failures and bad service responses raise.
"""

from typing import Optional


class WyzieSubsError(Exception):
    """Base class for all wyziesubs errors."""


class InvalidCriteriaError(WyzieSubsError, ValueError):
    """Search criteria cannot produce a valid request (no catalog id)."""


class NetworkError(WyzieSubsError):
    """
    An HTTP request failed, either with a non-2xx status or in transport.

    Attributes:
        operation: What was being done, e.g. "fetching subtitles"
        status_code: HTTP status if a response was received
    """

    def __init__(self, operation: str, detail: str, status_code: Optional[int] = None):
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Error {operation}: {detail}")


class FetchError(NetworkError):
    """Subtitle content download returned a non-2xx status."""


class DeserializationError(WyzieSubsError, ValueError):
    """Search response body is not JSON or not the expected shape."""


class NoSubtitlesError(WyzieSubsError):
    """VTT conversion was requested but the search returned nothing."""
