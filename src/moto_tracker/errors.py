"""Exception hierarchy for the motorcycle price tracker."""

from __future__ import annotations

from datetime import datetime
from typing import Any


class MotoTrackerError(Exception):
    """Base exception for all tracker errors.

    Attributes:
        message: Human-readable error message.
        source: Source name the error belongs to, when known.
        details: Additional error context.
        timestamp: When the error occurred.
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.source = source
        self.details = details or {}
        self.timestamp = datetime.now()
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source": self.source,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ExtractionError(MotoTrackerError):
    """Base for failures inside an extractor (fetch or parse)."""


class FetchError(ExtractionError):
    """Network failure, non-2xx response or timeout."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            message,
            source=source,
            details={"url": url, "status_code": status_code},
        )
        self.url = url
        self.status_code = status_code


class ParseError(ExtractionError):
    """Malformed payload or missing structure."""


class StoreError(MotoTrackerError):
    """A store read or write failed."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        details["operation"] = operation
        super().__init__(message, details=details)
        self.operation = operation
