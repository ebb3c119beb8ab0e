"""Exception hierarchy for the query engine."""

from enum import Enum


class DeskQueryError(Exception):
    """Base class for all engine errors."""


class ValidationError(DeskQueryError, ValueError):
    """Raised when a user query is malformed or suspicious."""


class ModelErrorKind(str, Enum):
    """Why a language model call failed."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    AUTH = "auth"
    UNAVAILABLE = "unavailable"
    INVALID_RESPONSE = "invalid_response"


class ModelError(DeskQueryError):
    """Raised when the language model is unreachable or returns unusable content."""

    def __init__(self, message: str, kind: ModelErrorKind = ModelErrorKind.UNAVAILABLE) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def transient(self) -> bool:
        """Whether retrying later could succeed."""
        return self.kind in (
            ModelErrorKind.TIMEOUT,
            ModelErrorKind.RATE_LIMITED,
            ModelErrorKind.UNAVAILABLE,
        )


class StoreError(DeskQueryError):
    """Raised when a storage tier fails to read or write."""


class SnapshotUnavailableError(StoreError):
    """Raised when no ticket snapshot can be loaded from any tier."""
