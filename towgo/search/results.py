"""Outcome of a best-effort call: a value plus an optional fallback reason."""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

MISSING_CREDENTIAL = "missing_credential"
TRANSPORT_ERROR = "transport_error"
MALFORMED_RESPONSE = "malformed_response"
NO_INPUT = "no_input"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a call that degrades to a default instead of raising.

    `degraded` is None when the external service answered and was used,
    otherwise it names why the default was returned.
    """

    value: T
    degraded: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(value=value, degraded=reason)

    @property
    def is_degraded(self) -> bool:
        return self.degraded is not None
