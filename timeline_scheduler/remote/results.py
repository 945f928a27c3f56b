"""Result values returned by the remote timeline client.

Remote conditions never raise; callers match on ``RemoteErrorKind``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class RemoteErrorKind(str, Enum):
    """Failure categories of a remote call."""

    TRANSPORT = "transport"                # Network error, timeout, 5xx
    POLICY_REJECTED = "policy_rejected"    # 402/403 from the service
    NOT_FOUND = "not_found"                # 404 or nothing stored
    INVALID_RESPONSE = "invalid_response"  # Undecodable body or success=false


@dataclass(frozen=True)
class RemoteError:
    """Why a remote call did not produce a value."""

    kind: RemoteErrorKind
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class RemoteResult(Generic[T]):
    """Either a value or a ``RemoteError``."""

    value: T | None = None
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "RemoteResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: RemoteErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> "RemoteResult[T]":
        return cls(error=RemoteError(kind=kind, message=message, status_code=status_code))
