"""
Tagged results returned by every gateway and feature action.

A call either succeeds (`Success`, optionally carrying data and a user-facing
message) or fails (`Failure`, always carrying a user-facing message). Callers
branch with ``isinstance`` on the two variants; there is no third shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """
    Successful outcome.

    Attributes
    ----------
    data:
        Optional payload (rows, a URL mapping, a new id).
    message:
        Optional user-facing confirmation text.
    """

    data: T | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    """
    Failed outcome.

    Attributes
    ----------
    message:
        User-facing explanation.
    detail:
        Optional diagnostic text for logs; never shown to the user.
    """

    message: str
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return False


GatewayResult = Union[Success[Any], Failure]
