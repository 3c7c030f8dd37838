"""Tagged outcome types shared by gateways and retrieval strategies.

Gateways never return ``None`` to mean "not configured".  They return
:class:`Success` or :class:`Unavailable`, so callers cannot mistake a
missing credential for an empty result.

Retrieval strategies return :class:`Hit` (the strategy produced an
answer, possibly empty) or :class:`Miss` (try the next strategy).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Provider call outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    """The provider answered with *value*."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Unavailable:
    """The provider could not answer (no credential, outage, bad response).

    Attributes
    ----------
    reason:
        Short human-readable explanation, suitable for logs.
    provider_name:
        Which provider was unavailable.
    """

    reason: str
    provider_name: str | None = None

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success[T], Unavailable]


# ---------------------------------------------------------------------------
# Retrieval strategy outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Hit:
    """A strategy produced a result; *passages* may legitimately be empty."""

    passages: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Miss:
    """A strategy could not run; the next strategy in the chain is tried."""

    reason: str


StrategyOutcome = Union[Hit, Miss]
