"""
State machine data models for the acquisition run.

This module defines immutable data structures for the run phase, the
purchase target, and the per-attempt and per-failure classifications
that drive phase changes.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class RunPhase(str, Enum):
    """Phases of a single acquisition run."""
    INIT = "init"
    RESOLVING_IDENTITY = "resolving_identity"
    RESOLVING_CATALOG = "resolving_catalog"
    RESOLVING_SESSION = "resolving_session"
    DECIDING = "deciding"
    COUNTING_DOWN = "counting_down"
    BUYING_NOW = "buying_now"
    ATTEMPTING = "attempting"
    ESCALATING_TO_LEAKS = "escalating_to_leaks"
    POLLING_LEAKS = "polling_leaks"
    DONE = "done"
    TERMINAL = "terminal"

    @property
    def is_final(self) -> bool:
        return self in (RunPhase.DONE, RunPhase.TERMINAL)


class ErrorKind(str, Enum):
    """Control-flow classification of a gateway failure."""
    SYSTEM_BUSY = "system_busy"
    PRODUCT_EXPIRED = "product_expired"
    OTHER = "other"


class OutcomeKind(str, Enum):
    """Result kinds of one purchase attempt."""
    SUCCESS = "success"
    REJECTED = "rejected"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one purchase attempt, consumed by the burst loop."""
    kind: OutcomeKind
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "AttemptOutcome":
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def rejected(cls, reason: str) -> "AttemptOutcome":
        return cls(OutcomeKind.REJECTED, reason)

    @classmethod
    def transient(cls, reason: str) -> "AttemptOutcome":
        return cls(OutcomeKind.TRANSIENT, reason)

    @property
    def succeeded(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS


@dataclass(frozen=True)
class SaleTarget:
    """What a burst buys: one sku of one item, ``buy_count`` tickets."""
    item_id: str
    sku_id: str
    buy_count: int

    def with_buy_count(self, buy_count: int) -> "SaleTarget":
        return replace(self, buy_count=buy_count)


@dataclass(frozen=True)
class RunState:
    """
    Exclusive state of one acquisition run.

    Every phase change produces a new value; the engine keeps only the
    latest one and no phase holds on to a previous value.
    """

    phase: RunPhase
    target: Optional[SaleTarget] = None
    sale_open_ms: Optional[int] = None
    perform_id: Optional[str] = None
    success: bool = False
    last_error: Optional[ErrorKind] = None
    history: tuple[RunPhase, ...] = ()

    def with_phase(self, phase: RunPhase, **changes) -> "RunState":
        """Create the successor state in ``phase``, recording the old phase."""
        return replace(self, phase=phase, history=self.history + (self.phase,), **changes)

    @property
    def visited(self) -> tuple[RunPhase, ...]:
        """All phases entered so far, current one included."""
        return self.history + (self.phase,)
