"""
Typed payloads exchanged with the sales API gateway.

Immutable where the engine only reads them; the order draft keeps a
mutable payload because attendee binding edits it before submission.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Identity:
    """The logged-in user behind the session."""
    nickname: str
    user_id: str = ""


@dataclass(frozen=True)
class PerformRef:
    """One performance (session) of a ticketed event."""
    perform_id: str
    name: str = ""


@dataclass(frozen=True)
class Catalog:
    """Event details needed to time and target a purchase."""
    ticket_id: str
    name: str
    sell_start_ms: int
    sell_start_text: str = ""
    sessions: tuple[PerformRef, ...] = ()

    def session_at(self, index: int) -> Optional[PerformRef]:
        """Return the session at a 1-based index, or None when out of range."""
        if 1 <= index <= len(self.sessions):
            return self.sessions[index - 1]
        return None


@dataclass(frozen=True)
class Tier:
    """A price tier (grade) of a session with its own sku."""
    item_id: str
    sku_id: str
    price_name: str = ""
    salable: bool = False


@dataclass(frozen=True)
class SessionTiers:
    """Tier listing of one session, in listing order."""
    perform_id: str
    tiers: tuple[Tier, ...] = ()

    def tier_at(self, index: int) -> Optional[Tier]:
        """Return the tier at a 1-based index, or None when out of range."""
        if 1 <= index <= len(self.tiers):
            return self.tiers[index - 1]
        return None


@dataclass
class OrderDraft:
    """An order built by the gateway and awaiting submission."""
    item_id: str
    sku_id: str
    buy_count: int
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SubmitReceipt:
    """Remote verdict on a submitted order."""
    success: bool
    ret: tuple[str, ...] = ()

    @property
    def reason(self) -> str:
        return self.ret[0] if self.ret else ""
