"""Default configuration parameters for a ticket acquisition run."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class LeaksConfig:
    """Inventory polling ("pick up leaks") parameters."""
    attempts: int = 100                              # Poll cycles before giving up
    interval_ms: int = 1000                          # Sleep between cycles, floored at 1000
    eligible_grades: frozenset = frozenset()         # 1-based tier indices, empty = any
    override_buy_count: int = 0                      # 0 = use the ticket's buy count
    grace_period_ms: int = 30 * 60 * 1000            # Escalation window after sale open

    @property
    def effective_interval_ms(self) -> int:
        return max(self.interval_ms, 1000)


@dataclass(frozen=True)
class AccountPolicy:
    """Timing and retry policy consumed by the engine."""
    # Burst shape
    retry_burst_size: int = 5                        # Attempts per burst
    retry_base_interval_ms: int = 100                # Short probe after even attempts
    retry_cycle_ms: int = 5500                       # Observed server admission cycle

    # Countdown
    poll_interval_ms: int = 100                      # Countdown tick
    early_submit_lead_ms: int = 0                    # Start bursting this early

    # Sale windows
    priority_purchase_lead_ms: int = 0               # Second window after priority sale
    sale_open_override_ms: int = 0                   # Positive value replaces catalog time

    # Pacing
    submit_delay_ms: int = 0                         # Pause between build and submit

    leaks: LeaksConfig = field(default_factory=LeaksConfig)


@dataclass(frozen=True)
class TicketSelection:
    """What to buy: ticket, session and tier (1-based indices)."""
    ticket_id: str = ""
    buy_count: int = 1
    session_index: int = 1
    grade_index: int = 1


@dataclass(frozen=True)
class ReauthConfig:
    """External re-authentication helper."""
    enabled: bool = False
    command: tuple = ()                              # argv prefix, --login_id is appended
    timeout_seconds: int = 300


@dataclass(frozen=True)
class AccountConfig:
    """Complete configuration for one account run."""
    login_id: str
    ticket: TicketSelection
    policy: AccountPolicy
    reauth: ReauthConfig
    remark: str = ""
    gateway: Optional[str] = None                    # "module:callable" factory
    gateway_options: dict[str, Any] = field(default_factory=dict)


def get_default_policy() -> AccountPolicy:
    """Get the default account policy instance."""
    return AccountPolicy(leaks=LeaksConfig())


def get_default_account(login_id: str, ticket_id: str = "") -> AccountConfig:
    """Get a default account configuration for ``login_id``."""
    return AccountConfig(
        login_id=login_id,
        ticket=TicketSelection(ticket_id=ticket_id),
        policy=get_default_policy(),
        reauth=ReauthConfig(),
    )
