"""
Allowed phase transitions for the acquisition run.

The engine validates every phase change against this table before
applying it, so a wiring mistake fails loudly instead of silently
skipping a phase.
"""

from ..errors import StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from .models import RunPhase, RunState

state_logger = get_state_logger(__name__)

ALLOWED_TRANSITIONS: dict[RunPhase, frozenset] = {
    RunPhase.INIT: frozenset({RunPhase.RESOLVING_IDENTITY}),
    RunPhase.RESOLVING_IDENTITY: frozenset({RunPhase.RESOLVING_CATALOG, RunPhase.TERMINAL}),
    RunPhase.RESOLVING_CATALOG: frozenset({RunPhase.RESOLVING_SESSION, RunPhase.TERMINAL}),
    RunPhase.RESOLVING_SESSION: frozenset({RunPhase.DECIDING, RunPhase.TERMINAL}),
    RunPhase.DECIDING: frozenset({RunPhase.COUNTING_DOWN, RunPhase.BUYING_NOW}),
    RunPhase.COUNTING_DOWN: frozenset({RunPhase.ATTEMPTING, RunPhase.TERMINAL}),
    RunPhase.BUYING_NOW: frozenset({RunPhase.ATTEMPTING}),
    RunPhase.ATTEMPTING: frozenset({
        RunPhase.DONE,
        RunPhase.ESCALATING_TO_LEAKS,
        RunPhase.COUNTING_DOWN,
        RunPhase.TERMINAL,
    }),
    RunPhase.ESCALATING_TO_LEAKS: frozenset({RunPhase.POLLING_LEAKS}),
    RunPhase.POLLING_LEAKS: frozenset({RunPhase.DONE, RunPhase.TERMINAL}),
    RunPhase.DONE: frozenset(),
    RunPhase.TERMINAL: frozenset(),
}


def validate_transition(current: RunPhase, target: RunPhase) -> None:
    """Raise ``StateTransitionError`` unless ``current → target`` is allowed."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise StateTransitionError(
            f"Invalid run transition from {current.value} to {target.value}",
            current_state=current.value,
            attempted_transition=target.value
        )


def apply_transition(
    state: RunState,
    to_phase: RunPhase,
    run_id: str,
    trigger: str,
    context: dict = None,
    **changes
) -> RunState:
    """
    Validate, log and apply a phase change, returning the new state.

    Keyword ``changes`` are copied onto the successor state, so fields such
    as ``target`` or ``sale_open_ms`` can be set in the same step.
    """
    validate_transition(state.phase, to_phase)

    log_state_transition(
        state_logger,
        run_id=run_id,
        from_state=state.phase.value,
        to_state=to_phase.value,
        trigger=trigger,
        context=context
    )

    return state.with_phase(to_phase, **changes)
