"""
Centralized logging configuration for the ticket acquisition engine.

This module configures structlog on top of the standard library logging
module. Every component obtains its logger from here so that countdown,
burst and state machine events share one format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # Millisecond timestamps matter when reading burst timings
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_purchase_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for purchase bursts and inventory polling.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the purchase subsystem tag
    """
    return get_logger(name).bind(subsystem="purchase")


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger specifically configured for run state transitions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for state transitions
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="state_machine",
        audit_trail=True
    )


def log_attempt(
    logger: FilteringBoundLogger,
    attempt: int,
    outcome: str,
    elapsed_ms: int,
    wait_ms: Optional[int] = None,
    reason: Optional[str] = None
) -> None:
    """
    Log a single purchase attempt with its timing.

    Args:
        logger: Structlog logger instance
        attempt: Zero-based attempt index within the burst
        outcome: Outcome kind of the attempt
        elapsed_ms: Wall-clock duration of the attempt
        wait_ms: Interval scheduled before the next attempt
        reason: Remote reason for a rejected or transient outcome
    """
    bound_logger = logger.bind(
        attempt=attempt,
        outcome=outcome,
        elapsed_ms=elapsed_ms,
    )
    if wait_ms is not None:
        bound_logger = bound_logger.bind(wait_ms=wait_ms)
    if reason:
        bound_logger = bound_logger.bind(reason=reason)

    bound_logger.info("Purchase attempt finished")


def log_state_transition(
    logger: FilteringBoundLogger,
    run_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a state transition with standardized format.

    Args:
        logger: Structlog logger instance
        run_id: Identifier of the run (account login id)
        from_state: Current phase
        to_state: Target phase
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        run_id=run_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")
