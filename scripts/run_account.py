#!/usr/bin/env python3
"""Run a ticket acquisition for one configured account."""

import argparse
import signal
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ticket_app.config.loader import ConfigLoader
from ticket_app.engine import TicketAcquisitionEngine
from ticket_app.errors import ConfigurationError, PreconditionError
from ticket_app.gateway.factory import create_gateway
from ticket_app.logging.config import configure_logging, get_logger
from ticket_app.state.models import RunPhase


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("login_id", help="Account login id as listed in accounts.yaml")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding accounts.yaml")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--json-logs", action="store_true",
                        help="Emit JSON log lines instead of console output")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json_logs)
    logger = get_logger("ticket_app.run")

    try:
        account = ConfigLoader.create(args.config_dir).load_account(args.login_id)
        gateway = create_gateway(account)
    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e))
        return 2

    engine = TicketAcquisitionEngine(account, gateway)

    # Ctrl-C is only honoured while counting down; a running burst completes
    signal.signal(signal.SIGINT, lambda signum, frame: engine.cancel())

    try:
        state = engine.run()
    except PreconditionError as e:
        logger.error("Run aborted", stage=e.stage, error=str(e))
        return 2

    if state.phase == RunPhase.DONE and state.success:
        print("\n✅ Order placed, complete payment in the app.")
        return 0

    print("\n❌ Tickets not acquired.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
