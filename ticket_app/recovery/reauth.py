"""Re-authentication strategies for an invalidated session."""

import subprocess
from abc import ABC, abstractmethod
from typing import Sequence

from ..config.defaults import ReauthConfig
from ..logging.config import get_logger

logger = get_logger(__name__)


class Reauthenticator(ABC):
    """Recovers a login session after the run hit a busy/invalid session."""

    @abstractmethod
    def reauthenticate(self, login_id: str) -> bool:
        """
        Attempt to refresh the session for ``login_id``.

        Returns:
            True if the helper reported success
        """


class NoopReauthenticator(Reauthenticator):
    """Used when no helper is configured; only logs."""

    def reauthenticate(self, login_id: str) -> bool:
        logger.warning("No re-authentication helper configured, log in again manually",
                       login_id=login_id)
        return False


class SubprocessReauthenticator(Reauthenticator):
    """Runs an external helper as ``<command...> --login_id <login_id>``."""

    def __init__(self, command: Sequence[str], timeout_seconds: int = 300):
        self.command = list(command)
        self.timeout_seconds = timeout_seconds

    def reauthenticate(self, login_id: str) -> bool:
        argv = self.command + ["--login_id", login_id]
        logger.info("Running re-authentication helper", argv=argv)

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("Re-authentication helper could not run", argv=argv, error=str(e))
            return False

        if result.returncode == 0:
            logger.info("Re-authentication helper succeeded", stdout=result.stdout.strip())
            return True

        logger.error(
            "Re-authentication helper failed",
            returncode=result.returncode,
            stderr=result.stderr.strip()
        )
        return False


def create_reauthenticator(config: ReauthConfig) -> Reauthenticator:
    """Build the strategy described by ``config``."""
    if config.enabled and config.command:
        return SubprocessReauthenticator(config.command, config.timeout_seconds)
    return NoopReauthenticator()
