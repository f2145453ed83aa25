"""Progress reporting for long running cluster operations."""
import logging
from typing import Optional


class Status:
    """Reports the start and end of a unit of work to a logger.

    Only one status message is active at a time. Starting a new one while
    another is still running ends the previous one successfully.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._status: Optional[str] = None

    def start(self, status: str) -> None:
        self.end(True)
        self._status = status
        self.logger.info(f" • {status} ...")

    def end(self, success: bool) -> None:
        if not self._status:
            return
        if success:
            self.logger.info(f" ✓ {self._status}")
        else:
            self.logger.error(f" ✗ {self._status}")
        self._status = None


def status_for_logger(logger: logging.Logger) -> Status:
    return Status(logger)
