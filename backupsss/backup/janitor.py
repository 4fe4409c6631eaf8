"""
Retention policy enforcement for backups.

Keeps the N most recent archives in a storage driver and removes the rest.
Ordering comes from the driver (`ls_rt`, newest first) and is never
re-sorted here.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .storage import StorageDriver, RemovalError


logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Outcome of removing one archive."""
    name: str
    removed: bool
    error: Optional[str] = None


class Janitor:
    """
    Prunes old backups from a storage driver.

    Everything past the first `retention_count` entries of the driver's
    listing is garbage.
    """

    def __init__(self, driver: StorageDriver, retention_count: int = 0):
        """
        Initialize janitor.

        Args:
            driver: Storage driver providing ls_rt() and rm(name)
            retention_count: Number of most recent archives to keep (default: 0)
        """
        if retention_count < 0:
            raise ValueError(f"retention_count must be >= 0, got {retention_count}")

        self.driver = driver
        self._retention_count = retention_count
        self.logs = []

    @property
    def retention_count(self) -> int:
        return self._retention_count

    def sift_trash(self) -> List[str]:
        """
        List the driver's archives and pick out the garbage.

        Returns:
            Archive names past the retention window, in listing order
        """
        listing = self.driver.ls_rt()

        if not listing:
            self._log("No garbage found")
            return []

        self._log("Found garbage...")
        for index, name in enumerate(listing):
            if index < self._retention_count:
                self._log(f"{name} (retaining)")
            else:
                self._log(name)

        return list(listing[self._retention_count:])

    def rm_garbage(self, garbage: List[str]) -> List[CleanupResult]:
        """
        Remove each archive, carrying on past individual failures.

        Args:
            garbage: Archive names to remove, in order

        Returns:
            One CleanupResult per name, in the same order
        """
        results = [self._rm_one(name) for name in garbage]
        self._log("Finished cleaning up.")
        return results

    def cleanup(self) -> List[CleanupResult]:
        """Sift and remove in one go."""
        return self.rm_garbage(self.sift_trash())

    def _rm_one(self, name: str) -> CleanupResult:
        self._log(f"Cleaning up {name}")
        try:
            self.driver.rm(name)
        except RemovalError as e:
            self._log(f"Could not clean up {name}: {e}", level=logging.WARNING)
            return CleanupResult(name, removed=False, error=str(e))
        return CleanupResult(name, removed=True)

    def _log(self, message: str, level: int = logging.INFO):
        self.logs.append(message)
        logger.log(level, message)
