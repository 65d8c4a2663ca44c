"""Locate the Jellyfin data directory"""

from pathlib import Path
from typing import Callable, Iterable, Optional

from ..config.paths import AppPaths
from ..logging_config import get_logger

logger = get_logger("locator")


class InstallationNotFoundError(Exception):
    """Raised when none of the candidate data directories exist"""

    def __init__(self, candidates: list[Path]):
        self.candidates = candidates
        listing = "\n".join(f"  - {c}" for c in candidates)
        super().__init__(f"Jellyfin data directory not found. Checked:\n{listing}")


class InstallationLocator:
    """Pick the single authoritative Jellyfin data directory.

    Candidates are checked in priority order (system-wide first, then the
    two user-scoped casings) and the first existing directory wins. Later
    candidates are not touched once one matches.
    """

    def __init__(
        self,
        candidates: Optional[Iterable[Path]] = None,
        exists: Callable[[Path], bool] = Path.is_dir,
    ):
        self.candidates = list(candidates) if candidates is not None else AppPaths.data_dir_candidates()
        self._exists = exists

    def resolve(self) -> Path:
        """Return the highest-priority existing data directory.

        Raises:
            InstallationNotFoundError: If no candidate exists
        """
        for candidate in self.candidates:
            try:
                found = self._exists(candidate)
            except OSError as e:
                logger.debug(f"Cannot access {candidate}: {e}")
                found = False
            if found:
                logger.info(f"Using Jellyfin data directory: {candidate}")
                return candidate
            logger.debug(f"Data directory candidate not present: {candidate}")

        logger.error("No Jellyfin data directory found")
        raise InstallationNotFoundError(self.candidates)
