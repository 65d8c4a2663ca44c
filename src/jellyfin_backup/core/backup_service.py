"""Create ZIP backups of the Jellyfin data directory with 7-Zip"""

import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..config.schema import AppConfig, DestinationChoice, ErrorKind, OperationResult
from ..logging_config import get_logger
from .archive_tool import ArchiveToolError, ArchiveToolProvisioner
from .process import CommandRunner
from .service_controller import ServiceController

logger = get_logger("backup_service")

ARCHIVE_PREFIX = "JellyfinBackup_"
ARCHIVE_PATTERN = re.compile(r"^JellyfinBackup_\d{8}_\d{6}(_\d+)?\.zip$")

# 7-Zip "create" switches: zip container, normal level, deflate, assume yes
CREATE_SWITCHES = ["-tzip", "-mx=5", "-mm=Deflate", "-y"]


def archive_name(timestamp: datetime) -> str:
    """Build the archive filename for a backup taken at timestamp.

    Names sort chronologically.
    """
    return f"{ARCHIVE_PREFIX}{timestamp.strftime('%Y%m%d_%H%M%S')}.zip"


def unique_archive_path(destination: Path, timestamp: datetime) -> Path:
    """Return a path for a new archive that does not exist yet.

    Existing archives are never written to, so a clash within the same
    second (or after the clock stepped back) gets a _1, _2, ... suffix.
    """
    first = destination / archive_name(timestamp)
    candidate = first
    counter = 1
    while candidate.exists():
        candidate = first.with_name(f"{first.stem}_{counter}{first.suffix}")
        counter += 1
    return candidate


class BackupExecutor:
    """Stop Jellyfin, archive its data directory, start Jellyfin again.

    The restart happens no matter how the archive step ends.
    """

    def __init__(
        self,
        config: AppConfig,
        service: ServiceController,
        provisioner: ArchiveToolProvisioner,
        runner: Optional[CommandRunner] = None,
        choose_directory: Optional[Callable[[Path], Optional[Path]]] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.service = service
        self.provisioner = provisioner
        self.runner = runner or CommandRunner()
        self.choose_directory = choose_directory
        self._now = now

    def run(self, choice: DestinationChoice = DestinationChoice.DEFAULT) -> OperationResult:
        """Run one backup.

        Args:
            choice: Write to the default Backups folder or ask the user

        Returns:
            OperationResult with the archive path on success
        """
        logger.info(f"Starting backup of {self.config.data_dir}")
        stop_outcome = self.service.stop()
        try:
            result = self._create_archive(choice)
        finally:
            start_outcome = self.service.start()

        result.stop_outcome = stop_outcome
        result.start_outcome = start_outcome
        if result.succeeded:
            logger.info(f"Backup completed: {result.archive_path}")
        elif result.cancelled:
            logger.info("Backup cancelled")
        else:
            logger.error(f"Backup failed: {result.message}")
        return result

    def _resolve_destination(self, choice: DestinationChoice) -> Optional[Path]:
        if choice is DestinationChoice.DEFAULT:
            return self.config.default_backup_dir
        if self.choose_directory is None:
            logger.warning("No folder picker available for interactive destination")
            return None
        return self.choose_directory(self.config.default_backup_dir)

    def _create_archive(self, choice: DestinationChoice) -> OperationResult:
        destination = self._resolve_destination(choice)
        if destination is None:
            return OperationResult(
                succeeded=False,
                error=ErrorKind.NO_DESTINATION,
                message="No backup destination selected",
            )

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return OperationResult(
                succeeded=False,
                error=ErrorKind.BACKUP_FAILED,
                message=f"Cannot create backup folder {destination}: {e}",
            )

        archive_path = unique_archive_path(destination, self._now())

        try:
            tool = self.provisioner.ensure_tool()
        except ArchiveToolError as e:
            return OperationResult(
                succeeded=False,
                error=ErrorKind.BACKUP_FAILED,
                archive_path=archive_path,
                message=str(e),
            )

        logger.info(f"Creating archive {archive_path}")
        source = self.config.data_dir / "*"
        result = self.runner.run([str(tool), "a", *CREATE_SWITCHES, str(archive_path), str(source)])
        if not result.ok:
            return OperationResult(
                succeeded=False,
                error=ErrorKind.BACKUP_FAILED,
                exit_code=result.returncode,
                archive_path=archive_path,
                message=f"7-Zip exited with code {result.returncode}",
            )

        if archive_path.exists():
            size_mb = archive_path.stat().st_size / (1024 * 1024)
            logger.info(f"Archive size: {size_mb:.1f} MB")

        return OperationResult(
            succeeded=True,
            exit_code=0,
            archive_path=archive_path,
            message=f"Backup saved to {archive_path}",
        )
