"""Restore the Jellyfin data directory from a backup archive.

Restoring is destructive: the data directory is emptied before 7-Zip
extracts into it. If extraction fails afterwards the directory is left
empty or partially populated; nothing is rolled back.
"""

import os
import shutil
import stat
import sys
from pathlib import Path
from typing import Optional

from ..config.path_validator import is_path_under_root, is_safe_to_clear, validate_archive_path
from ..config.schema import AppConfig, ErrorKind, OperationResult
from ..logging_config import get_logger
from .archive_tool import ArchiveToolError, ArchiveToolProvisioner
from .process import CommandRunner
from .service_controller import ServiceController

logger = get_logger("restore_service")


class RestoreExecutor:
    """Stop Jellyfin, replace its data directory from an archive, start it again."""

    def __init__(
        self,
        config: AppConfig,
        service: ServiceController,
        provisioner: ArchiveToolProvisioner,
        runner: Optional[CommandRunner] = None,
    ):
        self.config = config
        self.service = service
        self.provisioner = provisioner
        self.runner = runner or CommandRunner()

    def run(self, archive_path: Optional[Path]) -> OperationResult:
        """Restore from archive_path.

        Args:
            archive_path: Archive chosen by the user, None if the choice
                was cancelled

        Returns:
            OperationResult; a cancelled or invalid choice touches neither
            the filesystem nor the service
        """
        if archive_path is None:
            logger.info("Restore cancelled")
            return OperationResult(succeeded=False, error=ErrorKind.CANCELLED, message="Restore cancelled")

        is_valid, error = validate_archive_path(archive_path)
        if not is_valid:
            logger.error(error)
            return OperationResult(succeeded=False, error=ErrorKind.RESTORE_FAILED, message=error)

        data_dir = self.config.data_dir
        if not is_safe_to_clear(data_dir):
            message = f"Refusing to clear {data_dir}"
            logger.error(message)
            return OperationResult(succeeded=False, error=ErrorKind.RESTORE_FAILED, message=message)

        if is_path_under_root(archive_path, data_dir):
            message = f"{archive_path} is inside {data_dir} and would be deleted before extraction"
            logger.error(message)
            return OperationResult(succeeded=False, error=ErrorKind.RESTORE_FAILED, message=message)

        logger.info(f"Restoring {archive_path} into {data_dir}")
        stop_outcome = self.service.stop()
        try:
            result = self._replace_contents(archive_path)
        finally:
            start_outcome = self.service.start()

        result.archive_path = archive_path
        result.stop_outcome = stop_outcome
        result.start_outcome = start_outcome
        if result.succeeded:
            logger.info("Restore completed")
        else:
            logger.error(f"Restore failed: {result.message}")
        return result

    def _replace_contents(self, archive_path: Path) -> OperationResult:
        data_dir = self.config.data_dir
        try:
            clear_directory(data_dir)
        except OSError as e:
            return OperationResult(
                succeeded=False,
                error=ErrorKind.RESTORE_FAILED,
                message=f"Could not clear {data_dir}: {e}",
            )

        try:
            tool = self.provisioner.ensure_tool()
        except ArchiveToolError as e:
            return OperationResult(succeeded=False, error=ErrorKind.RESTORE_FAILED, message=str(e))

        result = self.runner.run([str(tool), "x", str(archive_path), f"-o{data_dir}", "-y"])
        if not result.ok:
            return OperationResult(
                succeeded=False,
                error=ErrorKind.RESTORE_FAILED,
                exit_code=result.returncode,
                message=f"7-Zip exited with code {result.returncode}",
            )

        return OperationResult(succeeded=True, exit_code=0, message=f"Restored from {archive_path}")


def _remove_readonly(func, path, _exc):
    """Error handler for shutil.rmtree to handle read-only files."""
    os.chmod(path, stat.S_IWRITE)
    func(path)


def _unlink(path: Path) -> None:
    try:
        path.unlink()
    except PermissionError:
        # Windows refuses to delete read-only files
        os.chmod(path, stat.S_IWRITE)
        path.unlink()


def clear_directory(directory: Path) -> None:
    """Delete everything inside directory, keeping the directory itself.

    Read-only files (common in media metadata copied from discs or shares)
    are made writable and deleted.
    """
    directory.mkdir(parents=True, exist_ok=True)
    for entry in directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            if sys.version_info >= (3, 12):
                shutil.rmtree(entry, onexc=_remove_readonly)
            else:
                shutil.rmtree(entry, onerror=_remove_readonly)
        else:
            _unlink(entry)
    logger.debug(f"Cleared {directory}")
