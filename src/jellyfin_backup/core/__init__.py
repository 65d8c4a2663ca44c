"""Core business logic module.

Submodules:
    locator: InstallationLocator picks the Jellyfin data directory
    archive_tool: ArchiveToolProvisioner downloads and caches portable 7-Zip
    service_controller: ServiceController stops/starts the service or process
    backup_service: BackupExecutor creates timestamped ZIP backups
    restore_service: RestoreExecutor replaces the data directory from a backup
    scheduler: ScheduleManager registers the unattended backup task
    process: CommandRunner wraps every external command
"""

from .archive_tool import ArchiveToolError, ArchiveToolProvisioner
from .backup_service import BackupExecutor
from .locator import InstallationLocator, InstallationNotFoundError
from .process import CommandResult, CommandRunner
from .restore_service import RestoreExecutor
from .scheduler import ScheduleManager
from .service_controller import ServiceController

__all__ = [
    "ArchiveToolError",
    "ArchiveToolProvisioner",
    "BackupExecutor",
    "InstallationLocator",
    "InstallationNotFoundError",
    "CommandResult",
    "CommandRunner",
    "RestoreExecutor",
    "ScheduleManager",
    "ServiceController",
]
