"""Configuration and result data models"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

DEFAULT_ARCHIVER_URL = "https://www.7-zip.org/a/7z2409-extra.7z"


class StrategyOutcome(Enum):
    """Result of one step in an ordered list of fallbacks"""
    SUCCEEDED = "succeeded"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


class StopOutcome(Enum):
    """Result of stopping the Jellyfin server"""
    STOPPED = "stopped"
    NOT_RUNNING = "not_running"
    STOP_FAILED = "stop_failed"


class StartOutcome(Enum):
    """Result of starting the Jellyfin server"""
    STARTED = "started"
    MANUAL_START_REQUIRED = "manual_start_required"
    START_FAILED = "start_failed"


class ErrorKind(Enum):
    """Reasons an operation did not complete"""
    NOT_FOUND = "NotFound"
    ACQUISITION_ERROR = "AcquisitionError"
    NO_DESTINATION = "NoDestination"
    CANCELLED = "Cancelled"
    BACKUP_FAILED = "BackupFailed"
    RESTORE_FAILED = "RestoreFailed"
    INVALID_FREQUENCY = "InvalidFrequency"
    SCHEDULE_FAILED = "ScheduleFailed"


class Frequency(Enum):
    """Task Scheduler recurrence, values are schtasks /SC tokens"""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    ONCE = "ONCE"


class DestinationChoice(Enum):
    """Where a backup archive should be written"""
    DEFAULT = "default"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration, resolved once at startup.

    Passed explicitly to every component; nothing reads global state.
    """
    data_dir: Path
    tool_dir: Path
    default_backup_dir: Path
    archiver_url: str = DEFAULT_ARCHIVER_URL
    task_command: tuple[str, ...] = ()


@dataclass
class Settings:
    """User-editable settings stored in configuration.xml"""
    backup_location: Optional[Path] = None
    archiver_url: str = DEFAULT_ARCHIVER_URL


@dataclass
class OperationResult:
    """Outcome of a backup or restore run"""
    succeeded: bool
    error: Optional[ErrorKind] = None
    exit_code: Optional[int] = None
    archive_path: Optional[Path] = None
    message: str = ""
    stop_outcome: Optional[StopOutcome] = None
    start_outcome: Optional[StartOutcome] = None

    @property
    def cancelled(self) -> bool:
        """True when the user declined an interactive choice."""
        return self.error in (ErrorKind.CANCELLED, ErrorKind.NO_DESTINATION)


@dataclass
class ScheduleResult:
    """Outcome of registering the scheduled backup"""
    succeeded: bool
    frequency: Optional[Frequency] = None
    error: Optional[ErrorKind] = None
    exit_code: Optional[int] = None
    message: str = ""
