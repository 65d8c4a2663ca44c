"""Register the unattended backup in Windows Task Scheduler"""

import subprocess
from typing import Optional, Sequence

from ..config.schema import ErrorKind, Frequency, ScheduleResult
from ..logging_config import get_logger
from .process import CommandRunner

logger = get_logger("scheduler")

TASK_NAME = "JellyfinBackup"
TASK_START_TIME = "03:00"
BACKUP_ONLY_FLAG = "--backup-only"

# "y" is offered as yearly in the menu but registers a single run
FREQUENCY_CODES = {
    "d": Frequency.DAILY,
    "w": Frequency.WEEKLY,
    "m": Frequency.MONTHLY,
    "y": Frequency.ONCE,
}


def frequency_for(code: str) -> Optional[Frequency]:
    """Map a menu code to a recurrence, None if the code is unknown."""
    return FREQUENCY_CODES.get(code.strip().lower()) if code else None


class ScheduleManager:
    """Maintain at most one scheduled backup task.

    Scheduling again replaces the previous task.
    """

    def __init__(
        self,
        task_command: Sequence[str],
        runner: Optional[CommandRunner] = None,
        task_name: str = TASK_NAME,
        start_time: str = TASK_START_TIME,
    ):
        self.task_command = list(task_command)
        self.runner = runner or CommandRunner()
        self.task_name = task_name
        self.start_time = start_time

    def build_task_run(self) -> str:
        """Command line stored in the task's /TR field."""
        return subprocess.list2cmdline([*self.task_command, BACKUP_ONLY_FLAG])

    def schedule(self, code: str) -> ScheduleResult:
        """Register a backup at 03:00 with the recurrence selected by code.

        Args:
            code: d (daily), w (weekly), m (monthly) or y (once)

        Returns:
            ScheduleResult; an unknown code changes nothing
        """
        frequency = frequency_for(code)
        if frequency is None:
            logger.warning(f"Invalid schedule frequency: {code!r}")
            return ScheduleResult(
                succeeded=False,
                error=ErrorKind.INVALID_FREQUENCY,
                message=f"Unknown frequency {code!r}, expected one of d, w, m, y",
            )

        self.unschedule()

        args = [
            "schtasks", "/Create",
            "/TN", self.task_name,
            "/TR", self.build_task_run(),
            "/SC", frequency.value,
            "/ST", self.start_time,
            "/RL", "HIGHEST",
            "/F",
        ]
        result = self.runner.run(args)
        if not result.ok:
            message = result.stderr.strip() or f"schtasks exited with code {result.returncode}"
            logger.error(f"Failed to register scheduled task: {message}")
            return ScheduleResult(
                succeeded=False,
                frequency=frequency,
                error=ErrorKind.SCHEDULE_FAILED,
                exit_code=result.returncode,
                message=message,
            )

        logger.info(f"Scheduled task '{self.task_name}' registered: {frequency.value} at {self.start_time}")
        return ScheduleResult(
            succeeded=True,
            frequency=frequency,
            exit_code=0,
            message=f"Backup scheduled {frequency.value.lower()} at {self.start_time}",
        )

    def unschedule(self) -> bool:
        """Delete the scheduled task.

        Returns:
            True if a task was removed, False if none existed
        """
        result = self.runner.run(["schtasks", "/Delete", "/TN", self.task_name, "/F"])
        if result.ok:
            logger.info(f"Removed existing scheduled task '{self.task_name}'")
        else:
            logger.debug(f"No scheduled task '{self.task_name}' to remove")
        return result.ok
