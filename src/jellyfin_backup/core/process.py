"""Thin wrapper around external process invocation.

Every external program this application drives (7-Zip, net, schtasks,
tar, PowerShell) goes through CommandRunner, so the
workflows can be tested with a recording fake and exit codes stay the only
success signal.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..logging_config import get_logger

logger = get_logger("process")

# Exit code reported when the executable could not be started at all
NOT_STARTED = -1

# Windows-only creation flags; zero elsewhere so the module imports anywhere
DETACHED_PROCESS = getattr(subprocess, "DETACHED_PROCESS", 0)
CREATE_NEW_PROCESS_GROUP = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
CREATE_NO_WINDOW = getattr(subprocess, "CREATE_NO_WINDOW", 0)


@dataclass
class CommandResult:
    """Exit code and captured output of a finished command"""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run external commands synchronously.

    No timeout is applied: archive and service operations on a large
    library can legitimately take a long time.
    """

    def run(self, args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        """Run a command and wait for it to finish.

        Args:
            args: Program and arguments
            cwd: Optional working directory

        Returns:
            CommandResult; a missing executable yields NOT_STARTED instead
            of raising
        """
        args = [str(a) for a in args]
        logger.debug("Running: %s", subprocess.list2cmdline(args))
        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
                creationflags=CREATE_NO_WINDOW,
            )
        except OSError as e:
            logger.warning("Could not run %s: %s", args[0], e)
            return CommandResult(returncode=NOT_STARTED, stderr=str(e))

        if completed.returncode != 0:
            logger.debug("%s exited with %d: %s", args[0], completed.returncode, completed.stderr.strip())
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def launch(self, args: Sequence[str]) -> bool:
        """Start a detached process that outlives this program.

        Args:
            args: Program and arguments

        Returns:
            True if the process was started
        """
        args = [str(a) for a in args]
        logger.debug("Launching detached: %s", subprocess.list2cmdline(args))
        try:
            subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                close_fds=True,
                creationflags=DETACHED_PROCESS | CREATE_NEW_PROCESS_GROUP,
            )
        except OSError as e:
            logger.warning("Could not launch %s: %s", args[0], e)
            return False
        return True
