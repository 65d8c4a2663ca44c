"""Stop and start the Jellyfin server around backup and restore.

The server runs either as the JellyfinServer Windows service or as a plain
jellyfin.exe process (tray install). Both stop() and start() try an ordered
list of strategies and report an outcome instead of raising, so the calling
workflow always reaches its restart step.
"""

import time
from pathlib import Path
from typing import Callable, Iterable, Optional

import psutil

from ..config.paths import AppPaths
from ..config.schema import StartOutcome, StopOutcome, StrategyOutcome
from ..logging_config import get_logger
from .process import CommandRunner

logger = get_logger("service_controller")

SERVICE_NAME = "JellyfinServer"
PROCESS_NAME = "jellyfin.exe"

# Pause after stopping so Jellyfin's file handles are released
STOP_GRACE_SECONDS = 3.0
SETTLE_TIMEOUT_SECONDS = 30.0
POLL_INTERVAL_SECONDS = 1.0


class ServiceController:
    """Best-effort control of the Jellyfin server.

    No state is kept between calls; the service and process tables are
    queried fresh every time.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        launch_candidates: Optional[Iterable[Path]] = None,
        service_name: str = SERVICE_NAME,
        process_name: str = PROCESS_NAME,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        grace_seconds: float = STOP_GRACE_SECONDS,
        settle_timeout: float = SETTLE_TIMEOUT_SECONDS,
    ):
        self.runner = runner or CommandRunner()
        self.launch_candidates = (
            list(launch_candidates) if launch_candidates is not None else AppPaths.launch_candidates()
        )
        self.service_name = service_name
        self.process_name = process_name
        self._sleep = sleep
        self._clock = clock
        self.grace_seconds = grace_seconds
        self.settle_timeout = settle_timeout

    # ------------------------------------------------------------------
    # Observed state
    # ------------------------------------------------------------------

    def service_state(self) -> Optional[str]:
        """Return the service state (e.g. RUNNING, STOPPED), or None if not registered."""
        # win_service_get only exists in psutil builds for Windows
        get_service = getattr(psutil, "win_service_get", None)
        if get_service is None:
            return None
        try:
            return get_service(self.service_name).status().upper()
        except psutil.NoSuchProcess:
            return None
        except (psutil.Error, OSError) as e:
            logger.debug(f"Cannot query service {self.service_name}: {e}")
            return None

    def find_processes(self) -> list:
        """Running processes whose image name matches the server executable."""
        wanted = self.process_name.lower()
        return [
            proc for proc in psutil.process_iter(["name"])
            if (proc.info.get("name") or "").lower() == wanted
        ]

    def process_running(self) -> bool:
        return bool(self.find_processes())

    # ------------------------------------------------------------------
    # Stop
    # ------------------------------------------------------------------

    def stop(self) -> StopOutcome:
        """Stop the server using the first applicable strategy.

        Returns:
            STOPPED, NOT_RUNNING or STOP_FAILED
        """
        for strategy in (self._stop_service, self._kill_process):
            try:
                outcome = strategy()
            except OSError as e:
                logger.warning(f"{strategy.__name__} raised {e}")
                outcome = StrategyOutcome.FAILED

            if outcome is StrategyOutcome.NOT_APPLICABLE:
                continue
            if outcome is StrategyOutcome.SUCCEEDED:
                logger.info(f"Jellyfin stopped, waiting {self.grace_seconds:g}s for file handles")
                self._sleep(self.grace_seconds)
                return StopOutcome.STOPPED
            logger.warning("Jellyfin could not be stopped, continuing anyway")
            return StopOutcome.STOP_FAILED

        logger.info("Jellyfin is not running")
        return StopOutcome.NOT_RUNNING

    def _stop_service(self) -> StrategyOutcome:
        state = self.service_state()
        if state is None or state == "STOPPED":
            return StrategyOutcome.NOT_APPLICABLE

        logger.info(f"Stopping service {self.service_name}")
        # /y also stops dependent services without prompting
        self.runner.run(["net", "stop", self.service_name, "/y"])
        if self._wait_until(lambda: self.service_state() in (None, "STOPPED")):
            return StrategyOutcome.SUCCEEDED
        return StrategyOutcome.FAILED

    def _kill_process(self) -> StrategyOutcome:
        processes = self.find_processes()
        if not processes:
            return StrategyOutcome.NOT_APPLICABLE

        logger.info(f"Terminating {len(processes)} {self.process_name} process(es)")
        for proc in processes:
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                pass
            except psutil.AccessDenied as e:
                logger.warning(f"Access denied killing pid {proc.pid}: {e}")

        _, alive = psutil.wait_procs(processes, timeout=self.settle_timeout)
        if alive:
            logger.warning(f"{len(alive)} {self.process_name} process(es) still running")
            return StrategyOutcome.FAILED
        return StrategyOutcome.SUCCEEDED

    def _wait_until(self, condition: Callable[[], bool]) -> bool:
        """Poll condition until it holds or the settle timeout expires."""
        deadline = self._clock() + self.settle_timeout
        while True:
            if condition():
                return True
            if self._clock() >= deadline:
                return False
            self._sleep(POLL_INTERVAL_SECONDS)

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    def start(self) -> StartOutcome:
        """Start the server using the first applicable strategy.

        Returns:
            STARTED, MANUAL_START_REQUIRED or START_FAILED
        """
        for strategy in (self._start_service, self._launch_process):
            try:
                outcome = strategy()
            except OSError as e:
                logger.warning(f"{strategy.__name__} raised {e}")
                outcome = StrategyOutcome.FAILED

            if outcome is StrategyOutcome.NOT_APPLICABLE:
                continue
            if outcome is StrategyOutcome.SUCCEEDED:
                logger.info("Jellyfin started")
                return StartOutcome.STARTED
            logger.error("Jellyfin could not be started, please start it manually")
            return StartOutcome.START_FAILED

        logger.warning("No Jellyfin service or executable found, please start Jellyfin manually")
        return StartOutcome.MANUAL_START_REQUIRED

    def _start_service(self) -> StrategyOutcome:
        state = self.service_state()
        if state is None:
            return StrategyOutcome.NOT_APPLICABLE

        logger.info(f"Starting service {self.service_name}")
        result = self.runner.run(["net", "start", self.service_name])
        if result.ok or self.service_state() == "RUNNING":
            return StrategyOutcome.SUCCEEDED
        return StrategyOutcome.FAILED

    def _launch_process(self) -> StrategyOutcome:
        executable = next((p for p in self.launch_candidates if p.is_file()), None)
        if executable is None:
            return StrategyOutcome.NOT_APPLICABLE

        logger.info(f"Launching {executable}")
        if self.runner.launch([str(executable)]):
            return StrategyOutcome.SUCCEEDED
        return StrategyOutcome.FAILED
