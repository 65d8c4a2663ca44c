"""Main application entry point and text menu"""

import sys
from pathlib import Path
from typing import Callable, Optional

from .config.manager import ConfigurationManager
from .config.schema import AppConfig, DestinationChoice, OperationResult
from .core.archive_tool import ArchiveToolProvisioner
from .core.backup_service import BackupExecutor
from .core.locator import InstallationLocator, InstallationNotFoundError
from .core.process import CommandRunner
from .core.restore_service import RestoreExecutor
from .core.scheduler import BACKUP_ONLY_FLAG, ScheduleManager
from .core.service_controller import ServiceController
from .logging_config import setup_logging
from . import __app_name__, __version__

MENU = """
  1) Backup
  2) Restore
  3) Schedule automatic backup
  4) Exit
"""


def _pick_directory(initial: Path) -> Optional[Path]:
    from .gui.dialogs import choose_directory
    return choose_directory(initial)


def _pick_archive(initial: Path) -> Optional[Path]:
    from .gui.dialogs import choose_archive
    return choose_archive(initial)


class JellyfinBackupApp:
    """Application orchestrator.

    Wires the components together from one AppConfig and drives either a
    single unattended backup or the interactive menu.
    """

    def __init__(
        self,
        config: AppConfig,
        runner: Optional[CommandRunner] = None,
        service: Optional[ServiceController] = None,
        provisioner: Optional[ArchiveToolProvisioner] = None,
        pick_directory: Callable[[Path], Optional[Path]] = _pick_directory,
        pick_archive: Callable[[Path], Optional[Path]] = _pick_archive,
    ):
        self.config = config
        self.runner = runner or CommandRunner()
        self.service = service or ServiceController(self.runner)
        self.provisioner = provisioner or ArchiveToolProvisioner(
            config.tool_dir, config.archiver_url, runner=self.runner
        )
        self.pick_archive = pick_archive
        self.backup = BackupExecutor(
            config, self.service, self.provisioner, self.runner, choose_directory=pick_directory
        )
        self.restore = RestoreExecutor(config, self.service, self.provisioner, self.runner)
        self.scheduler = ScheduleManager(config.task_command, self.runner)

    def run_backup_only(self) -> OperationResult:
        """Unattended mode used by the scheduled task."""
        return self.backup.run(DestinationChoice.DEFAULT)

    def run_interactive(
        self,
        prompt: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        """Show the menu until the user chooses Exit."""
        output(f"{__app_name__} v{__version__}")
        output(f"Jellyfin data: {self.config.data_dir}")
        while True:
            output(MENU)
            try:
                choice = prompt("Select an option: ").strip()
            except (EOFError, KeyboardInterrupt):
                return

            if choice == "1":
                self._menu_backup(prompt, output)
            elif choice == "2":
                self._menu_restore(prompt, output)
            elif choice == "3":
                self._menu_schedule(prompt, output)
            elif choice == "4":
                return
            else:
                output("Invalid option")

    def _menu_backup(self, prompt, output) -> None:
        answer = prompt("Save to default folder (d) or choose a folder (c)? [d]: ").strip().lower()
        choice = DestinationChoice.INTERACTIVE if answer == "c" else DestinationChoice.DEFAULT
        result = self.backup.run(choice)
        output(result.message)

    def _menu_restore(self, prompt, output) -> None:
        output(f"WARNING: everything in {self.config.data_dir} will be deleted first.")
        answer = prompt("Continue? (y/N): ").strip().lower()
        archive = self.pick_archive(self.config.default_backup_dir) if answer == "y" else None
        result = self.restore.run(archive)
        output(result.message)

    def _menu_schedule(self, prompt, output) -> None:
        code = prompt("Frequency - (d)aily, (w)eekly, (m)onthly, (y)early: ")
        result = self.scheduler.schedule(code)
        output(result.message)


def main(argv: Optional[list[str]] = None):
    """Application entry point."""
    argv = sys.argv[1:] if argv is None else argv
    backup_only = BACKUP_ONLY_FLAG in argv

    config_manager = ConfigurationManager()
    program_dir = config_manager.config_path.parent

    # Initialize logging first
    logger = setup_logging(debug="--debug" in argv, log_dir=program_dir)
    logger.info(f"Starting {__app_name__} v{__version__}")

    try:
        if config_manager.is_first_run():
            try:
                config_manager.save()
            except OSError as e:
                logger.warning(f"Could not write default configuration: {e}")
        else:
            config_manager.load()

        data_dir = InstallationLocator().resolve()
        config = config_manager.build_app_config(data_dir, program_dir)
        app = JellyfinBackupApp(config)

        if backup_only:
            app.run_backup_only()
        else:
            app.run_interactive()
    except InstallationNotFoundError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)
    finally:
        logger.info(f"{__app_name__} shutting down")


if __name__ == "__main__":
    main()
