"""Default paths for the Jellyfin installation and this program"""

import os
import sys
from pathlib import Path


class AppPaths:
    """Default paths for Jellyfin data, 7-Zip and backups.

    All paths use environment variable expansion for portability.
    """

    # Jellyfin data directories, highest priority first. The two user-scoped
    # entries differ only in casing because installers have used both.
    DATA_SYSTEM = Path(os.path.expandvars(r"%ProgramData%\Jellyfin\Server"))
    DATA_USER_LOWER = Path(os.path.expandvars(r"%LOCALAPPDATA%\jellyfin"))
    DATA_USER_UPPER = Path(os.path.expandvars(r"%LOCALAPPDATA%\Jellyfin"))

    # Server executables used when no Windows service is registered
    SERVER_EXE_USER = Path(os.path.expandvars(r"%LOCALAPPDATA%\Programs\Jellyfin\Server\jellyfin.exe"))
    SERVER_EXE_SYSTEM = Path(os.path.expandvars(r"%ProgramFiles%\Jellyfin\Server\jellyfin.exe"))

    # Installed 7-Zip, used only to unpack the portable download
    SEVEN_ZIP_INSTALLED = Path(os.path.expandvars(r"%ProgramFiles%\7-Zip\7z.exe"))

    # Used when not running as a frozen executable
    USER_HOME_DIR = Path(os.path.expandvars(r"%APPDATA%\JellyfinBackup"))

    TOOL_DIR_NAME = "7zip"
    BACKUP_DIR_NAME = "Backups"
    CONFIG_FILE_NAME = "configuration.xml"

    @classmethod
    def program_dir(cls) -> Path:
        """Directory that holds the 7zip folder, backups, config and log.

        Frozen builds (PyInstaller) keep everything beside the executable,
        matching a portable install. A pip install has no meaningful
        location of its own, so the per-user application data folder is used.

        Returns:
            Path to the program directory
        """
        if getattr(sys, 'frozen', False):
            return Path(sys.executable).resolve().parent
        return cls.USER_HOME_DIR

    @classmethod
    def config_file(cls) -> Path:
        return cls.program_dir() / cls.CONFIG_FILE_NAME

    @classmethod
    def data_dir_candidates(cls) -> list[Path]:
        """Candidate Jellyfin data directories in priority order."""
        return [cls.DATA_SYSTEM, cls.DATA_USER_LOWER, cls.DATA_USER_UPPER]

    @classmethod
    def launch_candidates(cls) -> list[Path]:
        """Server executables to try when starting without a service."""
        return [cls.SERVER_EXE_USER, cls.SERVER_EXE_SYSTEM]

    @classmethod
    def task_command(cls) -> list[str]:
        """Command line the scheduled task uses to re-invoke this program.

        Returns:
            Argument list without the backup-only flag
        """
        if getattr(sys, 'frozen', False):
            return [str(Path(sys.executable).resolve())]
        return [sys.executable, "-m", "jellyfin_backup"]

    @classmethod
    def expand_path(cls, path_str: str) -> Path:
        """Expand environment variables in path string.

        Args:
            path_str: Path string potentially containing environment variables

        Returns:
            Path object with expanded variables
        """
        return Path(os.path.expandvars(path_str))
