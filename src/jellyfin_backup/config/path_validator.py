"""Path validation utilities to prevent dangerous file operations.

Restore wipes the Jellyfin data directory before extracting. These checks
make sure a misresolved path can never turn that into deleting a system
directory, a drive root or the user's profile.
"""

import os
from pathlib import Path

from ..logging_config import get_logger

logger = get_logger("path_validator")

# Protected Windows system directories that must never be cleared themselves
PROTECTED_DIRECTORIES = [
    "C:\\Windows",
    "C:\\Program Files",
    "C:\\Program Files (x86)",
    "C:\\ProgramData",
    "C:\\Users",
    "C:\\Users\\Default",
    "C:\\Users\\Public",
]

# Additional protected paths based on environment variables
PROTECTED_ENV_PATHS = [
    "WINDIR",
    "SYSTEMROOT",
    "PROGRAMFILES",
    "PROGRAMFILES(X86)",
    "PROGRAMDATA",
    "LOCALAPPDATA",
    "APPDATA",
    "USERPROFILE",
]


def _get_protected_paths() -> set[Path]:
    """Build the set of protected paths including environment-based ones."""
    protected = set()

    for dir_path in PROTECTED_DIRECTORIES:
        try:
            protected.add(Path(dir_path).resolve())
        except (OSError, ValueError):
            pass

    for env_var in PROTECTED_ENV_PATHS:
        env_value = os.environ.get(env_var)
        if env_value:
            try:
                protected.add(Path(env_value).resolve())
            except (OSError, ValueError):
                pass

    try:
        protected.add(Path.home().resolve())
    except (OSError, RuntimeError):
        pass

    return protected


def is_safe_to_clear(path: Path) -> bool:
    """Check if a directory's contents may be deleted.

    Directories beneath a protected root (for example
    C:\\ProgramData\\Jellyfin\\Server) are allowed; the protected roots
    themselves and filesystem roots are not.

    Args:
        path: The directory to validate

    Returns:
        True if the directory may be cleared, False otherwise
    """
    try:
        resolved = path.resolve()
    except (OSError, ValueError) as e:
        logger.warning("Failed to resolve path %s: %s", path, e)
        return False

    if resolved == Path(resolved.anchor) or resolved.parent == resolved:
        logger.warning("Refusing to clear filesystem root %s", path)
        return False

    if resolved in _get_protected_paths():
        logger.warning("Refusing to clear protected directory %s", path)
        return False

    return True


def is_path_under_root(path: Path, root: Path) -> bool:
    """Check if a path is under a given root directory.

    Args:
        path: The path to check
        root: The root directory

    Returns:
        True if path is root or lies beneath it, False otherwise
    """
    try:
        path_resolved = path.resolve()
        root_resolved = root.resolve()
        return path_resolved == root_resolved or root_resolved in path_resolved.parents
    except (OSError, ValueError) as e:
        logger.warning("Failed to check path relationship: %s", e)
        return False


def validate_archive_path(archive_path: Path) -> tuple[bool, str]:
    """Validate a backup archive before restoring from it.

    Args:
        archive_path: The archive chosen by the user

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not archive_path:
        return False, "Archive path is empty"

    try:
        resolved = archive_path.resolve()
    except (OSError, ValueError) as e:
        return False, f"Invalid path: {e}"

    if not resolved.exists():
        return False, f"Archive does not exist: {archive_path}"

    if not resolved.is_file():
        return False, f"Archive is not a file: {archive_path}"

    return True, ""
