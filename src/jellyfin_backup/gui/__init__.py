"""GUI module using CustomTkinter for native pickers.

The application itself is driven from a text menu; only path selection
opens a window.

Components:
    choose_directory: Folder picker for the backup destination
    choose_archive: File picker for the archive to restore
"""

from .dialogs import choose_archive, choose_directory

__all__ = [
    "choose_archive",
    "choose_directory",
]
