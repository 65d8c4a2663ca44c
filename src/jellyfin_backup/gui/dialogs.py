"""Native folder and file pickers"""

from pathlib import Path
from tkinter import filedialog
from typing import Optional

import customtkinter as ctk


def _hidden_root() -> ctk.CTk:
    """Create an invisible, topmost window to own a dialog."""
    ctk.set_appearance_mode("system")
    root = ctk.CTk()
    root.withdraw()
    root.attributes("-topmost", True)
    return root


def choose_directory(initial_dir: Optional[Path] = None) -> Optional[Path]:
    """Ask the user for a backup destination folder.

    Args:
        initial_dir: Folder the dialog opens in

    Returns:
        Selected folder, or None if cancelled
    """
    root = _hidden_root()
    try:
        selected = filedialog.askdirectory(
            parent=root,
            initialdir=str(initial_dir) if initial_dir and initial_dir.exists() else None,
            title="Select Backup Folder",
        )
    finally:
        root.destroy()
    return Path(selected) if selected else None


def choose_archive(initial_dir: Optional[Path] = None) -> Optional[Path]:
    """Ask the user for a backup archive to restore.

    Args:
        initial_dir: Folder the dialog opens in

    Returns:
        Selected archive, or None if cancelled
    """
    root = _hidden_root()
    try:
        selected = filedialog.askopenfilename(
            parent=root,
            initialdir=str(initial_dir) if initial_dir and initial_dir.exists() else None,
            title="Select Jellyfin Backup",
            filetypes=[("ZIP archives", "*.zip"), ("All files", "*.*")],
        )
    finally:
        root.destroy()
    return Path(selected) if selected else None
