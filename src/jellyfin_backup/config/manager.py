"""Configuration management - load/save XML settings"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional
from xml.dom import minidom

from .paths import AppPaths
from .schema import DEFAULT_ARCHIVER_URL, AppConfig, Settings
from ..logging_config import get_logger

logger = get_logger("config_manager")


class ConfigurationManager:
    """Manages the optional configuration.xml beside the program.

    Every setting has a default, so a missing or unreadable file never
    prevents a backup from running.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or AppPaths.config_file()
        self.settings: Settings = Settings()

    def is_first_run(self) -> bool:
        """Check whether the configuration file has been written yet."""
        return not self.config_path.exists()

    def load(self) -> Settings:
        """Load settings from the XML file.

        Missing elements fall back to defaults. A malformed file is logged
        and ignored.

        Returns:
            Settings object with loaded values
        """
        self.settings = Settings()
        if not self.config_path.exists():
            logger.debug(f"No configuration file at {self.config_path}, using defaults")
            return self.settings

        logger.debug(f"Loading configuration from {self.config_path}")
        try:
            root = ET.parse(self.config_path).getroot()
        except ET.ParseError as e:
            logger.warning(f"Could not parse {self.config_path}, using defaults: {e}")
            return self.settings

        settings_elem = root.find("Settings")
        if settings_elem is not None:
            self.settings = Settings(
                backup_location=self._parse_path(settings_elem, "BackupLocation"),
                archiver_url=self._get_text(settings_elem, "ArchiverUrl", DEFAULT_ARCHIVER_URL).strip(),
            )
        return self.settings

    def save(self) -> None:
        """Save current settings to the XML file.

        Creates the parent directory if it doesn't exist.
        """
        logger.debug(f"Saving configuration to {self.config_path}")
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        root = ET.Element("JellyfinBackup", version="1.0")
        settings_elem = ET.SubElement(root, "Settings")
        ET.SubElement(settings_elem, "BackupLocation").text = (
            str(self.settings.backup_location) if self.settings.backup_location else ""
        )
        ET.SubElement(settings_elem, "ArchiverUrl").text = self.settings.archiver_url

        # Write pretty-printed XML
        xml_str = minidom.parseString(ET.tostring(root, encoding="unicode")).toprettyxml(indent="  ")
        # Remove extra blank lines that minidom adds
        lines = [line for line in xml_str.split('\n') if line.strip()]
        xml_str = '\n'.join(lines)

        self.config_path.write_text(xml_str, encoding="utf-8")

    def build_app_config(self, data_dir: Path, program_dir: Optional[Path] = None) -> AppConfig:
        """Assemble the runtime configuration passed to every component.

        Args:
            data_dir: The resolved Jellyfin data directory
            program_dir: Directory holding the 7zip and Backups folders

        Returns:
            Immutable AppConfig
        """
        program_dir = program_dir or AppPaths.program_dir()
        return AppConfig(
            data_dir=data_dir,
            tool_dir=program_dir / AppPaths.TOOL_DIR_NAME,
            default_backup_dir=self.settings.backup_location or program_dir / AppPaths.BACKUP_DIR_NAME,
            archiver_url=self.settings.archiver_url or DEFAULT_ARCHIVER_URL,
            task_command=tuple(AppPaths.task_command()),
        )

    # Helper methods for XML parsing
    @staticmethod
    def _get_text(parent: ET.Element, tag: str, default: str = "") -> str:
        """Get text content of a child element."""
        elem = parent.find(tag)
        return elem.text if elem is not None and elem.text else default

    @staticmethod
    def _parse_path(parent: ET.Element, tag: str) -> Optional[Path]:
        """Parse a path value from child element."""
        elem = parent.find(tag)
        if elem is not None and elem.text and elem.text.strip():
            return AppPaths.expand_path(elem.text.strip())
        return None
