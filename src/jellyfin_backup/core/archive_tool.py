"""Provision a portable 7-Zip executable on first use.

The portable "extra" package is itself a .7z file, so unpacking it needs an
archiver that is already on the machine. Each ExtractionStrategy wraps one
such archiver; they are tried in order until one succeeds.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import requests

from ..config.paths import AppPaths
from ..config.schema import DEFAULT_ARCHIVER_URL, StrategyOutcome
from ..logging_config import get_logger
from .process import CommandRunner

logger = get_logger("archive_tool")

# Acceptable executable names, most capable first
TOOL_NAMES = ("7z.exe", "7za.exe")

# 7z.exe cannot run without its codec library
COMPANION_FILES = {"7z.exe": ("7z.dll",)}

DOWNLOAD_CHUNK_SIZE = 1024 * 64


class ArchiveToolError(Exception):
    """Raised when no usable 7-Zip executable can be obtained"""
    pass


class ExtractionStrategy:
    """One way of unpacking the downloaded distribution."""

    name = "base"

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def extract(self, archive: Path, destination: Path) -> StrategyOutcome:
        raise NotImplementedError


class TarStrategy(ExtractionStrategy):
    """bsdtar ships with Windows 10 and later and reads 7z archives."""

    name = "tar"

    def extract(self, archive: Path, destination: Path) -> StrategyOutcome:
        tar = shutil.which("tar")
        if tar is None:
            return StrategyOutcome.NOT_APPLICABLE
        result = self.runner.run([tar, "-xf", str(archive), "-C", str(destination)])
        return StrategyOutcome.SUCCEEDED if result.ok else StrategyOutcome.FAILED


class InstalledSevenZipStrategy(ExtractionStrategy):
    """Use a full 7-Zip installation if the user already has one."""

    name = "installed 7-Zip"

    def __init__(self, runner: CommandRunner, executable: Optional[Path] = None):
        super().__init__(runner)
        self.executable = executable or AppPaths.SEVEN_ZIP_INSTALLED

    def extract(self, archive: Path, destination: Path) -> StrategyOutcome:
        if not self.executable.is_file():
            return StrategyOutcome.NOT_APPLICABLE
        result = self.runner.run([str(self.executable), "x", str(archive), f"-o{destination}", "-y"])
        return StrategyOutcome.SUCCEEDED if result.ok else StrategyOutcome.FAILED


def _ps_quote(path: Path) -> str:
    """Quote a path as a PowerShell single-quoted string."""
    return "'" + str(path).replace("'", "''") + "'"


class ExpandArchiveStrategy(ExtractionStrategy):
    """PowerShell Expand-Archive as the last resort.

    Expand-Archive only reads .zip files, so it applies only when the
    configured ArchiverUrl points at a zip distribution; the default .7z
    download is reported as not applicable.
    """

    name = "Expand-Archive"

    def extract(self, archive: Path, destination: Path) -> StrategyOutcome:
        if archive.suffix.lower() != ".zip":
            return StrategyOutcome.NOT_APPLICABLE
        powershell = shutil.which("powershell") or shutil.which("pwsh")
        if powershell is None:
            return StrategyOutcome.NOT_APPLICABLE
        command = (
            f"Expand-Archive -LiteralPath {_ps_quote(archive)} "
            f"-DestinationPath {_ps_quote(destination)} -Force"
        )
        result = self.runner.run([powershell, "-NoProfile", "-NonInteractive", "-Command", command])
        return StrategyOutcome.SUCCEEDED if result.ok else StrategyOutcome.FAILED


def default_strategies(runner: CommandRunner) -> list[ExtractionStrategy]:
    return [
        TarStrategy(runner),
        InstalledSevenZipStrategy(runner),
        ExpandArchiveStrategy(runner),
    ]


class ArchiveToolProvisioner:
    """Guarantee a 7-Zip executable exists in the tool directory.

    Safe to call repeatedly: once the executable is in place, ensure_tool()
    returns immediately without touching the network.
    """

    def __init__(
        self,
        tool_dir: Path,
        download_url: str = DEFAULT_ARCHIVER_URL,
        runner: Optional[CommandRunner] = None,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        temp_root: Optional[Path] = None,
    ):
        self.tool_dir = tool_dir
        self.download_url = download_url
        self.runner = runner or CommandRunner()
        self.strategies = list(strategies) if strategies is not None else default_strategies(self.runner)
        self.temp_root = temp_root

    def find_tool(self) -> Optional[Path]:
        """Return the cached executable, or None if not provisioned yet."""
        for name in TOOL_NAMES:
            candidate = self.tool_dir / name
            if candidate.is_file():
                return candidate
        return None

    def ensure_tool(self) -> Path:
        """Return the path to a usable 7-Zip, downloading it if needed.

        Returns:
            Path to 7z.exe or 7za.exe inside the tool directory

        Raises:
            ArchiveToolError: If the executable cannot be obtained
        """
        tool = self.find_tool()
        if tool is not None:
            logger.debug(f"Using cached archiver {tool}")
            return tool

        logger.info(f"7-Zip not found in {self.tool_dir}, downloading from {self.download_url}")
        try:
            self.tool_dir.mkdir(parents=True, exist_ok=True)
            work_dir = Path(tempfile.mkdtemp(prefix="jellyfin_backup_7z_", dir=self.temp_root))
        except OSError as e:
            raise ArchiveToolError(f"Cannot prepare {self.tool_dir} for 7-Zip: {e}") from e

        cause = ""
        try:
            download = work_dir / self.download_url.rsplit("/", 1)[-1]
            extracted = work_dir / "extracted"
            extracted.mkdir()

            self._download(self.download_url, download)
            if not self._extract(download, extracted):
                cause = "no extraction method could unpack the download"
            else:
                match = self._locate_in_tree(extracted)
                if match is None:
                    cause = f"none of {', '.join(TOOL_NAMES)} found in the download"
                else:
                    self._install(match)
        except requests.RequestException as e:
            cause = f"download failed: {e}"
            logger.error(f"Failed to download 7-Zip: {e}")
        except OSError as e:
            cause = str(e)
            logger.error(f"Failed to provision 7-Zip: {e}")
        finally:
            self._cleanup(work_dir)

        tool = self.find_tool()
        if tool is None:
            message = (
                f"Could not obtain 7-Zip ({cause or 'unknown error'}).\n"
                f"Download it manually from {self.download_url} and place "
                f"{' or '.join(TOOL_NAMES)} in {self.tool_dir}"
            )
            logger.error(message)
            raise ArchiveToolError(message)

        logger.info(f"7-Zip installed at {tool}")
        return tool

    def _download(self, url: str, target: Path) -> None:
        """Stream the distribution archive to disk."""
        with requests.get(url, stream=True) as response:
            response.raise_for_status()
            with open(target, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        logger.debug(f"Downloaded {target.stat().st_size} bytes to {target}")

    def _extract(self, archive: Path, destination: Path) -> bool:
        """Try each extraction strategy until one succeeds."""
        for strategy in self.strategies:
            outcome = strategy.extract(archive, destination)
            logger.debug(f"Extraction with {strategy.name}: {outcome.value}")
            if outcome is StrategyOutcome.SUCCEEDED:
                logger.info(f"Extracted 7-Zip using {strategy.name}")
                return True
        return False

    @staticmethod
    def _locate_in_tree(root: Path) -> Optional[Path]:
        """Find the most capable executable anywhere under root."""
        for name in TOOL_NAMES:
            for match in sorted(root.rglob(name)):
                if match.is_file():
                    return match
        return None

    def _install(self, executable: Path) -> None:
        """Copy the executable and its companion files into the tool directory."""
        shutil.copy2(executable, self.tool_dir / executable.name)
        for companion in COMPANION_FILES.get(executable.name, ()):
            source = executable.parent / companion
            if source.is_file():
                shutil.copy2(source, self.tool_dir / companion)

    @staticmethod
    def _cleanup(work_dir: Path) -> None:
        """Best-effort removal of download and extraction leftovers."""
        try:
            shutil.rmtree(work_dir)
        except OSError as e:
            logger.warning(f"Could not remove temporary files in {work_dir}: {e}")
