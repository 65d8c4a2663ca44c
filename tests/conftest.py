import pytest

from jellyfin_backup.config.schema import AppConfig, StartOutcome, StopOutcome
from jellyfin_backup.core.archive_tool import ArchiveToolError
from jellyfin_backup.core.process import CommandResult


class FakeRunner:
    """Records every command; handler decides the result."""

    def __init__(self, handler=None):
        self.calls = []
        self.launched = []
        self.handler = handler or (lambda args: CommandResult(returncode=0))

    def run(self, args, cwd=None):
        args = [str(a) for a in args]
        self.calls.append(args)
        return self.handler(args)

    def launch(self, args):
        self.launched.append([str(a) for a in args])
        return True


class FakeService:
    def __init__(self, events):
        self.events = events
        self.stop_calls = 0
        self.start_calls = 0

    def stop(self):
        self.stop_calls += 1
        self.events.append("stop")
        return StopOutcome.STOPPED

    def start(self):
        self.start_calls += 1
        self.events.append("start")
        return StartOutcome.STARTED


class FakeProvisioner:
    def __init__(self, tool, error=None):
        self.tool = tool
        self.error = error
        self.calls = 0

    def ensure_tool(self):
        self.calls += 1
        if self.error:
            raise ArchiveToolError(self.error)
        return self.tool


@pytest.fixture
def events():
    return []


@pytest.fixture
def fake_service(events):
    return FakeService(events)


@pytest.fixture
def fake_runner_factory():
    return FakeRunner


@pytest.fixture
def fake_provisioner(tmp_path):
    return FakeProvisioner(tmp_path / "7zip" / "7za.exe")


@pytest.fixture
def failing_provisioner(tmp_path):
    return FakeProvisioner(None, error="Could not obtain 7-Zip")


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "jellyfin"
    (path / "data").mkdir(parents=True)
    (path / "config").mkdir()
    (path / "config" / "system.xml").write_text("<ServerConfiguration />")
    (path / "data" / "library.db").write_bytes(b"old library")
    return path


@pytest.fixture
def app_config(tmp_path, data_dir):
    return AppConfig(
        data_dir=data_dir,
        tool_dir=tmp_path / "7zip",
        default_backup_dir=tmp_path / "Backups",
        task_command=("jellyfin-backup.exe",),
    )
