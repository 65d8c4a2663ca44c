import pytest

from jellyfin_backup import app as app_module
from jellyfin_backup.app import JellyfinBackupApp, main
from jellyfin_backup.config.paths import AppPaths
from jellyfin_backup.config.schema import ErrorKind, Frequency


@pytest.fixture
def program_dir(tmp_path, monkeypatch):
    home = tmp_path / "program"
    monkeypatch.setattr(AppPaths, "USER_HOME_DIR", home)
    monkeypatch.setattr(AppPaths, "DATA_SYSTEM", tmp_path / "ProgramData" / "Jellyfin" / "Server")
    monkeypatch.setattr(AppPaths, "DATA_USER_LOWER", tmp_path / "LocalAppData" / "jellyfin")
    monkeypatch.setattr(AppPaths, "DATA_USER_UPPER", tmp_path / "LocalAppData" / "Jellyfin")
    return home


def test_main_exits_with_1_without_data_directory(program_dir, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--backup-only"])

    assert exc_info.value.code == 1
    assert "Jellyfin data directory not found" in capsys.readouterr().err
    assert (program_dir / "jellyfin_backup.log").is_file()


def test_main_backup_only_runs_one_backup(tmp_path, program_dir, monkeypatch):
    data_dir = tmp_path / "LocalAppData" / "Jellyfin"
    data_dir.mkdir(parents=True)
    created = []

    class RecordingApp:
        def __init__(self, config):
            created.append(config)
            self.backups = 0

        def run_backup_only(self):
            self.backups += 1

        def run_interactive(self):
            raise AssertionError("menu must not open in backup-only mode")

    monkeypatch.setattr(app_module, "JellyfinBackupApp", RecordingApp)

    main(["--backup-only"])

    (config,) = created
    assert config.data_dir == data_dir
    assert config.default_backup_dir == program_dir / "Backups"
    assert (program_dir / "configuration.xml").is_file()


def make_app(app_config, fake_runner_factory, fake_service, fake_provisioner, archive=None):
    return JellyfinBackupApp(
        app_config,
        runner=fake_runner_factory(),
        service=fake_service,
        provisioner=fake_provisioner,
        pick_directory=lambda initial: None,
        pick_archive=lambda initial: archive,
    )


def scripted(*answers):
    answers = iter(answers)
    return lambda message: next(answers)


def test_backup_only_uses_default_destination(app_config, fake_runner_factory, fake_service, fake_provisioner):
    app = make_app(app_config, fake_runner_factory, fake_service, fake_provisioner)

    result = app.run_backup_only()

    assert result.succeeded
    assert result.archive_path.parent == app_config.default_backup_dir
    assert fake_service.start_calls == 1


def test_menu_schedule_then_exit(app_config, fake_runner_factory, fake_service, fake_provisioner):
    app = make_app(app_config, fake_runner_factory, fake_service, fake_provisioner)
    output = []

    app.run_interactive(prompt=scripted("3", "w", "4"), output=output.append)

    assert any("weekly" in line for line in output)
    assert fake_service.stop_calls == 0


def test_menu_declined_restore_touches_nothing(
    app_config, fake_runner_factory, fake_service, fake_provisioner
):
    app = make_app(app_config, fake_runner_factory, fake_service, fake_provisioner)
    output = []

    app.run_interactive(prompt=scripted("2", "n", "4"), output=output.append)

    assert "Restore cancelled" in output
    assert fake_service.stop_calls == 0


def test_menu_backup_to_cancelled_folder(app_config, fake_runner_factory, fake_service, fake_provisioner):
    app = make_app(app_config, fake_runner_factory, fake_service, fake_provisioner)
    output = []

    app.run_interactive(prompt=scripted("1", "c", "4"), output=output.append)

    assert "No backup destination selected" in output
    assert fake_service.start_calls == 1


def test_menu_ends_on_eof(app_config, fake_runner_factory, fake_service, fake_provisioner):
    app = make_app(app_config, fake_runner_factory, fake_service, fake_provisioner)

    def closed(message):
        raise EOFError

    app.run_interactive(prompt=closed, output=lambda line: None)
