from pathlib import Path

from jellyfin_backup.config.manager import ConfigurationManager
from jellyfin_backup.config.path_validator import is_path_under_root, is_safe_to_clear, validate_archive_path
from jellyfin_backup.config.schema import DEFAULT_ARCHIVER_URL


def test_missing_file_uses_defaults(tmp_path):
    manager = ConfigurationManager(tmp_path / "configuration.xml")

    assert manager.is_first_run()
    settings = manager.load()

    assert settings.backup_location is None
    assert settings.archiver_url == DEFAULT_ARCHIVER_URL


def test_saved_settings_load_back(tmp_path):
    path = tmp_path / "configuration.xml"
    manager = ConfigurationManager(path)
    manager.settings.backup_location = tmp_path / "NAS"
    manager.settings.archiver_url = "https://mirror.example/7z-extra.7z"
    manager.save()

    loaded = ConfigurationManager(path).load()

    assert not manager.is_first_run()
    assert loaded.backup_location == tmp_path / "NAS"
    assert loaded.archiver_url == "https://mirror.example/7z-extra.7z"


def test_malformed_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "configuration.xml"
    path.write_text("<JellyfinBackup><Settings>", encoding="utf-8")

    settings = ConfigurationManager(path).load()

    assert settings.archiver_url == DEFAULT_ARCHIVER_URL


def test_build_app_config(tmp_path):
    manager = ConfigurationManager(tmp_path / "configuration.xml")
    manager.load()

    config = manager.build_app_config(tmp_path / "jellyfin", tmp_path)

    assert config.data_dir == tmp_path / "jellyfin"
    assert config.tool_dir == tmp_path / "7zip"
    assert config.default_backup_dir == tmp_path / "Backups"
    assert config.task_command


def test_build_app_config_honours_backup_location(tmp_path):
    manager = ConfigurationManager(tmp_path / "configuration.xml")
    manager.settings.backup_location = tmp_path / "elsewhere"

    config = manager.build_app_config(tmp_path / "jellyfin", tmp_path)

    assert config.default_backup_dir == tmp_path / "elsewhere"


def test_filesystem_root_is_never_cleared(tmp_path):
    assert not is_safe_to_clear(Path(tmp_path.anchor))


def test_home_is_never_cleared():
    assert not is_safe_to_clear(Path.home())


def test_data_directory_may_be_cleared(tmp_path):
    data_dir = tmp_path / "Jellyfin" / "Server"
    data_dir.mkdir(parents=True)

    assert is_safe_to_clear(data_dir)


def test_validate_archive_path(tmp_path):
    archive = tmp_path / "backup.zip"
    archive.write_bytes(b"PK")

    assert validate_archive_path(archive) == (True, "")
    assert not validate_archive_path(tmp_path / "missing.zip")[0]
    assert not validate_archive_path(tmp_path)[0]


def test_is_path_under_root(tmp_path):
    data_dir = tmp_path / "Jellyfin"

    assert is_path_under_root(data_dir / "backups" / "a.zip", data_dir)
    assert is_path_under_root(data_dir, data_dir)
    assert not is_path_under_root(tmp_path / "Backups" / "a.zip", data_dir)
    # a sibling sharing the name prefix is not inside
    assert not is_path_under_root(tmp_path / "Jellyfin2" / "a.zip", data_dir)
