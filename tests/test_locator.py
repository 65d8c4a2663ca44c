from pathlib import Path

import pytest

from jellyfin_backup.core.locator import InstallationLocator, InstallationNotFoundError

CANDIDATES = [
    Path("ProgramData/Jellyfin/Server"),
    Path("LocalAppData/jellyfin"),
    Path("LocalAppData/Jellyfin"),
]


def make_locator(existing):
    checked = []

    def exists(path):
        checked.append(path)
        return path in existing

    return InstallationLocator(CANDIDATES, exists=exists), checked


@pytest.mark.parametrize("existing, expected", [
    ({CANDIDATES[0], CANDIDATES[1], CANDIDATES[2]}, CANDIDATES[0]),
    ({CANDIDATES[0], CANDIDATES[2]}, CANDIDATES[0]),
    ({CANDIDATES[1], CANDIDATES[2]}, CANDIDATES[1]),
    ({CANDIDATES[2]}, CANDIDATES[2]),
])
def test_resolve_returns_highest_priority_and_stops_checking(existing, expected):
    locator, checked = make_locator(existing)

    assert locator.resolve() == expected
    assert checked == CANDIDATES[:CANDIDATES.index(expected) + 1]


def test_resolve_raises_when_nothing_exists():
    locator, checked = make_locator(set())

    with pytest.raises(InstallationNotFoundError) as exc_info:
        locator.resolve()

    assert checked == CANDIDATES
    assert exc_info.value.candidates == CANDIDATES
    assert "LocalAppData" in str(exc_info.value)


def test_resolve_treats_inaccessible_candidate_as_missing():
    def exists(path):
        if path == CANDIDATES[0]:
            raise PermissionError("access denied")
        return True

    locator = InstallationLocator(CANDIDATES, exists=exists)

    assert locator.resolve() == CANDIDATES[1]


def test_resolve_on_real_filesystem(tmp_path):
    user_dir = tmp_path / "Jellyfin"
    user_dir.mkdir()
    locator = InstallationLocator([tmp_path / "missing", user_dir])

    assert locator.resolve() == user_dir
