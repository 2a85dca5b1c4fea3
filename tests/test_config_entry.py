from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from netconfig.core.entry import (
    GLOBAL_LOCATION,
    SYSTEM_LOCATION,
    ConfigEntry,
    ConfigLevel,
    level_for,
)


def test_level_for_well_known_locations(tmp_path: Path) -> None:
    assert level_for(GLOBAL_LOCATION) is ConfigLevel.GLOBAL
    assert level_for(str(SYSTEM_LOCATION)) is ConfigLevel.SYSTEM
    assert level_for(tmp_path / ".netconfig") is ConfigLevel.LOCAL


def test_entry_key_and_immutability() -> None:
    entry = ConfigEntry("remote", "origin.main", "url", "x", ConfigLevel.LOCAL)
    assert entry.key == "remote.origin.main.url"
    assert ConfigEntry("core", None, "editor", None, ConfigLevel.GLOBAL).key == "core.editor"
    with pytest.raises(FrozenInstanceError):
        entry.value = "y"  # type: ignore[misc]
