from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

FILE_NAME = ".netconfig"
GLOBAL_LOCATION = Path.home() / FILE_NAME
SYSTEM_LOCATION = (
    Path("C:/ProgramData") / FILE_NAME if sys.platform == "win32" else Path("/etc") / FILE_NAME
)


class ConfigLevel(Enum):
    SYSTEM = "system"
    GLOBAL = "global"
    LOCAL = "local"


def level_for(path: Union[str, Path]) -> ConfigLevel:
    """Return the level implied by *path*'s location."""

    path = Path(path)
    if path == GLOBAL_LOCATION:
        return ConfigLevel.GLOBAL
    if path == SYSTEM_LOCATION:
        return ConfigLevel.SYSTEM
    return ConfigLevel.LOCAL


@dataclass(frozen=True)
class ConfigEntry:
    """A single variable as read from a document, detached from its lines."""

    section: str
    subsection: Optional[str]
    name: str
    value: Optional[str]
    level: ConfigLevel

    @property
    def key(self) -> str:
        if self.subsection is None:
            return f"{self.section}.{self.name}"
        return f"{self.section}.{self.subsection}.{self.name}"
