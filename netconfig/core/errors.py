from __future__ import annotations

from pathlib import Path
from typing import Optional

from netconfig.core.lines import format_section


class ConfigError(Exception):
    """Base class for configuration document errors."""


class MalformedConfigLine(ConfigError, ValueError):
    """Raised when a file cannot be loaded because a line is malformed."""

    def __init__(self, path: Path, line: int, column: int, message: str) -> None:
        super().__init__(f"{path}({line},{column}): {message}")
        self.path = path
        self.line = line
        self.column = column
        self.message = message


class MultipleValuesError(ConfigError):
    """Raised when a single-value operation matches a multi-valued variable."""

    def __init__(
        self, section: str, subsection: Optional[str], name: str, alternative: str
    ) -> None:
        header = format_section(section, subsection)
        super().__init__(
            f"Multi-valued property '{header} {name}' found. Use {alternative} instead."
        )
        self.section = section
        self.subsection = subsection
        self.name = name
