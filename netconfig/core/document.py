from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Union

from netconfig.core.entry import ConfigEntry, ConfigLevel, level_for
from netconfig.core.errors import MalformedConfigLine, MultipleValuesError
from netconfig.core.line_parser import LineSyntaxError, parse_line
from netconfig.core.lines import BlankLine, CommentLine, Line, SectionLine, VariableLine

Match = Tuple[SectionLine, VariableLine]


def _value_matcher(value_regex: Optional[str]) -> Callable[[Optional[str]], bool]:
    """Build a predicate for a value filter.

    ``None`` matches everything, a leading ``!`` negates the expression that
    follows it. Flag variables (no value) are matched as the empty string.
    """

    if value_regex is None:
        return lambda value: True
    if value_regex.startswith("!"):
        pattern = re.compile(value_regex[1:])
        return lambda value: pattern.search(value or "") is None
    pattern = re.compile(value_regex)
    return lambda value: pattern.search(value or "") is not None


def _unknown_line(line: object) -> TypeError:
    return TypeError(f"Unsupported line type {type(line).__name__!r} in config document")


@dataclass
class ConfigDocument:
    """An ordered, round-trip safe view over one configuration file.

    ``lines`` is the single source of truth. Variables belong to the closest
    preceding :class:`SectionLine`; variables before the first header are
    never matched by section lookups.
    """

    path: Path
    level: Optional[ConfigLevel] = None
    lines: List[Line] = field(init=False, default_factory=list)

    logger = logging.getLogger(__name__)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.path.exists():
            self._load()
        if self.level is None:
            self.level = level_for(self.path)

    @classmethod
    def from_file(
        cls, path: Union[str, Path], level: Optional[ConfigLevel] = None
    ) -> ConfigDocument:
        return cls(Path(path), level)

    # ----- Persistence -----
    def _load(self) -> None:
        lines: List[Line] = []
        with self.path.open("r", encoding="utf-8-sig") as fh:
            for number, raw in enumerate(fh, start=1):
                text = raw[:-1] if raw.endswith("\n") else raw
                if not text:
                    lines.append(BlankLine())
                    continue
                try:
                    lines.append(parse_line(text))
                except LineSyntaxError as exc:
                    raise MalformedConfigLine(
                        self.path, number, exc.column, exc.message
                    ) from exc
        self.lines = lines
        self.logger.debug("Loaded %d lines from %s", len(lines), self.path)

    def save(self) -> None:
        """Write every line back to :attr:`path`, replacing its contents."""

        for line in self.lines:
            if not isinstance(line, (BlankLine, CommentLine, SectionLine, VariableLine)):
                raise _unknown_line(line)
        with self.path.open("w", encoding="utf-8", newline="\n") as fh:
            for line in self.lines:
                fh.write(f"{line.text}\n")
        self.logger.debug("Saved %d lines to %s", len(self.lines), self.path)

    # ----- Lookup -----
    def _index_of(self, target: Line) -> int:
        for index, line in enumerate(self.lines):
            if line is target:
                return index
        raise ValueError(f"{target!r} is not part of {self.path}")

    def _find_section(self, section: str, subsection: Optional[str]) -> Optional[SectionLine]:
        for line in self.lines:
            if isinstance(line, SectionLine) and line.matches(section, subsection):
                return line
        return None

    def _section_or_new(self, section: str, subsection: Optional[str]) -> SectionLine:
        header = self._find_section(section, subsection)
        if header is None:
            header = SectionLine(section, subsection)
            self.lines.append(header)
            self.logger.debug("Appended section %s to %s", header, self.path)
        return header

    def _find_variables(
        self, section: str, subsection: Optional[str], name: Optional[str] = None
    ) -> Iterator[Match]:
        current: Optional[SectionLine] = None
        for line in self.lines:
            if isinstance(line, SectionLine):
                current = line
            elif isinstance(line, VariableLine):
                if (
                    current is not None
                    and current.matches(section, subsection)
                    and (name is None or line.name == name)
                ):
                    yield current, line
            elif not isinstance(line, (BlankLine, CommentLine)):
                raise _unknown_line(line)

    def _single_match(
        self, section: str, subsection: Optional[str], name: str, alternative: str
    ) -> Optional[Match]:
        found = list(islice(self._find_variables(section, subsection, name), 2))
        if len(found) > 1:
            raise MultipleValuesError(section, subsection, name, alternative)
        return found[0] if found else None

    def _collapse_if_empty(self, header: SectionLine) -> None:
        """Drop *header* when removals left it without variables or comments."""

        index = self._index_of(header)
        if index == len(self.lines) - 1:
            del self.lines[index]
            self.logger.debug("Removed empty trailing section %s", header)
            return
        for line in self.lines[index + 1:]:
            if isinstance(line, (VariableLine, CommentLine)):
                return
            if isinstance(line, SectionLine):
                del self.lines[index]
                self.logger.debug("Removed empty section %s", header)
                return
            if not isinstance(line, BlankLine):
                raise _unknown_line(line)

    # ----- Queries -----
    def find(
        self,
        section: str,
        subsection: Optional[str],
        name: Optional[str],
        value_regex: Optional[str] = None,
    ) -> Iterator[ConfigEntry]:
        """Yield entries for ``section/subsection/name`` in document order.

        ``value_regex`` narrows the result: a plain expression must match the
        value, one prefixed with ``!`` must not. ``name=None`` yields every
        variable of the section. Entries carry *section* and *subsection* as
        given, not as spelled in the file.
        """

        matches = _value_matcher(value_regex)
        for _, variable in self._find_variables(section, subsection, name):
            if matches(variable.value):
                yield ConfigEntry(section, subsection, variable.name, variable.value, self.level)

    def __iter__(self) -> Iterator[ConfigEntry]:
        current: Optional[SectionLine] = None
        for line in self.lines:
            if isinstance(line, SectionLine):
                current = line
            elif isinstance(line, VariableLine):
                if current is not None:
                    yield ConfigEntry(
                        current.section, current.subsection, line.name, line.value, self.level
                    )
            elif not isinstance(line, (BlankLine, CommentLine)):
                raise _unknown_line(line)

    # ----- Mutations -----
    def add(
        self, section: str, subsection: Optional[str], name: str, value: Optional[str] = None
    ) -> None:
        """Append a variable at the end of the section's first block.

        Existing variables with the same name are left alone.
        """

        variable = VariableLine(name, value)
        header = self._section_or_new(section, subsection)
        index = self._index_of(header) + 1
        while index < len(self.lines) and not isinstance(
            self.lines[index], (BlankLine, SectionLine)
        ):
            index += 1
        self.lines.insert(index, variable)
        self.logger.debug("Added %s to %s at line %d", name, header, index + 1)

    def set(
        self, section: str, subsection: Optional[str], name: str, value: Optional[str] = None
    ) -> None:
        """Set the single matching variable, inserting it when missing.

        Raises :class:`MultipleValuesError` if the key has several values.
        """

        match = self._single_match(section, subsection, name, "set_all")
        if match is not None:
            match[1].value = value
            return

        variable = VariableLine(name, value)
        header = self._section_or_new(section, subsection)
        index = self._index_of(header) + 1
        # First non-header line anywhere after the section, even past
        # following empty sections.
        for offset, line in enumerate(self.lines[index:]):
            if not isinstance(line, SectionLine):
                index += offset + 1
                break
        self.lines.insert(index, variable)
        self.logger.debug("Inserted %s into %s at line %d", name, header, index + 1)

    def unset(self, section: str, subsection: Optional[str], name: str) -> None:
        """Remove the single matching variable and its section if now empty.

        Raises :class:`MultipleValuesError` if the key has several values.
        """

        match = self._single_match(section, subsection, name, "unset_all")
        if match is None:
            return
        header, variable = match
        del self.lines[self._index_of(variable)]
        self.logger.debug("Removed %s from %s", name, header)
        self._collapse_if_empty(header)

    def set_all(
        self,
        section: str,
        subsection: Optional[str],
        name: str,
        value: Optional[str] = None,
        value_regex: Optional[str] = None,
    ) -> None:
        matches = _value_matcher(value_regex)
        found = [
            variable
            for _, variable in self._find_variables(section, subsection, name)
            if matches(variable.value)
        ]
        for variable in found:
            variable.value = value

    def unset_all(
        self,
        section: str,
        subsection: Optional[str],
        name: str,
        value_regex: Optional[str] = None,
    ) -> None:
        matches = _value_matcher(value_regex)
        found = [
            (header, variable)
            for header, variable in self._find_variables(section, subsection, name)
            if matches(variable.value)
        ]
        headers: List[SectionLine] = []
        for header, variable in found:
            del self.lines[self._index_of(variable)]
            if not any(header is seen for seen in headers):
                headers.append(header)
        self.logger.debug("Removed %d values of %s", len(found), name)
        for header in headers:
            self._collapse_if_empty(header)
