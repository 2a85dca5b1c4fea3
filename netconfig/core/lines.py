from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b"}
_NEEDS_QUOTES = ("#", ";")


def _check_single_line(what: str, text: str) -> None:
    if "\n" in text or "\r" in text:
        raise ValueError(f"{what} cannot contain line breaks: {text!r}")


def format_value(value: str) -> str:
    """Render *value* as a value token that parses back to the same string.

    Backslashes, quotes and control characters are escaped. The token is
    wrapped in double quotes when it has leading or trailing whitespace or
    contains a comment marker.
    """

    token = "".join(_ESCAPES.get(ch, ch) for ch in value)
    if value != value.strip() or any(mark in value for mark in _NEEDS_QUOTES):
        return f'"{token}"'
    return token


def format_section(section: str, subsection: Optional[str] = None) -> str:
    _check_single_line("section names", section)
    if subsection is None:
        return f"[{section}]"
    _check_single_line("subsection names", subsection)
    escaped = subsection.replace("\\", "\\\\").replace('"', '\\"')
    return f'[{section} "{escaped}"]'


@dataclass(eq=False)
class BlankLine:
    """An empty (or whitespace only) line."""

    text: str = ""


@dataclass(eq=False)
class CommentLine:
    text: str


@dataclass(eq=False)
class SectionLine:
    """A ``[section]`` or ``[section "subsection"]`` header.

    ``section`` matches case-insensitively while ``subsection`` matches
    exactly. ``text`` is rendered from both when not supplied.
    """

    section: str
    subsection: Optional[str] = None
    text: str = ""

    def __post_init__(self) -> None:
        if not self.text:
            self.text = format_section(self.section, self.subsection)

    def matches(self, section: str, subsection: Optional[str]) -> bool:
        return (
            self.section.casefold() == section.casefold()
            and self.subsection == subsection
        )

    def __str__(self) -> str:
        return format_section(self.section, self.subsection)


class VariableLine:
    """A ``name = value`` line, or a bare ``name`` flag when value is ``None``.

    Parsed lines remember their layout (``lead`` holds the indentation and
    name, ``assign`` the ``=`` with its spacing, ``raw`` the value token as
    written and ``trailer`` any trailing whitespace or comment). Assigning
    :attr:`value` only re-renders the value token.
    """

    def __init__(
        self,
        name: str,
        value: Optional[str] = None,
        *,
        lead: Optional[str] = None,
        assign: Optional[str] = None,
        raw: Optional[str] = None,
        trailer: str = "",
    ) -> None:
        if lead is None:
            _check_single_line("variable names", name)
            lead = f"\t{name}"
        self.name = name
        self._value = value
        self._lead = lead
        self._assign = assign
        self._raw = raw
        self._trailer = trailer

    @property
    def value(self) -> Optional[str]:
        return self._value

    @value.setter
    def value(self, value: Optional[str]) -> None:
        self._value = value
        self._raw = None

    @property
    def text(self) -> str:
        if self._value is None:
            return self._lead + self._trailer
        token = self._raw if self._raw is not None else format_value(self._value)
        return self._lead + (self._assign or " = ") + token + self._trailer

    def __repr__(self) -> str:
        return f"VariableLine(name={self.name!r}, value={self._value!r})"


Line = Union[BlankLine, CommentLine, SectionLine, VariableLine]
