from __future__ import annotations

from netconfig.core.lines import BlankLine, CommentLine, Line, SectionLine, VariableLine

COMMENT_MARKERS = "#;"
_VALUE_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t", "b": "\b"}


class LineSyntaxError(ValueError):
    """Raised when a single line does not follow the configuration grammar."""

    def __init__(self, column: int, message: str) -> None:
        super().__init__(f"column {column}: {message}")
        self.column = column
        self.message = message


def _is_section_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch in "-.")


def _is_name_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "-")


def _skip_space(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t":
        pos += 1
    return pos


def _check_trailer(text: str, pos: int, what: str) -> None:
    pos = _skip_space(text, pos)
    if pos < len(text) and text[pos] not in COMMENT_MARKERS:
        raise LineSyntaxError(pos + 1, f"unexpected character {text[pos]!r} after {what}")


def _parse_section(text: str, start: int) -> SectionLine:
    pos = start + 1
    name_start = pos
    while pos < len(text) and _is_section_char(text[pos]):
        pos += 1
    if pos == name_start:
        raise LineSyntaxError(pos + 1, "expected a section name")
    section = text[name_start:pos]

    subsection: str | None = None
    after_name = _skip_space(text, pos)
    if after_name < len(text) and text[after_name] == '"':
        pos = after_name + 1
        chars: list[str] = []
        while True:
            if pos >= len(text):
                raise LineSyntaxError(pos + 1, "unterminated subsection name")
            ch = text[pos]
            if ch == '"':
                pos += 1
                break
            if ch == "\\":
                pos += 1
                if pos >= len(text):
                    raise LineSyntaxError(pos + 1, "unterminated subsection name")
                ch = text[pos]
            chars.append(ch)
            pos += 1
        subsection = "".join(chars)
    elif after_name != pos:
        pos = after_name

    if pos >= len(text) or text[pos] != "]":
        found = repr(text[pos]) if pos < len(text) else "end of line"
        raise LineSyntaxError(pos + 1, f"expected ']' but found {found}")
    _check_trailer(text, pos + 1, "section header")
    return SectionLine(section, subsection, text)


def _parse_value(text: str, start: int) -> tuple[str, int]:
    """Decode the value starting at *start*.

    Returns the value and the index just past its last significant character,
    so everything after it is trailing whitespace or a comment.
    """

    chars: list[str] = []
    pending = ""
    end = start
    quoted = False
    pos = start
    while pos < len(text):
        ch = text[pos]
        if not quoted and ch in COMMENT_MARKERS:
            break
        if not quoted and ch in " \t":
            pending += ch
            pos += 1
            continue
        if ch == "\\":
            if pos + 1 >= len(text):
                raise LineSyntaxError(pos + 1, "line continuation is not supported")
            escaped = _VALUE_ESCAPES.get(text[pos + 1])
            if escaped is None:
                raise LineSyntaxError(pos + 2, f"unknown escape sequence '\\{text[pos + 1]}'")
            chars.append(pending + escaped)
            pos += 2
        elif ch == '"':
            chars.append(pending)
            quoted = not quoted
            pos += 1
        else:
            chars.append(pending + ch)
            pos += 1
        pending = ""
        end = pos
    if quoted:
        raise LineSyntaxError(len(text) + 1, "unterminated quoted value")
    return "".join(chars), end


def _parse_variable(text: str, start: int) -> VariableLine:
    if not (text[start].isascii() and text[start].isalpha()):
        raise LineSyntaxError(start + 1, "variable names must start with a letter")
    pos = start + 1
    while pos < len(text) and _is_name_char(text[pos]):
        pos += 1
    name = text[start:pos]
    lead = text[:pos]

    after_name = _skip_space(text, pos)
    if after_name >= len(text) or text[after_name] in COMMENT_MARKERS:
        return VariableLine(name, None, lead=lead, trailer=text[pos:])
    if text[after_name] != "=":
        raise LineSyntaxError(
            after_name + 1, f"invalid character {text[after_name]!r} in variable name"
        )

    value_start = _skip_space(text, after_name + 1)
    value, value_end = _parse_value(text, value_start)
    return VariableLine(
        name,
        value,
        lead=lead,
        assign=text[pos:value_start],
        raw=text[value_start:value_end],
        trailer=text[value_end:],
    )


def parse_line(text: str) -> Line:
    """Parse one line of a configuration file (without its newline).

    Raises :class:`LineSyntaxError` carrying the 1-based column of the first
    offending character.
    """

    start = _skip_space(text, 0)
    if start == len(text):
        return BlankLine(text)
    first = text[start]
    if first in COMMENT_MARKERS:
        return CommentLine(text)
    if first == "[":
        return _parse_section(text, start)
    return _parse_variable(text, start)
