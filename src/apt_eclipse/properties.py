"""Reading and writing Java ``.properties`` files.

Eclipse stores workspace and project preferences in this format. Files are
read and written as ISO-8859-1; anything outside printable ASCII is written as
a ``\\uXXXX`` escape. Key order is kept on both sides and no timestamp comment
is written, so identical content always produces identical bytes.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterator, Mapping

ENCODING = "iso-8859-1"

_WHITESPACE = " \t\f"
_NATURAL_LINE = re.compile(r"\r\n|\r|\n")
_UNESCAPES = {"t": "\t", "r": "\r", "n": "\n", "f": "\f"}
_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


class PropertiesFormatError(ValueError):
    """Raised when a properties file cannot be parsed."""


def _logical_lines(text: str) -> Iterator[str]:
    pending: str | None = None
    for raw in _NATURAL_LINE.split(text):
        stripped = raw.lstrip(_WHITESPACE)
        if pending is None:
            if not stripped or stripped[0] in "#!":
                continue
            line = stripped
        else:
            line = pending + stripped
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending = line[:-1]
            continue
        pending = None
        yield line
    if pending is not None:
        yield pending


def _split_line(line: str) -> tuple[str, str]:
    length = len(line)
    key_end = value_start = length
    has_separator = False
    backslash = False
    for index, char in enumerate(line):
        if char == "\\":
            backslash = not backslash
            continue
        if not backslash and char in "=:":
            key_end, value_start, has_separator = index, index + 1, True
            break
        if not backslash and char in _WHITESPACE:
            key_end, value_start = index, index + 1
            break
        backslash = False
    while value_start < length and line[value_start] in _WHITESPACE:
        value_start += 1
    if not has_separator and value_start < length and line[value_start] in "=:":
        value_start += 1
        while value_start < length and line[value_start] in _WHITESPACE:
            value_start += 1
    return line[:key_end], line[value_start:]


def _unescape(text: str) -> str:
    out: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        index += 1
        if char != "\\":
            out.append(char)
            continue
        if index >= length:
            break
        char = text[index]
        index += 1
        if char == "u":
            digits = text[index:index + 4]
            if len(digits) < 4 or any(d not in "0123456789abcdefABCDEF" for d in digits):
                raise PropertiesFormatError(f"Malformed \\uxxxx encoding in {text!r}")
            out.append(chr(int(digits, 16)))
            index += 4
        else:
            out.append(_UNESCAPES.get(char, char))
    # Surrogate pairs written by Java for characters outside the BMP.
    try:
        return "".join(out).encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError as exc:
        raise PropertiesFormatError(f"Unpaired surrogate escape in {text!r}") from exc


def loads(text: str) -> Dict[str, str]:
    """Parse properties text into an insertion-ordered dict (last duplicate wins)."""

    properties: Dict[str, str] = {}
    for line in _logical_lines(text):
        raw_key, raw_value = _split_line(line)
        key = _unescape(raw_key)
        properties.pop(key, None)
        properties[key] = _unescape(raw_value)
    return properties


def _escape(text: str, *, is_key: bool) -> str:
    out: list[str] = []
    for index, char in enumerate(text):
        if char == " ":
            out.append("\\ " if is_key or index == 0 else " ")
        elif char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif char in "=:#!\\":
            out.append("\\" + char)
        elif 0x20 <= ord(char) <= 0x7E:
            out.append(char)
        else:
            encoded = char.encode("utf-16-be", "surrogatepass")
            for offset in range(0, len(encoded), 2):
                out.append("\\u%04X" % int.from_bytes(encoded[offset:offset + 2], "big"))
    return "".join(out)


def dumps(properties: Mapping[str, str]) -> str:
    return "".join(
        f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}\n"
        for key, value in properties.items()
    )


def read_properties(path: Path) -> Dict[str, str]:
    return loads(path.read_text(encoding=ENCODING))


def write_properties(path: Path, properties: Mapping[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(properties), encoding=ENCODING, newline="\n")


__all__ = [
    "PropertiesFormatError",
    "dumps",
    "loads",
    "read_properties",
    "write_properties",
]
