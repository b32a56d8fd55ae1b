"""Conversion between VCF header text and :mod:`header_lines` values.

``##INFO`` and ``##FORMAT`` definitions become :class:`CompoundHeaderLine`,
``##FILTER`` declarations become :class:`FilterHeaderLine` and any other
``<ID=...>`` structure becomes a :class:`NamedHeaderLine`. ``##SAMPLE`` and
``##vcfProcessLog`` keep their raw value because they are merged by rewriting
the text itself. Everything else is a plain :class:`HeaderLine`.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, List, Union

from .header_lines import (
    COMPOUND_KEYS,
    CompoundHeaderLine,
    FilterHeaderLine,
    HeaderLine,
    NamedHeaderLine,
    VcfHeader,
)
from .logging_utils import MalformedHeaderLineError

RAW_VALUE_KEYS = ("SAMPLE", "vcfProcessLog")

_OPENERS = {"<": ">", "{": "}", "[": "]"}


def _unquote(value: str) -> str:
    if len(value) < 2 or not (value[0] == value[-1] == '"'):
        return value
    inner = value[1:-1]
    unescaped: list[str] = []
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and i + 1 < len(inner) and inner[i + 1] in {"\\", '"'}:
            unescaped.append(inner[i + 1])
            i += 2
            continue
        unescaped.append(ch)
        i += 1
    return "".join(unescaped)


def split_mapping(body: str) -> "OrderedDict[str, str]":
    """Return the ordered ``key=value`` entries of a ``<...>`` header body.

    Commas inside quotes or nested brackets do not split entries. Quoted values
    are unescaped.
    """

    entries: OrderedDict[str, str] = OrderedDict()
    token: list[str] = []
    stack: list[str] = []
    in_quotes = False
    escape = False

    def flush_token() -> None:
        raw = "".join(token).strip()
        token.clear()
        if not raw:
            return
        if "=" not in raw:
            raise ValueError(f"Invalid header mapping entry: '{raw}'")
        key, value = raw.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Header mapping keys cannot be empty.")
        entries[key] = _unquote(value.strip())

    for ch in body:
        if escape:
            token.append(ch)
            escape = False
            continue

        if ch == "\\":
            token.append(ch)
            escape = True
            continue

        if in_quotes:
            if ch == '"':
                in_quotes = False
            token.append(ch)
            continue

        if ch == '"':
            in_quotes = True
            token.append(ch)
            continue

        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
            token.append(ch)
            continue

        if stack and ch == stack[-1]:
            stack.pop()
            token.append(ch)
            continue

        if ch == "," and not stack:
            flush_token()
            continue

        token.append(ch)

    if in_quotes or stack:
        raise ValueError(f"Unbalanced header mapping: '{body}'")
    flush_token()
    return entries


def _is_bracketed(value: str) -> bool:
    return len(value) >= 2 and value.startswith("<") and value.endswith(">")


def _compound_line(key: str, mapping: "OrderedDict[str, str]", text: str) -> CompoundHeaderLine:
    mapping = OrderedDict(mapping)
    name = mapping.pop("ID", "")
    if not name:
        raise MalformedHeaderLineError(f"{key} definition without ID: {text}", lines=(text,))
    if "Type" not in mapping:
        raise MalformedHeaderLineError(f"{key} definition without Type: {text}", lines=(text,))
    count = mapping.pop("Number", ".")
    value_type = mapping.pop("Type")
    description = mapping.pop("Description", "")
    try:
        return CompoundHeaderLine(
            key=key,
            name=name,
            count=count,
            type=value_type,
            description=description,
            fields=tuple(mapping.items()),
        )
    except ValueError as exc:
        raise MalformedHeaderLineError(f"Invalid {key} definition {text}: {exc}", lines=(text,)) from exc


def parse_header_line(text: str) -> HeaderLine:
    """Parse a single ``##key=value`` line into its typed representation."""

    stripped = text.rstrip("\r\n")
    if not stripped.startswith("##"):
        raise MalformedHeaderLineError(f"Header line must start with '##': {stripped}", lines=(stripped,))
    key, sep, value = stripped[2:].partition("=")
    key = key.strip()
    if not sep or not key:
        raise MalformedHeaderLineError(f"Header line must be of the form ##key=value: {stripped}", lines=(stripped,))

    if key in RAW_VALUE_KEYS or not _is_bracketed(value):
        return HeaderLine(key=key, value=value)

    try:
        mapping = split_mapping(value[1:-1])
    except ValueError as exc:
        if key in COMPOUND_KEYS or key == "FILTER":
            raise MalformedHeaderLineError(f"Invalid {key} line {stripped}: {exc}", lines=(stripped,)) from exc
        return HeaderLine(key=key, value=value)

    if key in COMPOUND_KEYS:
        return _compound_line(key, mapping, stripped)

    if key == "FILTER":
        name = mapping.pop("ID", "")
        if not name:
            raise MalformedHeaderLineError(f"FILTER declaration without ID: {stripped}", lines=(stripped,))
        description = mapping.pop("Description", "")
        return FilterHeaderLine(name=name, description=description, fields=tuple(mapping.items()))

    if "ID" in mapping:
        name = mapping.pop("ID")
        return NamedHeaderLine(key=key, name=name, fields=tuple(mapping.items()))
    return HeaderLine(key=key, value=value)


def parse_header(text: Union[str, Iterable[str]]) -> VcfHeader:
    """Parse header text (or an iterable of its lines) into a :class:`VcfHeader`.

    Parsing stops at the first data line. Sample names are taken from the
    ``#CHROM`` column line when present.
    """

    raw_lines = text.splitlines() if isinstance(text, str) else text
    lines: List[HeaderLine] = []
    samples: List[str] = []
    for raw in raw_lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        if line.startswith("##"):
            lines.append(parse_header_line(line))
            continue
        if line.startswith("#"):
            columns = line.lstrip("#").split("\t")
            samples = columns[9:]
            continue
        break
    return VcfHeader(lines=tuple(lines), samples=tuple(samples))


def serialize_header(lines: Iterable[HeaderLine]) -> str:
    """Return the ``##`` text for *lines*, one per line, ``fileformat`` first."""

    ordered = sorted(lines, key=lambda line: line.key != "fileformat")
    return "".join(line.serialize() + "\n" for line in ordered)


__all__ = [
    "RAW_VALUE_KEYS",
    "parse_header",
    "parse_header_line",
    "serialize_header",
    "split_mapping",
]
