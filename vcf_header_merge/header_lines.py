"""Typed representation of VCF meta-information lines.

Every ``##`` line of a VCF header is modelled as an immutable value:

* :class:`HeaderLine` for plain ``##key=value`` declarations,
* :class:`NamedHeaderLine` for structured ``##key=<ID=...,...>`` declarations
  such as contigs or symbolic alleles,
* :class:`CompoundHeaderLine` for INFO and FORMAT definitions, which carry a
  count, a value type and a description,
* :class:`FilterHeaderLine` for FILTER declarations.

Lines compare structurally, so two declarations are duplicates exactly when all
their fields agree. The transformations used while merging
(:meth:`CompoundHeaderLine.widen_count_to_unbounded` and
:meth:`CompoundHeaderLine.promote_integer_to_float`) return new values instead
of mutating the line in place.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Tuple, Union

UNBOUNDED = "."
"""Count marker for a variable, unknown or unbounded number of values."""

SYMBOLIC_COUNTS: Tuple[str, ...] = ("A", "R", "G", UNBOUNDED)

COMPOUND_KEYS: Tuple[str, ...] = ("INFO", "FORMAT")

Count = Union[int, str]


class HeaderLineType(str, Enum):
    """Value types allowed in INFO and FORMAT definitions."""

    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    CHARACTER = "Character"
    FLAG = "Flag"

    def __str__(self) -> str:
        return self.value


def normalize_count(count) -> Count:
    """Return *count* as a non-negative int or one of :data:`SYMBOLIC_COUNTS`."""
    if isinstance(count, bool):
        raise ValueError(f"Invalid header count: {count!r}")
    if isinstance(count, int):
        if count < 0:
            raise ValueError(f"Header count cannot be negative: {count}")
        return count
    text = str(count).strip()
    if text in SYMBOLIC_COUNTS:
        return text
    try:
        number = int(text)
    except ValueError as exc:
        raise ValueError(f"Invalid header count: {count!r}") from exc
    return normalize_count(number)


def format_mapping_value(key: str, value: str) -> str:
    """Return a header-safe representation of one ``<...>`` mapping entry."""
    value = str(value)
    needs_quotes = key == "Description" or any(
        char in value for char in [" ", ",", "\t", '"', "<", ">", "="]
    )
    if not needs_quotes:
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_mapping(mapping) -> str:
    """Serialize an ordered mapping as the body of a ``<...>`` header value."""
    return ",".join(f"{k}={format_mapping_value(k, v)}" for k, v in mapping.items())


@dataclass(frozen=True)
class HeaderLine:
    """A plain ``##key=value`` meta-information line."""

    key: str
    value: str = ""

    @property
    def merge_key(self) -> Tuple[str, ...]:
        """Identity used to detect the same declaration across headers."""
        return (self.key,)

    def serialize(self) -> str:
        return f"##{self.key}={self.value}"

    def __str__(self) -> str:
        return self.serialize()


@dataclass(frozen=True)
class NamedHeaderLine(HeaderLine):
    """A structured line identified by its ``ID`` in addition to its key."""

    name: str = ""
    fields: Tuple[Tuple[str, str], ...] = ()
    """Remaining ``<...>`` entries after ``ID``, in declaration order."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple((str(k), str(v)) for k, v in self.fields))

    @property
    def merge_key(self) -> Tuple[str, ...]:
        return (self.key, self.name)

    def mapping(self) -> "OrderedDict[str, str]":
        result: OrderedDict[str, str] = OrderedDict(ID=self.name)
        result.update(self.fields)
        return result

    def serialize(self) -> str:
        return f"##{self.key}=<{format_mapping(self.mapping())}>"


@dataclass(frozen=True)
class FilterHeaderLine(NamedHeaderLine):
    """A ``##FILTER`` declaration."""

    key: str = "FILTER"
    description: str = ""

    def mapping(self) -> "OrderedDict[str, str]":
        result: OrderedDict[str, str] = OrderedDict(ID=self.name, Description=self.description)
        result.update(self.fields)
        return result


@dataclass(frozen=True)
class CompoundHeaderLine(NamedHeaderLine):
    """An INFO or FORMAT field definition."""

    key: str = "INFO"
    count: Count = UNBOUNDED
    type: HeaderLineType = HeaderLineType.STRING
    description: str = ""

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "count", normalize_count(self.count))
        object.__setattr__(self, "type", HeaderLineType(self.type))

    @property
    def is_unbounded(self) -> bool:
        return self.count == UNBOUNDED

    def equals_excluding_description(self, other: object) -> bool:
        """Return True when *other* matches this line apart from its description."""
        if not isinstance(other, CompoundHeaderLine) or type(other) is not type(self):
            return False
        return replace(self, description="") == replace(other, description="")

    def widen_count_to_unbounded(self) -> "CompoundHeaderLine":
        if self.is_unbounded:
            return self
        return replace(self, count=UNBOUNDED)

    def promote_integer_to_float(self) -> "CompoundHeaderLine":
        """Return this definition typed as Float.

        Only Integer definitions can be promoted; Float definitions are
        returned unchanged.
        """
        if self.type is HeaderLineType.FLOAT:
            return self
        if self.type is not HeaderLineType.INTEGER:
            raise ValueError(
                f"Cannot promote {self.key} '{self.name}' of type {self.type} to Float"
            )
        return replace(self, type=HeaderLineType.FLOAT)

    def mapping(self) -> "OrderedDict[str, str]":
        result: OrderedDict[str, str] = OrderedDict(
            ID=self.name,
            Number=str(self.count),
            Type=str(self.type),
            Description=self.description,
        )
        result.update(self.fields)
        return result


def merge_key(line: HeaderLine) -> Tuple[str, ...]:
    """Return the identity of *line*: its key, plus its name for named lines."""
    return line.merge_key


@dataclass(frozen=True)
class VcfHeader:
    """The meta-information lines and sample names of one VCF header."""

    lines: Tuple[HeaderLine, ...] = ()
    samples: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "samples", tuple(self.samples))

    def __iter__(self) -> Iterator[HeaderLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def lines_for(self, key: str) -> Tuple[HeaderLine, ...]:
        return tuple(line for line in self.lines if line.key == key)

    def get_named(self, key: str, name: str):
        for line in self.lines:
            if isinstance(line, NamedHeaderLine) and line.key == key and line.name == name:
                return line
        return None


__all__ = [
    "UNBOUNDED",
    "SYMBOLIC_COUNTS",
    "COMPOUND_KEYS",
    "HeaderLineType",
    "HeaderLine",
    "NamedHeaderLine",
    "FilterHeaderLine",
    "CompoundHeaderLine",
    "VcfHeader",
    "format_mapping",
    "format_mapping_value",
    "merge_key",
    "normalize_count",
]
