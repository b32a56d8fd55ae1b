"""Generic ("smart") merging of VCF headers.

:func:`smart_merge_headers` walks every line of every header in order and keys
it by :func:`merge_key`. The first line seen for a key is kept; later lines for
the same key are either exact duplicates, reconciled INFO/FORMAT definitions,
or conflicts that are reported once through a :class:`ConflictWarner` and
dropped. Declarations of different kinds sharing a key cannot be merged and
abort the call with :class:`IncompatibleHeadersError`.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .conflicts import ConflictWarner
from .header_lines import (
    CompoundHeaderLine,
    FilterHeaderLine,
    HeaderLine,
    HeaderLineType,
    VcfHeader,
    merge_key,
)
from .logging_utils import IncompatibleHeadersError, handle_critical_error, log_message

HeaderInput = Union[VcfHeader, Iterable[HeaderLine]]

_NUMERIC_TYPES = {HeaderLineType.INTEGER, HeaderLineType.FLOAT}


def _cause(line: HeaderLine, conflict: str) -> str:
    return ".".join(line.merge_key) + ":" + conflict


def _lines_of(header: HeaderInput) -> Iterable[HeaderLine]:
    if isinstance(header, VcfHeader):
        return header.lines
    return header


def _incompatible(message: str, *lines: HeaderLine) -> None:
    handle_critical_error(message, exc_cls=IncompatibleHeadersError, lines=lines)


def merge_compound_lines(
    existing: HeaderLine,
    incoming: HeaderLine,
    warner: ConflictWarner,
) -> CompoundHeaderLine:
    """Unify two INFO/FORMAT definitions that share a merge key.

    Differing counts widen the result to unbounded and an Integer/Float pair
    promotes it to Float. Any other type mismatch raises
    :class:`IncompatibleHeadersError`. The description of *existing* is kept,
    and any remaining difference, such as extra fields, is warned and dropped.
    Returns the merged definition, which replaces *existing* in the caller's
    map.
    """

    if incoming == existing:
        return existing
    if type(incoming) is not type(existing):
        _incompatible(f"Incompatible header types: {incoming} {existing}", incoming, existing)
    if not isinstance(existing, CompoundHeaderLine):
        _incompatible(f"Expected an INFO or FORMAT definition: {incoming}", incoming, existing)

    merged = existing
    if incoming.count != existing.count:
        warner.warn(
            _cause(existing, "Number"),
            "Promoting header field Number to . due to number differences in header lines: "
            f"{incoming} {existing}",
        )
        merged = merged.widen_count_to_unbounded()

    if incoming.type is not existing.type:
        if {incoming.type, existing.type} == _NUMERIC_TYPES:
            integer_line = incoming if incoming.type is HeaderLineType.INTEGER else existing
            warner.warn(
                _cause(existing, "Type"),
                f"Promoting Integer to Float in header: {integer_line}",
            )
            merged = merged.promote_integer_to_float()
        else:
            _incompatible(
                f"Incompatible header types, collision between these two types: {incoming} {existing}",
                incoming,
                existing,
            )

    if incoming.description != existing.description:
        warner.warn(
            _cause(existing, "Description"),
            f"Allowing unequal description fields through: keeping {merged} excluding {incoming}",
        )
    if not merged.equals_excluding_description(replace(incoming, count=merged.count, type=merged.type)):
        warner.warn(
            _cause(existing, "Value"),
            "Ignoring header line already in map: "
            f"this header line = {incoming} already present header = {merged}",
        )
    return merged


def smart_merge_headers(
    headers: Iterable[HeaderInput],
    sink: Optional[Callable[[str], None]] = None,
    *,
    warner: Optional[ConflictWarner] = None,
) -> List[HeaderLine]:
    """Merge *headers* into one list of lines keyed by declaration identity.

    The result is in first-seen order and holds one line per merge key.
    Recoverable conflicts go to *sink* (once per cause) and keep the first-seen
    line.
    """

    if warner is None:
        warner = ConflictWarner(sink)
    merged: Dict[Tuple[str, ...], HeaderLine] = {}
    source_count = 0

    for header in headers:
        source_count += 1
        for line in _lines_of(header):
            key = merge_key(line)
            other = merged.get(key)
            if other is None:
                merged[key] = line
                continue
            if line == other:
                continue
            if type(line) is not type(other):
                _incompatible(f"Incompatible header types: {line} {other}", line, other)
            if isinstance(line, FilterHeaderLine):
                if line.name != other.name:
                    _incompatible(f"Incompatible header types: {line} {other}", line, other)
                warner.warn(
                    _cause(other, "Description"),
                    f"Allowing unequal description fields through: keeping {other} excluding {line}",
                )
            elif isinstance(line, CompoundHeaderLine):
                merged[key] = merge_compound_lines(other, line, warner)
            else:
                warner.warn(
                    _cause(other, "Value"),
                    "Ignoring header line already in map: "
                    f"this header line = {line} already present header = {other}",
                )

    log_message(
        f"Merged {source_count} header(s) into {len(merged)} line(s).",
        level=logging.DEBUG,
    )
    return list(merged.values())


__all__ = ["merge_compound_lines", "smart_merge_headers"]
