"""Category-partitioned merging of headers following TCGA VCF conventions.

Unlike :func:`~vcf_header_merge.merging.smart_merge_headers`, this merge knows
which source every header came from. Lines are split into five buckets:

* miscellaneous lines, including the accumulated ``center`` list and the
  ``vcfProcessLog`` provenance record,
* INFO definitions, reconciled across sources,
* FILTER declarations, renamed to ``<name>.<source>``,
* FORMAT definitions, reconciled across sources,
* SAMPLE declarations, whose ID becomes ``<id>.<source>``.

The provenance record has the form::

    <InputVCF=<a.vcf>,InputVCFSource=<caller>,InputVCFVer=<1.0>,InputVCFParam=<p>,InputVCFgeneAnno=<g.gaf>>

and is merged field by field so that each sub-field becomes a comma list of
the values contributed by every source.
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .conflicts import ConflictWarner
from .header_lines import CompoundHeaderLine, FilterHeaderLine, HeaderLine, merge_key
from .logging_utils import (
    IncompatibleHeadersError,
    MalformedHeaderLineError,
    ProcessLogFormatError,
    handle_critical_error,
    log_message,
)
from .merging import HeaderInput, _lines_of, merge_compound_lines

CENTER_KEY = "center"
PROCESS_LOG_KEY = "vcfProcessLog"
PROCESS_LOG_FIELDS: Tuple[str, ...] = (
    "InputVCF",
    "InputVCFSource",
    "InputVCFVer",
    "InputVCFParam",
    "InputVCFgeneAnno",
)

_PROCESS_LOG_ENTRY = re.compile(r"(?P<name>InputVCF\w*)=<(?P<value>[^<>]*)>")


def _sample_id_bounds(sample_value: str) -> Tuple[int, int]:
    equal_pos = sample_value.find("=")
    if equal_pos < 0:
        handle_critical_error(
            f"SAMPLE declaration without an ID: {sample_value}",
            exc_cls=MalformedHeaderLineError,
            lines=(sample_value,),
        )
    comma_pos = sample_value.find(",", equal_pos + 1)
    if comma_pos < 0:
        comma_pos = len(sample_value) - 1 if sample_value.endswith(">") else len(sample_value)
    if comma_pos <= equal_pos + 1:
        handle_critical_error(
            f"SAMPLE declaration with an empty ID: {sample_value}",
            exc_cls=MalformedHeaderLineError,
            lines=(sample_value,),
        )
    return equal_pos + 1, comma_pos


def parse_sample_id(sample_value: str) -> str:
    """Return the ID of a ``SAMPLE`` value such as ``ID=foo,bar=1``."""
    start, end = _sample_id_bounds(sample_value)
    return sample_value[start:end]


def qualify_sample_value(sample_value: str, source: str) -> str:
    """Insert ``.<source>`` right after the ID of a ``SAMPLE`` value."""
    _, end = _sample_id_bounds(sample_value)
    return f"{sample_value[:end]}.{source}{sample_value[end:]}"


def parse_process_log(value: str) -> "OrderedDict[str, str]":
    """Return the five ``vcfProcessLog`` sub-fields of *value* in fixed order.

    Raises :class:`ProcessLogFormatError` when any sub-field is missing.
    """
    found: Dict[str, str] = {}
    for match in _PROCESS_LOG_ENTRY.finditer(value):
        found.setdefault(match.group("name"), match.group("value"))
    if any(name not in found for name in PROCESS_LOG_FIELDS):
        handle_critical_error(
            "Incompatible vcfProcessLog, expected "
            + ", ".join(PROCESS_LOG_FIELDS)
            + f" but got {value}",
            exc_cls=ProcessLogFormatError,
            lines=(value,),
        )
    return OrderedDict((name, found[name]) for name in PROCESS_LOG_FIELDS)


def merge_process_log(stored: str, incoming: str) -> str:
    """Append every sub-field of *incoming* to the matching one of *stored*.

    Text around the sub-fields of *stored* (the enclosing ``<`` and ``>``) is
    kept as is.
    """
    stored_fields = parse_process_log(stored)
    incoming_fields = parse_process_log(incoming)
    matches = list(_PROCESS_LOG_ENTRY.finditer(stored))
    prefix = stored[: matches[0].start()]
    suffix = stored[matches[-1].end():]
    body = ",".join(
        f"{name}=<{stored_fields[name]},{incoming_fields[name]}>" for name in PROCESS_LOG_FIELDS
    )
    return prefix + body + suffix


def _require(line: HeaderLine, cls, description: str) -> None:
    if not isinstance(line, cls):
        handle_critical_error(
            f"Incompatible header type, not {description}: {line}",
            exc_cls=IncompatibleHeadersError,
            lines=(line,),
        )


def tcga_merge_headers(
    headers_by_source: Mapping[str, HeaderInput],
    sink: Optional[Callable[[str], None]] = None,
    *,
    warner: Optional[ConflictWarner] = None,
) -> List[HeaderLine]:
    """Merge headers keyed by source name into one list of lines.

    Sources are visited in mapping order, which determines the order of the
    accumulated ``center`` and ``vcfProcessLog`` values and which definition
    wins reconciliation ties.
    """

    if warner is None:
        warner = ConflictWarner(sink)
    misc: Dict[Tuple[str, ...], HeaderLine] = {}
    info: Dict[str, HeaderLine] = {}
    filters: Dict[str, Tuple[str, FilterHeaderLine]] = {}
    formats: Dict[str, HeaderLine] = {}
    samples: Dict[str, HeaderLine] = {}

    for source, header in headers_by_source.items():
        for line in _lines_of(header):
            key = line.key

            if key == CENTER_KEY:
                existing = misc.get((CENTER_KEY,))
                if existing is None:
                    misc[(CENTER_KEY,)] = line
                else:
                    misc[(CENTER_KEY,)] = HeaderLine(CENTER_KEY, f"{existing.value},{line.value}")

            elif key in ("INFO", "FORMAT"):
                _require(line, CompoundHeaderLine, "an INFO or FORMAT definition")
                bucket = info if key == "INFO" else formats
                existing = bucket.get(line.name)
                if existing is None:
                    bucket[line.name] = line
                else:
                    bucket[line.name] = merge_compound_lines(existing, line, warner)

            elif key == "FILTER":
                _require(line, FilterHeaderLine, "a FILTER declaration")
                qualified = replace(line, name=f"{line.name}.{source}")
                stored = filters.get(qualified.name)
                if stored is None:
                    filters[qualified.name] = (line.name, qualified)
                    continue
                original_name, other = stored
                if original_name != line.name:
                    # "a.b" from "c" and "a" from "b.c" both qualify to "a.b.c"
                    handle_critical_error(
                        f"Incompatible header types, qualified FILTER names collide: {qualified} {other}",
                        exc_cls=IncompatibleHeadersError,
                        lines=(qualified, other),
                    )
                if other != qualified:
                    warner.warn(
                        f"FILTER.{qualified.name}:Description",
                        f"Ignoring header line already in map: this header line = {qualified} "
                        f"already present header = {other}",
                    )

            elif key == "SAMPLE":
                sample_key = f"{parse_sample_id(line.value)}.{source}"
                samples[sample_key] = HeaderLine(key, qualify_sample_value(line.value, source))

            elif key == PROCESS_LOG_KEY:
                existing = misc.get((PROCESS_LOG_KEY,))
                if existing is None:
                    parse_process_log(line.value)
                    misc[(PROCESS_LOG_KEY,)] = line
                else:
                    misc[(PROCESS_LOG_KEY,)] = HeaderLine(
                        PROCESS_LOG_KEY, merge_process_log(existing.value, line.value)
                    )

            else:
                line_key = merge_key(line)
                other = misc.get(line_key)
                if other is None:
                    misc[line_key] = line
                elif other != line:
                    warner.warn(
                        ".".join(line_key) + ":Value",
                        "Ignoring header line already in map: "
                        f"this header line = {line} already present header = {other}",
                    )

    qualified_filters = {name: line for name, (_, line) in filters.items()}
    merged: List[HeaderLine] = []
    for bucket in (misc, info, qualified_filters, formats, samples):
        merged.extend(bucket.values())
    log_message(
        f"Merged headers from {len(headers_by_source)} source(s) into {len(merged)} line(s).",
        level=logging.DEBUG,
    )
    return merged


__all__ = [
    "CENTER_KEY",
    "PROCESS_LOG_FIELDS",
    "PROCESS_LOG_KEY",
    "merge_process_log",
    "parse_process_log",
    "parse_sample_id",
    "qualify_sample_value",
    "tcga_merge_headers",
]
