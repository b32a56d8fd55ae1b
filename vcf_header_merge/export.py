"""Writing merged header lines as a header-only VCF through :mod:`vcfpy`."""

from __future__ import annotations

import os
from typing import Iterable, List, Sequence

from . import vcfpy
from .header_lines import CompoundHeaderLine, FilterHeaderLine, HeaderLine, NamedHeaderLine
from .logging_utils import HeaderMergeError, handle_critical_error, log_message
from .parsing import split_mapping

DEFAULT_FILEFORMAT = "VCFv4.2"

ID_KEYS = ("ALT", "contig", "FILTER", "FORMAT", "INFO", "META", "PEDIGREE", "SAMPLE")


def to_vcfpy_line(line: HeaderLine):
    """Return the :mod:`vcfpy` header line equivalent to *line*."""

    if isinstance(line, CompoundHeaderLine):
        if line.key == "FORMAT":
            return vcfpy.header.FormatHeaderLine.from_mapping(line.mapping())
        return vcfpy.header.InfoHeaderLine.from_mapping(line.mapping())
    if isinstance(line, FilterHeaderLine):
        return vcfpy.header.FilterHeaderLine.from_mapping(line.mapping())
    if isinstance(line, NamedHeaderLine):
        if line.key == "contig":
            return vcfpy.header.ContigHeaderLine.from_mapping(line.mapping())
        value = line.serialize().split("=", 1)[1]
        return vcfpy.header.SimpleHeaderLine(line.key, value, line.mapping())
    if line.key in ID_KEYS:
        # vcfpy indexes these keys by ID, so the raw value must be a mapping
        try:
            mapping = split_mapping(line.value[1:-1]) if line.value.startswith("<") else {}
        except ValueError:
            mapping = {}
        if "ID" not in mapping:
            handle_critical_error(
                f"Cannot export {line.key} line without an ID: {line}",
                exc_cls=HeaderMergeError,
            )
        if line.key == "SAMPLE":
            return vcfpy.header.SampleHeaderLine.from_mapping(mapping)
        return vcfpy.header.SimpleHeaderLine(line.key, line.value, mapping)
    return vcfpy.header.HeaderLine(line.key, line.value)


def _ordered_lines(lines: Iterable[HeaderLine]) -> List[HeaderLine]:
    lines = list(lines)
    fileformat = [line for line in lines if line.key == "fileformat"]
    rest = [line for line in lines if line.key != "fileformat"]
    if not fileformat:
        fileformat = [HeaderLine("fileformat", DEFAULT_FILEFORMAT)]
    return fileformat[:1] + rest


def to_vcfpy_header(lines: Iterable[HeaderLine], samples: Sequence[str] = ()):
    """Build a :class:`vcfpy.Header` holding *lines* and *samples*.

    A ``fileformat`` line is placed first, adding ``VCFv4.2`` when none is
    present.
    """

    vcfpy_lines = [to_vcfpy_line(line) for line in _ordered_lines(lines)]
    return vcfpy.Header(lines=vcfpy_lines, samples=vcfpy.SamplesInfos(list(samples)))


def write_header_vcf(
    path: str | os.PathLike[str],
    lines: Iterable[HeaderLine],
    samples: Sequence[str] = (),
    verbose: bool = False,
) -> str:
    """Write a VCF containing only the merged header to *path*."""

    path = os.fspath(path)
    header = to_vcfpy_header(lines, samples)
    try:
        writer = vcfpy.Writer.from_path(path, header)
    except Exception as exc:
        handle_critical_error(
            f"Failed to open writer for merged header ({path}): {exc}",
            exc_cls=HeaderMergeError,
            exc_info=exc,
        )
    writer.close()
    log_message(f"Merged header written: {path}", verbose)
    return path


__all__ = ["DEFAULT_FILEFORMAT", "to_vcfpy_header", "to_vcfpy_line", "write_header_vcf"]
