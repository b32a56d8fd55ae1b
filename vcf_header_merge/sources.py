"""Discovery of the headers that take part in a merge.

A :class:`HeaderRegistry` holds named headers in registration order and answers
the three queries merges need: every header, the headers whose name is one of
a given set, and the headers whose name starts with a prefix. Headers are read
from plain or gzip-compressed VCF text, or from BCF through :mod:`pysam`.
"""

from __future__ import annotations

import gzip
import os
from collections import OrderedDict
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Sequence

from . import pysam
from .header_lines import HeaderLine, VcfHeader
from .logging_utils import HeaderSourceError, handle_critical_error, log_message
from .parsing import parse_header

VCF_SUFFIXES = (".vcf.gz", ".vcf.bgz", ".vcf", ".bcf")


def _open_vcf(path: str):
    return (
        gzip.open(path, "rt", encoding="utf-8")
        if path.endswith((".gz", ".bgz"))
        else open(path, "r", encoding="utf-8")
    )


def _read_header_lines(path: str) -> List[str]:
    header_lines: List[str] = []
    with _open_vcf(path) as handle:
        for raw in handle:
            if not raw.startswith("#"):
                break
            header_lines.append(raw.rstrip("\n"))
    return header_lines


def _read_bcf_header_text(path: str) -> str:
    with pysam.VariantFile(path) as variant_file:
        return str(variant_file.header)


def read_vcf_header(path: str | os.PathLike[str]) -> VcfHeader:
    """Read the header of the VCF or BCF file at *path*."""

    path = os.fspath(path)
    try:
        if path.endswith(".bcf"):
            header = parse_header(_read_bcf_header_text(path))
        else:
            header = parse_header(_read_header_lines(path))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        handle_critical_error(
            f"Failed to read VCF header from {path}: {exc}",
            exc_cls=HeaderSourceError,
            exc_info=exc,
        )
    log_message(f"Read {len(header)} header line(s) from {path}")
    return header


def source_name_for(path: str | os.PathLike[str]) -> str:
    """Return the default source name for *path*: its file name without suffix."""

    name = os.path.basename(os.fspath(path))
    for suffix in VCF_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


class HeaderRegistry:
    """Named headers in registration order."""

    def __init__(self, headers: Optional[Mapping[str, VcfHeader]] = None) -> None:
        self._headers: "OrderedDict[str, VcfHeader]" = OrderedDict()
        for name, header in (headers or {}).items():
            self.add(name, header)

    @classmethod
    def from_paths(
        cls,
        paths: Sequence[str | os.PathLike[str]],
        names: Optional[Sequence[str]] = None,
    ) -> "HeaderRegistry":
        """Read every file in *paths*, named by *names* or by file name."""
        if names is not None and len(names) != len(paths):
            raise ValueError("names and paths must have the same length")
        registry = cls()
        for index, path in enumerate(paths):
            name = names[index] if names is not None else source_name_for(path)
            registry.add_path(name, path)
        return registry

    def add(self, name: str, header: VcfHeader) -> None:
        if name in self._headers:
            handle_critical_error(
                f"Duplicate header source name: {name}",
                exc_cls=HeaderSourceError,
            )
        self._headers[name] = header

    def add_path(self, name: str, path: str | os.PathLike[str]) -> VcfHeader:
        header = read_vcf_header(path)
        self.add(name, header)
        return header

    def __len__(self) -> int:
        return len(self._headers)

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def names(self) -> List[str]:
        return list(self._headers)

    def headers(self, names: Optional[Collection[str]] = None) -> Dict[str, VcfHeader]:
        """Return all headers, or only those whose name is in *names*."""
        if names is None:
            return OrderedDict(self._headers)
        wanted = set(names)
        return OrderedDict((n, h) for n, h in self._headers.items() if n in wanted)

    def headers_with_prefix(self, prefix: str) -> Dict[str, VcfHeader]:
        return OrderedDict((n, h) for n, h in self._headers.items() if n.startswith(prefix))

    def header_fields(self, names: Optional[Collection[str]] = None) -> List[HeaderLine]:
        """Return the union of all header lines, without conflict handling.

        Structural duplicates are dropped; the first occurrence keeps its
        position.
        """
        return _union(self.headers(names).values())


def _union(headers: Iterable[VcfHeader]) -> List[HeaderLine]:
    seen = set()
    fields: List[HeaderLine] = []
    for header in headers:
        for line in header.lines:
            if line in seen:
                continue
            seen.add(line)
            fields.append(line)
    return fields


__all__ = [
    "HeaderRegistry",
    "VCF_SUFFIXES",
    "read_vcf_header",
    "source_name_for",
]
