"""Shared pytest fixtures for the vcf_header_merge test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest

from vcf_header_merge.header_lines import (
    CompoundHeaderLine,
    FilterHeaderLine,
    HeaderLine,
    HeaderLineType,
    VcfHeader,
)


def info(name: str, count="1", type_="Integer", description="", key="INFO") -> CompoundHeaderLine:
    """Build an INFO (or FORMAT) definition with terse defaults."""
    return CompoundHeaderLine(
        key=key,
        name=name,
        count=count,
        type=HeaderLineType(type_),
        description=description or f"{name} description",
    )


def filter_line(name: str, description: str = "") -> FilterHeaderLine:
    return FilterHeaderLine(name=name, description=description or f"{name} filter")


def header(*lines: HeaderLine, samples=()) -> VcfHeader:
    return VcfHeader(lines=lines, samples=samples)


@pytest.fixture
def messages() -> List[str]:
    """Collect the warnings a merge sends to its diagnostic sink."""
    return []


@pytest.fixture
def sink(messages) -> Callable[[str], None]:
    return messages.append


@pytest.fixture
def write_vcf(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a small VCF with the given ``##`` lines."""

    def _write(name: str, *meta_lines: str, samples=(), records=()) -> Path:
        columns = ["CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO"]
        if samples:
            columns += ["FORMAT", *samples]
        text = [
            "##fileformat=VCFv4.2",
            *meta_lines,
            "#" + "\t".join(columns),
            *records,
        ]
        path = tmp_path / name
        path.write_text("\n".join(text) + "\n")
        return path

    return _write
