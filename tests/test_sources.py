"""Tests for reading headers and querying the header registry."""

from __future__ import annotations

import gzip

import pytest

from conftest import header, info
from vcf_header_merge import pysam
from vcf_header_merge.header_lines import CompoundHeaderLine, FilterHeaderLine, HeaderLine, HeaderLineType
from vcf_header_merge.logging_utils import HeaderSourceError
from vcf_header_merge.sources import HeaderRegistry, read_vcf_header, source_name_for

META_LINES = (
    "##center=broad",
    '##INFO=<ID=DP,Number=1,Type=Integer,Description="Depth">',
    '##FILTER=<ID=q10,Description="Quality below 10">',
)


def test_read_plain_vcf_header(write_vcf):
    path = write_vcf("broad.vcf", *META_LINES, samples=["NORMAL", "TUMOR"], records=["1\t1\t.\tA\tC\t.\tPASS\t.\tGT\t0/0\t0/1"])

    hdr = read_vcf_header(path)

    assert hdr.lines[0] == HeaderLine("fileformat", "VCFv4.2")
    assert HeaderLine("center", "broad") in hdr.lines
    assert hdr.get_named("FILTER", "q10") == FilterHeaderLine(name="q10", description="Quality below 10")
    assert hdr.samples == ("NORMAL", "TUMOR")


def test_read_gzip_vcf_header(write_vcf, tmp_path):
    plain = write_vcf("plain.vcf", *META_LINES)
    compressed = tmp_path / "broad.vcf.gz"
    with gzip.open(compressed, "wt", encoding="utf-8") as handle:
        handle.write(plain.read_text())

    assert read_vcf_header(compressed) == read_vcf_header(plain)


def test_read_bcf_header(tmp_path):
    path = tmp_path / "calls.bcf"
    vh = pysam.VariantHeader()
    vh.add_line("##contig=<ID=1,length=1000>")
    vh.add_line('##INFO=<ID=DP,Number=1,Type=Integer,Description="Depth">')
    vh.add_sample("S1")
    with pysam.VariantFile(str(path), "wb", header=vh):
        pass

    hdr = read_vcf_header(path)

    dp = hdr.get_named("INFO", "DP")
    assert isinstance(dp, CompoundHeaderLine)
    assert (dp.count, dp.type, dp.description) == (1, HeaderLineType.INTEGER, "Depth")
    assert hdr.get_named("contig", "1") is not None
    assert hdr.samples == ("S1",)


def test_missing_file_raises_source_error(tmp_path):
    with pytest.raises(HeaderSourceError, match="Failed to read VCF header"):
        read_vcf_header(tmp_path / "absent.vcf")


@pytest.mark.parametrize(
    "path, expected",
    [("dir/broad.vcf", "broad"), ("wustl.vcf.gz", "wustl"), ("/x/ucsc.bcf", "ucsc"), ("notes.txt", "notes.txt")],
)
def test_source_name_for(path, expected):
    assert source_name_for(path) == expected


def _registry():
    return HeaderRegistry(
        {
            "broad_snv": header(HeaderLine("center", "broad"), info("DP")),
            "broad_indel": header(HeaderLine("center", "broad"), info("AF", type_="Float")),
            "wustl": header(HeaderLine("center", "wustl"), info("DP")),
        }
    )


def test_registry_returns_all_headers_in_order():
    assert list(_registry().headers()) == ["broad_snv", "broad_indel", "wustl"]


def test_registry_filters_by_exact_name():
    registry = _registry()

    assert list(registry.headers(["wustl", "broad_snv", "missing"])) == ["broad_snv", "wustl"]
    assert registry.headers(["broad"]) == {}


def test_registry_filters_by_prefix():
    assert list(_registry().headers_with_prefix("broad")) == ["broad_snv", "broad_indel"]


def test_registry_header_fields_is_a_plain_union():
    fields = _registry().header_fields()

    assert fields == [
        HeaderLine("center", "broad"),
        info("DP"),
        info("AF", type_="Float"),
        HeaderLine("center", "wustl"),
    ]


def test_registry_rejects_duplicate_names():
    registry = _registry()

    with pytest.raises(HeaderSourceError, match="Duplicate header source name"):
        registry.add("wustl", header())


def test_registry_from_paths(write_vcf):
    one = write_vcf("one.vcf", "##center=A")
    two = write_vcf("two.vcf", "##center=B")

    registry = HeaderRegistry.from_paths([one, two])

    assert registry.names() == ["one", "two"]
    assert "two" in registry and len(registry) == 2

    renamed = HeaderRegistry.from_paths([one, two], names=["s1", "s2"])
    assert renamed.names() == ["s1", "s2"]

    with pytest.raises(ValueError):
        HeaderRegistry.from_paths([one], names=["a", "b"])
