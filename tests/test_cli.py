"""Tests for the command-line entrypoint."""

from __future__ import annotations

import pytest

from vcf_header_merge import cli
from vcf_header_merge.header_lines import HeaderLine, HeaderLineType
from vcf_header_merge.logging_utils import configure_logging
from vcf_header_merge.sources import read_vcf_header


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    configure_logging()


@pytest.fixture
def center_vcfs(write_vcf):
    one = write_vcf(
        "broad.vcf",
        "##center=broad",
        '##INFO=<ID=DP,Number=1,Type=Integer,Description="Depth">',
        '##FILTER=<ID=q10,Description="Quality below 10">',
        samples=["NORMAL"],
    )
    two = write_vcf(
        "wustl.vcf",
        "##center=wustl",
        '##INFO=<ID=DP,Number=2,Type=Float,Description="Read depth">',
        '##FILTER=<ID=q10,Description="Quality below 10">',
        samples=["NORMAL", "TUMOR"],
    )
    return one, two


def test_parse_arguments_names_sources(tmp_path):
    args = cli.parse_arguments(["--source", "s1=a.vcf", str(tmp_path / "wustl.vcf.gz")])

    assert args.source_names == ["s1", "wustl"]
    assert args.source_paths[0] == "a.vcf"
    assert args.mode == "smart"


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--only", "a", "--prefix", "b", "a.vcf"],
        ["--source", "no_separator"],
        ["--mode", "union", "a.vcf"],
    ],
)
def test_parse_arguments_rejects_bad_invocations(argv):
    with pytest.raises(SystemExit):
        cli.parse_arguments(argv)


def test_smart_merge_prints_to_stdout(center_vcfs, capsys):
    one, two = center_vcfs

    assert cli.main([str(one), str(two)]) == 0

    out = capsys.readouterr().out
    assert out.startswith("##fileformat=VCFv4.2\n")
    assert '##INFO=<ID=DP,Number=.,Type=Float,Description="Depth">' in out
    assert "##center=broad" in out
    assert "##center=wustl" not in out


def test_tcga_merge_writes_header_vcf(center_vcfs, tmp_path, capsys):
    one, two = center_vcfs
    out_path = tmp_path / "merged.vcf"

    code = cli.main(["--mode", "tcga", "--source", f"s1={one}", "--source", f"s2={two}", "-o", str(out_path)])

    assert code == 0
    merged = read_vcf_header(out_path)
    assert HeaderLine("center", "broad,wustl") in merged.lines
    assert sorted(line.name for line in merged.lines_for("FILTER")) == ["q10.s1", "q10.s2"]
    assert merged.get_named("INFO", "DP").type is HeaderLineType.FLOAT
    assert merged.samples == ("NORMAL", "TUMOR")
    assert capsys.readouterr().out == ""


def test_prefix_selects_sources(center_vcfs, capsys):
    one, two = center_vcfs

    code = cli.main(["--mode", "tcga", "--source", f"broad_snv={one}", "--source", f"wustl={two}", "--prefix", "broad"])

    assert code == 0
    out = capsys.readouterr().out
    assert "##center=broad\n" in out
    assert "q10.broad_snv" in out
    assert "wustl" not in out


def test_only_selects_named_sources(center_vcfs, capsys):
    one, two = center_vcfs

    assert cli.main(["--only", "wustl", str(one), str(two)]) == 0

    out = capsys.readouterr().out
    assert "##center=wustl" in out
    assert "##center=broad" not in out


def test_unmatched_selection_reports_error(center_vcfs, capsys):
    one, _ = center_vcfs

    assert cli.main(["--only", "missing", str(one)]) == 1
    assert "ERROR: No header sources match" in capsys.readouterr().out


def test_incompatible_headers_report_error(write_vcf, capsys):
    one = write_vcf("one.vcf", '##INFO=<ID=XX,Number=1,Type=String,Description="x">')
    two = write_vcf("two.vcf", '##INFO=<ID=XX,Number=1,Type=Integer,Description="x">')

    assert cli.main([str(one), str(two)]) == 1
    assert "ERROR: Incompatible header types" in capsys.readouterr().out


def test_missing_input_reports_error(tmp_path, capsys):
    assert cli.main([str(tmp_path / "absent.vcf")]) == 1
    assert "ERROR: Failed to read VCF header" in capsys.readouterr().out


def test_verbose_echoes_conflict_warnings(center_vcfs, capsys):
    one, two = center_vcfs

    assert cli.main(["-v", str(one), str(two)]) == 0
    assert "Promoting Integer to Float in header" in capsys.readouterr().out


def test_log_file_receives_warnings(center_vcfs, tmp_path):
    one, two = center_vcfs
    log_path = tmp_path / "merge.log"

    assert cli.main(["--log-file", str(log_path), str(one), str(two)]) == 0

    assert "Promoting header field Number to ." in log_path.read_text(encoding="utf-8")


def test_unknown_log_level_fails(center_vcfs, capsys):
    one, _ = center_vcfs

    assert cli.main(["--log-level", "LOUD", str(one)]) == 1
    assert "ERROR: Unknown log level" in capsys.readouterr().out


def test_merge_helpers_can_be_patched(center_vcfs, monkeypatch, capsys):
    one, two = center_vcfs
    seen = []
    monkeypatch.setattr(cli, "smart_merge_headers", lambda headers, sink: seen.append(len(headers)) or [])

    assert cli.main([str(one), str(two)]) == 0
    assert seen == [2]
