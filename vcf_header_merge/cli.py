"""Command-line entrypoint for merging VCF headers."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from . import export, merging, parsing, sources, tcga
from .logging_utils import (
    HeaderMergeError,
    configure_logging,
    handle_critical_error,
    log_message,
    warning_sink,
)

# Re-export frequently patched helpers for easier test monkeypatching.
smart_merge_headers = merging.smart_merge_headers
tcga_merge_headers = tcga.tcga_merge_headers
write_header_vcf = export.write_header_vcf

MERGE_MODES = ("smart", "tcga")


def _validate_source_entry(arg: str) -> str:
    """Validate NAME=PATH and return it stripped."""
    s = arg.strip()
    if "=" not in s:
        raise argparse.ArgumentTypeError("Use NAME=PATH (e.g., broad=calls.vcf)")
    name, path = (part.strip() for part in s.split("=", 1))
    if not name or not path:
        raise argparse.ArgumentTypeError("Source entries need a non-empty NAME and PATH")
    return f"{name}={path}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vcf_header_merge",
        description="Merge the meta-information headers of several VCF files.",
    )
    parser.add_argument(
        "input_vcfs",
        nargs="*",
        help="Input VCF/BCF files, named after their file name.",
    )
    parser.add_argument(
        "--source",
        action="append",
        dest="source_entries",
        type=_validate_source_entry,
        default=[],
        help="Named input NAME=PATH (repeatable). Names qualify FILTER and SAMPLE lines in tcga mode.",
    )
    parser.add_argument(
        "--mode",
        choices=MERGE_MODES,
        default="smart",
        help="Merge strategy: 'smart' unifies by identity, 'tcga' partitions by category and source.",
    )
    parser.add_argument(
        "--only",
        action="append",
        dest="only_names",
        default=None,
        help="Merge only the sources with this exact name (repeatable).",
    )
    parser.add_argument(
        "--prefix",
        dest="prefix",
        help="Merge only the sources whose name starts with this prefix.",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output",
        help="Write a header-only VCF here. Prints the merged lines to stdout when omitted.",
    )
    parser.add_argument("--log-file", dest="log_file", help="Also write log messages to this file.")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        help="Logging level for the console and log file (default: INFO).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Echo warnings to stdout.")
    return parser


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args for the header merging tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.input_vcfs and not args.source_entries:
        parser.error("No input VCF files specified.")
    if args.only_names and args.prefix:
        parser.error("--only and --prefix cannot be combined.")

    names: List[str] = []
    paths: List[str] = []
    for entry in args.source_entries:
        name, path = entry.split("=", 1)
        names.append(name)
        paths.append(str(Path(path)))
    for path in args.input_vcfs:
        names.append(sources.source_name_for(path))
        paths.append(str(Path(path)))
    args.source_names = names
    args.source_paths = paths
    return args


def _select_headers(registry: sources.HeaderRegistry, args: argparse.Namespace):
    if args.prefix:
        selected = registry.headers_with_prefix(args.prefix)
    else:
        selected = registry.headers(args.only_names)
    if not selected:
        handle_critical_error("No header sources match the requested names.", exc_cls=HeaderMergeError)
    return selected


def _merged_samples(selected) -> List[str]:
    samples: List[str] = []
    for header in selected.values():
        for name in header.samples:
            if name not in samples:
                samples.append(name)
    return samples


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    verbose = args.verbose

    try:
        configure_logging(
            log_level=args.log_level,
            log_file=args.log_file,
            enable_file_logging=bool(args.log_file),
            enable_console=True,
        )
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return 1

    try:
        registry = sources.HeaderRegistry.from_paths(args.source_paths, names=args.source_names)
        selected = _select_headers(registry, args)
        log_message(
            f"Merging {len(selected)} header(s) in {args.mode} mode: " + ", ".join(selected),
            verbose,
            level=logging.DEBUG,
        )

        sink = warning_sink(verbose)
        if args.mode == "tcga":
            merged = tcga_merge_headers(selected, sink)
        else:
            merged = smart_merge_headers(list(selected.values()), sink)

        if args.output:
            write_header_vcf(args.output, merged, _merged_samples(selected), verbose=verbose)
        else:
            sys.stdout.write(parsing.serialize_header(merged))
        log_message(f"Merged header contains {len(merged)} line(s).", verbose)
    except HeaderMergeError as exc:
        print(f"ERROR: {exc}")
        return 1
    return 0


__all__ = ["build_parser", "main", "parse_arguments"]
