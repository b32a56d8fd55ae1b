"""Command-line entry point for the vcf_header_merge package."""

from vcf_header_merge.cli import main as _cli_main


def main() -> None:
    """Execute the vcf_header_merge command-line interface."""

    raise SystemExit(_cli_main())


if __name__ == "__main__":  # pragma: no cover - entry point
    main()
