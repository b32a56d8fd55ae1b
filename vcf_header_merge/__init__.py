"""Semantic merging of VCF meta-information headers.

This package combines the ``##`` header lines of several VCF files into one
consistent header. Two strategies are offered: :func:`smart_merge_headers`
keys every declaration by its identity and unifies compatible differences,
while :func:`tcga_merge_headers` partitions lines by category and qualifies
filters and samples with the name of the source they came from.

Importing the package verifies that the runtime dependencies :mod:`vcfpy` and
:mod:`pysam` are available so that header export and BCF reading never fail
with a deferred import error.
"""

from __future__ import annotations


def _import_dependency(name: str):
    try:
        module = __import__(name)
    except ImportError as exc:  # pragma: no cover - exercised when dependency missing
        raise ModuleNotFoundError(
            f"The '{name}' package is required for VCF header merging. "
            f"Please install it with 'pip install {name}'."
        ) from exc
    return module


vcfpy = _import_dependency("vcfpy")
pysam = _import_dependency("pysam")

from .conflicts import ConflictWarner  # noqa: E402
from .header_lines import (  # noqa: E402
    UNBOUNDED,
    CompoundHeaderLine,
    FilterHeaderLine,
    HeaderLine,
    HeaderLineType,
    NamedHeaderLine,
    VcfHeader,
    merge_key,
)
from .logging_utils import (  # noqa: E402
    HeaderMergeError,
    HeaderSourceError,
    IncompatibleHeadersError,
    MalformedHeaderLineError,
    ProcessLogFormatError,
)
from .merging import merge_compound_lines, smart_merge_headers  # noqa: E402
from .parsing import parse_header, parse_header_line  # noqa: E402
from .sources import HeaderRegistry, read_vcf_header  # noqa: E402
from .tcga import tcga_merge_headers  # noqa: E402
from .variants import rs_id_of_first_real_variant, variant_type  # noqa: E402

__all__ = [
    "vcfpy",
    "pysam",
    "UNBOUNDED",
    "CompoundHeaderLine",
    "ConflictWarner",
    "FilterHeaderLine",
    "HeaderLine",
    "HeaderLineType",
    "HeaderMergeError",
    "HeaderRegistry",
    "HeaderSourceError",
    "IncompatibleHeadersError",
    "MalformedHeaderLineError",
    "NamedHeaderLine",
    "ProcessLogFormatError",
    "VcfHeader",
    "merge_compound_lines",
    "merge_key",
    "parse_header",
    "parse_header_line",
    "read_vcf_header",
    "rs_id_of_first_real_variant",
    "smart_merge_headers",
    "tcga_merge_headers",
    "variant_type",
]
