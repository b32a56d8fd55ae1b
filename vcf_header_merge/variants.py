"""Lookup helpers over VCF records."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

NO_VARIATION = "NO_VARIATION"
SNP = "SNP"
MNP = "MNP"
INDEL = "INDEL"
SYMBOLIC = "SYMBOLIC"
MIXED = "MIXED"

MISSING_ID = "."

# vcfpy alternative allele types grouped by the variant type they imply
_ALT_TYPE_GROUPS = {
    "SNV": SNP,
    "MNV": MNP,
    "DEL": INDEL,
    "INS": INDEL,
    "INDEL": INDEL,
    "SV": SYMBOLIC,
    "BND": SYMBOLIC,
    "SYMBOLIC": SYMBOLIC,
}


def variant_type(record) -> str:
    """Classify a :class:`vcfpy.Record` by the types of its ALT alleles."""

    alts = [alt for alt in (getattr(record, "ALT", None) or []) if alt is not None]
    if not alts:
        return NO_VARIATION
    groups = {_ALT_TYPE_GROUPS.get(getattr(alt, "type", None), MIXED) for alt in alts}
    if len(groups) == 1:
        return groups.pop()
    return MIXED


def record_id(record) -> str:
    """Return the ID column of *record* as written in a VCF.

    A record without an identifier yields the missing-value marker ``"."``, so
    a matching record is never confused with no match.
    """

    value = getattr(record, "ID", None)
    if isinstance(value, (list, tuple)):
        value = ";".join(str(entry) for entry in value if entry)
    if not value:
        return MISSING_ID
    return str(value)


def rs_id_of_first_real_variant(
    records: Optional[Iterable],
    target_type: str,
    *,
    type_of: Callable[[object], str] = variant_type,
) -> Optional[str]:
    """Return the ID of the first record of *target_type*.

    Returns None when *records* is None or empty or when no record matches.
    """

    if records is None:
        return None
    for record in records:
        if type_of(record) == target_type:
            return record_id(record)
    return None


__all__ = [
    "INDEL",
    "MISSING_ID",
    "MIXED",
    "MNP",
    "NO_VARIATION",
    "SNP",
    "SYMBOLIC",
    "record_id",
    "rs_id_of_first_real_variant",
    "variant_type",
]
