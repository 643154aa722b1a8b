"""Input/output handlers for txrepair.

- Metadata: per-transcript flag table (TSV/CSV)
- GFF3: gene annotation files

Example:
    >>> from txrepair.io import read_gff, read_metadata
    >>> genes = read_gff("annotations.gff3")
    >>> records = read_metadata("transcripts.tsv")
"""

from txrepair.io.gff import (
    GFF3Parser,
    GFF3Writer,
    cds_sets,
    exon_sets,
    read_gff,
    write_gff,
)
from txrepair.io.metadata import read_metadata

__all__: list[str] = [
    "GFF3Parser",
    "GFF3Writer",
    "cds_sets",
    "exon_sets",
    "read_gff",
    "read_metadata",
    "write_gff",
]
