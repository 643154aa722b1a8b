"""Transcript metadata table reader.

The metadata table has one row per transcript with its gene and the
flags that drive extension:

    transcript_id  gene_id  longest_start  longest_end  cds_start_NF  cds_end_NF  cds_start_end_NF

Ensembl column names (``ensembl_transcript_id``, ``ensembl_gene_id``)
are accepted as well. ``cds_start_end_NF`` is optional; when absent it
is derived as ``cds_start_NF + cds_end_NF``.

Example:
    >>> from txrepair.io.metadata import read_metadata
    >>> records = read_metadata("transcripts.tsv")
    >>> records[0].transcript_id
    'ENST00000000001'
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from txrepair.core.models import TranscriptRecord

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

TRANSCRIPT_ID_COLUMNS = ("transcript_id", "ensembl_transcript_id")
GENE_ID_COLUMNS = ("gene_id", "ensembl_gene_id")

FLAG_COLUMNS = {
    "longest_start": "longest_start",
    "longest_end": "longest_end",
    "cds_start_NF": "cds_start_nf",
    "cds_end_NF": "cds_end_nf",
}
COMBINED_COLUMN = "cds_start_end_NF"


# =============================================================================
# Parsing
# =============================================================================


def _pick_column(fieldnames: list[str], candidates: tuple[str, ...], path: Path) -> str:
    for name in candidates:
        if name in fieldnames:
            return name
    raise ValueError(f"{path}: missing column, expected one of {', '.join(candidates)}")


def _parse_int(value: str | None, column: str, line_no: int, path: Path) -> int:
    if value is None or value.strip() in ("", "NA", "."):
        return 0
    try:
        return int(float(value))
    except ValueError:
        raise ValueError(f"{path}:{line_no}: invalid {column} value '{value}'") from None


def _parse_flag(value: str | None, column: str, line_no: int, path: Path) -> bool:
    number = _parse_int(value, column, line_no, path)
    if number not in (0, 1):
        raise ValueError(f"{path}:{line_no}: {column} must be 0 or 1, got '{value}'")
    return bool(number)


def read_metadata(path: Path | str) -> list[TranscriptRecord]:
    """Read transcript metadata from a TSV or CSV file.

    The delimiter is a comma for ``.csv`` files and a tab otherwise.
    Empty or NA flag values count as 0.

    Args:
        path: Path to the metadata table.

    Returns:
        TranscriptRecord per row, in file order.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If a required column is missing, a value is invalid,
            or a transcript ID appears twice.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Metadata file not found: {path}")

    delimiter = "," if path.suffix.lower() == ".csv" else "\t"
    records: list[TranscriptRecord] = []
    seen: set[str] = set()

    with open(path, newline="") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        fieldnames = list(reader.fieldnames or [])

        tx_column = _pick_column(fieldnames, TRANSCRIPT_ID_COLUMNS, path)
        gene_column = _pick_column(fieldnames, GENE_ID_COLUMNS, path)
        missing = [c for c in FLAG_COLUMNS if c not in fieldnames]
        if missing:
            raise ValueError(f"{path}: missing column(s) {', '.join(missing)}")
        has_combined = COMBINED_COLUMN in fieldnames

        # Line 1 is the header
        for line_no, row in enumerate(reader, start=2):
            tx_id = (row.get(tx_column) or "").strip()
            if not tx_id:
                logger.warning(f"{path}:{line_no}: empty transcript ID, skipping row")
                continue
            if tx_id in seen:
                raise ValueError(f"{path}:{line_no}: duplicate transcript ID {tx_id}")
            seen.add(tx_id)

            flags = {
                attr: _parse_flag(row.get(column), column, line_no, path)
                for column, attr in FLAG_COLUMNS.items()
            }
            if has_combined:
                combined = _parse_int(row.get(COMBINED_COLUMN), COMBINED_COLUMN, line_no, path)
                if combined < 0:
                    raise ValueError(f"{path}:{line_no}: {COMBINED_COLUMN} must be >= 0")
                flags["cds_start_end_nf"] = combined

            records.append(
                TranscriptRecord(
                    transcript_id=tx_id,
                    gene_id=(row.get(gene_column) or "").strip(),
                    **flags,
                )
            )

    logger.info(f"Read metadata for {len(records)} transcripts from {path}")
    return records
