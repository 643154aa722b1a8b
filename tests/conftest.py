"""Pytest configuration and shared fixtures for txrepair tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- Interval fixtures: Build exon sets from plain coordinates
- Gene fixtures: Reference/truncated transcript layouts
- File fixtures: Synthetic GFF3 and metadata files
"""

from pathlib import Path
from typing import Callable

import pytest

from txrepair.core.models import ExonSet, TranscriptRecord


# =============================================================================
# Interval Fixtures
# =============================================================================


@pytest.fixture
def make_exons() -> Callable[..., ExonSet]:
    """Return a factory building an ExonSet on chr1 from (start, end) pairs."""

    def _make(coords: list[tuple[int, int]], strand: str = "+", seqid: str = "chr1") -> ExonSet:
        return ExonSet.from_coords(seqid, strand, coords)

    return _make


# =============================================================================
# Gene Fixtures
# =============================================================================


@pytest.fixture
def reference_coords() -> list[tuple[int, int]]:
    """Exons of the reference (longest) transcript."""
    return [(100, 200), (300, 500), (600, 900)]


@pytest.fixture
def end_truncated_gene(make_exons, reference_coords) -> dict[str, ExonSet]:
    """Reference R and transcript T lacking R's last exon.

    R: 100-200, 300-500, 600-900
    T: 100-200, 300-500
    """
    return {
        "R": make_exons(reference_coords),
        "T": make_exons([(100, 200), (300, 500)]),
    }


@pytest.fixture
def end_truncated_records() -> list[TranscriptRecord]:
    """Records for end_truncated_gene: R is the reference, T lacks its end."""
    return [
        TranscriptRecord("R", "G1", longest_start=True, longest_end=True),
        TranscriptRecord("T", "G1", cds_end_nf=True),
    ]


# =============================================================================
# File Fixtures
# =============================================================================


GFF_LINES = [
    "##gff-version 3",
    # gene1: R is complete, T lacks the last exon
    "chr1\ttest\tgene\t101\t900\t.\t+\t.\tID=gene1;Name=GENE1",
    "chr1\ttest\tmRNA\t101\t900\t.\t+\t.\tID=R;Parent=gene1",
    "chr1\ttest\texon\t101\t200\t.\t+\t.\tID=R.e1;Parent=R",
    "chr1\ttest\texon\t301\t500\t.\t+\t.\tID=R.e2;Parent=R",
    "chr1\ttest\texon\t601\t900\t.\t+\t.\tID=R.e3;Parent=R",
    "chr1\ttest\tCDS\t151\t200\t.\t+\t0\tID=R.c1;Parent=R",
    "chr1\ttest\tCDS\t301\t500\t.\t+\t1\tID=R.c2;Parent=R",
    "chr1\ttest\tCDS\t601\t800\t.\t+\t2\tID=R.c3;Parent=R",
    "chr1\ttest\tmRNA\t101\t500\t.\t+\t.\tID=T;Parent=gene1",
    "chr1\ttest\texon\t101\t200\t.\t+\t.\tID=T.e1;Parent=T",
    "chr1\ttest\texon\t301\t500\t.\t+\t.\tID=T.e2;Parent=T",
    "chr1\ttest\tCDS\t151\t200\t.\t+\t0\tID=T.c1;Parent=T",
    "chr1\ttest\tCDS\t301\t500\t.\t+\t1\tID=T.c2;Parent=T",
    # gene2: single complete transcript
    "chr1\ttest\tgene\t2001\t2500\t.\t+\t.\tID=gene2",
    "chr1\ttest\tmRNA\t2001\t2500\t.\t+\t.\tID=tx3;Parent=gene2",
    "chr1\ttest\texon\t2001\t2200\t.\t+\t.\tID=tx3.e1;Parent=tx3",
    "chr1\ttest\texon\t2301\t2500\t.\t+\t.\tID=tx3.e2;Parent=tx3",
    "chr1\ttest\tCDS\t2051\t2200\t.\t+\t0\tID=tx3.c1;Parent=tx3",
    "chr1\ttest\tCDS\t2301\t2400\t.\t+\t0\tID=tx3.c2;Parent=tx3",
]

METADATA_ROWS = [
    ["transcript_id", "gene_id", "longest_start", "longest_end",
     "cds_start_NF", "cds_end_NF", "cds_start_end_NF"],
    ["R", "gene1", "1", "1", "0", "0", "0"],
    ["T", "gene1", "0", "0", "0", "1", "1"],
    ["tx3", "gene2", "1", "1", "0", "0", "0"],
]


@pytest.fixture
def synthetic_gff(tmp_path: Path) -> Path:
    """Create a GFF3 file with one end-truncated and one complete gene.

    gene1 (chr1:101-900, +):
        R: exons 101-200, 301-500, 601-900; CDS to 800
        T: exons 101-200, 301-500 (cds_end_NF)
    gene2 (chr1:2001-2500, +):
        tx3: complete
    """
    gff_path = tmp_path / "test.gff3"
    gff_path.write_text("\n".join(GFF_LINES) + "\n")
    return gff_path


@pytest.fixture
def synthetic_metadata(tmp_path: Path) -> Path:
    """Create the metadata TSV matching synthetic_gff."""
    path = tmp_path / "transcripts.tsv"
    path.write_text("\n".join("\t".join(row) for row in METADATA_ROWS) + "\n")
    return path


@pytest.fixture
def write_metadata(tmp_path: Path) -> Callable[..., Path]:
    """Return a writer for ad-hoc metadata tables."""

    def _write(rows: list[list[str]], name: str = "meta.tsv", delimiter: str = "\t") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(delimiter.join(row) for row in rows) + "\n")
        return path

    return _write
