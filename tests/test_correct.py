"""Tests for txrepair.core.correct module.

Tests cover:
- Grouping records by gene
- Genome-wide correction with serial and threaded executors
- Result summary and DataFrame export
- Merging extended sets and writing the extension report
"""

import csv
import logging

import pytest

from txrepair.config import Config, ExtensionConfig
from txrepair.core.correct import (
    REPORT_COLUMNS,
    CorrectionResult,
    apply_extensions,
    correct_annotations,
    format_summary,
    group_by_gene,
    write_extension_report_tsv,
)
from txrepair.core.extend import MissingTranscriptError
from txrepair.core.models import ExtensionStatus, TranscriptRecord
from txrepair.parallel.executor import ParallelExecutor


@pytest.fixture
def two_gene_data(make_exons, reference_coords):
    """Gene G1 with an end-truncated transcript, gene G2 complete."""
    records = [
        TranscriptRecord("R", "G1", longest_start=True, longest_end=True),
        TranscriptRecord("T", "G1", cds_end_nf=True),
        TranscriptRecord("U", "G2", longest_start=True, longest_end=True),
    ]
    exons = {
        "R": make_exons(reference_coords),
        "T": make_exons([(100, 200), (300, 500)]),
        "U": make_exons([(2000, 2200), (2300, 2500)]),
    }
    cdss = {
        "R": make_exons([(150, 200), (300, 500), (600, 800)]),
        "T": make_exons([(150, 200), (300, 500)]),
        "U": make_exons([(2050, 2200), (2300, 2400)]),
    }
    return records, exons, cdss


# =============================================================================
# Grouping Tests
# =============================================================================


class TestGroupByGene:
    """Tests for group_by_gene."""

    def test_keeps_order(self) -> None:
        records = [
            TranscriptRecord("a", "G2"),
            TranscriptRecord("b", "G1"),
            TranscriptRecord("c", "G2"),
        ]
        groups = group_by_gene(records)

        assert list(groups) == ["G2", "G1"]
        assert [r.transcript_id for r in groups["G2"]] == ["a", "c"]

    def test_duplicate_transcript(self) -> None:
        records = [TranscriptRecord("a", "G1"), TranscriptRecord("a", "G2")]
        with pytest.raises(ValueError, match="Duplicate"):
            group_by_gene(records)


# =============================================================================
# Driver Tests
# =============================================================================


class TestCorrectAnnotations:
    """Tests for correct_annotations."""

    def test_serial(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        result = correct_annotations(records, exons, cdss)

        assert list(result.exons) == ["T"]
        assert result.exons["T"].coords() == [(100, 200), (300, 500), (600, 900)]
        assert result.cdss["T"].coords() == [(150, 200), (300, 500), (600, 800)]
        assert result.n_genes == 2
        assert result.n_truncated == 1

    def test_threads_match_serial(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        serial = correct_annotations(records, exons, cdss)
        threaded = correct_annotations(
            records, exons, cdss, executor=ParallelExecutor(n_workers=2, backend="threads")
        )

        assert threaded.exons == serial.exons
        assert threaded.cdss == serial.cdss
        assert threaded.attempts == serial.attempts

    def test_only_truncated_genes_attempted(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        result = correct_annotations(records, exons, cdss)

        assert {a.gene_id for a in result.attempts} == {"G1"}

    def test_config_threshold(self, make_exons, reference_coords) -> None:
        records = [
            TranscriptRecord("R", "G1", longest_end=True),
            TranscriptRecord("T", "G1", cds_end_nf=True),
        ]
        exons = {
            "R": make_exons(reference_coords),
            "T": make_exons([(100, 200), (300, 520)]),
        }
        config = Config(extension=ExtensionConfig(max_exon_extension=10))
        result = correct_annotations(records, exons, {}, config=config)

        assert result.exons == {}
        assert result.attempts[0].status is ExtensionStatus.DIVERGENCE_TOO_LARGE

    def test_missing_transcript_checked_first(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        records = records + [TranscriptRecord("X", "G3")]
        calls = []
        executor = ParallelExecutor(progress_callback=lambda *args: calls.append(args))

        with pytest.raises(MissingTranscriptError):
            correct_annotations(records, exons, cdss, executor=executor)
        assert calls == []

    def test_progress_reported_per_gene(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        calls = []
        executor = ParallelExecutor(progress_callback=lambda *args: calls.append(args))
        correct_annotations(records, exons, cdss, executor=executor)

        assert calls == [(1, 1, "G1")]

    def test_task_stats_logged(self, two_gene_data, caplog) -> None:
        records, exons, cdss = two_gene_data
        with caplog.at_level(logging.DEBUG, logger="txrepair.core.correct"):
            correct_annotations(records, exons, cdss)

        assert "Gene tasks: 1/1" in caplog.text


# =============================================================================
# Result Tests
# =============================================================================


class TestCorrectionResult:
    """Tests for CorrectionResult."""

    def test_summary(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        summary = correct_annotations(records, exons, cdss).summary()

        assert summary["genes"] == 2
        assert summary["truncated_transcripts"] == 1
        assert summary["genes_extended"] == 1
        assert summary["exons_extended"] == 1
        assert summary["cds_extended"] == 1
        assert summary["attempts"] == 2
        assert summary["status_extended"] == 2
        assert summary["status_no_overlap"] == 0

    def test_empty_summary(self) -> None:
        summary = CorrectionResult().summary()
        assert summary["genes"] == 0
        assert all(summary[f"status_{s.value}"] == 0 for s in ExtensionStatus)

    def test_to_dataframe(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        df = correct_annotations(records, exons, cdss).to_dataframe()

        assert list(df.columns) == REPORT_COLUMNS
        assert len(df) == 2
        assert list(df["feature"]) == ["exon", "CDS"]

    def test_format_summary(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        text = format_summary(correct_annotations(records, exons, cdss).summary())

        assert "Genes:" in text
        assert "divergence_too_large:" in text
        assert "extended:" in text


# =============================================================================
# Merge and Report Tests
# =============================================================================


class TestApplyExtensions:
    """Tests for apply_extensions."""

    def test_replaces_and_keeps_others(self, two_gene_data) -> None:
        records, exons, cdss = two_gene_data
        result = correct_annotations(records, exons, cdss)
        merged = apply_extensions(exons, result.exons)

        assert merged["T"] == result.exons["T"]
        assert merged["R"] == exons["R"]
        assert len(merged["T"]) == 3
        assert len(exons["T"]) == 2


class TestExtensionReport:
    """Tests for write_extension_report_tsv."""

    def test_write_report(self, two_gene_data, tmp_path) -> None:
        records, exons, cdss = two_gene_data
        result = correct_annotations(records, exons, cdss)
        report = tmp_path / "report.tsv"

        write_extension_report_tsv(result.attempts, report)

        with open(report) as f:
            rows = list(csv.DictReader(f, delimiter="\t"))
        assert len(rows) == 2
        assert rows[0]["transcript_id"] == "T"
        assert rows[0]["direction"] == "downstream"
        assert rows[0]["status"] == "extended"
        assert rows[0]["bases_added"] == "300"

    def test_empty_report_has_header(self, tmp_path) -> None:
        report = tmp_path / "report.tsv"
        write_extension_report_tsv([], report)

        assert report.read_text().strip().split("\t") == REPORT_COLUMNS
