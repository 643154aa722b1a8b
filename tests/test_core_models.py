"""Tests for txrepair.core.models module.

Tests cover:
- ExonSet construction, ordering and validation
- TranscriptRecord flags
- Reference resolution
- ExtensionAttempt serialization
"""

import attrs
import pytest

from txrepair.core.models import (
    AmbiguousReference,
    Direction,
    ExonSet,
    ExtensionAttempt,
    ExtensionOutcome,
    ExtensionStatus,
    NoReference,
    SingleReference,
    TranscriptRecord,
    resolve_reference,
    select_ids,
)
from txrepair.utils.intervals import GenomicInterval


# =============================================================================
# ExonSet Tests
# =============================================================================


class TestExonSet:
    """Tests for ExonSet."""

    def test_sorted_on_creation(self) -> None:
        exons = ExonSet.from_coords("chr1", "+", [(300, 400), (100, 200)])
        assert exons.coords() == [(100, 200), (300, 400)]

    def test_properties(self) -> None:
        exons = ExonSet.from_coords("chr1", "-", [(100, 200), (300, 500)])

        assert len(exons) == 2
        assert exons.seqid == "chr1"
        assert exons.strand == "-"
        assert exons.span == (100, 500)
        assert exons.total_length == 300
        assert exons[1] == GenomicInterval("chr1", 300, 500, "-")

    def test_empty(self) -> None:
        exons = ExonSet()
        assert len(exons) == 0
        assert exons.span is None
        assert exons.strand is None
        assert exons.total_length == 0

    def test_mixed_strands_rejected(self) -> None:
        with pytest.raises(ValueError, match="share seqid and strand"):
            ExonSet((GenomicInterval("chr1", 0, 10, "+"), GenomicInterval("chr1", 20, 30, "-")))

    def test_inverted_interval_rejected(self) -> None:
        with pytest.raises(ValueError, match="Empty or inverted"):
            ExonSet.from_coords("chr1", "+", [(200, 100)])

    def test_frozen(self) -> None:
        exons = ExonSet.from_coords("chr1", "+", [(0, 10)])
        with pytest.raises(attrs.exceptions.FrozenInstanceError):
            exons.intervals = ()

    def test_equality(self) -> None:
        a = ExonSet.from_coords("chr1", "+", [(0, 10), (20, 30)])
        b = ExonSet.from_coords("chr1", "+", [(20, 30), (0, 10)])
        assert a == b

    def test_merge_returns_new_set(self) -> None:
        exons = ExonSet.from_coords("chr1", "+", [(100, 200)])
        merged = exons.merge([GenomicInterval("chr1", 200, 250, "+"), GenomicInterval("chr1", 400, 500, "+")])

        assert merged.coords() == [(100, 250), (400, 500)]
        assert exons.coords() == [(100, 200)]

    def test_overlaps(self) -> None:
        a = ExonSet.from_coords("chr1", "+", [(100, 200)])
        b = ExonSet.from_coords("chr1", "+", [(150, 160)])
        c = ExonSet.from_coords("chr1", "+", [(200, 300)])

        assert a.overlaps(b)
        assert not a.overlaps(c)


# =============================================================================
# TranscriptRecord Tests
# =============================================================================


class TestTranscriptRecord:
    """Tests for TranscriptRecord."""

    def test_defaults(self) -> None:
        record = TranscriptRecord("T1", "G1")
        assert not record.longest_start
        assert not record.longest_end
        assert record.cds_start_end_nf == 0
        assert not record.is_truncated

    def test_combined_flag_derived(self) -> None:
        record = TranscriptRecord("T1", "G1", cds_start_nf=True, cds_end_nf=True)
        assert record.cds_start_end_nf == 2
        assert record.is_truncated

    def test_combined_flag_explicit(self) -> None:
        """The combined column drives truncation even without the split flags."""
        record = TranscriptRecord("T1", "G1", cds_start_end_nf=1)
        assert record.is_truncated
        assert not record.cds_start_nf
        assert not record.cds_end_nf

    def test_negative_combined_rejected(self) -> None:
        with pytest.raises(ValueError):
            TranscriptRecord("T1", "G1", cds_start_end_nf=-1)

    def test_select_ids(self) -> None:
        records = [
            TranscriptRecord("A", "G", cds_end_nf=True),
            TranscriptRecord("B", "G"),
            TranscriptRecord("C", "G", cds_end_nf=True),
        ]
        assert select_ids(records, "cds_end_nf") == ["A", "C"]


# =============================================================================
# Reference Resolution Tests
# =============================================================================


class TestResolveReference:
    """Tests for resolve_reference."""

    def test_no_reference(self) -> None:
        records = [TranscriptRecord("A", "G")]
        assert resolve_reference(records, "longest_end") == NoReference()

    def test_single_reference(self) -> None:
        records = [TranscriptRecord("A", "G"), TranscriptRecord("B", "G", longest_end=True)]
        assert resolve_reference(records, "longest_end") == SingleReference("B")

    def test_ambiguous_reference(self) -> None:
        records = [
            TranscriptRecord("A", "G", longest_start=True),
            TranscriptRecord("B", "G", longest_start=True),
        ]
        reference = resolve_reference(records, "longest_start")

        assert isinstance(reference, AmbiguousReference)
        assert reference.transcript_ids == ("A", "B")


# =============================================================================
# Outcome Tests
# =============================================================================


class TestOutcomes:
    """Tests for ExtensionOutcome and ExtensionAttempt."""

    def test_not_extended_has_empty_exons(self) -> None:
        outcome = ExtensionOutcome.not_extended(ExtensionStatus.NO_OVERLAP)
        assert not outcome.extended
        assert len(outcome.exons) == 0

    def test_extended(self) -> None:
        exons = ExonSet.from_coords("chr1", "+", [(0, 10)])
        outcome = ExtensionOutcome(ExtensionStatus.EXTENDED, exons)
        assert outcome.extended

    def test_attempt_to_dict(self) -> None:
        attempt = ExtensionAttempt(
            gene_id="G1",
            transcript_id="T",
            reference_id="R",
            feature="exon",
            direction=Direction.DOWNSTREAM,
            status=ExtensionStatus.EXTENDED,
            n_added=1,
            bases_added=300,
        )
        data = attempt.to_dict()

        assert data["direction"] == "downstream"
        assert data["status"] == "extended"
        assert data["bases_added"] == 300
