"""Data models for transcript extension.

Key components:
- ExonSet: Immutable, coordinate-ordered interval set of one transcript
- TranscriptRecord: Per-transcript metadata flags
- Direction: Extension direction (transcript start or end)
- NoReference / SingleReference / AmbiguousReference: Reference resolution
- ExtensionOutcome: Result of a single extension attempt

Example:
    >>> from txrepair.core.models import ExonSet
    >>> exons = ExonSet.from_coords("chr1", "+", [(100, 200), (300, 500)])
    >>> exons.span
    (100, 500)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import Enum

import attrs

from txrepair.utils.intervals import GenomicInterval, any_overlap, union_intervals

# =============================================================================
# Enums
# =============================================================================


class Direction(Enum):
    """Direction of extension relative to the transcript."""

    UPSTREAM = "upstream"  # 5', transcript start
    DOWNSTREAM = "downstream"  # 3', transcript end


class ExtensionStatus(Enum):
    """Outcome categories of an extension attempt."""

    EXTENDED = "extended"
    NO_OVERLAP = "no_overlap"
    UNSUPPORTED_EXON = "unsupported_exon"
    DIVERGENCE_TOO_LARGE = "divergence_too_large"
    NOTHING_TO_ADD = "nothing_to_add"


# =============================================================================
# Interval Sets
# =============================================================================


def _sorted_intervals(intervals: Iterable[GenomicInterval]) -> tuple[GenomicInterval, ...]:
    return tuple(sorted(intervals, key=lambda iv: (iv.start, iv.end)))


@attrs.define(frozen=True)
class ExonSet:
    """Coordinate-ordered intervals of one transcript feature type.

    All intervals share one seqid and strand. Operations never modify
    the set; they return new ones.

    Attributes:
        intervals: Intervals sorted by start position.
    """

    intervals: tuple[GenomicInterval, ...] = attrs.field(
        default=(), converter=_sorted_intervals
    )

    @intervals.validator
    def _check_consistent(self, attribute: attrs.Attribute, value: tuple) -> None:
        keys = {(iv.seqid, iv.strand) for iv in value}
        if len(keys) > 1:
            raise ValueError(f"ExonSet intervals must share seqid and strand, got {sorted(keys)}")
        for iv in value:
            if iv.end <= iv.start:
                raise ValueError(f"Empty or inverted interval: {iv}")

    @classmethod
    def from_coords(
        cls,
        seqid: str,
        strand: str,
        coords: Iterable[tuple[int, int]],
    ) -> ExonSet:
        """Build from (start, end) pairs on one seqid and strand."""
        return cls(tuple(GenomicInterval(seqid, start, end, strand) for start, end in coords))

    def __len__(self) -> int:
        return len(self.intervals)

    def __iter__(self) -> Iterator[GenomicInterval]:
        return iter(self.intervals)

    def __getitem__(self, index: int) -> GenomicInterval:
        return self.intervals[index]

    @property
    def seqid(self) -> str | None:
        return self.intervals[0].seqid if self.intervals else None

    @property
    def strand(self) -> str | None:
        return self.intervals[0].strand if self.intervals else None

    @property
    def span(self) -> tuple[int, int] | None:
        """Genomic (start, end) covered from first to last interval."""
        if not self.intervals:
            return None
        return self.intervals[0].start, max(iv.end for iv in self.intervals)

    @property
    def total_length(self) -> int:
        """Summed interval length."""
        return sum(iv.length for iv in self.intervals)

    def coords(self) -> list[tuple[int, int]]:
        """Intervals as plain (start, end) pairs."""
        return [(iv.start, iv.end) for iv in self.intervals]

    def overlaps(self, other: Sequence[GenomicInterval]) -> bool:
        """Check if any interval overlaps any interval of ``other``."""
        return any_overlap(self.intervals, list(other))

    def merge(self, added: Iterable[GenomicInterval]) -> ExonSet:
        """Positional union with ``added``, coalescing touching intervals."""
        return ExonSet(tuple(union_intervals(self.intervals, added)))


# =============================================================================
# Transcript Metadata
# =============================================================================


@attrs.define(frozen=True, slots=True)
class TranscriptRecord:
    """Annotation flags for one transcript.

    Attributes:
        transcript_id: Stable transcript identifier.
        gene_id: Parent gene identifier.
        longest_start: Transcript is the gene's reference for starts.
        longest_end: Transcript is the gene's reference for ends.
        cds_start_nf: CDS start not found (start unconfirmed).
        cds_end_nf: CDS end not found (end unconfirmed).
        cds_start_end_nf: Combined indicator, truthy when > 0.
    """

    transcript_id: str
    gene_id: str
    longest_start: bool = False
    longest_end: bool = False
    cds_start_nf: bool = False
    cds_end_nf: bool = False
    cds_start_end_nf: int = attrs.field(
        default=attrs.Factory(
            lambda self: int(self.cds_start_nf) + int(self.cds_end_nf),
            takes_self=True,
        ),
        validator=attrs.validators.ge(0),
    )

    @property
    def is_truncated(self) -> bool:
        return self.cds_start_end_nf > 0


def select_ids(records: Iterable[TranscriptRecord], flag: str) -> list[str]:
    """Transcript IDs whose boolean ``flag`` attribute is set, in input order."""
    return [r.transcript_id for r in records if getattr(r, flag)]


# =============================================================================
# Reference Resolution
# =============================================================================


@attrs.define(frozen=True)
class NoReference:
    """No transcript holds the flag; the direction is skipped."""


@attrs.define(frozen=True)
class SingleReference:
    """Exactly one reference transcript; the direction may run."""

    transcript_id: str


@attrs.define(frozen=True)
class AmbiguousReference:
    """Several transcripts hold the flag; the direction is skipped."""

    transcript_ids: tuple[str, ...]


Reference = NoReference | SingleReference | AmbiguousReference


def resolve_reference(records: Iterable[TranscriptRecord], flag: str) -> Reference:
    """Resolve the reference transcript for ``longest_start`` or ``longest_end``.

    Args:
        records: Records of one gene.
        flag: Name of the flag attribute.

    Returns:
        NoReference, SingleReference or AmbiguousReference.
    """
    ids = select_ids(records, flag)
    if not ids:
        return NoReference()
    if len(ids) == 1:
        return SingleReference(ids[0])
    return AmbiguousReference(tuple(ids))


# =============================================================================
# Outcomes
# =============================================================================


@attrs.define(frozen=True)
class ExtensionOutcome:
    """Result of one extension attempt.

    Attributes:
        status: Why the transcript was or was not extended.
        exons: New interval set when extended, otherwise empty.
    """

    status: ExtensionStatus
    exons: ExonSet = attrs.Factory(ExonSet)

    @property
    def extended(self) -> bool:
        return self.status is ExtensionStatus.EXTENDED

    @classmethod
    def not_extended(cls, status: ExtensionStatus) -> ExtensionOutcome:
        return cls(status)


@attrs.define(frozen=True, slots=True)
class ExtensionAttempt:
    """One logged extension attempt, used for reports.

    Attributes:
        gene_id: Gene identifier.
        transcript_id: Truncated transcript.
        reference_id: Reference transcript.
        feature: Feature collection ("exon" or "CDS").
        direction: Direction attempted.
        status: Outcome status.
        n_added: Number of intervals gained.
        bases_added: Number of bases gained.
    """

    gene_id: str
    transcript_id: str
    reference_id: str
    feature: str
    direction: Direction
    status: ExtensionStatus
    n_added: int = 0
    bases_added: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for report TSV."""
        return {
            "gene_id": self.gene_id,
            "transcript_id": self.transcript_id,
            "reference_id": self.reference_id,
            "feature": self.feature,
            "direction": self.direction.value,
            "status": self.status.value,
            "n_added": self.n_added,
            "bases_added": self.bases_added,
        }
