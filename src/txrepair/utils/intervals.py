"""Genomic interval operations.

This module provides the interval geometry used by the extension
algorithm:

- Overlap detection
- Disjoining into elementary segments
- Positional union (metadata-stripped, touching intervals coalesced)
- Directional diff between two transcripts

Coordinates are 0-based half-open throughout.

Example:
    >>> from txrepair.utils.intervals import GenomicInterval, diff_regions
    >>> a = [GenomicInterval("chr1", 100, 200), GenomicInterval("chr1", 300, 400)]
    >>> b = [GenomicInterval("chr1", 100, 200)]
    >>> diff_regions("a", "b", {"a": a, "b": b})["a"]
    [DiffInterval(interval=GenomicInterval(seqid='chr1', start=300, end=400, strand='+'), upstream=False, downstream=True)]
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import NamedTuple

import numpy as np

# =============================================================================
# Data Structures
# =============================================================================


class GenomicInterval(NamedTuple):
    """A genomic interval with chromosome and strand.

    Attributes:
        seqid: Chromosome/contig identifier.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        strand: Strand (+ or -).
    """

    seqid: str
    start: int
    end: int
    strand: str = "+"

    @property
    def length(self) -> int:
        """Get interval length."""
        return self.end - self.start

    def overlaps(self, other: GenomicInterval) -> bool:
        """Check if this interval overlaps another on the same strand."""
        return (
            self.seqid == other.seqid
            and self.strand == other.strand
            and self.start < other.end
            and other.start < self.end
        )


class DiffInterval(NamedTuple):
    """An interval unique to one transcript of a compared pair.

    Attributes:
        interval: The unique region.
        upstream: Region lies 5' of everything the pair shares.
        downstream: Region lies 3' of everything the pair shares.
    """

    interval: GenomicInterval
    upstream: bool
    downstream: bool

    def is_tagged(self, direction: str) -> bool:
        """Check the tag for "upstream" or "downstream"."""
        if direction == "upstream":
            return self.upstream
        if direction == "downstream":
            return self.downstream
        raise ValueError(f"Unknown direction: {direction}")


# =============================================================================
# Overlap Operations
# =============================================================================


def overlaps(a: GenomicInterval, b: GenomicInterval) -> bool:
    """Check if two intervals overlap.

    Args:
        a: First interval.
        b: Second interval.

    Returns:
        True if intervals share at least one base on the same strand.
    """
    return a.overlaps(b)


def find_overlaps(
    query: GenomicInterval,
    targets: Sequence[GenomicInterval],
) -> list[tuple[int, GenomicInterval]]:
    """Find all intervals that overlap a query.

    Args:
        query: Query interval.
        targets: List of target intervals.

    Returns:
        List of (index, interval) tuples for overlapping intervals.
    """
    result = []
    for i, target in enumerate(targets):
        if overlaps(query, target):
            result.append((i, target))
    return result


def any_overlap(
    a: Iterable[GenomicInterval],
    b: Sequence[GenomicInterval],
) -> bool:
    """Check if any interval of ``a`` overlaps any interval of ``b``."""
    return any(find_overlaps(interval, b) for interval in a)


# =============================================================================
# Merge Operations
# =============================================================================


def merge_intervals(intervals: Iterable[GenomicInterval]) -> list[GenomicInterval]:
    """Merge overlapping or touching intervals.

    Intervals are grouped by seqid and strand; within a group, any two
    intervals that overlap or abut are fused.

    Args:
        intervals: Intervals to merge.

    Returns:
        Merged intervals sorted by (seqid, strand, start).
    """
    sorted_intervals = sorted(intervals, key=lambda x: (x.seqid, x.strand, x.start, x.end))
    if not sorted_intervals:
        return []

    merged = [sorted_intervals[0]]
    for current in sorted_intervals[1:]:
        last = merged[-1]
        same_group = current.seqid == last.seqid and current.strand == last.strand
        if same_group and current.start <= last.end:
            merged[-1] = last._replace(end=max(last.end, current.end))
        else:
            merged.append(current)

    return merged


def union_intervals(
    base: Iterable[GenomicInterval],
    added: Iterable[GenomicInterval],
) -> list[GenomicInterval]:
    """Positional union of two interval collections.

    Only coordinates and strand propagate; anything else attached to the
    added intervals (such as diff tags) is dropped.

    Args:
        base: Original intervals.
        added: Intervals to add.

    Returns:
        Merged intervals sorted by coordinate.
    """
    stripped = [
        GenomicInterval(iv.seqid, iv.start, iv.end, iv.strand)
        for iv in (*base, *added)
    ]
    return merge_intervals(stripped)


# =============================================================================
# Diff Operations
# =============================================================================


def disjoin(intervals: Sequence[GenomicInterval]) -> list[GenomicInterval]:
    """Split intervals at every boundary into non-overlapping segments.

    Only segments covered by at least one input interval are returned.
    All intervals must share seqid and strand.

    Args:
        intervals: Intervals to split.

    Returns:
        Elementary segments in coordinate order.
    """
    if not intervals:
        return []

    seqid = intervals[0].seqid
    strand = intervals[0].strand
    starts = np.array([iv.start for iv in intervals], dtype=np.int64)
    ends = np.array([iv.end for iv in intervals], dtype=np.int64)

    breakpoints = np.unique(np.concatenate([starts, ends]))
    seg_starts = breakpoints[:-1]
    seg_ends = breakpoints[1:]

    # segment i is covered if some interval contains it
    covered = (
        (seg_starts[:, None] >= starts[None, :]) & (seg_ends[:, None] <= ends[None, :])
    ).any(axis=1)

    return [
        GenomicInterval(seqid, int(s), int(e), strand)
        for s, e in zip(seg_starts[covered], seg_ends[covered])
    ]


def _coverage(segments: Sequence[GenomicInterval], intervals: Sequence[GenomicInterval]) -> np.ndarray:
    """Boolean mask of segments contained in any of ``intervals``."""
    if not segments or not intervals:
        return np.zeros(len(segments), dtype=bool)
    seg_starts = np.array([s.start for s in segments], dtype=np.int64)
    seg_ends = np.array([s.end for s in segments], dtype=np.int64)
    starts = np.array([iv.start for iv in intervals], dtype=np.int64)
    ends = np.array([iv.end for iv in intervals], dtype=np.int64)
    return (
        (seg_starts[:, None] >= starts[None, :]) & (seg_ends[:, None] <= ends[None, :])
    ).any(axis=1)


def _tag(
    regions: list[GenomicInterval],
    shared_start: int | None,
    shared_end: int | None,
    strand: str,
) -> list[DiffInterval]:
    """Tag unique regions relative to the span of the shared segments."""
    tagged = []
    for region in regions:
        if shared_start is None or shared_end is None:
            tagged.append(DiffInterval(region, False, False))
            continue
        before = region.end <= shared_start
        after = region.start >= shared_end
        if strand == "-":
            before, after = after, before
        tagged.append(DiffInterval(region, before, after))
    return tagged


def diff_regions(
    id_a: str,
    id_b: str,
    features: Mapping[str, Sequence[GenomicInterval]],
) -> dict[str, list[DiffInterval]]:
    """Find the regions unique to each of two transcripts.

    Both transcripts' intervals are disjoined together; segments covered
    by only one transcript are fused back into contiguous regions and
    tagged upstream (5') or downstream (3') when they lie entirely
    outside the span of the shared segments. Regions between shared
    segments carry neither tag.

    Args:
        id_a: First transcript ID.
        id_b: Second transcript ID.
        features: Interval collections keyed by transcript ID.

    Returns:
        Dictionary with one list of DiffInterval per transcript ID. The
        two lists partition the bases not shared by both transcripts.

    Raises:
        KeyError: If either ID is missing from ``features``.
        ValueError: If the two transcripts are on different seqids or strands.
    """
    a = list(features[id_a])
    b = list(features[id_b])
    combined = a + b
    if not combined:
        return {id_a: [], id_b: []}

    keys = {(iv.seqid, iv.strand) for iv in combined}
    if len(keys) > 1:
        raise ValueError(
            f"Cannot compare {id_a} and {id_b}: intervals span {sorted(keys)}"
        )
    strand = combined[0].strand

    segments = disjoin(combined)
    in_a = _coverage(segments, a)
    in_b = _coverage(segments, b)
    shared = in_a & in_b

    shared_segments = [s for s, flag in zip(segments, shared) if flag]
    shared_start = shared_segments[0].start if shared_segments else None
    shared_end = shared_segments[-1].end if shared_segments else None

    only_a = merge_intervals(s for s, flag in zip(segments, in_a & ~in_b) if flag)
    only_b = merge_intervals(s for s, flag in zip(segments, in_b & ~in_a) if flag)

    return {
        id_a: _tag(only_a, shared_start, shared_end, strand),
        id_b: _tag(only_b, shared_start, shared_end, strand),
    }


def total_length(intervals: Iterable[GenomicInterval]) -> int:
    """Sum of interval lengths."""
    return sum(iv.length for iv in intervals)
