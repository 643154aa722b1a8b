"""Extension of truncated transcripts to the gene's reference transcript.

Transcripts whose CDS start or end was not found (``cds_start_NF`` /
``cds_end_NF``) are extended by adding the terminal exons of the gene's
longest transcript. A transcript is only extended when every exon at its
truncated end is supported by an exon of the reference; a terminal exon
missing from the reference points to an alternative splice event rather
than a truncation, so the transcript is left alone.

Ends are extended before starts, and exons before CDS. A transcript that
is truncated at both ends gets its start extended from the end-extended
coordinates.

Key components:
- extend_single_transcript: Decide and build one extension
- extend_transcripts: End pass then start pass over one feature collection
- correct_gene: Exon pass then CDS pass for one gene

Example:
    >>> from txrepair.core.extend import correct_gene
    >>> result = correct_gene(records, exons, cdss)
    >>> sorted(result.exons)
    ['ENST0002']
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import attrs

from txrepair.core.models import (
    AmbiguousReference,
    Direction,
    ExonSet,
    ExtensionAttempt,
    ExtensionOutcome,
    ExtensionStatus,
    NoReference,
    Reference,
    SingleReference,
    TranscriptRecord,
    resolve_reference,
)
from txrepair.utils.intervals import diff_regions

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_EXON_EXTENSION = 100_000

FEATURE_EXON = "exon"
FEATURE_CDS = "CDS"


class MissingTranscriptError(KeyError):
    """A transcript listed in the metadata has no intervals in the collection."""


# =============================================================================
# Result Containers
# =============================================================================


@attrs.define(slots=True)
class DirectionBatchResult:
    """Result of the end and start passes over one feature collection.

    Attributes:
        extended: New interval sets of the extended transcripts only.
        attempts: Every extension attempt made, in order.
    """

    extended: dict[str, ExonSet] = attrs.Factory(dict)
    attempts: list[ExtensionAttempt] = attrs.Factory(list)


@attrs.define(slots=True)
class GeneCorrection:
    """Extended exons and CDS of one gene.

    Attributes:
        gene_id: Gene identifier.
        exons: Extended exon sets, keyed by transcript ID.
        cdss: Extended CDS sets, keyed by transcript ID.
        attempts: Exon and CDS extension attempts.
    """

    gene_id: str
    exons: dict[str, ExonSet] = attrs.Factory(dict)
    cdss: dict[str, ExonSet] = attrs.Factory(dict)
    attempts: list[ExtensionAttempt] = attrs.Factory(list)


# =============================================================================
# Single Transcript
# =============================================================================


def extend_single_transcript(
    truncated_id: str,
    reference_id: str,
    direction: Direction,
    features: Mapping[str, ExonSet],
    max_exon_extension: int = DEFAULT_MAX_EXON_EXTENSION,
) -> ExtensionOutcome:
    """Extend one transcript in one direction using the reference transcript.

    Args:
        truncated_id: ID of the truncated transcript.
        reference_id: ID of the reference transcript.
        direction: Side of the transcript to extend.
        features: Interval sets keyed by transcript ID.
        max_exon_extension: Maximum number of bases the truncated
            transcript may diverge from the reference at the extended
            end for the extension to proceed.

    Returns:
        ExtensionOutcome; its exons are empty unless status is EXTENDED.

    Raises:
        ValueError: If both IDs are the same.
        KeyError: If either ID is missing from ``features``.
    """
    if truncated_id == reference_id:
        raise ValueError(f"Cannot extend {truncated_id} against itself")

    tx_exons = features[truncated_id]
    ref_exons = features[reference_id]

    # No shared splice context to anchor the extension
    if not tx_exons.overlaps(ref_exons):
        return ExtensionOutcome.not_extended(ExtensionStatus.NO_OVERLAP)

    diff = diff_regions(truncated_id, reference_id, features)

    tx_direction = [d.interval for d in diff[truncated_id] if d.is_tagged(direction.value)]
    if tx_direction:
        parents = [
            exon for exon in tx_exons
            if any(exon.overlaps(fragment) for fragment in tx_direction)
        ]
        supported = [exon for exon in parents if any(exon.overlaps(r) for r in ref_exons)]
        if len(supported) < len(parents):
            return ExtensionOutcome.not_extended(ExtensionStatus.UNSUPPORTED_EXON)
        if sum(iv.length for iv in tx_direction) > max_exon_extension:
            return ExtensionOutcome.not_extended(ExtensionStatus.DIVERGENCE_TOO_LARGE)

    missing = [d.interval for d in diff[reference_id] if d.is_tagged(direction.value)]
    if not missing:
        return ExtensionOutcome.not_extended(ExtensionStatus.NOTHING_TO_ADD)

    return ExtensionOutcome(ExtensionStatus.EXTENDED, tx_exons.merge(missing))


# =============================================================================
# One Feature Collection
# =============================================================================


def _run_pass(
    candidates: Sequence[str],
    reference: Reference,
    direction: Direction,
    features: Mapping[str, ExonSet],
    feature: str,
    gene_id: str,
    max_exon_extension: int,
    result: DirectionBatchResult,
) -> dict[str, ExonSet]:
    """Extend ``candidates`` in one direction; returns extended sets only."""
    if isinstance(reference, NoReference):
        return {}
    if isinstance(reference, AmbiguousReference):
        logger.warning(
            f"{gene_id}: {len(reference.transcript_ids)} reference transcripts "
            f"for {direction.value} {feature} extension, skipping"
        )
        return {}

    assert isinstance(reference, SingleReference)
    reference_id = reference.transcript_id

    extended: dict[str, ExonSet] = {}
    for tx_id in candidates:
        if tx_id == reference_id:
            continue
        outcome = extend_single_transcript(
            tx_id, reference_id, direction, features, max_exon_extension
        )
        original = features[tx_id]
        n_added = len(outcome.exons) - len(original) if outcome.extended else 0
        bases_added = outcome.exons.total_length - original.total_length if outcome.extended else 0
        result.attempts.append(
            ExtensionAttempt(
                gene_id=gene_id,
                transcript_id=tx_id,
                reference_id=reference_id,
                feature=feature,
                direction=direction,
                status=outcome.status,
                n_added=n_added,
                bases_added=bases_added,
            )
        )
        logger.debug(
            f"{gene_id}: {tx_id} {direction.value} {feature} vs {reference_id}: "
            f"{outcome.status.value}"
        )
        if outcome.extended:
            extended[tx_id] = outcome.exons

    return extended


def extend_transcripts(
    truncated: Sequence[TranscriptRecord],
    start_reference: Reference,
    end_reference: Reference,
    features: Mapping[str, ExonSet],
    feature: str = FEATURE_EXON,
    max_exon_extension: int = DEFAULT_MAX_EXON_EXTENSION,
    gene_id: str = "",
) -> DirectionBatchResult:
    """Extend all truncated transcripts of a gene, ends first, then starts.

    The end pass produces a new baseline collection in which end-extended
    transcripts replace their originals; the start pass reads from that
    baseline. A start-pass result replaces the end-pass result for the
    same transcript.

    Args:
        truncated: Metadata of the truncated transcripts.
        start_reference: Reference for starts (``longest_start``).
        end_reference: Reference for ends (``longest_end``).
        features: Interval sets keyed by transcript ID.
        feature: Feature label used in logs and attempts.
        max_exon_extension: See extend_single_transcript.
        gene_id: Gene label used in logs and attempts.

    Returns:
        DirectionBatchResult holding only the extended transcripts.
    """
    result = DirectionBatchResult()

    missing_ends = [r.transcript_id for r in truncated if r.cds_end_nf]
    ends = _run_pass(
        missing_ends, end_reference, Direction.DOWNSTREAM,
        features, feature, gene_id, max_exon_extension, result,
    )
    baseline = {**features, **ends}

    missing_starts = [r.transcript_id for r in truncated if r.cds_start_nf]
    starts = _run_pass(
        missing_starts, start_reference, Direction.UPSTREAM,
        baseline, feature, gene_id, max_exon_extension, result,
    )

    for record in truncated:
        tx_id = record.transcript_id
        if tx_id in starts:
            result.extended[tx_id] = starts[tx_id]
        elif tx_id in ends:
            result.extended[tx_id] = ends[tx_id]

    return result


# =============================================================================
# One Gene
# =============================================================================


def correct_gene(
    records: Sequence[TranscriptRecord],
    exons: Mapping[str, ExonSet],
    cdss: Mapping[str, ExonSet],
    max_exon_extension: int = DEFAULT_MAX_EXON_EXTENSION,
) -> GeneCorrection:
    """Extend the truncated transcripts of a single gene.

    Exons are extended first. The CDS of every transcript whose exons
    were extended, and which has a CDS, is then extended with the same
    reference transcripts.

    Args:
        records: Metadata of all transcripts of the gene.
        exons: Exon sets keyed by transcript ID.
        cdss: CDS sets keyed by transcript ID.
        max_exon_extension: See extend_single_transcript.

    Returns:
        GeneCorrection with the extended exon and CDS sets.

    Raises:
        MissingTranscriptError: If a transcript has no exons.
    """
    gene_id = records[0].gene_id if records else ""
    tx_ids = [r.transcript_id for r in records]

    missing = [tx_id for tx_id in tx_ids if tx_id not in exons]
    if missing:
        raise MissingTranscriptError(f"{gene_id}: no exons for transcript(s) {', '.join(missing)}")

    start_reference = resolve_reference(records, "longest_start")
    end_reference = resolve_reference(records, "longest_end")

    truncated = [r for r in records if r.is_truncated]
    gene_exons = {tx_id: exons[tx_id] for tx_id in tx_ids}
    exon_result = extend_transcripts(
        truncated, start_reference, end_reference, gene_exons,
        FEATURE_EXON, max_exon_extension, gene_id,
    )

    truncated_cds = [
        r for r in truncated
        if r.transcript_id in exon_result.extended and r.transcript_id in cdss
    ]
    gene_cdss = {tx_id: cdss[tx_id] for tx_id in tx_ids if tx_id in cdss}
    cds_result = extend_transcripts(
        truncated_cds,
        _with_features(start_reference, gene_cdss, gene_id),
        _with_features(end_reference, gene_cdss, gene_id),
        gene_cdss,
        FEATURE_CDS,
        max_exon_extension,
        gene_id,
    )

    if exon_result.extended:
        logger.debug(
            f"{gene_id}: extended exons of {len(exon_result.extended)}, "
            f"CDS of {len(cds_result.extended)} transcript(s)"
        )

    return GeneCorrection(
        gene_id=gene_id,
        exons=exon_result.extended,
        cdss=cds_result.extended,
        attempts=exon_result.attempts + cds_result.attempts,
    )


def _with_features(reference: Reference, features: Mapping[str, ExonSet], gene_id: str) -> Reference:
    """Downgrade a single reference with no intervals in ``features`` to NoReference."""
    if isinstance(reference, SingleReference) and reference.transcript_id not in features:
        logger.debug(f"{gene_id}: reference {reference.transcript_id} has no CDS, skipping")
        return NoReference()
    return reference
