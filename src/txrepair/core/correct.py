"""Genome-wide correction of truncated transcripts.

Groups the metadata table by gene, runs ``correct_gene`` for every gene
(serially or through the parallel executor), and aggregates the extended
exon and CDS collections together with a record of every extension
attempt.

Key components:
- group_by_gene: Group transcript records by gene, keeping table order
- correct_annotations: Run all genes and aggregate results
- CorrectionResult: Aggregated results with summary and report export
- apply_extensions: Merge extended sets back into a full collection

Example:
    >>> from txrepair.core.correct import correct_annotations, apply_extensions
    >>> result = correct_annotations(records, exons, cdss)
    >>> new_exons = apply_extensions(exons, result.exons)
"""

from __future__ import annotations

import csv
import functools
import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import attrs

from txrepair.config import Config
from txrepair.core.extend import (
    FEATURE_EXON,
    GeneCorrection,
    MissingTranscriptError,
    correct_gene,
)
from txrepair.core.models import ExonSet, ExtensionAttempt, ExtensionStatus, TranscriptRecord
from txrepair.parallel.executor import ParallelExecutor

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "gene_id",
    "transcript_id",
    "reference_id",
    "feature",
    "direction",
    "status",
    "n_added",
    "bases_added",
]


# =============================================================================
# Result Container
# =============================================================================


@attrs.define(slots=True)
class CorrectionResult:
    """Aggregated extension results across genes.

    Attributes:
        exons: Extended exon sets, keyed by transcript ID.
        cdss: Extended CDS sets, keyed by transcript ID.
        attempts: Every extension attempt, in gene order.
        n_genes: Number of genes processed.
        n_truncated: Number of truncated transcripts in the input.
    """

    exons: dict[str, ExonSet] = attrs.Factory(dict)
    cdss: dict[str, ExonSet] = attrs.Factory(dict)
    attempts: list[ExtensionAttempt] = attrs.Factory(list)
    n_genes: int = 0
    n_truncated: int = 0

    def add(self, correction: GeneCorrection) -> None:
        """Add one gene's results."""
        self.exons.update(correction.exons)
        self.cdss.update(correction.cdss)
        self.attempts.extend(correction.attempts)

    def summary(self) -> dict[str, Any]:
        """Count genes, transcripts and attempt outcomes."""
        statuses = Counter(a.status.value for a in self.attempts)
        genes_extended = {
            a.gene_id for a in self.attempts
            if a.status is ExtensionStatus.EXTENDED and a.feature == FEATURE_EXON
        }
        return {
            "genes": self.n_genes,
            "truncated_transcripts": self.n_truncated,
            "genes_extended": len(genes_extended),
            "exons_extended": len(self.exons),
            "cds_extended": len(self.cdss),
            "attempts": len(self.attempts),
            **{f"status_{s.value}": statuses.get(s.value, 0) for s in ExtensionStatus},
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Convert extension attempts to a pandas DataFrame.

        Returns:
            pandas DataFrame with one row per attempt.
        """
        import pandas as pd

        return pd.DataFrame([a.to_dict() for a in self.attempts], columns=REPORT_COLUMNS)


# =============================================================================
# Grouping
# =============================================================================


def group_by_gene(records: Iterable[TranscriptRecord]) -> dict[str, list[TranscriptRecord]]:
    """Group records by gene ID, keeping first-seen gene and row order.

    Raises:
        ValueError: If a transcript ID appears more than once.
    """
    groups: dict[str, list[TranscriptRecord]] = {}
    seen: set[str] = set()
    for record in records:
        if record.transcript_id in seen:
            raise ValueError(f"Duplicate transcript ID in metadata: {record.transcript_id}")
        seen.add(record.transcript_id)
        groups.setdefault(record.gene_id, []).append(record)
    return groups


# =============================================================================
# Driver
# =============================================================================


@attrs.define(frozen=True)
class GeneTask:
    """One gene's records and intervals, sliced from the full collections.

    Slicing keeps the payload sent to worker processes per-gene.
    """

    records: list[TranscriptRecord]
    exons: dict[str, ExonSet]
    cdss: dict[str, ExonSet]

    @classmethod
    def from_collections(
        cls,
        records: list[TranscriptRecord],
        exons: Mapping[str, ExonSet],
        cdss: Mapping[str, ExonSet],
    ) -> GeneTask:
        ids = [r.transcript_id for r in records]
        return cls(
            records=records,
            exons={i: exons[i] for i in ids if i in exons},
            cdss={i: cdss[i] for i in ids if i in cdss},
        )


def run_gene_task(task: GeneTask, max_exon_extension: int) -> GeneCorrection:
    """Run correct_gene on one task; module level so it pickles."""
    return correct_gene(task.records, task.exons, task.cdss, max_exon_extension)


def correct_annotations(
    records: Sequence[TranscriptRecord],
    exons: Mapping[str, ExonSet],
    cdss: Mapping[str, ExonSet],
    config: Config | None = None,
    executor: ParallelExecutor | None = None,
) -> CorrectionResult:
    """Extend truncated transcripts of every gene.

    Every transcript in ``records`` must have exons; this is checked
    before any gene is processed.

    Args:
        records: Metadata of all transcripts.
        exons: Exon sets keyed by transcript ID.
        cdss: CDS sets keyed by transcript ID.
        config: Configuration (defaults if None).
        executor: Executor for per-gene work; defaults to one built from
            ``config.parallel``.

    Returns:
        CorrectionResult with extended transcripts only.

    Raises:
        MissingTranscriptError: If a transcript has no exons.
        ValueError: If a transcript ID appears twice.
        TaskError: If a gene fails in the executor.
    """
    config = config or Config()
    groups = group_by_gene(records)

    missing = [r.transcript_id for r in records if r.transcript_id not in exons]
    if missing:
        shown = ", ".join(missing[:5]) + (" ..." if len(missing) > 5 else "")
        raise MissingTranscriptError(f"{len(missing)} transcript(s) without exons: {shown}")

    result = CorrectionResult(
        n_genes=len(groups),
        n_truncated=sum(1 for r in records if r.is_truncated),
    )

    # Genes without truncated transcripts cannot change
    work = {gene_id: group for gene_id, group in groups.items() if any(r.is_truncated for r in group)}
    tasks = [GeneTask.from_collections(group, exons, cdss) for group in work.values()]

    if executor is None:
        executor = ParallelExecutor(
            n_workers=config.parallel.max_workers,
            backend=config.parallel.backend,
        )

    logger.info(
        f"Extending {result.n_truncated} truncated transcripts in "
        f"{len(work)} of {len(groups)} genes"
    )

    func = functools.partial(
        run_gene_task, max_exon_extension=config.extension.max_exon_extension
    )
    task_results, stats = executor.map_items(
        func, tasks, task_ids=list(work), continue_on_error=False
    )
    for task_result in task_results:
        result.add(task_result.result)

    logger.debug(
        f"Gene tasks: {stats.successful}/{stats.total_tasks} in {stats.total_duration:.2f}s "
        f"(slowest {stats.max_task_duration:.2f}s)"
    )

    logger.info(
        f"Extended exons of {len(result.exons)} and CDS of "
        f"{len(result.cdss)} transcripts"
    )
    return result


# =============================================================================
# Merging and Reports
# =============================================================================


def apply_extensions(
    original: Mapping[str, ExonSet],
    extended: Mapping[str, ExonSet],
) -> dict[str, ExonSet]:
    """New collection with extended sets replacing their originals.

    Args:
        original: Full collection.
        extended: Extended sets only.

    Returns:
        New dictionary; ``original`` is not modified.
    """
    merged = dict(original)
    merged.update(extended)
    return merged


def write_extension_report_tsv(
    attempts: Iterable[ExtensionAttempt],
    output_path: Path | str,
) -> None:
    """Write one TSV row per extension attempt.

    Args:
        attempts: Extension attempts.
        output_path: Output file path.
    """
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_COLUMNS, delimiter="\t")
        writer.writeheader()
        for attempt in attempts:
            writer.writerow(attempt.to_dict())

    logger.info(f"Wrote extension report to {output_path}")


def format_summary(summary: dict[str, Any]) -> str:
    """Format a summary dictionary for console output."""
    lines = [
        f"Genes:                    {summary['genes']:,}",
        f"Truncated transcripts:    {summary['truncated_transcripts']:,}",
        f"Genes extended:           {summary['genes_extended']:,}",
        f"Exon sets extended:       {summary['exons_extended']:,}",
        f"CDS sets extended:        {summary['cds_extended']:,}",
        "Not extended:",
    ]
    for status in ExtensionStatus:
        if status is ExtensionStatus.EXTENDED:
            continue
        lines.append(f"  {status.value + ':':<24}{summary[f'status_{status.value}']:,}")
    return "\n".join(lines)

