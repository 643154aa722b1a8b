"""Core extension logic for txrepair.

This module contains the data structures and algorithms that extend
truncated transcripts:

- Interval sets, transcript records and extension outcomes
- Single-transcript extension decisions
- Per-gene end/start and exon/CDS orchestration
- Genome-wide aggregation

Example:
    >>> from txrepair.core import correct_gene, extend_single_transcript
"""

from txrepair.core.correct import (
    CorrectionResult,
    apply_extensions,
    correct_annotations,
    group_by_gene,
    write_extension_report_tsv,
)
from txrepair.core.extend import (
    DEFAULT_MAX_EXON_EXTENSION,
    DirectionBatchResult,
    GeneCorrection,
    MissingTranscriptError,
    correct_gene,
    extend_single_transcript,
    extend_transcripts,
)
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
)

__all__: list[str] = [
    # Models
    "AmbiguousReference",
    "Direction",
    "ExonSet",
    "ExtensionAttempt",
    "ExtensionOutcome",
    "ExtensionStatus",
    "NoReference",
    "SingleReference",
    "TranscriptRecord",
    "resolve_reference",
    # Extension
    "DEFAULT_MAX_EXON_EXTENSION",
    "DirectionBatchResult",
    "GeneCorrection",
    "MissingTranscriptError",
    "correct_gene",
    "extend_single_transcript",
    "extend_transcripts",
    # Genome-wide
    "CorrectionResult",
    "apply_extensions",
    "correct_annotations",
    "group_by_gene",
    "write_extension_report_tsv",
]
