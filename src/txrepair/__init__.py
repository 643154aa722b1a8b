"""txrepair: Extend truncated transcript models to their gene's reference.

Transcripts annotated with an unconfirmed CDS start or end
(``cds_start_NF`` / ``cds_end_NF``) are extended with the terminal exons
of the gene's longest transcript, as long as every exon at the truncated
end is supported by that transcript.

Example:
    >>> import txrepair
    >>> txrepair.__version__
    '0.1.0'

Modules:
    core: Extension algorithm and genome-wide driver
    io: Metadata table and GFF3 input/output
    parallel: Per-gene parallel execution
    utils: Interval geometry and logging
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
