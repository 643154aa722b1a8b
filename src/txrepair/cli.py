"""Command-line interface for txrepair.

This module provides the main entry point for the txrepair CLI tool.
It uses Click to define commands.

Commands:
    extend: Extend truncated transcripts and write a repaired GFF3

Example:
    $ txrepair --help
    $ txrepair extend -m transcripts.tsv -g annotations.gff3 -o repaired.gff3
    $ txrepair extend -m transcripts.tsv -g annotations.gff3 -o repaired.gff3 \\
        -r extension_report.tsv -j 8
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from txrepair import __version__

# Initialize rich console for pretty output
console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="txrepair")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """txrepair: Extend truncated transcripts to their gene's reference transcript.

    Transcripts with an unconfirmed CDS start or end are extended with the
    terminal exons of the gene's longest transcript, when every exon at the
    truncated end is supported by that transcript.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# =============================================================================
# extend command
# =============================================================================


@main.command()
@click.option(
    "-m",
    "--metadata",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Transcript metadata table (TSV, or CSV by .csv suffix).",
)
@click.option(
    "-g",
    "--gff",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Input GFF3 annotation with exon and CDS features.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output GFF3 file with extended transcripts.",
)
@click.option(
    "-r",
    "--report",
    type=click.Path(path_type=Path),
    help="Output TSV with one row per extension attempt.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="TOML configuration file.",
)
@click.option(
    "--max-exon-extension",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum bases a truncated transcript may diverge from the reference "
    "at the extended end [default: 100000].",
)
@click.option(
    "-j",
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of parallel workers [default: 1].",
)
@click.option(
    "--backend",
    type=click.Choice(["serial", "threads", "processes"]),
    default=None,
    help="Parallel backend [default: processes].",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Write debug log to this file.",
)
@click.pass_context
def extend(
    ctx: click.Context,
    metadata: Path,
    gff: Path,
    output: Path,
    report: Optional[Path],
    config_path: Optional[Path],
    max_exon_extension: Optional[int],
    workers: Optional[int],
    backend: Optional[str],
    log_file: Optional[Path],
) -> None:
    """Extend truncated transcripts in a GFF3 annotation.

    \b
    Steps performed:
    1. Read the metadata table and the GFF3 annotation
    2. Extend transcript ends, then starts, using each gene's reference
    3. Extend the CDS of transcripts whose exons were extended
    4. Write the full annotation with extended transcripts replaced

    \b
    Required metadata columns:
    - transcript_id (or ensembl_transcript_id)
    - gene_id (or ensembl_gene_id)
    - longest_start, longest_end, cds_start_NF, cds_end_NF
    - cds_start_end_NF (optional, derived when absent)

    \b
    Examples:
        $ txrepair extend -m transcripts.tsv -g genes.gff3 -o repaired.gff3

        $ txrepair extend -m transcripts.tsv -g genes.gff3 -o repaired.gff3 \\
            -r report.tsv --max-exon-extension 50 -j 8
    """
    import logging

    import attrs

    from txrepair.config import Config
    from txrepair.core.correct import (
        correct_annotations,
        format_summary,
        write_extension_report_tsv,
    )
    from txrepair.io.gff import apply_to_genes, cds_sets, exon_sets, read_gff, write_gff
    from txrepair.io.metadata import read_metadata
    from txrepair.parallel.executor import ParallelExecutor, create_progress_bar
    from txrepair.utils.logging import Timer, setup_logging

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)
    setup_logging(verbosity=0 if quiet else (2 if verbose else 1), log_file=log_file)
    logger = logging.getLogger("txrepair.cli")

    try:
        config = Config.load(config_path)
        if max_exon_extension is not None:
            config.extension = attrs.evolve(config.extension, max_exon_extension=max_exon_extension)
        if workers is not None:
            config.parallel = attrs.evolve(config.parallel, max_workers=workers)
        if backend is not None:
            config.parallel = attrs.evolve(config.parallel, backend=backend)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not quiet:
        console.print(f"[blue]Metadata:[/blue] {metadata}")
        console.print(f"[blue]Annotation:[/blue] {gff}")
        console.print(f"[blue]Max exon extension:[/blue] {config.extension.max_exon_extension:,} bp")
        console.print(f"[blue]Output:[/blue] {output}")

    try:
        with Timer("Transcript extension", logger):
            records = read_metadata(metadata)
            genes = read_gff(gff)
            exons = exon_sets(genes)
            cdss = cds_sets(genes)

            if not quiet:
                console.print(
                    f"[dim]Loaded {len(records):,} transcripts, "
                    f"{len(genes):,} genes[/dim]"
                )

            progress = None if quiet else create_progress_bar()
            callback = None
            if progress is not None:
                task_id = progress.add_task("Extending...", total=None)

                def callback(completed: int, total: int, gene_id: str) -> None:
                    progress.update(
                        task_id,
                        completed=completed,
                        total=total,
                        description=f"Extending {gene_id}...",
                    )

                progress.start()

            executor = ParallelExecutor(
                n_workers=config.parallel.max_workers,
                backend=config.parallel.backend,
                progress_callback=callback,
            )
            try:
                result = correct_annotations(records, exons, cdss, config=config, executor=executor)
            finally:
                if progress is not None:
                    progress.stop()

            repaired = apply_to_genes(genes, result.exons, result.cdss)
            write_gff(repaired, output, original_gff=gff)

            if report:
                write_extension_report_tsv(result.attempts, report)

        if not quiet:
            console.print("")
            console.print("[bold]Extension Summary:[/bold]")
            for line in format_summary(result.summary()).splitlines():
                console.print(f"  {line}")
            console.print("")
            console.print(f"[green]Wrote repaired GFF:[/green] {output}")
            if report:
                console.print(f"[green]Wrote extension report:[/green] {report}")

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback

            traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
