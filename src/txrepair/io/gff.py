"""GFF3 file handling.

This module reads gene annotations from GFF3, converts them to the
per-transcript interval collections used by the extension algorithm,
and writes repaired annotations back to GFF3.

Every child line of a transcript (exons, CDS, UTRs, codons, ...) is kept
as read, with its own source, score and attributes. Transcripts that are
not extended are written back unchanged; extended transcripts get new
exon/CDS lines, reusing the original attributes where the coordinates
did not change.

Features:
    - Parse GFF3 files into GeneModel objects
    - Build exon and CDS collections keyed by transcript ID
    - Replace a transcript's exons/CDS and reassign CDS phases
    - Write GeneModel objects to GFF3 format

Example:
    >>> from txrepair.io.gff import read_gff, exon_sets, cds_sets
    >>> genes = read_gff("annotations.gff3")
    >>> exons = exon_sets(genes)
    >>> cdss = cds_sets(genes)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterator, Mapping

import attrs

from txrepair.core.models import ExonSet
from txrepair.utils.intervals import GenomicInterval

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF3 column indices
COL_SEQID = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_SCORE = 5
COL_STRAND = 6
COL_PHASE = 7
COL_ATTRIBUTES = 8

# Standard feature types
FEATURE_GENE = "gene"
FEATURE_MRNA = "mRNA"
FEATURE_EXON = "exon"
FEATURE_CDS = "CDS"

FEATURE_TYPES_GENE = {"gene", "ncRNA_gene", "pseudogene"}
FEATURE_TYPES_TRANSCRIPT = {"mRNA", "transcript", "ncRNA", "lnc_RNA", "lncRNA"}

# Reserved characters in attribute values; "," separates multiple values
# and is never escaped.
_ESCAPES = str.maketrans({";": "%3B", "=": "%3D", "&": "%26", "\t": "%09", "\n": "%0A", "\r": "%0D"})
_BARE_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")
_DECODABLE = re.compile(r"%(3[Bb]|3[Dd]|26|09|0[AaDd]|25)")


# =============================================================================
# Data Models
# =============================================================================


@attrs.define(slots=True)
class FeatureModel:
    """A child feature line of a transcript.

    Attributes:
        feature_type: GFF3 type (exon, CDS, five_prime_UTR, ...).
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        source: Annotation source.
        score: Score column, kept verbatim.
        phase: CDS phase, or None.
        attributes: Attributes from GFF3.
    """

    feature_type: str
    start: int
    end: int
    source: str = "."
    score: str = "."
    phase: int | None = None
    attributes: dict[str, str] = attrs.Factory(dict)


@attrs.define(slots=True)
class TranscriptModel:
    """Represents a transcript/mRNA with its features.

    Attributes:
        transcript_id: Unique transcript identifier.
        parent_gene: Parent gene ID.
        seqid: Scaffold/chromosome name.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        strand: Strand (+ or -).
        source: Annotation source.
        feature_type: GFF3 type of the transcript line.
        exons: List of (start, end) tuples for exons.
        cds: List of (start, end, phase) tuples for CDS.
        children: Child feature lines in file order, exons and CDS included.
            Empty for models built in code; the writer then derives
            exon and CDS lines from ``exons`` and ``cds``.
        attributes: Additional attributes from GFF3.
    """

    transcript_id: str
    parent_gene: str
    seqid: str
    start: int
    end: int
    strand: str
    source: str = "."
    feature_type: str = FEATURE_MRNA
    exons: list[tuple[int, int]] = attrs.Factory(list)
    cds: list[tuple[int, int, int]] = attrs.Factory(list)  # (start, end, phase)
    children: list[FeatureModel] = attrs.Factory(list)
    attributes: dict[str, str] = attrs.Factory(dict)


@attrs.define(slots=True)
class GeneModel:
    """Represents a gene with its child features.

    Attributes:
        gene_id: Unique gene identifier.
        seqid: Scaffold/chromosome name.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        strand: Strand (+ or -).
        source: Annotation source.
        feature_type: GFF3 type of the gene line.
        transcripts: List of transcript models.
        attributes: Additional attributes from GFF3.
    """

    gene_id: str
    seqid: str
    start: int
    end: int
    strand: str
    source: str = "."
    feature_type: str = FEATURE_GENE
    transcripts: list[TranscriptModel] = attrs.Factory(list)
    attributes: dict[str, str] = attrs.Factory(dict)


# =============================================================================
# Attribute Parsing
# =============================================================================


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse GFF3 attribute string into dictionary.

    Escapes of reserved characters are decoded; an escaped comma (%2C)
    stays escaped so that it is not confused with a value separator.

    Args:
        attr_string: Semicolon-separated key=value pairs.

    Returns:
        Dictionary of attribute key-value pairs.
    """
    attributes = {}
    if not attr_string or attr_string == ".":
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item:
            continue

        if "=" in item:
            key, value = item.split("=", 1)
            attributes[key] = _DECODABLE.sub(lambda m: chr(int(m.group(1), 16)), value)

    return attributes


def format_attributes(attributes: dict[str, str]) -> str:
    """Format attribute dictionary as GFF3 string.

    Args:
        attributes: Dictionary of attributes.

    Returns:
        Semicolon-separated key=value string.
    """
    if not attributes:
        return "."

    parts = []
    for key, value in attributes.items():
        value = _BARE_PERCENT.sub("%25", str(value)).translate(_ESCAPES)
        parts.append(f"{key}={value}")

    return ";".join(parts)


def _parent_ids(attributes: dict[str, str]) -> list[str]:
    parent = attributes.get("Parent", "")
    return parent.split(",") if parent else []


# =============================================================================
# GFF3 Parser
# =============================================================================


class GFF3Parser:
    """Parse GFF3 annotations into structured gene models.

    Handles:
    - Parent-child relationships (gene -> transcript -> child features)
    - Multiple transcripts per gene
    - Child features shared by several transcripts
    - Attribute parsing

    Attributes:
        path: Path to the GFF3 file.
        gene_count: Total number of genes (after parsing).

    Example:
        >>> parser = GFF3Parser("annotations.gff3")
        >>> for gene in parser.iter_genes():
        ...     print(gene.gene_id, len(gene.transcripts))
    """

    def __init__(self, gff_path: Path | str) -> None:
        """Initialize the parser.

        Args:
            gff_path: Path to GFF3 file.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        self.path = Path(gff_path)
        if not self.path.exists():
            raise FileNotFoundError(f"GFF3 file not found: {self.path}")

        self._genes: dict[str, GeneModel] | None = None

    def _parse_line(self, line: str) -> dict[str, Any] | None:
        """Parse a single GFF3 line.

        Args:
            line: Raw GFF3 line.

        Returns:
            Parsed feature dictionary or None for comments/empty.
        """
        line = line.strip()
        if not line or line.startswith("#"):
            return None

        parts = line.split("\t")
        if len(parts) < 9:
            logger.warning(f"Malformed GFF3 line (expected 9 columns): {line[:50]}...")
            return None

        try:
            # Parse coordinates (GFF3 is 1-based, convert to 0-based)
            start = int(parts[COL_START]) - 1
            end = int(parts[COL_END])

            return {
                "seqid": parts[COL_SEQID],
                "source": parts[COL_SOURCE],
                "type": parts[COL_TYPE],
                "start": start,
                "end": end,
                "score": parts[COL_SCORE],
                "strand": parts[COL_STRAND] if parts[COL_STRAND] in ("+", "-") else "+",
                "phase": None if parts[COL_PHASE] == "." else int(parts[COL_PHASE]),
                "attributes": parse_attributes(parts[COL_ATTRIBUTES]),
            }

        except (ValueError, IndexError) as e:
            logger.warning(f"Error parsing GFF3 line: {e}")
            return None

    def _build_genes(self) -> dict[str, GeneModel]:
        """Build gene models from GFF3 file."""
        genes: dict[str, GeneModel] = {}
        transcripts: dict[str, TranscriptModel] = {}

        gene_features: dict[str, dict] = {}
        transcript_features: dict[str, dict] = {}
        child_features: list[dict] = []

        with open(self.path) as f:
            for line in f:
                if line.startswith("##FASTA"):
                    break
                feature = self._parse_line(line)
                if feature is None:
                    continue

                ftype = feature["type"]
                fattrs = feature["attributes"]

                if ftype in FEATURE_TYPES_GENE:
                    gene_id = fattrs.get("ID", fattrs.get("gene_id", f"gene_{len(gene_features)}"))
                    gene_features[gene_id] = feature

                elif ftype in FEATURE_TYPES_TRANSCRIPT:
                    tx_id = fattrs.get("ID", fattrs.get("transcript_id", f"tx_{len(transcript_features)}"))
                    transcript_features[tx_id] = feature

                else:
                    child_features.append(feature)

        for gene_id, gf in gene_features.items():
            genes[gene_id] = GeneModel(
                gene_id=gene_id,
                seqid=gf["seqid"],
                start=gf["start"],
                end=gf["end"],
                strand=gf["strand"],
                source=gf["source"],
                feature_type=gf["type"],
                attributes=gf["attributes"],
            )

        for tx_id, tf in transcript_features.items():
            parent_ids = _parent_ids(tf["attributes"])

            transcript = TranscriptModel(
                transcript_id=tx_id,
                parent_gene=parent_ids[0] if parent_ids else "",
                seqid=tf["seqid"],
                start=tf["start"],
                end=tf["end"],
                strand=tf["strand"],
                source=tf["source"],
                feature_type=tf["type"],
                attributes=tf["attributes"],
            )
            transcripts[tx_id] = transcript

            for parent_id in parent_ids:
                if parent_id in genes:
                    genes[parent_id].transcripts.append(transcript)
                else:
                    logger.warning(f"Transcript {tx_id} has unknown parent gene {parent_id}")

        n_skipped = 0
        for cf in child_features:
            child = FeatureModel(
                feature_type=cf["type"],
                start=cf["start"],
                end=cf["end"],
                source=cf["source"],
                score=cf["score"],
                phase=cf["phase"],
                attributes=cf["attributes"],
            )
            parents = [transcripts[p] for p in _parent_ids(cf["attributes"]) if p in transcripts]
            if not parents:
                n_skipped += 1
            # One object per line; shared children are written once
            for tx in parents:
                tx.children.append(child)
                if child.feature_type == FEATURE_EXON:
                    tx.exons.append((child.start, child.end))
                elif child.feature_type == FEATURE_CDS:
                    tx.cds.append((child.start, child.end, child.phase or 0))

        if n_skipped:
            logger.warning(f"Skipped {n_skipped} features without a transcript parent")

        for tx in transcripts.values():
            tx.exons.sort()
            tx.cds.sort()

        logger.info(f"Parsed {len(genes)} genes, {len(transcripts)} transcripts")
        return genes

    def _ensure_parsed(self) -> None:
        """Ensure the GFF3 file has been parsed."""
        if self._genes is None:
            self._genes = self._build_genes()

    def iter_genes(self) -> Iterator[GeneModel]:
        """Iterate over genes with their child features.

        Yields:
            GeneModel objects.
        """
        self._ensure_parsed()
        assert self._genes is not None
        yield from self._genes.values()

    def get_gene(self, gene_id: str) -> GeneModel | None:
        """Retrieve specific gene by ID.

        Args:
            gene_id: Gene identifier.

        Returns:
            GeneModel or None if not found.
        """
        self._ensure_parsed()
        assert self._genes is not None
        return self._genes.get(gene_id)

    @property
    def gene_count(self) -> int:
        """Total number of genes."""
        self._ensure_parsed()
        assert self._genes is not None
        return len(self._genes)


# =============================================================================
# Interval Collections
# =============================================================================


def _iter_transcripts(genes: list[GeneModel]) -> Iterator[TranscriptModel]:
    for gene in genes:
        yield from gene.transcripts


def exon_sets(genes: list[GeneModel]) -> dict[str, ExonSet]:
    """Exon collection keyed by transcript ID.

    Transcripts without exon lines are left out.

    Args:
        genes: Parsed gene models.

    Returns:
        Dictionary of transcript ID to ExonSet.
    """
    return {
        tx.transcript_id: ExonSet.from_coords(tx.seqid, tx.strand, tx.exons)
        for tx in _iter_transcripts(genes)
        if tx.exons
    }


def cds_sets(genes: list[GeneModel]) -> dict[str, ExonSet]:
    """CDS collection keyed by transcript ID.

    Non-coding transcripts are left out, so the keys are a subset of
    the exon collection's.

    Args:
        genes: Parsed gene models.

    Returns:
        Dictionary of transcript ID to ExonSet.
    """
    return {
        tx.transcript_id: ExonSet.from_coords(
            tx.seqid, tx.strand, [(start, end) for start, end, _ in tx.cds]
        )
        for tx in _iter_transcripts(genes)
        if tx.cds
    }


def assign_phases(
    intervals: list[GenomicInterval] | ExonSet,
    strand: str,
    first_phase: int = 0,
) -> list[tuple[int, int, int]]:
    """Assign GFF3 phases to CDS segments.

    Phases are propagated from the 5'-most segment, which gets
    ``first_phase``.

    Args:
        intervals: CDS segments.
        strand: Strand of the transcript.
        first_phase: Phase of the 5'-most segment.

    Returns:
        (start, end, phase) tuples sorted by start.
    """
    ordered = sorted(intervals, key=lambda iv: iv.start, reverse=(strand == "-"))
    phased = []
    phase = first_phase
    for iv in ordered:
        phased.append((iv.start, iv.end, phase))
        phase = (3 - ((iv.length - phase) % 3)) % 3
    return sorted(phased)


# =============================================================================
# Transcript Updates
# =============================================================================


def _rebuild_children(
    transcript: TranscriptModel,
    feature_type: str,
    segments: list[tuple[int, int, int | None]],
) -> list[FeatureModel]:
    """New child lines of one type, reusing unchanged segments.

    A segment at the same coordinates (and phase) as an original line
    reuses that line. New segments share the ID of the
    original lines when they all carry one ID (the usual CDS layout),
    otherwise get a fresh ID.
    """
    originals = [c for c in transcript.children if c.feature_type == feature_type]
    by_coords = {(c.start, c.end): c for c in originals}
    taken = {c.attributes.get("ID") for c in transcript.children}
    shared_ids = {c.attributes.get("ID") for c in originals}
    shared_id = shared_ids.pop() if len(shared_ids) == 1 else None

    children = []
    for i, (start, end, phase) in enumerate(segments, 1):
        original = by_coords.get((start, end))
        if original is not None:
            if original.phase == phase:
                children.append(original)
                continue
            attributes = dict(original.attributes)
            if len(_parent_ids(attributes)) > 1:
                # A re-phased copy of a shared line gets no ID of its own
                attributes.pop("ID", None)
                attributes["Parent"] = transcript.transcript_id
            children.append(attrs.evolve(original, phase=phase, attributes=attributes))
            continue

        if shared_id is not None:
            new_id = shared_id
        else:
            new_id = f"{transcript.transcript_id}.{feature_type}{i}"
            while new_id in taken:
                new_id += "x"
            taken.add(new_id)
        children.append(
            FeatureModel(
                feature_type=feature_type,
                start=start,
                end=end,
                source=transcript.source,
                phase=phase,
                attributes={"ID": new_id, "Parent": transcript.transcript_id},
            )
        )
    return children


def update_transcript(
    transcript: TranscriptModel,
    exons: ExonSet | None = None,
    cds: ExonSet | None = None,
) -> TranscriptModel:
    """Return a copy of ``transcript`` with replaced exons and/or CDS.

    The transcript span is widened to cover the new exons. CDS phases
    are recomputed; the original 5' phase is kept when the 5'-most CDS
    segment still starts at the same position, otherwise phase 0 is used.
    Other child features (UTRs, codons, ...) are kept as they were.

    Args:
        transcript: Original transcript.
        exons: New exon set, or None to keep the exons.
        cds: New CDS set, or None to keep the CDS.

    Returns:
        New TranscriptModel.
    """
    new_exons = exons.coords() if exons is not None else list(transcript.exons)

    new_cds = list(transcript.cds)
    if cds is not None:
        first_phase = 0
        if transcript.cds:
            if transcript.strand == "-":
                old_first = max(transcript.cds, key=lambda c: c[1])
                still_first = cds.intervals[-1].end == old_first[1]
            else:
                old_first = min(transcript.cds)
                still_first = cds.intervals[0].start == old_first[0]
            if still_first:
                first_phase = old_first[2]
        new_cds = assign_phases(cds, transcript.strand, first_phase)

    children = list(transcript.children)
    if children:
        replaced = set()
        rebuilt = []
        if exons is not None:
            replaced.add(FEATURE_EXON)
            rebuilt += _rebuild_children(transcript, FEATURE_EXON, [(s, e, None) for s, e in new_exons])
        if cds is not None:
            replaced.add(FEATURE_CDS)
            rebuilt += _rebuild_children(transcript, FEATURE_CDS, new_cds)
        children = [c for c in children if c.feature_type not in replaced] + rebuilt

    starts = [transcript.start] + [s for s, _ in new_exons]
    ends = [transcript.end] + [e for _, e in new_exons]

    return attrs.evolve(
        transcript,
        start=min(starts),
        end=max(ends),
        exons=new_exons,
        cds=new_cds,
        children=children,
        attributes=dict(transcript.attributes),
    )


def apply_to_genes(
    genes: list[GeneModel],
    exons: Mapping[str, ExonSet],
    cdss: Mapping[str, ExonSet],
    tag: str | None = "extended",
) -> list[GeneModel]:
    """Return copies of ``genes`` with extended transcripts replaced.

    Gene spans are widened to cover their transcripts. Unaffected genes
    are returned unchanged.

    Args:
        genes: Original gene models.
        exons: Extended exon sets keyed by transcript ID.
        cdss: Extended CDS sets keyed by transcript ID.
        tag: Attribute added to modified transcripts (value lists the
            modified feature types), or None to add nothing.

    Returns:
        List of GeneModel objects.
    """
    updated_genes = []
    for gene in genes:
        if not any(tx.transcript_id in exons or tx.transcript_id in cdss for tx in gene.transcripts):
            updated_genes.append(gene)
            continue

        transcripts = []
        for tx in gene.transcripts:
            new_exons = exons.get(tx.transcript_id)
            new_cds = cdss.get(tx.transcript_id)
            if new_exons is None and new_cds is None:
                transcripts.append(tx)
                continue
            updated = update_transcript(tx, new_exons, new_cds)
            if tag:
                modified = [name for name, value in (("exon", new_exons), ("CDS", new_cds)) if value is not None]
                updated.attributes[tag] = ",".join(modified)
            transcripts.append(updated)

        updated_genes.append(
            attrs.evolve(
                gene,
                start=min([gene.start] + [tx.start for tx in transcripts]),
                end=max([gene.end] + [tx.end for tx in transcripts]),
                transcripts=transcripts,
            )
        )

    return updated_genes


# =============================================================================
# GFF3 Writer
# =============================================================================


class GFF3Writer:
    """Write gene models to GFF3 format.

    Example:
        >>> with GFF3Writer("output.gff3") as writer:
        ...     writer.write_header()
        ...     for gene in genes:
        ...         writer.write_gene(gene)
    """

    def __init__(
        self,
        output_path: Path | str,
        source: str | None = None,
    ) -> None:
        """Initialize the writer.

        Args:
            output_path: Output file path.
            source: Source field value; None keeps each feature's own source.
        """
        self.path = Path(output_path)
        self.source = source
        self._file = open(self.path, "w")
        self._header_written = False
        self._written: set[int] = set()

    def __enter__(self) -> GFF3Writer:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the output file."""
        if self._file:
            self._file.close()
            self._file = None

    def write_header(
        self,
        original_gff: Path | str | None = None,
        version: str | None = None,
    ) -> None:
        """Write GFF3 header with provenance.

        Args:
            original_gff: Path to the input annotation.
            version: txrepair version.
        """
        if version is None:
            from txrepair import __version__ as version

        self._file.write("##gff-version 3\n")
        self._file.write(f"#!processor txrepair v{version}\n")
        if original_gff:
            self._file.write(f"#!original-file {original_gff}\n")

        self._header_written = True

    def _write_line(
        self,
        seqid: str,
        source: str,
        feature_type: str,
        start: int,
        end: int,
        strand: str,
        attributes: dict[str, str],
        phase: int | None = None,
        score: str | None = None,
    ) -> None:
        self._file.write(
            format_gff_line(
                seqid,
                self.source or source,
                feature_type,
                start,
                end,
                score=score,
                strand=strand,
                phase=phase,
                attributes=attributes,
            )
            + "\n"
        )

    def write_gene(self, gene: GeneModel) -> None:
        """Write a gene and its child features.

        Args:
            gene: GeneModel to write.
        """
        if not self._header_written:
            self.write_header()

        gene_attrs = {"ID": gene.gene_id}
        gene_attrs.update(gene.attributes)

        self._write_line(
            gene.seqid, gene.source, gene.feature_type,
            gene.start, gene.end, gene.strand, gene_attrs,
        )

        for transcript in gene.transcripts:
            self._write_transcript(transcript)

    def _write_transcript(self, transcript: TranscriptModel) -> None:
        """Write a transcript and its features."""
        tx_attrs = {"ID": transcript.transcript_id, "Parent": transcript.parent_gene}
        tx_attrs.update(transcript.attributes)

        self._write_line(
            transcript.seqid, transcript.source, transcript.feature_type,
            transcript.start, transcript.end, transcript.strand, tx_attrs,
        )

        if transcript.children:
            for child in transcript.children:
                if id(child) in self._written:
                    continue
                self._written.add(id(child))
                self._write_line(
                    transcript.seqid, child.source, child.feature_type,
                    child.start, child.end, transcript.strand, child.attributes,
                    phase=child.phase, score=child.score,
                )
            return

        for i, (start, end) in enumerate(transcript.exons, 1):
            exon_attrs = {
                "ID": f"{transcript.transcript_id}.exon{i}",
                "Parent": transcript.transcript_id,
            }
            self._write_line(
                transcript.seqid, transcript.source, FEATURE_EXON,
                start, end, transcript.strand, exon_attrs,
            )

        for i, (start, end, phase) in enumerate(transcript.cds, 1):
            cds_attrs = {
                "ID": f"{transcript.transcript_id}.CDS{i}",
                "Parent": transcript.transcript_id,
            }
            self._write_line(
                transcript.seqid, transcript.source, FEATURE_CDS,
                start, end, transcript.strand, cds_attrs, phase=phase,
            )

    def write_genes(self, genes: list[GeneModel]) -> None:
        """Write multiple genes.

        Args:
            genes: List of GeneModel objects.
        """
        for gene in genes:
            self.write_gene(gene)


# =============================================================================
# Convenience Functions
# =============================================================================


def read_gff(path: Path | str) -> list[GeneModel]:
    """Read gene models from a GFF3 file.

    Args:
        path: Path to the GFF3 file.

    Returns:
        List of GeneModel objects.
    """
    parser = GFF3Parser(path)
    return list(parser.iter_genes())


def write_gff(
    genes: list[GeneModel],
    path: Path | str,
    source: str | None = None,
    original_gff: Path | str | None = None,
) -> None:
    """Write gene models to a GFF3 file.

    Args:
        genes: List of GeneModel objects.
        path: Output file path.
        source: Source field value; None keeps each feature's own source.
        original_gff: Input annotation recorded in the header.
    """
    with GFF3Writer(path, source=source) as writer:
        writer.write_header(original_gff=original_gff)
        writer.write_genes(genes)


def format_gff_line(
    seqid: str,
    source: str,
    feature_type: str,
    start: int,
    end: int,
    score: float | str | None = None,
    strand: str = ".",
    phase: int | None = None,
    attributes: dict[str, str] | None = None,
) -> str:
    """Format a single GFF3 line.

    Args:
        seqid: Sequence identifier.
        source: Source of the annotation.
        feature_type: Type of feature.
        start: Start position (0-based).
        end: End position (0-based, exclusive).
        score: Feature score; strings are written verbatim.
        strand: Strand.
        phase: CDS phase.
        attributes: Feature attributes.

    Returns:
        Formatted GFF3 line.
    """
    # Convert to 1-based for GFF3
    gff_start = start + 1
    gff_end = end

    if score is None:
        score_str = "."
    elif isinstance(score, str):
        score_str = score
    else:
        score_str = f"{score:.4f}"
    phase_str = "." if phase is None else str(phase)
    attr_str = format_attributes(attributes or {})

    return f"{seqid}\t{source}\t{feature_type}\t{gff_start}\t{gff_end}\t{score_str}\t{strand}\t{phase_str}\t{attr_str}"
