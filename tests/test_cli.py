"""Tests for the txrepair command-line interface."""

import csv
from pathlib import Path

from click.testing import CliRunner

from txrepair import __version__
from txrepair.cli import main
from txrepair.io.gff import cds_sets, exon_sets, read_gff


# =============================================================================
# Test CLI Option Parsing
# =============================================================================


class TestHelp:
    """Test help and version output."""

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_main_help_lists_extend(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "extend" in result.output

    def test_extend_help_shows_options(self):
        runner = CliRunner()
        result = runner.invoke(main, ["extend", "--help"])
        assert result.exit_code == 0
        for option in ("--metadata", "--gff", "--output", "--report", "--max-exon-extension", "--workers"):
            assert option in result.output

    def test_extend_requires_inputs(self):
        runner = CliRunner()
        result = runner.invoke(main, ["extend"])
        assert result.exit_code != 0


# =============================================================================
# Test Extend Command
# =============================================================================


class TestExtendCommand:
    """End-to-end tests for the extend command."""

    def test_extend(self, synthetic_gff: Path, synthetic_metadata: Path, tmp_path: Path):
        output = tmp_path / "repaired.gff3"
        report = tmp_path / "report.tsv"

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "extend",
                "-m", str(synthetic_metadata),
                "-g", str(synthetic_gff),
                "-o", str(output),
                "-r", str(report),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Extension Summary" in result.output

        genes = read_gff(output)
        assert exon_sets(genes)["T"].coords() == [(100, 200), (300, 500), (600, 900)]
        assert cds_sets(genes)["T"].coords() == [(150, 200), (300, 500), (600, 800)]
        assert exon_sets(genes)["tx3"] == exon_sets(read_gff(synthetic_gff))["tx3"]

        tx = {t.transcript_id: t for g in genes for t in g.transcripts}
        assert tx["T"].attributes["extended"] == "exon,CDS"
        assert tx["T"].end == 900
        assert [phase for _, _, phase in tx["T"].cds] == [0, 1, 2]

        with open(report) as f:
            rows = list(csv.DictReader(f, delimiter="\t"))
        assert [(r["transcript_id"], r["feature"], r["status"]) for r in rows] == [
            ("T", "exon", "extended"),
            ("T", "CDS", "extended"),
        ]

    def test_threshold_option(self, synthetic_gff: Path, synthetic_metadata: Path, tmp_path: Path):
        output = tmp_path / "repaired.gff3"

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "-q",
                "extend",
                "-m", str(synthetic_metadata),
                "-g", str(synthetic_gff),
                "-o", str(output),
                "--max-exon-extension", "0",
            ],
        )

        # T diverges from R by 0 bases at its end, so it is still extended
        assert result.exit_code == 0, result.output
        assert len(exon_sets(read_gff(output))["T"]) == 3

    def test_threads_backend(self, synthetic_gff: Path, synthetic_metadata: Path, tmp_path: Path):
        output = tmp_path / "repaired.gff3"

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "-q",
                "extend",
                "-m", str(synthetic_metadata),
                "-g", str(synthetic_gff),
                "-o", str(output),
                "-j", "2",
                "--backend", "threads",
            ],
        )

        assert result.exit_code == 0, result.output
        assert len(exon_sets(read_gff(output))["T"]) == 3

    def test_config_file(self, synthetic_gff: Path, synthetic_metadata: Path, tmp_path: Path):
        config = tmp_path / "txrepair.toml"
        config.write_text('[parallel]\nbackend = "serial"\n')
        output = tmp_path / "repaired.gff3"

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "extend",
                "-m", str(synthetic_metadata),
                "-g", str(synthetic_gff),
                "-o", str(output),
                "-c", str(config),
            ],
        )

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_invalid_config(self, synthetic_gff: Path, synthetic_metadata: Path, tmp_path: Path):
        config = tmp_path / "txrepair.toml"
        config.write_text("[homology]\n")

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "extend",
                "-m", str(synthetic_metadata),
                "-g", str(synthetic_gff),
                "-o", str(tmp_path / "out.gff3"),
                "-c", str(config),
            ],
        )

        assert result.exit_code == 1
        assert "Unknown configuration section" in result.output

    def test_missing_transcript(self, synthetic_gff: Path, tmp_path: Path):
        metadata = tmp_path / "meta.tsv"
        metadata.write_text(
            "transcript_id\tgene_id\tlongest_start\tlongest_end\tcds_start_NF\tcds_end_NF\n"
            "R\tgene1\t1\t1\t0\t0\n"
            "ghost\tgene1\t0\t0\t0\t1\n"
        )
        output = tmp_path / "out.gff3"

        runner = CliRunner()
        result = runner.invoke(
            main,
            ["extend", "-m", str(metadata), "-g", str(synthetic_gff), "-o", str(output)],
        )

        assert result.exit_code == 1
        assert "ghost" in result.output
        assert not output.exists()
