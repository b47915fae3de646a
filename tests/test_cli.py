"""Tests for the command-line interface."""

import logging

import pandas as pd
import pytest
from click.testing import CliRunner

from codon_structure.cli import cli


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def run_args(data_dir, tmp_path):
    genes = tmp_path / "genes.txt"
    genes.write_text("g1\nmissing\n")
    outdir = tmp_path / "results"
    return outdir, ["--genes", str(genes), "--data-dir", str(data_dir),
                    "--outdir", str(outdir), "--figure-format", "png", "-q"]


class TestAnalysisCommands:
    def test_beta_sheets(self, runner, run_args):
        outdir, args = run_args
        result = runner.invoke(cli, ["beta-sheets"] + args)
        assert result.exit_code == 0, result.output
        assert "Processed 1/2 genes" in result.output

        per_gene = pd.read_csv(outdir / "beta_sheets_per_gene.tsv", sep="\t")
        assert per_gene["class"].tolist() == ["beta", "non_beta"]
        summary = pd.read_csv(outdir / "beta_sheets_summary.tsv", sep="\t")
        assert summary.loc[0, "skipped_genes"] == 1
        assert (outdir / "codon_structure.log").exists()

    def test_boundaries(self, runner, run_args):
        outdir, args = run_args
        result = runner.invoke(cli, ["boundaries", "--radius", "1"] + args)
        assert result.exit_code == 0, result.output
        per_gene = pd.read_csv(outdir / "boundaries_r1_per_gene.tsv", sep="\t")
        assert per_gene.loc[per_gene["class"] == "near_boundary", "n"].tolist() == [2]

    def test_correlate(self, runner, run_args):
        outdir, args = run_args
        result = runner.invoke(cli, ["correlate", "--feature", "length"] + args)
        assert result.exit_code == 0, result.output
        assert "not enough data" in result.output
        table = pd.read_csv(outdir / "correlation_length.tsv", sep="\t")
        assert table["length"].tolist() == [6]

    def test_unknown_feature(self, runner, run_args):
        _, args = run_args
        result = runner.invoke(cli, ["correlate", "--feature", "mass"] + args)
        assert result.exit_code == 2

    def test_needs_config_or_genes(self, runner, tmp_path):
        result = runner.invoke(cli, ["beta-sheets", "--outdir", str(tmp_path)])
        assert result.exit_code == 1

    def test_config_file(self, runner, run_args, tmp_path, data_dir):
        outdir, _ = run_args
        config = tmp_path / "run.yaml"
        config.write_text(
            "genes: genes.txt\n"
            f"source:\n  data_dir: {data_dir}\n"
            "analysis:\n  radius: 1\n"
            "output_dir: from_config\n"
            "figure_format: png\n"
        )
        result = runner.invoke(cli, ["boundaries", "--config", str(config), "-q"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "from_config" / "boundaries_r1_summary.tsv").exists()


class TestUtilityCommands:
    def test_show_weights(self, runner):
        result = runner.invoke(cli, ["show-weights", "--species", "E. coli"])
        assert result.exit_code == 0
        assert "Leu" in result.output
        assert "CUG 3.300" in result.output

    def test_create_and_validate_config(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        result = runner.invoke(cli, ["create-config", "-o", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(cli, ["validate-config", str(path)])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "Missing file paths" in result.output

    def test_validate_invalid_config(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("analysis:\n  frame_policy: sometimes\n")
        result = runner.invoke(cli, ["validate-config", str(path)])
        assert result.exit_code == 1
