"""
Tests for the copysift command line.
"""

import json

import pytest
from click.testing import CliRunner
from loguru import logger

from copysift import __version__
from copysift.cli import main

FOX_TSV = (
    "Description\tCode\n"
    "The quick brown fox\tA-1\n"
    "The quick brown fox!\tA-2\n"
    "Totally different text\tB-1\n"
    "the QUICK brown Fox.\tA-3\n"
)


class TestCli:
    """Tests for the click commands."""

    @pytest.fixture
    def runner(self):
        """Create a CLI runner."""
        return CliRunner()

    @pytest.fixture
    def source(self, tmp_path):
        """Write the fox table to a TSV file."""
        path = tmp_path / "rows.tsv"
        path.write_text(FOX_TSV, encoding="utf-8")
        return str(path)

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        """Ignore COPYSIFT_* settings from the outer environment."""
        for name in ("THRESHOLD", "SHINGLE_SIZE", "MODE", "SEARCH_COLUMN", "PALETTE", "LOG_LEVEL"):
            monkeypatch.delenv(f"COPYSIFT_{name}", raising=False)
        yield
        # the CLI points loguru at the runner's stderr, which closes after invoke
        logger.remove()

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self, runner):
        """Test the info command."""
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 0
        assert "copysift" in result.output

    def test_dedup(self, runner, source):
        """Test dedup reports the fox group."""
        result = runner.invoke(main, ["dedup", source, "--column", "Description", "--threshold", "0.5"])
        assert result.exit_code == 0, result.output
        assert "1 duplicate groups, 3 rows" in result.output

    def test_dedup_no_duplicates(self, runner, source):
        """Test dedup on a column without duplicates."""
        result = runner.invoke(main, ["dedup", source, "--column", "Code", "--threshold", "0.9"])
        assert result.exit_code == 0, result.output
        assert "No duplicates found" in result.output

    def test_dedup_writes_tsv(self, runner, source, tmp_path):
        """Test --output writes the annotated table."""
        out = tmp_path / "out.tsv"
        result = runner.invoke(main, ["dedup", source, "-k", "0", "-t", "0.5", "-o", str(out)])
        assert result.exit_code == 0, result.output
        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Description\tCode\tnote"
        assert lines[1].endswith("duplicate group 1 (3 items)")
        assert len(lines) == 5

    def test_dedup_from_stdin(self, runner):
        """Test '-' reads the table from stdin."""
        result = runner.invoke(main, ["dedup", "-", "-t", "0.5"], input=FOX_TSV)
        assert result.exit_code == 0, result.output
        assert "1 duplicate groups" in result.output

    def test_search(self, runner, source):
        """Test search reports matched rows per query."""
        result = runner.invoke(main, [
            "search", source, "-q", "brown fox", "-q", "different",
            "--column", "Description", "--mode", "similar", "--threshold", "0.3",
        ])
        assert result.exit_code == 0, result.output
        assert "brown fox: 3 rows" in result.output
        assert "different: 1 rows" in result.output

    def test_search_writes_json(self, runner, source, tmp_path):
        """Test JSON output holds only matched rows."""
        out = tmp_path / "out.json"
        result = runner.invoke(main, [
            "search", source, "-q", "different", "--mode", "contains", "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        records = json.loads(out.read_text(encoding="utf-8"))
        assert len(records) == 1
        assert records[0]["Description"] == "Totally different text"
        assert records[0]["note"] == "matched different"

    def test_invalid_threshold(self, runner, source):
        """Test configuration errors exit with status 1."""
        result = runner.invoke(main, ["dedup", source, "--threshold", "2"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_column(self, runner, source):
        """Test unknown column names exit with status 1."""
        result = runner.invoke(main, ["search", source, "-q", "fox", "--column", "Missing"])
        assert result.exit_code == 1
        assert "Unknown column" in result.output
