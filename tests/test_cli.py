"""
Comprehensive tests for the CLI commands.

Tests cover:
- Main CLI group and options
- analyze and analyze-local commands
- diagram command
- schema and summarize commands
- config-show command

Author: RepoGraph Team
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from repograph.cli import main
from repograph.config import get_config, reset_config


ANALYSIS = {
    "repository": "acme/shop",
    "summary": "A TypeScript repository with 3 files.",
    "meta": {"name": "shop", "language": "TypeScript"},
    "nodes": [],
    "edges": [],
    "stats": {"totalFiles": 3, "cached": False},
}


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_config_fixture():
    """Reset config before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def checkout(tmp_path):
    """A small local repository."""
    (tmp_path / "src" / "services").mkdir(parents=True)
    (tmp_path / "src" / "index.ts").write_text("import { getUser } from './services/user'\ngetUser()\n")
    (tmp_path / "src" / "services" / "user.ts").write_text("export function getUser() {}\n")
    return tmp_path


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_help_option(self, runner):
        """Test --help shows help message."""
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "RepoGraph" in result.output
        assert "analyze" in result.output

    def test_version(self, runner):
        """Test --version prints the version."""
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_max_files_option(self, runner):
        """Test --max-files updates the analysis config."""
        result = runner.invoke(main, ["--max-files", "5", "config-show"])

        assert result.exit_code == 0
        assert get_config().analysis.max_parsed_files == 5

    def test_merge_schemas_option(self, runner):
        """Test --merge-schemas updates the schema config."""
        result = runner.invoke(main, ["--merge-schemas", "config-show"])

        assert result.exit_code == 0
        assert get_config().schemas.merge_schema_files is True


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_analyze_help(self, runner):
        """Test analyze --help."""
        result = runner.invoke(main, ["analyze", "--help"])

        assert result.exit_code == 0
        assert "REPOSITORY" in result.output

    @patch("repograph.cli.analyze_repository", new_callable=AsyncMock)
    def test_analyze_json(self, mock_analyze, runner):
        """Test that the JSON result is printed."""
        mock_analyze.return_value = ANALYSIS

        result = runner.invoke(main, ["analyze", "acme/shop"])

        assert result.exit_code == 0
        assert "acme/shop" in result.output
        mock_analyze.assert_called_once_with("acme/shop", include_contents=False)

    @patch("repograph.cli.analyze_repository", new_callable=AsyncMock)
    def test_analyze_output_file(self, mock_analyze, runner, tmp_path):
        """Test writing the result to a file."""
        mock_analyze.return_value = ANALYSIS
        output = tmp_path / "graph.json"

        result = runner.invoke(main, ["analyze", "acme/shop", "-o", str(output)])

        assert result.exit_code == 0
        assert json.loads(output.read_text())["repository"] == "acme/shop"

    @patch("repograph.cli.analyze_repository", new_callable=AsyncMock)
    def test_analyze_summary(self, mock_analyze, runner):
        """Test the summary table."""
        mock_analyze.return_value = ANALYSIS

        result = runner.invoke(main, ["analyze", "acme/shop", "--summary"])

        assert result.exit_code == 0
        assert "A TypeScript repository with 3 files." in result.output
        assert "totalFiles" in result.output

    @patch("repograph.cli.analyze_repository", new_callable=AsyncMock)
    def test_analyze_error(self, mock_analyze, runner):
        """Test that an error payload exits with status 1."""
        mock_analyze.return_value = {"error": "Repository acme/missing not found"}

        result = runner.invoke(main, ["analyze", "acme/missing"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestAnalyzeLocalCommand:
    """Tests for the analyze-local command."""

    def test_analyze_local(self, runner, checkout):
        """Test analyzing a local checkout."""
        result = runner.invoke(main, ["analyze-local", str(checkout), "-o", str(checkout.parent / "out.json")])

        assert result.exit_code == 0
        data = json.loads((checkout.parent / "out.json").read_text())
        assert data["stats"]["totalFiles"] == 2
        assert any(e["data"]["type"] == "call" for e in data["edges"])

    def test_missing_path(self, runner, tmp_path):
        """Test that a missing directory is rejected by click."""
        result = runner.invoke(main, ["analyze-local", str(tmp_path / "nope")])

        assert result.exit_code != 0


class TestDiagramCommand:
    """Tests for the diagram command."""

    def test_raw_local_architecture(self, runner, checkout):
        """Test printing raw Mermaid text for a local checkout."""
        result = runner.invoke(main, ["diagram", str(checkout), "--local", "--raw"])

        assert result.exit_code == 0
        assert "graph TD\n" in result.output
        assert "-->|\"calls getUser\"|" in result.output

    def test_empty_diagram(self, runner, checkout):
        """Test the message for an empty diagram."""
        result = runner.invoke(main, ["diagram", str(checkout), "--local", "--type", "erd"])

        assert result.exit_code == 0
        assert "nothing to draw" in result.output

    @patch("repograph.cli.generate_diagram", new_callable=AsyncMock)
    def test_unknown_endpoint(self, mock_generate, runner):
        """Test that available endpoints are listed on error."""
        mock_generate.return_value = {"error": "No API endpoint at x.ts", "endpoints": ["app/api/a/route.ts"]}

        result = runner.invoke(main, ["diagram", "acme/shop", "-t", "sequence", "-e", "x.ts"])

        assert result.exit_code == 1
        assert "app/api/a/route.ts" in result.output

    def test_invalid_type(self, runner):
        """Test that click rejects unknown diagram types."""
        result = runner.invoke(main, ["diagram", "acme/shop", "--type", "pie"])

        assert result.exit_code != 0


class TestSchemaCommand:
    """Tests for the schema command."""

    def test_schema_tables(self, runner, tmp_path):
        """Test entity tables and ERD output."""
        schema = tmp_path / "init.sql"
        schema.write_text("CREATE TABLE users (id INT PRIMARY KEY, name TEXT)")

        result = runner.invoke(main, ["schema", str(schema)])

        assert result.exit_code == 0
        assert "users" in result.output
        assert "erDiagram" in result.output

    def test_schema_erd_only(self, runner, tmp_path):
        """Test --erd prints only Mermaid text."""
        schema = tmp_path / "init.sql"
        schema.write_text("CREATE TABLE users (id INT PRIMARY KEY, name TEXT)")

        result = runner.invoke(main, ["schema", str(schema), "--erd"])

        assert result.exit_code == 0
        assert "erDiagram\n    users {\n        INT id PK\n        TEXT name\n    }\n" in result.output
        assert "Field" not in result.output

    def test_no_entities(self, runner, tmp_path):
        """Test files without entities."""
        empty = tmp_path / "empty.sql"
        empty.write_text("-- nothing")

        result = runner.invoke(main, ["schema", str(empty)])

        assert result.exit_code == 0
        assert "No entities found" in result.output


class TestSummarizeCommand:
    """Tests for the summarize command."""

    def test_summarize(self, runner, tmp_path):
        """Test the summary and external calls of a file."""
        source = tmp_path / "client.ts"
        source.write_text("export async function load() {\n  return fetch('https://api.acme.io/items')\n}\n")

        result = runner.invoke(main, ["summarize", str(source)])

        assert result.exit_code == 0
        assert "A TypeScript file with 4 lines. Defines: load. Makes external API calls." in result.output
        assert "https://api.acme.io/items" in result.output

    def test_empty_file(self, runner, tmp_path):
        """Test that an empty file is an error."""
        empty = tmp_path / "empty.py"
        empty.write_text("")

        result = runner.invoke(main, ["summarize", str(empty)])

        assert result.exit_code == 1
        assert "content and file_path are required" in result.output

    def test_missing_file(self, runner, tmp_path):
        """Test that a missing file is rejected."""
        result = runner.invoke(main, ["summarize", str(tmp_path / "nope.py")])
        assert result.exit_code != 0


class TestConfigShowCommand:
    """Tests for the config-show command."""

    def test_config_show(self, runner):
        """Test configuration table output."""
        result = runner.invoke(main, ["config-show"])

        assert result.exit_code == 0
        assert "Max Parsed Files" in result.output
        assert "60" in result.output
