"""Tests for the command-line interface."""

import json

from typer.testing import CliRunner

from jinntap.cli import app

runner = CliRunner()


class TestCli:
    """Tests for the jinntap commands."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "jinntap 0.1.0" in result.stdout

    def test_compile_bundled_schema(self) -> None:
        """compile lists the bundled element types."""
        result = runner.invoke(app, ["compile"], env={"COLUMNS": "250"})
        assert result.exit_code == 0
        assert "persName" in result.stdout
        assert "toggleList" in result.stdout

    def test_compile_reports_rejected_entries(self, tmp_path) -> None:
        """compile exits non-zero when entries are rejected."""
        schema = tmp_path / "schema.yml"
        schema.write_text("p:\n  type: block\nfig:\n  type: widget\n", encoding="utf-8")
        result = runner.invoke(app, ["compile", str(schema)])
        assert result.exit_code == 1

    def test_compile_missing_schema(self, tmp_path) -> None:
        """A missing schema file is an error."""
        result = runner.invoke(app, ["compile", str(tmp_path / "missing.yml")])
        assert result.exit_code == 1

    def test_serialize(self, tmp_path) -> None:
        """serialize writes the XML form of a JSON tree."""
        schema = tmp_path / "schema.yml"
        schema.write_text("note:\n  type: block\n  content: inline*\n", encoding="utf-8")
        document = tmp_path / "doc.json"
        document.write_text(
            json.dumps(
                {
                    "type": "doc",
                    "content": [
                        {"type": "note", "attrs": {"id": "n1"}, "content": [{"type": "text", "text": "hi"}]}
                    ],
                }
            ),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["serialize", str(document), "--schema", str(schema)])

        assert result.exit_code == 0
        assert result.stdout == '      <note id="n1">hi</note>\n'

    def test_parse(self, tmp_path) -> None:
        """parse prints the tree as YAML."""
        source = tmp_path / "doc.xml"
        source.write_text('      <div><p>hello <hi rend="b">you</hi></p></div>\n', encoding="utf-8")

        result = runner.invoke(app, ["parse", str(source)])

        assert result.exit_code == 0
        assert "type: doc" in result.stdout
        assert "hello" in result.stdout
        assert "you" in result.stdout
        assert "rend: b" in result.stdout

    def test_verbose_traces_compilation(self, tmp_path) -> None:
        """--verbose turns on debug tracing without changing the result."""
        schema = tmp_path / "schema.yml"
        schema.write_text("p:\n  type: block\n", encoding="utf-8")
        result = runner.invoke(app, ["--verbose", "compile", str(schema)], env={"COLUMNS": "250"})
        assert result.exit_code == 0
