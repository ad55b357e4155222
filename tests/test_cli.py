"""
Tests for the textgrab command-line interface.
"""

import json
import logging

import pytest

from textgrab.cli import create_parser, main


URL = "https://docs.example.com/guide/intro"

PAGE = """
<html>
<head><title>Guide</title></head>
<body>
  <nav><a href="/">Home</a></nav>
  <div class="sidebar-links">Links</div>
  <div class="doc-content">
    <h1>Introduction</h1>
    <p>Install the package first.</p>
  </div>
</body>
</html>
"""


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return str(path)


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "textgrab.db")


def run(capsys, *argv):
    main(list(argv))
    return capsys.readouterr().out


class TestParser:
    """Test argument parsing."""

    def test_global_options(self):
        args = create_parser().parse_args(
            ["--db", "x.db", "--max-length", "900", "--format", "json", "page", "p.html"]
        )

        assert args.db == "x.db"
        assert args.max_length == 900
        assert args.format == "json"
        assert args.command == "page"

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1


class TestCommands:
    """Test the CLI commands end to end."""

    def test_remember_and_extract(self, capsys, db, page_file):
        out = run(capsys, "--db", db, "remember", page_file, "--url", URL, "--select", "div.doc-content")
        assert "docs.example.com" in out
        assert "html > body > div.doc-content" in out

        out = run(capsys, "--db", db, "--no-header", "extract", page_file, "--url", URL)

        assert out == "Introduction\n\nInstall the package first.\n"

    def test_extract_with_header(self, capsys, db, page_file):
        run(capsys, "--db", db, "remember", page_file, "--url", URL, "--select", "div.doc-content")

        out = run(capsys, "--db", db, "extract", page_file, "--url", URL)

        assert out.startswith("[AI Text Extract - Guide]\nSource: " + URL)

    def test_extract_json(self, capsys, db, page_file):
        run(capsys, "--db", db, "remember", page_file, "--url", URL, "--select", "div.doc-content")

        out = run(capsys, "--db", db, "--format", "json", "extract", page_file, "--url", URL)
        data = json.loads(out)

        assert data["text"] == "Introduction\n\nInstall the package first."
        assert data["truncated"] is False
        assert data["stats"]["words"] == 5

    def test_extract_without_selection_fails(self, db, page_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", db, "extract", page_file, "--url", URL])
        assert exc_info.value.code == 1

    def test_remember_unmatched_selector_fails(self, db, page_file):
        with pytest.raises(SystemExit):
            main(["--db", db, "remember", page_file, "--url", URL, "--select", "table.none"])

    def test_page(self, capsys, db, page_file):
        out = run(capsys, "--db", db, "--no-header", "page", page_file)

        assert "Install the package first." in out
        assert "Home" not in out

    def test_main_falls_back_to_page(self, capsys, db, page_file):
        out = run(capsys, "--db", db, "--no-header", "main", page_file)
        assert "Introduction" in out

    def test_show_and_forget(self, capsys, db, page_file):
        run(capsys, "--db", db, "remember", page_file, "--url", URL, "--select", "div.doc-content")

        out = run(capsys, "--db", db, "show", "--url", "https://docs.example.com/other")
        assert "div.doc-content" in out

        out = run(capsys, "--db", db, "forget", "--url", URL)
        assert "Forgot" in out

        out = run(capsys, "--db", db, "show", "--url", URL)
        assert "No saved selection" in out

    def test_stats_and_cleanup(self, capsys, db, page_file):
        run(capsys, "--db", db, "remember", page_file, "--url", URL, "--select", "div.doc-content")

        data = json.loads(run(capsys, "--db", db, "--format", "json", "stats"))
        assert data["locators"]["valid_entries"] == 1
        assert data["usage"]["total_copies"] == 0

        out = run(capsys, "--db", db, "cleanup")
        assert "Removed 0 expired locators" in out

    def test_select_does_not_persist(self, capsys, db, page_file):
        """One-off extraction prints the element and leaves the store empty."""
        out = run(capsys, "--db", db, "--no-header", "select", page_file, "--select", "div.doc-content")

        assert out == "Introduction\n\nInstall the package first.\n"

        data = json.loads(run(capsys, "--db", db, "--format", "json", "stats"))
        assert data["locators"]["total_entries"] == 0

    def test_select_unmatched_fails(self, db, page_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", db, "select", page_file, "--select", "table.none"])
        assert exc_info.value.code == 1

    def test_zero_max_length_is_rejected(self, db, page_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", db, "--max-length", "0", "page", page_file])
        assert exc_info.value.code == 1


class TestLogging:
    """Test log level selection."""

    def test_debug_setting_enables_debug_logging(self, monkeypatch, capsys, db):
        monkeypatch.setenv("TEXTGRAB_DEBUG", "1")

        run(capsys, "--db", db, "stats")

        assert logging.getLogger("textgrab").level == logging.DEBUG

    def test_default_level(self, monkeypatch, capsys, db):
        monkeypatch.delenv("TEXTGRAB_DEBUG", raising=False)

        run(capsys, "--db", db, "stats")

        assert logging.getLogger("textgrab").level == logging.INFO

    def test_verbose_flag(self, monkeypatch, capsys, db):
        monkeypatch.delenv("TEXTGRAB_DEBUG", raising=False)

        run(capsys, "--db", db, "-v", "stats")

        assert logging.getLogger("textgrab").level == logging.DEBUG
