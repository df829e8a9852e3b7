"""Unit tests for CLI utilities including the run banner."""

import pytest

from gimport.cli_utils import BannerFormatter, ErrorFormatter, PathValidator


class TestBannerFormatter:
    """Tests for BannerFormatter class."""

    def test_format_banner_centers_version_and_invocation(self):
        result = BannerFormatter.format_banner("0.1.0", "importAndSave", "/src/app", width=30)
        lines = result.split("\n")

        assert len(lines) == 4
        assert lines[0] == lines[3] == "=" * 30
        assert lines[1] == " " * 8 + "gimport 0.1.0"
        assert lines[2].strip() == "importAndSave /src/app"

    def test_long_path_is_not_indented(self):
        path = "/" + "x" * 40
        lines = BannerFormatter.format_banner("0.1.0", "importAndSave", path, width=20).split("\n")

        assert lines[2] == f"importAndSave {path}"

    def test_print_banner(self, capsys):
        BannerFormatter.print_banner("0.1.0", "importAndSave", "/src/app")
        out = capsys.readouterr().out
        assert "=" * 80 in out
        assert "importAndSave /src/app" in out


class TestErrorFormatter:
    """Tests for ErrorFormatter class."""

    def test_print_error(self, capsys):
        ErrorFormatter.print_error("Import failed!", "Exit code 1")
        out = capsys.readouterr().out
        assert "✗ Import failed!" in out
        assert "Exit code 1" in out

    def test_handle_keyboard_interrupt(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_keyboard_interrupt()
        assert exc_info.value.code == 130
        assert "interrupted" in capsys.readouterr().out


class TestPathValidator:
    """Tests for PathValidator class."""

    def test_directory_passes(self, tmp_path):
        PathValidator.validate_project_dir(tmp_path)

    def test_missing_path_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            PathValidator.validate_project_dir(tmp_path / "missing")
        assert exc_info.value.code == 1
        assert "is not directory" in capsys.readouterr().out
