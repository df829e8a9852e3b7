"""Tests for the gimport CLI entry point."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from gimport.cli import main


class TestCLIImportAndSave:
    """Tests for 'gimport importAndSave'."""

    @pytest.fixture
    def mock_services(self):
        """Patch service creation and the command so nothing real runs."""
        with (
            patch("gimport.cli.create_host_services") as create,
            patch("gimport.cli.ImportAndSaveCommand") as command_class,
            patch("gimport.cli.setup_logging"),
        ):
            services = MagicMock()
            services.application.exit.side_effect = lambda force, confirm, exit_code: sys.exit(exit_code)
            create.return_value = services
            command = MagicMock()
            command.process_command.return_value = 0
            command_class.return_value = command
            yield create, command, services

    @pytest.mark.parametrize(
        "argv",
        [
            ["gimport", "importAndSave"],
            ["gimport", "importAndSave", "only-one"],
            ["gimport", "importAndSave", "a", "b", "c"],
            ["gimport", "exportAndSave", "a", "b"],
        ],
    )
    def test_bad_arguments_exit_1(self, argv, mock_services, monkeypatch, capsys):
        """Wrong argument counts print usage and never open a project."""
        create, command, _ = mock_services
        monkeypatch.setattr(sys, "argv", argv)

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Usage: gimport importAndSave" in capsys.readouterr().out
        create.assert_not_called()

    def test_no_command_shows_help(self, mock_services, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["gimport"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "importAndSave" in capsys.readouterr().out

    def test_not_a_directory(self, mock_services, tmp_path, monkeypatch, capsys):
        """A project path that is not a directory exits 1 before Gradle is touched."""
        create, command, _ = mock_services
        not_dir = tmp_path / "build.gradle"
        not_dir.write_text("")
        monkeypatch.setattr(sys, "argv", ["gimport", "importAndSave", str(not_dir), str(tmp_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert f"{not_dir} is not directory" in out
        assert "Usage: gimport importAndSave" in out
        create.assert_not_called()
        command.process_command.assert_not_called()

    @pytest.mark.parametrize("exit_code", [0, 1, 2])
    def test_exit_code_comes_from_command(self, mock_services, project_dir, jdk_home, monkeypatch, exit_code):
        """The application exits with whatever the command returned."""
        _, command, services = mock_services
        command.process_command.return_value = exit_code
        monkeypatch.setattr(sys, "argv", ["gimport", "importAndSave", str(project_dir), str(jdk_home)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == exit_code
        services.application.exit.assert_called_once_with(force=True, confirm=True, exit_code=exit_code)
        args = command.process_command.call_args[0][0]
        assert args.project_path == str(project_dir)
        assert args.jdk_path == str(jdk_home)

    def test_success_message(self, mock_services, project_dir, jdk_home, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["gimport", "importAndSave", str(project_dir), str(jdk_home)])

        with pytest.raises(SystemExit):
            main()

        assert "Project imported and compiled" in capsys.readouterr().out

    def test_keyboard_interrupt_exits_130(self, mock_services, project_dir, jdk_home, monkeypatch):
        _, command, _ = mock_services
        command.process_command.side_effect = KeyboardInterrupt()
        monkeypatch.setattr(sys, "argv", ["gimport", "importAndSave", str(project_dir), str(jdk_home)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 130

    def test_unexpected_error_exits_1(self, mock_services, project_dir, jdk_home, monkeypatch, capsys):
        create, _, _ = mock_services
        create.side_effect = RuntimeError("settings directory is read-only")
        monkeypatch.setattr(sys, "argv", ["gimport", "importAndSave", str(project_dir), str(jdk_home)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "settings directory is read-only" in capsys.readouterr().out

    def test_version(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["gimport", "--version"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert "gimport 0.1.0" in capsys.readouterr().out
