"""CLI output helpers for gimport.

- Run outcome lines (success, failure, interrupt)
- The run banner
- Project path validation
"""

import sys
import traceback
from pathlib import Path

from gimport.config import USAGE_MESSAGE
from gimport.errors import EXIT_FAILURE, EXIT_INTERRUPTED

BANNER_WIDTH = 80


class ErrorFormatter:
    """Prints run outcomes with ANSI color codes."""

    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print a failure line followed by its details.

        Args:
            title: Short failure summary (e.g., "Import failed!")
            message: Details, such as the exit code and log location
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Report an interrupted run and exit 130."""
        print()
        print(f"{ErrorFormatter.YELLOW}✗ Import interrupted{ErrorFormatter.RESET}")
        sys.exit(EXIT_INTERRUPTED)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Report an error that escaped the command and exit 1.

        Args:
            error: The exception to report
            verbose: Also print the traceback
        """
        ErrorFormatter.print_error("Unexpected error", f"{type(error).__name__}: {error}")
        if verbose:
            print("Traceback:")
            print(traceback.format_exc())
        sys.exit(EXIT_FAILURE)


class BannerFormatter:
    """Run banner: tool version and the invocation, between two rules."""

    @staticmethod
    def format_banner(version: str, command: str, project_path: str, width: int = BANNER_WIDTH) -> str:
        rule = "=" * width
        lines = [f"gimport {version}", f"{command} {project_path}"]
        return "\n".join([rule, *(" " * max((width - len(line)) // 2, 0) + line for line in lines), rule])

    @staticmethod
    def print_banner(version: str, command: str, project_path: str) -> None:
        print()
        print(BannerFormatter.format_banner(version, command, project_path))


class PathValidator:
    """Validates project paths and directories."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Validate that the project path is an existing directory.

        Args:
            project_dir: Path to validate

        Raises:
            SystemExit: With exit code 1 if the path is not a directory
        """
        if not project_dir.is_dir():
            print(f"{ErrorFormatter.RED}✗ {project_dir} is not directory{ErrorFormatter.RESET}")
            print(USAGE_MESSAGE)
            sys.exit(EXIT_FAILURE)
