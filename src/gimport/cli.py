"""
Command-line interface for gimport.

This module provides the `gimport` CLI tool, which imports a Gradle
project headlessly, saves it and compiles it.
"""

import argparse
import sys
from pathlib import Path

from gimport import __version__
from gimport.cli_utils import BannerFormatter, ErrorFormatter, PathValidator
from gimport.command import ImportAndSaveCommand, InvocationArgs
from gimport.config import COMMAND, PROG, USAGE_MESSAGE, ImportConfig
from gimport.errors import EXIT_FAILURE, EXIT_SUCCESS
from gimport.host.services import create_host_services
from gimport.log_utils import setup_logging


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that prints the usage line and exits 1 on bad arguments."""

    def error(self, message: str) -> None:
        print(f"{PROG}: error: {message}", file=sys.stderr)
        print(USAGE_MESSAGE)
        sys.exit(EXIT_FAILURE)


def import_and_save_command(args: InvocationArgs, config: ImportConfig, verbose: bool = False) -> None:
    """Import a Gradle project, save it and compile it.

    Examples:
        gimport importAndSave ~/src/app /usr/lib/jvm/java-8-openjdk
        build_mode_use_make=true gimport importAndSave ~/src/app $JAVA_HOME
    """
    BannerFormatter.print_banner(__version__, COMMAND, args.project_path)

    try:
        services = create_host_services(config)
        exit_code = ImportAndSaveCommand(services, config).process_command(args)

        if exit_code == EXIT_SUCCESS:
            ErrorFormatter.print_success("Project imported and compiled")
        else:
            ErrorFormatter.print_error("Import failed!", f"Exit code {exit_code}; see {config.log_file}")

        services.application.exit(force=True, confirm=True, exit_code=exit_code)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, verbose)


def main() -> None:
    """gimport - headless Gradle import, save and build."""
    parser = UsageArgumentParser(
        prog=PROG,
        description="gimport - import a Gradle project headlessly, save it and compile it",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PROG} {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    import_parser = subparsers.add_parser(
        COMMAND,
        help="Import a Gradle project, save it and compile it",
    )
    import_parser.add_argument(
        "project_path",
        help="Root directory of the Gradle project",
    )
    import_parser.add_argument(
        "jdk_path",
        help="JDK home directory to use as the project SDK",
    )
    import_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output",
    )

    parsed_args = parser.parse_args()

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(EXIT_FAILURE)

    args = InvocationArgs(project_path=parsed_args.project_path, jdk_path=parsed_args.jdk_path)
    PathValidator.validate_project_dir(Path(args.project_path))

    config = ImportConfig.from_env()
    setup_logging(config.log_file, verbose=parsed_args.verbose)
    import_and_save_command(args, config, verbose=parsed_args.verbose)


if __name__ == "__main__":
    main()
