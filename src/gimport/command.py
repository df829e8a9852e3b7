"""
The importAndSave command.

Opens a Gradle project headlessly, attaches a JDK, imports the Gradle
model, unloads buildSrc modules, saves everything and compiles:

    process_command()
        ├── bootstrap (skip indices, low-memory watcher, allow saving)
        ├── read action: import_project()
        │       ├── locate / open
        │       ├── disable delegated build, attach JDK (write action)
        │       ├── unlink + link Gradle settings, refresh, import
        │       ├── prune_build_src_modules()
        │       └── persist()
        └── compile_project()  (rebuild, or make when build_mode_use_make=true)

Each phase blocks until the previous one has finished. Any failure while
importing disposes the project and ends the run with exit code 1; a
compile that reports errors, aborts, or stops without reporting also
ends with exit code 1. The low-memory watcher ends the process at once
with exit code 2.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable

from gimport.config import BUILD_SRC_MARKER, DEFAULT_JDK_NAME, SKIP_INDICES_PROPERTY, USAGE_MESSAGE, ImportConfig
from gimport.errors import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    CompileFailure,
    ImportCmdError,
    ImportFailure,
    ResourceExhaustion,
    ValidationError,
)
from gimport.host.compiler.context import CompileContext
from gimport.host.gradle.settings import GradleProjectSettings
from gimport.host.interfaces import IRefreshCallback
from gimport.host.memory import LowMemoryWatcher, LowMemoryWatcherType
from gimport.host.model import CompileOutcome, CompilerMessage, MessageCategory, ProjectData, ThreeState
from gimport.host.project import Project
from gimport.host.services import HostServices

_REPORT_ORDER = (
    MessageCategory.ERROR,
    MessageCategory.WARNING,
    MessageCategory.INFORMATION,
    MessageCategory.STATISTICS,
)


@dataclass(frozen=True)
class InvocationArgs:
    """Positional arguments of importAndSave.

    Attributes:
        project_path: Root directory of the Gradle project
        jdk_path: JDK home to register as the project SDK
    """

    project_path: str
    jdk_path: str


class RefreshResult(IRefreshCallback):
    """Records the outcome of a Gradle refresh.

    The command only inspects the result after ``refresh_project`` has
    returned; ``done`` tells whether the callback fired at all.
    """

    def __init__(self):
        self.done = threading.Event()
        self.data: ProjectData | None = None
        self.error: str | None = None

    def on_success(self, external_project: ProjectData | None) -> None:
        self.data = external_project
        self.done.set()

    def on_failure(self, error_message: str) -> None:
        self.error = error_message
        self.done.set()


def format_compiler_message(message: CompilerMessage) -> str:
    """Render a diagnostic as ``file:line: text``, or just ``text`` without a file."""
    if message.file_path is None:
        return message.message
    location = message.file_path if message.line is None else f"{message.file_path}:{message.line}"
    return f"{location}: {message.message}"


class ImportAndSaveCommand:
    """Runs one importAndSave invocation against the host services."""

    def __init__(
        self,
        services: HostServices,
        config: ImportConfig,
        hard_exit: Callable[[int], None] = os._exit,
    ):
        """Initialize the command.

        Args:
            services: Host services to drive
            config: Run configuration
            hard_exit: Terminates the process without cleanup (low memory)
        """
        self.services = services
        self.config = config
        self._hard_exit = hard_exit

    def process_command(self, args: InvocationArgs) -> int:
        """Run the whole command.

        Args:
            args: Validated invocation arguments

        Returns:
            Process exit code
        """
        os.environ[SKIP_INDICES_PROPERTY] = "true"
        watcher = LowMemoryWatcher.register(
            self._on_low_memory,
            LowMemoryWatcherType.ONLY_AFTER_GC,
            threshold_bytes=self.config.low_memory_mb * 1024 * 1024,
            interval=self.config.memory_check_seconds,
        )
        try:
            self.services.application.save_allowed = True
            project = self.services.application.run_read_action(lambda: self.import_project(args))

            outcome = self.compile_project(project)
            if outcome.failed:
                raise CompileFailure(outcome)
            logging.info(f"Compilation finished successfully with {outcome.warning_count} warning(s)")
            return EXIT_SUCCESS
        except ImportCmdError as e:
            logging.error(str(e))
            return e.exit_code
        except KeyboardInterrupt:
            raise
        except Exception as e:
            logging.exception(f"importAndSave failed: {e}")
            return EXIT_FAILURE
        finally:
            watcher.stop()
            logging.info("Exit application")

    def _on_low_memory(self) -> None:
        logging.error("Low memory. Exiting...")
        self._hard_exit(ResourceExhaustion.exit_code)

    def import_project(self, args: InvocationArgs) -> Project:
        """Open, configure, refresh, prune and save the project.

        Raises:
            ValidationError: If the project path cannot be found
            ImportFailure: If any later step fails; the project is disposed first
        """
        project_path = args.project_path.replace("\\", "/")

        vfile = self.services.vfs.find_file_by_path(project_path)
        if vfile is None:
            logging.error(f"Cannot find project directory {project_path}")
            print(USAGE_MESSAGE)
            raise ValidationError(f"{project_path} was not found")

        logging.info(f"Opening project {vfile.canonical_path}")
        project = self.services.projects.open_project(vfile.canonical_path)
        if project is None:
            logging.error(f"Unable to open project {vfile.canonical_path}")
            self.graceful_exit(project)

        try:
            self.services.gradle.set_delegated_build(project, False)
            self._attach_jdk(project, args.jdk_path)
            self._link_gradle_project(project, project_path)

            logging.info(f"Refreshing Gradle project {project_path}")
            data = self._refresh(project, project_path)
            if data is None:
                self.graceful_exit(project)

            self.services.importer.import_data(data, project, overwrite=True)

            self.prune_build_src_modules(project)
            self.persist(project)
        except ImportCmdError:
            raise
        except KeyboardInterrupt:
            raise
        except Exception as e:
            logging.exception(f"Import of {project_path} failed: {e}")
            self.graceful_exit(project)
        return project

    def _attach_jdk(self, project: Project, jdk_path: str) -> None:
        jdk_table = self.services.jdk_table
        with self.services.application.write_action(jdk_table, project):
            sdk = jdk_table.create_jdk(DEFAULT_JDK_NAME, jdk_path)
            jdk_table.add_jdk(sdk)
            jdk_table.set_project_sdk(project, sdk)
        logging.info(f"Project SDK set to {DEFAULT_JDK_NAME} ({jdk_path})")

    def _link_gradle_project(self, project: Project, project_path: str) -> None:
        gradle = self.services.gradle
        settings = GradleProjectSettings(
            external_project_path=project_path,
            delegated_build=ThreeState.NO,
            store_project_files_externally=ThreeState.NO,
        ).with_qualified_module_names()

        for linked in gradle.linked_projects_settings(project):
            gradle.unlink_external_project(project, linked.external_project_path)
        gradle.link_project(project, settings)

    def _refresh(self, project: Project, project_path: str) -> ProjectData | None:
        result = RefreshResult()
        self.services.gradle.refresh_project(
            project,
            project_path,
            result,
            is_preview=False,
        )
        if not result.done.is_set():
            logging.error("Gradle refresh did not report completion")
            return None
        if result.error is not None:
            logging.error(f"Gradle refresh failed: {result.error}")
            return None
        if result.data is None:
            logging.error("Gradle refresh returned no project model")
        return result.data

    def prune_build_src_modules(self, project: Project) -> list[str]:
        """Unload every module whose name mentions buildSrc.

        Returns:
            Names of the unloaded modules
        """
        names = [m.name for m in self.services.modules.sorted_modules(project) if BUILD_SRC_MARKER in m.name]
        self.services.modules.set_unloaded_modules(project, names)
        if names:
            logging.info(f"Unloaded {len(names)} buildSrc module(s): {', '.join(names)}")
        return names

    def persist(self, project: Project) -> None:
        """Save the project, mark it open, then flush documents and settings."""
        logging.info(f"Saving project {project.name}")
        self.services.projects.save(project)
        self.services.projects.track_open(project)
        self.services.application.save_all_documents()
        self.services.application.save_settings()

    def graceful_exit(self, project: Project | None) -> None:
        """Dispose the project if it is still alive and abort the run.

        Raises:
            ImportFailure: Always
        """
        if project is not None and not project.is_disposed:
            self.services.projects.close_and_dispose(project)
        raise ImportFailure("Failed to proceed")

    def compile_project(self, project: Project) -> CompileOutcome:
        """Compile the project and wait for the compiler to report back.

        While waiting, a status line is logged once per polling slice. If
        the compiler's progress indicator stops without the callback having
        fired, the wait ends and the outcome is marked ``timed_out``.

        Returns:
            CompileOutcome describing the run
        """
        compiler = self.services.compiler
        done = threading.Event()
        outcome = CompileOutcome()

        def on_finished(aborted: bool, errors: int, warnings: int, context: CompileContext) -> None:
            try:
                outcome.aborted = aborted
                outcome.error_count = errors
                outcome.warning_count = warnings
                outcome.messages = context.messages
                logging.info(f"Compilation finished. Aborted: {aborted}. Errors: {errors}. Warnings: {warnings}.")
                self._report_messages(context)
            except Exception as e:
                logging.error(f"Failed to report compilation result: {e}")
            finally:
                done.set()

        compiler.set_build_process_heap_size(project, self.config.build_process_heap_mb)
        if self.config.use_make:
            logging.info(f"Starting make of {project.name}")
            context = compiler.make(project, compiler.project_scope(project), on_finished)
        else:
            logging.info(f"Starting rebuild of {project.name}")
            context = compiler.rebuild(project, on_finished)

        while not done.wait(self.config.compile_poll_seconds):
            errors = context.get_message_count(MessageCategory.ERROR)
            warnings = context.get_message_count(MessageCategory.WARNING)
            logging.info(f"Compilation status: Errors: {errors}. Warnings: {warnings}.")
            if not context.progress_indicator.is_running:
                # the callback may have fired after the slice expired
                if done.is_set():
                    break
                logging.error("Compiler stopped without reporting completion")
                outcome.timed_out = True
                break

        return outcome

    def _report_messages(self, context: CompileContext) -> None:
        for category in _REPORT_ORDER:
            for message in context.get_messages(category):
                try:
                    text = format_compiler_message(message)
                    if category == MessageCategory.ERROR:
                        logging.error(text)
                    elif category == MessageCategory.WARNING:
                        logging.warning(text)
                    else:
                        logging.info(text)
                except Exception as e:
                    logging.error(f"Failed to format compiler message: {e}")
