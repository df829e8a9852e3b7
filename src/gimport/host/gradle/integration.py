"""
Gradle build-tool integration.

Keeps the linked Gradle settings in the project state and refreshes a
linked project by running Gradle on a worker thread:

    refresh_project()
        └── worker thread: GradleRunner.dump_model() -> build_project_data()
                └── callback.on_success(graph) / callback.on_failure(message)

The caller blocks until the worker finishes, bounded by the refresh
timeout. The callback is invoked at most once.
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from gimport.config import ImportConfig
from gimport.host.gradle.resolver import build_project_data
from gimport.host.gradle.runner import GradleError, GradleRunner
from gimport.host.gradle.settings import GRADLE_SYSTEM_ID, GradleProjectSettings
from gimport.host.interfaces import IBuildToolIntegration, IRefreshCallback
from gimport.host.model import ProjectData
from gimport.interrupt_utils import handle_keyboard_interrupt_properly

if TYPE_CHECKING:
    from gimport.host.jdk import JdkTable
    from gimport.host.project import Project


def _same_path(a: str, b: str) -> bool:
    return Path(a).resolve() == Path(b).resolve()


class _OnceCallback(IRefreshCallback):
    """Forwards the first notification and drops the rest."""

    def __init__(self, delegate: IRefreshCallback):
        self.delegate = delegate
        self.lock = threading.Lock()
        self.fired = False

    def _claim(self) -> bool:
        with self.lock:
            if self.fired:
                return False
            self.fired = True
            return True

    def on_success(self, external_project: ProjectData | None) -> None:
        if not self._claim():
            logging.warning("Ignoring duplicate refresh notification")
            return
        try:
            self.delegate.on_success(external_project)
        except Exception as e:
            logging.error(f"Refresh callback raised: {e}")

    def on_failure(self, error_message: str) -> None:
        if not self._claim():
            logging.warning("Ignoring duplicate refresh notification")
            return
        try:
            self.delegate.on_failure(error_message)
        except Exception as e:
            logging.error(f"Refresh callback raised: {e}")


class GradleIntegration(IBuildToolIntegration):
    """Links Gradle builds to projects and resolves their model."""

    system_id = GRADLE_SYSTEM_ID

    def __init__(self, config: ImportConfig, jdk_table: "JdkTable", runner: GradleRunner | None = None):
        """Initialize the integration.

        Args:
            config: Run configuration (Gradle executable, refresh timeout)
            jdk_table: JDK table used to find the project JDK for Gradle
            runner: Gradle runner (one built from ``config`` if omitted)
        """
        self.config = config
        self.jdk_table = jdk_table
        self.runner = runner or GradleRunner(
            executable=config.gradle_executable,
            timeout=config.refresh_timeout_seconds,
        )

    def set_delegated_build(self, project: "Project", delegated: bool) -> None:
        project.state.delegated_build = delegated
        logging.info(f"Delegated build {'enabled' if delegated else 'disabled'} for {project.name}")

    def linked_projects_settings(self, project: "Project") -> list[GradleProjectSettings]:
        return [
            GradleProjectSettings.from_dict(entry)
            for entry in project.state.linked_settings
            if entry.get("system_id", GRADLE_SYSTEM_ID) == GRADLE_SYSTEM_ID
        ]

    def unlink_external_project(self, project: "Project", external_project_path: str) -> None:
        before = len(project.state.linked_settings)
        project.state.linked_settings = [
            entry
            for entry in project.state.linked_settings
            if not (
                entry.get("system_id", GRADLE_SYSTEM_ID) == GRADLE_SYSTEM_ID
                and _same_path(entry["external_project_path"], external_project_path)
            )
        ]
        if len(project.state.linked_settings) != before:
            logging.info(f"Unlinked Gradle project {external_project_path}")

    def link_project(self, project: "Project", settings: GradleProjectSettings) -> None:
        for linked in self.linked_projects_settings(project):
            if _same_path(linked.external_project_path, settings.external_project_path):
                raise ValueError(f"Gradle project {settings.external_project_path} is already linked")
        project.state.linked_settings.append(settings.to_dict())
        logging.info(f"Linked Gradle project {settings.external_project_path}")

    def _find_linked(self, project: "Project", external_project_path: str) -> GradleProjectSettings | None:
        for linked in self.linked_projects_settings(project):
            if _same_path(linked.external_project_path, external_project_path):
                return linked
        return None

    def refresh_project(
        self,
        project: "Project",
        external_project_path: str,
        callback: IRefreshCallback,
        is_preview: bool = False,
    ) -> None:
        once = _OnceCallback(callback)
        settings = self._find_linked(project, external_project_path)
        if settings is None:
            once.on_failure(f"Gradle project {external_project_path} is not linked to {project.name}")
            return

        sdk = project.sdk or self.jdk_table.find_jdk(project.state.sdk_name)
        env = sdk.build_env() if sdk is not None else None

        worker = threading.Thread(
            target=self._resolve,
            args=(external_project_path, settings, env, is_preview, once),
            name="gradle-refresh",
            daemon=True,
        )
        worker.start()

        worker.join(self.config.refresh_timeout_seconds)
        if worker.is_alive():
            logging.error(f"Gradle refresh did not finish within {self.config.refresh_timeout_seconds}s")

    def _resolve(
        self,
        external_project_path: str,
        settings: GradleProjectSettings,
        env: dict[str, str] | None,
        is_preview: bool,
        callback: IRefreshCallback,
    ) -> None:
        try:
            records = self.runner.dump_model(Path(external_project_path), env=env, preview=is_preview)
            data = build_project_data(
                Path(external_project_path),
                records,
                qualified=settings.use_qualified_module_names,
            )
        except KeyboardInterrupt as ke:
            handle_keyboard_interrupt_properly(ke)
        except GradleError as e:
            logging.error(f"Gradle refresh failed: {e}")
            callback.on_failure(str(e))
            return
        except Exception as e:
            logging.exception("Unexpected error during Gradle refresh")
            callback.on_failure(f"{type(e).__name__}: {e}")
            return

        if data is not None:
            logging.info(f"Gradle reported {len(data.modules)} module(s) for {data.name}")
        callback.on_success(data)
