"""Abstract interfaces for the host services the import command drives.

The command never talks to Gradle, the JDK table or the compiler
directly. It goes through these contracts so that the local backend in
``gimport.host`` can be swapped for another implementation (or a test
fake) without touching the orchestration:

- IVirtualFileSystem: path resolution
- IProjectService: project open / close / save
- IJdkRegistry: process-wide JDK table
- IBuildToolIntegration: linked settings and project refresh
- IProjectDataImporter: import of a refreshed project graph
- IModuleRegistry: module listing and unloading
- ICompilerService: rebuild / make with a completion callback
- IApplication: read/write actions, document and settings persistence, exit
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Callable, Iterable, TypeVar

from gimport.host.model import ModuleData, ProjectData

if TYPE_CHECKING:
    from gimport.host.compiler.context import CompileContext, CompileScope
    from gimport.host.gradle.settings import GradleProjectSettings
    from gimport.host.jdk import Sdk
    from gimport.host.project import Project
    from gimport.host.vfs import VirtualFile

T = TypeVar("T")

# (aborted, errors, warnings, context) -> None
CompileStatusNotification = Callable[[bool, int, int, "CompileContext"], None]




class ITransactional(ABC):
    """State that a write action can snapshot and roll back."""

    @abstractmethod
    def snapshot(self) -> Any:
        """Capture the current state."""
        pass

    @abstractmethod
    def restore(self, snapshot: Any) -> None:
        """Return to a state captured by ``snapshot``."""
        pass


class IVirtualFileSystem(ABC):
    """Resolves paths to file handles."""

    @abstractmethod
    def find_file_by_path(self, path: str) -> "VirtualFile | None":
        """Resolve a path.

        Args:
            path: Path with forward slashes

        Returns:
            VirtualFile, or None if nothing exists at the path
        """
        pass


class IProjectService(ABC):
    """Opens, tracks, saves and disposes projects."""

    @abstractmethod
    def open_project(self, path: str) -> "Project | None":
        """Open the project rooted at ``path`` without any UI.

        Returns:
            The opened project, or None if it could not be opened
        """
        pass

    @abstractmethod
    def track_open(self, project: "Project") -> None:
        """Register an already-opened project as open."""
        pass

    @abstractmethod
    def save(self, project: "Project") -> bool:
        """Persist project-level configuration.

        Returns:
            True if the project state was written
        """
        pass

    @abstractmethod
    def close_and_dispose(self, project: "Project") -> None:
        """Close the project and release everything tied to it."""
        pass


class IJdkRegistry(ITransactional):
    """Process-wide JDK table."""

    @abstractmethod
    def create_jdk(self, name: str, home_path: str) -> "Sdk":
        """Create (but do not register) a JDK entry.

        Raises:
            JdkError: If ``home_path`` is not a usable JDK
        """
        pass

    @abstractmethod
    def add_jdk(self, sdk: "Sdk") -> None:
        """Register a JDK entry in the table."""
        pass

    @abstractmethod
    def set_project_sdk(self, project: "Project", sdk: "Sdk") -> None:
        """Make ``sdk`` the project's default SDK."""
        pass


class IRefreshCallback(ABC):
    """Receives the result of a build-tool refresh exactly once."""

    @abstractmethod
    def on_success(self, external_project: ProjectData | None) -> None:
        pass

    @abstractmethod
    def on_failure(self, error_message: str) -> None:
        pass


class IBuildToolIntegration(ABC):
    """Build-tool settings and project refresh."""

    system_id: str

    @abstractmethod
    def set_delegated_build(self, project: "Project", delegated: bool) -> None:
        """Choose whether builds are handed to the build tool."""
        pass

    @abstractmethod
    def linked_projects_settings(self, project: "Project") -> list["GradleProjectSettings"]:
        pass

    @abstractmethod
    def unlink_external_project(self, project: "Project", external_project_path: str) -> None:
        pass

    @abstractmethod
    def link_project(self, project: "Project", settings: "GradleProjectSettings") -> None:
        """Link external project settings.

        Raises:
            ValueError: If the external project path is already linked
        """
        pass

    @abstractmethod
    def refresh_project(
        self,
        project: "Project",
        external_project_path: str,
        callback: IRefreshCallback,
        is_preview: bool = False,
    ) -> None:
        """Resolve the external project model and report it to ``callback``.

        Blocks until the refresh finishes or the refresh timeout expires.
        """
        pass


class IProjectDataImporter(ABC):
    """Imports a refreshed project graph into the project model."""

    @abstractmethod
    def import_data(self, data: ProjectData, project: "Project", overwrite: bool = True) -> None:
        pass


class IModuleRegistry(ABC):
    """Lists modules and manages the unloaded set."""

    @abstractmethod
    def sorted_modules(self, project: "Project") -> list[ModuleData]:
        """Return all modules in a stable order."""
        pass

    @abstractmethod
    def set_unloaded_modules(self, project: "Project", names: Iterable[str]) -> None:
        """Replace the project's unloaded module set."""
        pass

    @abstractmethod
    def unloaded_modules(self, project: "Project") -> list[str]:
        pass


class ICompilerService(ABC):
    """Drives compilation and reports completion through a callback."""

    @abstractmethod
    def set_build_process_heap_size(self, project: "Project", size_mb: int) -> None:
        pass

    @abstractmethod
    def project_scope(self, project: "Project") -> "CompileScope":
        """Scope covering every loaded module of the project."""
        pass

    @abstractmethod
    def rebuild(self, project: "Project", callback: CompileStatusNotification) -> "CompileContext":
        """Start a full rebuild; ``callback`` fires once when it ends."""
        pass

    @abstractmethod
    def make(
        self,
        project: "Project",
        scope: "CompileScope",
        callback: CompileStatusNotification,
    ) -> "CompileContext":
        """Start an incremental make of ``scope``; ``callback`` fires once."""
        pass


class IApplication(ABC):
    """Application-wide locking, persistence and lifecycle."""

    save_allowed: bool

    @abstractmethod
    def run_read_action(self, action: Callable[[], T]) -> T:
        """Run ``action`` holding the application read lock."""
        pass

    @abstractmethod
    def write_action(self, *participants: ITransactional) -> AbstractContextManager[None]:
        """Exclusive write scope that rolls ``participants`` back on error."""
        pass

    @abstractmethod
    def save_all_documents(self) -> int:
        """Flush unsaved document buffers; returns how many were written."""
        pass

    @abstractmethod
    def save_settings(self) -> None:
        """Persist application-level settings."""
        pass

    @abstractmethod
    def exit(self, force: bool = False, confirm: bool = True, exit_code: int = 0) -> None:
        """Shut the application down and end the process."""
        pass
