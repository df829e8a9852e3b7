"""
Project model and project lifecycle management.

A project is a directory on disk plus the state gimport keeps for it in
``<project>/.gimport/project.json``:

- the imported modules and which of them are unloaded
- the project SDK name
- linked build-tool settings and the delegated-build flag
- compiler settings

Only one project may be open per process.
"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gimport.config import PROJECT_STATE_DIR, PROJECT_STATE_FILE
from gimport.host.interfaces import IProjectService, ITransactional
from gimport.host.model import ModuleData
from gimport.host.storage import read_json_safe, write_json_atomic

if TYPE_CHECKING:
    from gimport.host.application import Application
    from gimport.host.jdk import Sdk


@dataclass
class ProjectState:
    """Persisted project-level configuration.

    Attributes:
        name: Project name
        modules: Imported modules
        unloaded_modules: Names of modules excluded from compilation
        sdk_name: Name of the project SDK in the JDK table
        linked_settings: Serialized linked build-tool settings
        delegated_build: Whether builds are delegated to the build tool
        build_process_heap_mb: Heap size for the compiler process
    """

    name: str
    modules: list[ModuleData] = field(default_factory=list)
    unloaded_modules: list[str] = field(default_factory=list)
    sdk_name: str | None = None
    linked_settings: list[dict[str, Any]] = field(default_factory=list)
    delegated_build: bool = True
    build_process_heap_mb: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "modules": [m.to_dict() for m in self.modules],
            "unloaded_modules": list(self.unloaded_modules),
            "sdk_name": self.sdk_name,
            "linked_settings": list(self.linked_settings),
            "delegated_build": self.delegated_build,
            "build_process_heap_mb": self.build_process_heap_mb,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectState":
        """Create ProjectState from dictionary."""
        return cls(
            name=data["name"],
            modules=[ModuleData.from_dict(m) for m in data.get("modules", [])],
            unloaded_modules=data.get("unloaded_modules", []),
            sdk_name=data.get("sdk_name"),
            linked_settings=data.get("linked_settings", []),
            delegated_build=data.get("delegated_build", True),
            build_process_heap_mb=data.get("build_process_heap_mb"),
        )


class Project(ITransactional):
    """An opened project.

    Owned by the ProjectManager; callers hold a borrowed reference and must
    not use it after ``close_and_dispose``.
    """

    def __init__(self, base_path: str, state: ProjectState):
        self.base_path = base_path
        self.state = state
        self.sdk: "Sdk | None" = None
        self._disposed = False

    @property
    def name(self) -> str:
        return self.state.name

    @property
    def state_dir(self) -> Path:
        return Path(self.base_path) / PROJECT_STATE_DIR

    @property
    def state_file(self) -> Path:
        return self.state_dir / PROJECT_STATE_FILE

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._disposed = True
        self.sdk = None

    def snapshot(self) -> Any:
        return copy.deepcopy(self.state), self.sdk

    def restore(self, snapshot: Any) -> None:
        self.state, self.sdk = snapshot

    def __repr__(self) -> str:
        status = "disposed" if self._disposed else "open"
        return f"Project(name={self.name!r}, path={self.base_path!r}, {status})"


class ProjectManager(IProjectService):
    """Opens projects from disk and tracks the open one."""

    def __init__(self, application: "Application"):
        """Initialize the manager.

        Args:
            application: Application whose save policy applies to projects
        """
        self.application = application
        self.lock = threading.Lock()
        self._open_projects: dict[str, Project] = {}

    @property
    def open_projects(self) -> list[Project]:
        with self.lock:
            return list(self._open_projects.values())

    def open_project(self, path: str) -> Project | None:
        base = Path(path)
        if not base.is_dir():
            logging.error(f"Project directory does not exist: {path}")
            return None

        key = base.resolve().as_posix()
        with self.lock:
            existing = self._open_projects.get(key)
            if existing is not None:
                return existing
            if self._open_projects:
                other = next(iter(self._open_projects))
                logging.error(f"Cannot open {path}: project {other} is already open")
                return None

            state = self._load_state(base)
            project = Project(key, state)
            self._open_projects[key] = project

        logging.info(f"Opened project {project.name} at {key}")
        return project

    def _load_state(self, base: Path) -> ProjectState:
        data = read_json_safe(base / PROJECT_STATE_DIR / PROJECT_STATE_FILE)
        if data is None:
            return ProjectState(name=base.resolve().name)
        try:
            return ProjectState.from_dict(data)
        except (KeyError, TypeError) as e:
            logging.warning(f"Discarding unreadable project state in {base}: {e}")
            return ProjectState(name=base.resolve().name)

    def track_open(self, project: Project) -> None:
        if project.is_disposed:
            raise ValueError(f"Cannot track disposed project {project.name}")
        with self.lock:
            self._open_projects[project.base_path] = project

    def save(self, project: Project) -> bool:
        if not self.application.save_allowed:
            logging.warning(f"Saving is not allowed; project {project.name} not saved")
            return False
        write_json_atomic(project.state_file, project.state.to_dict())
        logging.info(f"Saved project state to {project.state_file}")
        return True

    def close_and_dispose(self, project: Project) -> None:
        with self.lock:
            self._open_projects.pop(project.base_path, None)
        self.application.documents.discard_under(project.state_dir)
        project.dispose()
        logging.info(f"Closed and disposed project {project.name}")
