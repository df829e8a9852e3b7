"""
Typed data model shared by the host services.

This module defines the dataclasses passed between the import command and
the host services:

- The imported project graph (ProjectData / ModuleData)
- Build-tool settings flags (ThreeState)
- Compiler diagnostics and the aggregated compile outcome

Everything that is persisted round-trips through ``to_dict``/``from_dict``
so state files stay plain JSON.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class ThreeState(Enum):
    """Tri-state flag used by build-tool settings."""

    YES = "yes"
    NO = "no"
    UNSURE = "unsure"

    @classmethod
    def from_string(cls, value: str | None) -> "ThreeState":
        """Convert string to ThreeState, defaulting to UNSURE if invalid."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNSURE


class MessageCategory(Enum):
    """Compiler message category, in report order."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    STATISTICS = "statistics"


@dataclass
class ModuleData:
    """One module of the imported project.

    Attributes:
        name: Module name (qualified, e.g. ``app.core.main``)
        gradle_path: Gradle project path the module belongs to (``:core``)
        directory: Absolute project directory of the Gradle project
        source_set: Source set name, or None for the project holder module
        source_dirs: Absolute source root paths
        resource_dirs: Absolute resource root paths
        external_classpath: Resolved external jars
        dependencies: Names of modules this one depends on
    """

    name: str
    gradle_path: str
    directory: str
    source_set: str | None = None
    source_dirs: list[str] = field(default_factory=list)
    resource_dirs: list[str] = field(default_factory=list)
    external_classpath: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)

    @property
    def is_test(self) -> bool:
        return self.source_set is not None and "test" in self.source_set.lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModuleData":
        """Create ModuleData from dictionary."""
        return cls(
            name=data["name"],
            gradle_path=data.get("gradle_path", ":"),
            directory=data.get("directory", ""),
            source_set=data.get("source_set"),
            source_dirs=data.get("source_dirs", []),
            resource_dirs=data.get("resource_dirs", []),
            external_classpath=data.get("external_classpath", []),
            dependencies=data.get("dependencies", []),
        )


@dataclass
class ProjectData:
    """External project graph produced by a build-tool refresh.

    Attributes:
        name: Root project name
        root_dir: Absolute path of the linked external project
        modules: Modules in the order the build tool reported them
    """

    name: str
    root_dir: str
    modules: list[ModuleData] = field(default_factory=list)



@dataclass
class CompilerMessage:
    """A single compiler diagnostic.

    Attributes:
        category: Message category
        message: Message text (may span several lines)
        file_path: Source file the message refers to, if any
        line: 1-based line number, if known
    """

    category: MessageCategory
    message: str
    file_path: str | None = None
    line: int | None = None


@dataclass
class CompileOutcome:
    """Aggregated result of one compile invocation.

    Attributes:
        aborted: Compiler reported the run as aborted
        error_count: Number of errors reported
        warning_count: Number of warnings reported
        messages: Diagnostics collected by the compiler
        timed_out: The compiler stopped running without signalling completion
    """

    aborted: bool = False
    error_count: int = 0
    warning_count: int = 0
    messages: list[CompilerMessage] = field(default_factory=list)
    timed_out: bool = False

    @property
    def failed(self) -> bool:
        return self.aborted or self.error_count > 0 or self.timed_out
