"""Gradle linked-project settings."""

from dataclasses import dataclass
from typing import Any

from gimport.host.model import ThreeState

GRADLE_SYSTEM_ID = "GRADLE"


@dataclass
class GradleProjectSettings:
    """Settings of one linked Gradle project.

    Attributes:
        external_project_path: Root directory of the Gradle build
        delegated_build: Hand builds to Gradle instead of compiling directly
        store_project_files_externally: Keep project files outside the project dir
        use_qualified_module_names: Name modules ``root.sub.sourceSet``
    """

    external_project_path: str
    delegated_build: ThreeState = ThreeState.UNSURE
    store_project_files_externally: ThreeState = ThreeState.UNSURE
    use_qualified_module_names: bool = False

    def with_qualified_module_names(self) -> "GradleProjectSettings":
        self.use_qualified_module_names = True
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "system_id": GRADLE_SYSTEM_ID,
            "external_project_path": self.external_project_path,
            "delegated_build": self.delegated_build.value,
            "store_project_files_externally": self.store_project_files_externally.value,
            "use_qualified_module_names": self.use_qualified_module_names,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GradleProjectSettings":
        """Create GradleProjectSettings from dictionary."""
        return cls(
            external_project_path=data["external_project_path"],
            delegated_build=ThreeState.from_string(data.get("delegated_build")),
            store_project_files_externally=ThreeState.from_string(data.get("store_project_files_externally")),
            use_qualified_module_names=data.get("use_qualified_module_names", False),
        )
