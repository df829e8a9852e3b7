"""
Gradle integration for gimport.

This package provides:
- Linked Gradle project settings
- Gradle invocation with a model-dumping init script
- Conversion of the model into a project graph
- Project refresh with a completion callback
"""

from gimport.host.gradle.integration import GradleIntegration
from gimport.host.gradle.resolver import build_project_data
from gimport.host.gradle.runner import GradleError, GradleRunner, find_gradle_executable
from gimport.host.gradle.settings import GRADLE_SYSTEM_ID, GradleProjectSettings

__all__ = [
    "GRADLE_SYSTEM_ID",
    "GradleError",
    "GradleIntegration",
    "GradleProjectSettings",
    "GradleRunner",
    "build_project_data",
    "find_gradle_executable",
]
