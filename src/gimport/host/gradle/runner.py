"""Gradle invocation.

This module runs Gradle with an init script that prints the project model
as one JSON line per Gradle project, and parses those lines back.

Design:
    - The init script is written to a temporary file per run
    - Model lines are prefixed with MODEL_MARKER so ordinary build output
      can be ignored
    - Preview runs skip dependency resolution
"""

import json
import logging
import os
import platform
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

MODEL_MARKER = "GIMPORT_MODEL "
PREVIEW_PROPERTY = "gimport.preview"

INIT_SCRIPT = """\
import groovy.json.JsonOutput
import org.gradle.api.artifacts.ProjectDependency
import org.gradle.api.artifacts.component.ModuleComponentIdentifier

def preview = gradle.startParameter.projectProperties.get('%(preview)s') == 'true'

gradle.projectsEvaluated { g ->
    g.rootProject.allprojects { p ->
        def sourceSets = [:]
        if (p.extensions.findByName('sourceSets') != null) {
            p.sourceSets.each { ss ->
                def jars = []
                def deps = []
                def cfg = p.configurations.findByName(ss.compileClasspathConfigurationName)
                if (cfg != null) {
                    deps = cfg.allDependencies.withType(ProjectDependency).collect { d ->
                        d.metaClass.respondsTo(d, 'getPath') ? d.path : d.dependencyProject.path
                    }
                    if (!preview) {
                        jars = cfg.incoming.artifactView { view ->
                            view.componentFilter { it instanceof ModuleComponentIdentifier }
                        }.files.files.collect { it.absolutePath }
                    }
                }
                sourceSets[ss.name] = [
                    sourceDirs  : ss.java.srcDirs.collect { it.absolutePath },
                    resourceDirs: ss.resources.srcDirs.collect { it.absolutePath },
                    classpath   : jars,
                    projectDeps : deps,
                ]
            }
        }
        println '%(marker)s' + JsonOutput.toJson([
            name      : p.name,
            path      : p.path,
            dir       : p.projectDir.absolutePath,
            rootDir   : p.rootDir.absolutePath,
            rootName  : p.rootProject.name,
            sourceSets: sourceSets,
        ])
    }
}
""" % {"preview": PREVIEW_PROPERTY, "marker": MODEL_MARKER}


class GradleError(Exception):
    """Raised when Gradle cannot be found or fails to report a model."""
    pass


def find_gradle_executable(project_dir: Path, explicit: str | None = None) -> str:
    """Locate the Gradle executable for a project.

    Order: explicit setting, the project's wrapper, ``gradle`` on PATH.

    Raises:
        GradleError: If no executable is found
    """
    if explicit:
        return explicit

    wrapper = project_dir / ("gradlew.bat" if platform.system() == "Windows" else "gradlew")
    if wrapper.exists():
        if not os.access(wrapper, os.X_OK) and platform.system() != "Windows":
            raise GradleError(f"Gradle wrapper is not executable: {wrapper}")
        return str(wrapper)

    found = shutil.which("gradle")
    if found:
        return found

    raise GradleError(f"Gradle not found: no wrapper in {project_dir} and no 'gradle' on PATH")


def parse_model_output(stdout: str) -> list[dict[str, Any]]:
    """Extract model records from Gradle's standard output.

    Raises:
        GradleError: If a model line is not valid JSON
    """
    records = []
    for line in stdout.splitlines():
        if not line.startswith(MODEL_MARKER):
            continue
        try:
            records.append(json.loads(line[len(MODEL_MARKER):]))
        except json.JSONDecodeError as e:
            raise GradleError(f"Malformed model line from Gradle: {e}") from e
    return records


def _tail(text: str, lines: int = 20) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


class GradleRunner:
    """Runs Gradle to dump a project model."""

    def __init__(self, executable: str | None = None, timeout: float | None = None):
        """Initialize the runner.

        Args:
            executable: Gradle executable, or None to locate one per project
            timeout: Kill Gradle after this many seconds (None waits forever)
        """
        self.executable = executable
        self.timeout = timeout

    def dump_model(
        self,
        project_dir: Path,
        env: dict[str, str] | None = None,
        preview: bool = False,
    ) -> list[dict[str, Any]]:
        """Run Gradle against ``project_dir`` and return its model records.

        Args:
            project_dir: Root of the Gradle build
            env: Environment for the Gradle process (JAVA_HOME etc.)
            preview: Skip dependency resolution

        Returns:
            One record per Gradle project, including included buildSrc builds

        Raises:
            GradleError: If Gradle is missing, fails, or times out
        """
        executable = find_gradle_executable(project_dir, self.executable)

        with tempfile.TemporaryDirectory(prefix="gimport-") as temp_dir:
            init_script = Path(temp_dir) / "gimport-model.gradle"
            init_script.write_text(INIT_SCRIPT, encoding="utf-8")

            cmd = [
                executable,
                "--init-script",
                str(init_script),
                "--quiet",
                "--console=plain",
                "help",
            ]
            if preview:
                cmd.append(f"-P{PREVIEW_PROPERTY}=true")

            logging.info(f"Running: {' '.join(cmd)}")
            try:
                result = subprocess.run(
                    cmd,
                    cwd=str(project_dir),
                    env=env,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as e:
                raise GradleError(f"Gradle did not finish within {self.timeout}s") from e
            except OSError as e:
                raise GradleError(f"Failed to start Gradle ({executable}): {e}") from e

        if result.returncode != 0:
            raise GradleError(
                f"Gradle exited with code {result.returncode}:\n{_tail(result.stderr or result.stdout)}"
            )

        return parse_model_output(result.stdout)
