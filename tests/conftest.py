"""Shared fixtures for the gimport test suite."""

import os
import stat
from pathlib import Path

import pytest

from gimport.config import (
    COMPILE_POLL_ENV,
    CONFIG_DIR_ENV,
    GRADLE_ENV,
    LOW_MEMORY_ENV,
    MEMORY_CHECK_ENV,
    REFRESH_TIMEOUT_ENV,
    SKIP_INDICES_PROPERTY,
    USE_MAKE_ENV,
    ImportConfig,
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep settings out of the real home directory and clear overrides."""
    for name in (
        USE_MAKE_ENV,
        COMPILE_POLL_ENV,
        GRADLE_ENV,
        LOW_MEMORY_ENV,
        MEMORY_CHECK_ENV,
        REFRESH_TIMEOUT_ENV,
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "config"))
    # process_command sets this; registering it here restores it afterwards
    monkeypatch.setenv(SKIP_INDICES_PROPERTY, "false")


def make_executable(path: Path, content: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def jdk_home(tmp_path):
    """A directory that looks like a JDK home."""
    home = tmp_path / "jdk"
    suffix = ".exe" if os.name == "nt" else ""
    make_executable(home / "bin" / f"javac{suffix}")
    make_executable(home / "bin" / f"java{suffix}")
    (home / "release").write_text('JAVA_VERSION="1.8.0_392"\nOS_NAME="Linux"\n')
    return home


@pytest.fixture
def project_dir(tmp_path):
    """An empty Gradle project directory."""
    root = tmp_path / "app"
    root.mkdir()
    (root / "settings.gradle").write_text("rootProject.name = 'app'\n")
    return root


@pytest.fixture
def config(tmp_path):
    """Configuration with short timeouts for tests."""
    return ImportConfig(
        config_dir=tmp_path / "config",
        compile_poll_seconds=0.05,
        refresh_timeout_seconds=5.0,
        memory_check_seconds=0.01,
    )
