"""
Central configuration for gimport.

All tunables are plain module constants with an environment variable
override. ``ImportConfig.from_env()`` snapshots the environment once at
startup so the rest of the run never reads ``os.environ`` directly.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# ── Command ───────────────────────────────────────────────────────────────────
COMMAND = "importAndSave"
PROG = "gimport"
USAGE_MESSAGE = f"Usage: {PROG} {COMMAND} <path-to-gradle-project> <path-to-jdk>"

# Set by the process itself; the host skips expensive indexing when present.
SKIP_INDICES_PROPERTY = "idea.skip.indices.initialization"

# ── Settings storage ──────────────────────────────────────────────────────────
CONFIG_DIR_ENV = "GIMPORT_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path.home() / ".gimport"

# Per-project state lives beside the sources, like .idea/ would.
PROJECT_STATE_DIR = ".gimport"
PROJECT_STATE_FILE = "project.json"
COMPILER_OUTPUT_DIR = "out"

# ── Compile ───────────────────────────────────────────────────────────────────
# "true" selects incremental make, anything else a full rebuild.
USE_MAKE_ENV = "build_mode_use_make"
COMPILE_POLL_ENV = "GIMPORT_COMPILE_POLL_SECONDS"
DEFAULT_COMPILE_POLL_SECONDS = 60.0
BUILD_PROCESS_HEAP_SIZE_MB = 3500

# ── Gradle ────────────────────────────────────────────────────────────────────
GRADLE_ENV = "GIMPORT_GRADLE"
REFRESH_TIMEOUT_ENV = "GIMPORT_REFRESH_TIMEOUT_SECONDS"
DEFAULT_REFRESH_TIMEOUT_SECONDS = 1800.0

# ── JDK ───────────────────────────────────────────────────────────────────────
DEFAULT_JDK_NAME = "JDK_1.8"

# ── Low-memory watchdog ───────────────────────────────────────────────────────
LOW_MEMORY_ENV = "GIMPORT_LOW_MEMORY_MB"
DEFAULT_LOW_MEMORY_MB = 256
MEMORY_CHECK_ENV = "GIMPORT_MEMORY_CHECK_SECONDS"
DEFAULT_MEMORY_CHECK_SECONDS = 5.0

# Modules whose name contains this marker are build-script-only.
BUILD_SRC_MARKER = "buildSrc"


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logging.warning(f"Ignoring {name}={raw!r}: not a number, using {default}")
        return default
    if value <= 0:
        logging.warning(f"Ignoring {name}={raw!r}: must be positive, using {default}")
        return default
    return value


@dataclass(frozen=True)
class ImportConfig:
    """Snapshot of the run configuration.

    Attributes:
        config_dir: Application settings directory (JDK table, logs)
        use_make: Incremental make instead of a full rebuild
        compile_poll_seconds: Length of one compile-wait polling slice
        refresh_timeout_seconds: Upper bound for the Gradle refresh
        low_memory_mb: Available-memory floor that counts as critical
        memory_check_seconds: Watchdog sampling interval
        gradle_executable: Explicit Gradle executable, or None to auto-detect
        build_process_heap_mb: Heap size handed to the compiler process
    """

    config_dir: Path = DEFAULT_CONFIG_DIR
    use_make: bool = False
    compile_poll_seconds: float = DEFAULT_COMPILE_POLL_SECONDS
    refresh_timeout_seconds: float = DEFAULT_REFRESH_TIMEOUT_SECONDS
    low_memory_mb: int = DEFAULT_LOW_MEMORY_MB
    memory_check_seconds: float = DEFAULT_MEMORY_CHECK_SECONDS
    gradle_executable: str | None = None
    build_process_heap_mb: int = BUILD_PROCESS_HEAP_SIZE_MB

    @property
    def log_file(self) -> Path:
        return self.config_dir / "logs" / "gimport.log"

    @property
    def jdk_table_file(self) -> Path:
        return self.config_dir / "options" / "jdk.table.json"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ImportConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (tests)

        Returns:
            ImportConfig with every override applied
        """
        env = os.environ if environ is None else environ
        config_dir = env.get(CONFIG_DIR_ENV)
        return cls(
            config_dir=Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR,
            use_make=env.get(USE_MAKE_ENV) == "true",
            compile_poll_seconds=_env_float(env, COMPILE_POLL_ENV, DEFAULT_COMPILE_POLL_SECONDS),
            refresh_timeout_seconds=_env_float(env, REFRESH_TIMEOUT_ENV, DEFAULT_REFRESH_TIMEOUT_SECONDS),
            low_memory_mb=int(_env_float(env, LOW_MEMORY_ENV, DEFAULT_LOW_MEMORY_MB)),
            memory_check_seconds=_env_float(env, MEMORY_CHECK_ENV, DEFAULT_MEMORY_CHECK_SECONDS),
            gradle_executable=env.get(GRADLE_ENV) or None,
        )
