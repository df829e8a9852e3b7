"""
JDK entries and the process-wide JDK table.

A JDK entry is a name plus a home directory. The table is shared by every
project in the process, is only mutated under the application write
action, and is persisted with the application settings.
"""

import copy
import logging
import os
import platform
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gimport.host.interfaces import IJdkRegistry
from gimport.host.storage import read_json_safe, write_json_atomic

if TYPE_CHECKING:
    from gimport.host.project import Project


class JdkError(Exception):
    """Raised when a JDK home is missing or unusable."""
    pass


@dataclass(frozen=True)
class Sdk:
    """A registered JDK.

    Attributes:
        name: Table key (e.g. ``JDK_1.8``)
        home_path: JDK home directory, forward slashes
        version_string: Version read from the JDK ``release`` file, if any
    """

    name: str
    home_path: str
    version_string: str | None = None

    @property
    def bin_dir(self) -> Path:
        return Path(self.home_path) / "bin"

    def tool(self, name: str) -> Path:
        """Path of a JDK tool such as ``javac``."""
        suffix = ".exe" if platform.system() == "Windows" else ""
        return self.bin_dir / f"{name}{suffix}"

    def build_env(self) -> dict[str, str]:
        """Copy of os.environ with JAVA_HOME set and the JDK bin first on PATH."""
        env = os.environ.copy()
        env["JAVA_HOME"] = str(Path(self.home_path))
        env["PATH"] = str(self.bin_dir) + os.pathsep + env.get("PATH", "")
        return env

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sdk":
        """Create Sdk from dictionary."""
        return cls(
            name=data["name"],
            home_path=data["home_path"],
            version_string=data.get("version_string"),
        )


def read_java_version(home: Path) -> str | None:
    """Read JAVA_VERSION from ``<home>/release``.

    Returns:
        Version string, or None if the file is absent or has no version
    """
    release = home / "release"
    if not release.is_file():
        return None
    try:
        for line in release.read_text(encoding="utf-8", errors="replace").splitlines():
            key, sep, value = line.partition("=")
            if sep and key.strip() == "JAVA_VERSION":
                return value.strip().strip('"')
    except OSError as e:
        logging.warning(f"Failed to read {release}: {e}")
    return None


class JavaSdk:
    """Factory for Java SDK entries."""

    @staticmethod
    def create_jdk(name: str, home_path: str, is_jre: bool = False) -> Sdk:
        """Create a JDK entry for ``home_path``.

        Args:
            name: Table key for the entry
            home_path: JDK home directory
            is_jre: Accept a runtime without ``javac``

        Returns:
            Sdk describing the installation

        Raises:
            JdkError: If the home does not exist or lacks the required tools
        """
        home = Path(home_path).expanduser()
        if not home.is_dir():
            raise JdkError(f"JDK home is not a directory: {home_path}")

        candidate = Sdk(name=name, home_path=home.resolve().as_posix())
        required = "java" if is_jre else "javac"
        if not candidate.tool(required).exists():
            raise JdkError(f"{required} not found in {candidate.bin_dir}")

        return Sdk(name=name, home_path=candidate.home_path, version_string=read_java_version(home))


class JdkTable(IJdkRegistry):
    """Thread-safe process-wide JDK table.

    Entries are added on creation and never removed; a write action may
    roll the whole table back through ``snapshot``/``restore``.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._jdks: dict[str, Sdk] = {}

    def create_jdk(self, name: str, home_path: str) -> Sdk:
        return JavaSdk.create_jdk(name, home_path)

    def add_jdk(self, sdk: Sdk) -> None:
        with self.lock:
            previous = self._jdks.get(sdk.name)
            self._jdks[sdk.name] = sdk
        if previous is not None and previous != sdk:
            logging.info(f"Replaced JDK {sdk.name}: {previous.home_path} -> {sdk.home_path}")
        else:
            logging.info(f"Registered JDK {sdk.name} at {sdk.home_path}")

    def find_jdk(self, name: str | None) -> Sdk | None:
        if name is None:
            return None
        with self.lock:
            return self._jdks.get(name)

    def all_jdks(self) -> list[Sdk]:
        with self.lock:
            return [self._jdks[name] for name in sorted(self._jdks)]

    def set_project_sdk(self, project: "Project", sdk: Sdk) -> None:
        if self.find_jdk(sdk.name) != sdk:
            raise JdkError(f"JDK {sdk.name} is not registered")
        project.sdk = sdk
        project.state.sdk_name = sdk.name

    def snapshot(self) -> Any:
        with self.lock:
            return copy.copy(self._jdks)

    def restore(self, snapshot: Any) -> None:
        with self.lock:
            self._jdks = dict(snapshot)

    def load(self, path: Path) -> None:
        """Load entries persisted by ``save``; missing or corrupt files are ignored."""
        data = read_json_safe(path)
        if not data:
            return
        loaded = {}
        for entry in data.get("jdks", []):
            try:
                sdk = Sdk.from_dict(entry)
            except (KeyError, TypeError) as e:
                logging.warning(f"Skipping malformed JDK entry in {path}: {e}")
                continue
            loaded[sdk.name] = sdk
        with self.lock:
            self._jdks.update(loaded)
        logging.debug(f"Loaded {len(loaded)} JDK entries from {path}")

    def save(self, path: Path) -> None:
        write_json_atomic(path, {"jdks": [sdk.to_dict() for sdk in self.all_jdks()]})
