"""Compile scope, progress indicator and compile context."""

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gimport.host.model import CompilerMessage, MessageCategory

if TYPE_CHECKING:
    from gimport.host.project import Project


@dataclass
class CompileScope:
    """Set of modules a make covers.

    Attributes:
        project: Project the modules belong to
        module_names: Names of the modules in scope
    """

    project: "Project"
    module_names: list[str] = field(default_factory=list)

    def __contains__(self, module_name: str) -> bool:
        return module_name in self.module_names


class ProgressIndicator:
    """Thread-safe running/cancelled flags plus a status text."""

    def __init__(self):
        self.lock = threading.Lock()
        self._running = False
        self._canceled = False
        self._text = ""

    def start(self) -> None:
        with self.lock:
            self._running = True

    def stop(self) -> None:
        with self.lock:
            self._running = False

    def cancel(self) -> None:
        with self.lock:
            self._canceled = True

    @property
    def is_running(self) -> bool:
        with self.lock:
            return self._running

    @property
    def is_canceled(self) -> bool:
        with self.lock:
            return self._canceled

    @property
    def text(self) -> str:
        with self.lock:
            return self._text

    @text.setter
    def text(self, value: str) -> None:
        with self.lock:
            self._text = value


class CompileContext:
    """State of one compile run, shared between the driver thread and callers."""

    def __init__(self, project: "Project", scope: CompileScope, is_rebuild: bool):
        self.project = project
        self.scope = scope
        self.is_rebuild = is_rebuild
        self.progress_indicator = ProgressIndicator()
        self.lock = threading.Lock()
        self._messages: list[CompilerMessage] = []

    def add_message(self, message: CompilerMessage) -> None:
        with self.lock:
            self._messages.append(message)

    def get_messages(self, category: MessageCategory) -> list[CompilerMessage]:
        with self.lock:
            return [m for m in self._messages if m.category == category]

    def get_message_count(self, category: MessageCategory) -> int:
        return len(self.get_messages(category))

    @property
    def messages(self) -> list[CompilerMessage]:
        with self.lock:
            return list(self._messages)

    def __repr__(self) -> str:
        kind = "rebuild" if self.is_rebuild else "make"
        return f"CompileContext({kind}, project={self.project.name!r}, modules={len(self.scope.module_names)})"
