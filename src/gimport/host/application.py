"""
Application-wide services: read/write locking, document buffers,
settings persistence and process exit.

Design:
    - Read actions share a lock; a write action excludes every other thread
    - A thread already inside a read action may enter a write action once
      it is the only reader left (lock upgrade)
    - A write action snapshots its participants and restores them if the
      body raises, so a failed mutation leaves no partial state behind
    - Saves are rejected until ``save_allowed`` is set
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from gimport.config import ImportConfig
from gimport.host.interfaces import IApplication, ITransactional
from gimport.host.jdk import JdkTable
from gimport.host.storage import write_text_atomic

T = TypeVar("T")


class WriteActionError(Exception):
    """Raised when a write action body fails and its state was rolled back."""
    pass


class ReadWriteLock:
    """Readers-writer lock with per-thread read counts.

    Reads are reentrant. A writer waits until no other thread holds a read
    lock, so a reader may upgrade to a write without deadlocking on itself.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers: dict[int, int] = {}
        self._writer: int | None = None
        self._write_depth = 0

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            while self._writer is not None and self._writer != me:
                self._cond.wait()
            self._readers[me] = self._readers.get(me, 0) + 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            count = self._readers.get(me, 0)
            if count <= 0:
                raise RuntimeError("release_read without matching acquire_read")
            if count == 1:
                del self._readers[me]
            else:
                self._readers[me] = count - 1
            self._cond.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._write_depth += 1
                return
            while self._writer is not None or any(tid != me for tid in self._readers):
                self._cond.wait()
            self._writer = me
            self._write_depth = 1

    def release_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer != me:
                raise RuntimeError("release_write from a thread that does not hold the write lock")
            self._write_depth -= 1
            if self._write_depth == 0:
                self._writer = None
                self._cond.notify_all()


class FileDocumentManager:
    """In-memory document buffers flushed to disk on demand."""

    def __init__(self):
        self.lock = threading.Lock()
        self._unsaved: dict[Path, str] = {}

    def set_text(self, path: Path, text: str) -> None:
        """Replace the buffer for ``path``; nothing is written yet."""
        with self.lock:
            self._unsaved[Path(path)] = text

    @property
    def unsaved_documents(self) -> list[Path]:
        with self.lock:
            return sorted(self._unsaved)

    def discard_under(self, root: Path) -> int:
        """Drop unsaved buffers for files below ``root``.

        Returns:
            Number of buffers dropped
        """
        root = Path(root)
        with self.lock:
            dropped = [p for p in self._unsaved if p.is_relative_to(root)]
            for path in dropped:
                del self._unsaved[path]
        if dropped:
            logging.info(f"Discarded {len(dropped)} unsaved document(s) under {root}")
        return len(dropped)

    def save_all_documents(self) -> int:
        """Write every unsaved buffer atomically.

        Returns:
            Number of documents written
        """
        with self.lock:
            pending = dict(self._unsaved)
            self._unsaved.clear()

        for path in sorted(pending):
            write_text_atomic(path, pending[path])
        if pending:
            logging.info(f"Saved {len(pending)} document(s)")
        return len(pending)


class Application(IApplication):
    """The headless application instance."""

    def __init__(
        self,
        config: ImportConfig,
        jdk_table: JdkTable,
        documents: FileDocumentManager | None = None,
    ):
        """Initialize the application.

        Args:
            config: Run configuration (settings locations)
            jdk_table: Process-wide JDK table persisted with the settings
            documents: Document buffers (a fresh manager if omitted)
        """
        self.config = config
        self.jdk_table = jdk_table
        self.documents = documents if documents is not None else FileDocumentManager()
        self.save_allowed = False
        self._lock = ReadWriteLock()

    def run_read_action(self, action: Callable[[], T]) -> T:
        self._lock.acquire_read()
        try:
            return action()
        finally:
            self._lock.release_read()

    @contextmanager
    def write_action(self, *participants: ITransactional) -> Iterator[None]:
        self._lock.acquire_write()
        try:
            snapshots = [(p, p.snapshot()) for p in participants]
            try:
                yield
            except Exception as e:
                for participant, snapshot in reversed(snapshots):
                    participant.restore(snapshot)
                logging.warning(f"Write action rolled back: {e}")
                raise WriteActionError(str(e)) from e
        finally:
            self._lock.release_write()

    def save_all_documents(self) -> int:
        if not self.save_allowed:
            logging.warning("Saving is not allowed; documents left unsaved")
            return 0
        return self.documents.save_all_documents()

    def save_settings(self) -> None:
        if not self.save_allowed:
            logging.warning("Saving is not allowed; settings left unsaved")
            return
        self.jdk_table.save(self.config.jdk_table_file)
        logging.info(f"Saved application settings to {self.config.config_dir}")

    def load_settings(self) -> None:
        self.jdk_table.load(self.config.jdk_table_file)

    def exit(self, force: bool = False, confirm: bool = True, exit_code: int = 0) -> None:
        """Save pending state and end the process.

        Args:
            force: Exit even if unsaved documents cannot be written
            confirm: Exit was confirmed; headless runs never prompt
            exit_code: Process exit status

        Raises:
            SystemExit: Always, unless the exit is declined
        """
        if not confirm:
            logging.info("Exit not confirmed; staying alive")
            return

        if self.save_allowed:
            try:
                self.save_all_documents()
                self.save_settings()
            except OSError as e:
                if not force:
                    raise
                logging.error(f"Failed to save on exit: {e}")
        elif self.documents.unsaved_documents:
            logging.warning(f"Exiting with {len(self.documents.unsaved_documents)} unsaved document(s)")

        raise SystemExit(exit_code)
