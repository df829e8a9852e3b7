"""
Low-memory watchdog.

A background thread samples available system memory with psutil. When it
falls below the configured floor the watcher (optionally) forces a garbage
collection, samples again, and only then notifies its listener. The
listener runs on the watchdog thread.
"""

import gc
import logging
import threading
from enum import Enum
from typing import Callable

import psutil

from gimport.interrupt_utils import handle_keyboard_interrupt_properly


class LowMemoryWatcherType(Enum):
    """When the listener is notified."""

    ALWAYS = "always"
    ONLY_AFTER_GC = "only_after_gc"


class LowMemoryWatcher:
    """Notifies a listener when memory stays critical.

    Example usage:
        watcher = LowMemoryWatcher.register(on_low_memory, threshold_bytes=256 * 1024 * 1024)
        try:
            run()
        finally:
            watcher.stop()
    """

    def __init__(
        self,
        listener: Callable[[], None],
        watcher_type: LowMemoryWatcherType = LowMemoryWatcherType.ONLY_AFTER_GC,
        threshold_bytes: int = 256 * 1024 * 1024,
        interval: float = 5.0,
    ):
        """Initialize the watcher without starting it.

        Args:
            listener: Called once memory is judged critical
            watcher_type: Whether a GC must fail to free memory first
            threshold_bytes: Available-memory floor
            interval: Seconds between samples
        """
        self.listener = listener
        self.watcher_type = watcher_type
        self.threshold_bytes = threshold_bytes
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._fired = False

    @classmethod
    def register(
        cls,
        listener: Callable[[], None],
        watcher_type: LowMemoryWatcherType = LowMemoryWatcherType.ONLY_AFTER_GC,
        threshold_bytes: int = 256 * 1024 * 1024,
        interval: float = 5.0,
    ) -> "LowMemoryWatcher":
        """Create a watcher and start its sampling thread."""
        watcher = cls(listener, watcher_type, threshold_bytes, interval)
        watcher.start()
        return watcher

    @property
    def is_registered(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="low-memory-watcher", daemon=True)
        self._thread.start()
        logging.debug(f"Low-memory watcher started (floor {self.threshold_bytes // (1024 * 1024)} MB)")

    def stop(self) -> None:
        """Deregister the watcher; the listener will not be called afterwards."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)
        logging.debug("Low-memory watcher stopped")

    def _is_critical(self) -> bool:
        return psutil.virtual_memory().available < self.threshold_bytes

    def check(self) -> bool:
        """Take one sample and notify the listener if memory is critical.

        Returns:
            True if the listener was notified
        """
        if self._stop.is_set() or self._fired:
            return False
        if not self._is_critical():
            return False
        if self.watcher_type == LowMemoryWatcherType.ONLY_AFTER_GC:
            gc.collect()
            if not self._is_critical():
                logging.debug("Memory pressure relieved by garbage collection")
                return False
        if self._stop.is_set():
            return False

        self._fired = True
        available_mb = psutil.virtual_memory().available // (1024 * 1024)
        logging.warning(f"Low memory: {available_mb} MB available")
        self.listener()
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                if self.check():
                    return
            except KeyboardInterrupt as ke:
                handle_keyboard_interrupt_properly(ke)
            except Exception as e:
                logging.error(f"Low-memory check failed: {e}")
