"""Tests for the low-memory watchdog."""

import threading
from unittest.mock import MagicMock, patch

import pytest

from gimport.host.memory import LowMemoryWatcher, LowMemoryWatcherType

MB = 1024 * 1024


def memory(available_mb):
    sample = MagicMock()
    sample.available = available_mb * MB
    return sample


@pytest.fixture
def virtual_memory():
    with patch("gimport.host.memory.psutil.virtual_memory") as mock:
        yield mock


class TestLowMemoryWatcher:
    def test_plenty_of_memory(self, virtual_memory):
        virtual_memory.return_value = memory(4096)
        listener = MagicMock()

        assert LowMemoryWatcher(listener, threshold_bytes=256 * MB).check() is False
        listener.assert_not_called()

    def test_gc_relieves_pressure(self, virtual_memory):
        virtual_memory.side_effect = [memory(100), memory(1024)]
        listener = MagicMock()

        with patch("gimport.host.memory.gc.collect") as collect:
            fired = LowMemoryWatcher(listener, LowMemoryWatcherType.ONLY_AFTER_GC, 256 * MB).check()

        assert fired is False
        collect.assert_called_once()
        listener.assert_not_called()

    def test_critical_after_gc(self, virtual_memory):
        virtual_memory.return_value = memory(100)
        listener = MagicMock()
        watcher = LowMemoryWatcher(listener, LowMemoryWatcherType.ONLY_AFTER_GC, 256 * MB)

        assert watcher.check() is True
        assert watcher.check() is False
        listener.assert_called_once()

    def test_always_skips_gc(self, virtual_memory):
        virtual_memory.return_value = memory(100)
        listener = MagicMock()

        with patch("gimport.host.memory.gc.collect") as collect:
            LowMemoryWatcher(listener, LowMemoryWatcherType.ALWAYS, 256 * MB).check()

        collect.assert_not_called()
        listener.assert_called_once()

    def test_stopped_watcher_never_fires(self, virtual_memory):
        virtual_memory.return_value = memory(100)
        listener = MagicMock()
        watcher = LowMemoryWatcher.register(listener, interval=60)
        watcher.stop()

        assert watcher.is_registered is False
        assert watcher.check() is False
        listener.assert_not_called()

    def test_background_thread_notifies(self, virtual_memory):
        virtual_memory.return_value = memory(1)
        notified = threading.Event()
        watcher = LowMemoryWatcher.register(notified.set, threshold_bytes=256 * MB, interval=0.01)
        try:
            assert notified.wait(2)
        finally:
            watcher.stop()

    def test_sampling_errors_are_logged(self, virtual_memory, caplog):
        samples = []

        def sample():
            samples.append(1)
            if len(samples) == 1:
                raise RuntimeError("no /proc")
            return memory(1)

        virtual_memory.side_effect = sample
        notified = threading.Event()
        watcher = LowMemoryWatcher.register(notified.set, LowMemoryWatcherType.ALWAYS, 256 * MB, interval=0.01)
        try:
            assert notified.wait(2)
        finally:
            watcher.stop()
        assert "Low-memory check failed: no /proc" in caplog.text
