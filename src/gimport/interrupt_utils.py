"""Keyboard interrupt utilities for worker threads.

Worker threads (Gradle refresh, compile driver, low-memory watcher) never
receive SIGINT themselves; when one sees a KeyboardInterrupt it must hand
it to the main thread instead of dying silently.
"""

import _thread


def handle_keyboard_interrupt_properly(ke: KeyboardInterrupt) -> None:
    """Propagate a KeyboardInterrupt to the main thread and re-raise it.

    Usage:
        try:
            work()
        except KeyboardInterrupt as ke:
            handle_keyboard_interrupt_properly(ke)
        except Exception:
            ...

    Args:
        ke: The KeyboardInterrupt exception to handle

    Raises:
        KeyboardInterrupt: Always re-raises the exception after handling
    """
    _thread.interrupt_main()
    raise ke
