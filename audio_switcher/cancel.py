"""
Cooperative cancellation shared between the interrupt handlers and the monitor.
"""

from __future__ import annotations

import threading


class CancelToken:
    """
    One-way flag set from a signal handler and polled by the monitor at
    each tick boundary. Once cancelled it stays cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()
