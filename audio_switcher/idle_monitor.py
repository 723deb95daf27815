"""
Idle monitoring using Win32 GetLastInputInfo to drive the switching state machine.
"""

from __future__ import annotations

import ctypes
import sys
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from shared.events import SwitchEvent, SwitchEventType
from audio_switcher import logger as app_logger
from audio_switcher.cancel import CancelToken
from audio_switcher.device_directory import DeviceDirectory
from audio_switcher.errors import QueryError
from audio_switcher.state_machine import InactivityStateMachine

_LOGGER = app_logger.get_logger()

TICK_INTERVAL_MS = 1000
_TICK_MODULUS = 2**32


class InactivityMonitor(QObject):
    """
    Polls system idle time on a fixed cadence and feeds each sample, together
    with the current default playback device, into the state machine.
    Runs until stopped or until the cancel token is set.
    """

    statusTick = Signal(object)
    switchAttempted = Signal(object)
    switchSucceeded = Signal(object)
    switchFailed = Signal(object)
    rearmed = Signal(object)
    fatalError = Signal(object)
    stopped = Signal()

    def __init__(
        self,
        machine: InactivityStateMachine,
        directory: DeviceDirectory,
        *,
        cancel_token: Optional[CancelToken] = None,
        idle_ms_provider: Optional[Callable[[], int]] = None,
        poll_interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__()
        self._machine = machine
        self._directory = directory
        self._cancel_token = cancel_token or CancelToken()
        self._idle_ms_provider = idle_ms_provider or get_idle_milliseconds
        self._poll_interval_ms = poll_interval_ms
        self._timer = QTimer(self)
        self._timer.setInterval(self._poll_interval_ms)
        self._timer.timeout.connect(self._check_idle)  # type: ignore[arg-type]
        self._active = False
        self._signals = {
            SwitchEventType.STATUS_TICK: self.statusTick,
            SwitchEventType.SWITCH_ATTEMPTED: self.switchAttempted,
            SwitchEventType.SWITCH_SUCCEEDED: self.switchSucceeded,
            SwitchEventType.SWITCH_FAILED: self.switchFailed,
            SwitchEventType.REARMED: self.rearmed,
        }

    @property
    def machine(self) -> InactivityStateMachine:
        return self._machine

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Begin monitoring user idle time."""
        if self._active:
            return
        self._active = True
        self._timer.start()

    def stop(self) -> None:
        """Stop monitoring."""
        if not self._active:
            return
        self._timer.stop()
        self._active = False
        self.stopped.emit()

    def set_idle_ms_provider(self, provider: Callable[[], int]) -> None:
        """
        Override idle time acquisition. Primarily used for testing.
        """
        self._idle_ms_provider = provider

    def tick(self) -> None:
        """
        Run one sampling step. Raises QueryError when the current default
        device cannot be read.
        """
        idle_ms = self._get_idle_ms()
        current_default = self._directory.get_current_default_playback_device()
        for event in self._machine.tick(idle_ms, current_default):
            self._emit(event)

    def _check_idle(self) -> None:
        if not self._active:
            return

        if self._cancel_token.is_cancelled():
            _LOGGER.info("Cancellation requested; stopping idle monitor.")
            self.stop()
            return

        try:
            self.tick()
        except QueryError as exc:
            # Without the current default there is nothing to decide on.
            _LOGGER.error("Unable to query the default playback device: {}", exc)
            self._timer.stop()
            self._active = False
            self.fatalError.emit(exc)

    def _get_idle_ms(self) -> int:
        return max(0, int(self._idle_ms_provider()))

    def _emit(self, event: SwitchEvent) -> None:
        self._signals[event.type].emit(event)


def get_idle_milliseconds() -> int:
    """
    Milliseconds since the last keyboard or mouse input. Returns 0 when the
    query is unavailable or fails.
    """
    if sys.platform != "win32":
        return 0
    try:
        last_input = _get_last_input_info()
        tick_count = _get_tick_count_ms()
    except OSError as exc:
        _LOGGER.debug("Idle time query failed: {}", exc)
        return 0
    return idle_ms_between(tick_count, last_input)


def idle_ms_between(tick_count_ms: int, last_input_ms: int) -> int:
    """Elapsed 32-bit tick time, tolerant of the ~49.7 day counter wraparound."""
    return (tick_count_ms - last_input_ms) % _TICK_MODULUS


def _get_last_input_info() -> int:
    class LASTINPUTINFO(ctypes.Structure):
        _fields_ = [("cbSize", ctypes.c_uint), ("dwTime", ctypes.c_uint)]

    user32 = ctypes.windll.user32  # type: ignore[attr-defined]
    last_input = LASTINPUTINFO()
    last_input.cbSize = ctypes.sizeof(LASTINPUTINFO)

    if not user32.GetLastInputInfo(ctypes.byref(last_input)):
        raise ctypes.WinError()  # type: ignore[attr-defined]

    return last_input.dwTime


def _get_tick_count_ms() -> int:
    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    kernel32.GetTickCount.restype = ctypes.c_uint32
    return int(kernel32.GetTickCount())
