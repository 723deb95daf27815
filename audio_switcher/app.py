"""
Application coordinator wiring the device directory, target resolution and
the inactivity monitor into a Qt event loop.
"""

from __future__ import annotations

import signal
import sys
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from PySide6.QtCore import QCoreApplication

from shared.device_definition import PlaybackDevice
from shared.events import SwitchEvent
from audio_switcher import logger as app_logger
from audio_switcher.cancel import CancelToken
from audio_switcher.device_directory import DeviceDirectory
from audio_switcher.idle_monitor import TICK_INTERVAL_MS, InactivityMonitor
from audio_switcher.settings import SwitcherSettings
from audio_switcher.state_machine import InactivityStateMachine
from audio_switcher.target import resolve_target

APP_NAME = "Idle Audio Switcher"
APP_VERSION = "1.0.0"
EXIT_OK = 0
EXIT_DIRECTORY_FAILURE = 1


@dataclass
class SwitcherApp:
    settings: SwitcherSettings
    directory: DeviceDirectory
    idle_ms_provider: Optional[Callable[[], int]] = None
    poll_interval_ms: int = TICK_INTERVAL_MS

    def __post_init__(self) -> None:
        self._logger = app_logger.get_logger()
        self._target: Optional[PlaybackDevice] = None
        self._monitor: Optional[InactivityMonitor] = None
        self._exit_code = EXIT_OK

    @property
    def target(self) -> Optional[PlaybackDevice]:
        return self._target

    @property
    def monitor(self) -> Optional[InactivityMonitor]:
        return self._monitor

    def resolve_target(self) -> PlaybackDevice:
        """Resolve the configured device name once; later calls reuse the result."""
        if self._target is not None:
            return self._target

        devices = self.directory.list_playback_devices()
        resolution = resolve_target(
            self.settings.target_device,
            devices,
            case_sensitive=self.settings.case_sensitive,
        )
        self._target = resolution.device
        self._logger.info(
            "Target device: {} (id={}, currently default: {}). Switching after {}s of inactivity.",
            self._target.name,
            self._target.device_id,
            "yes" if self._target.is_default else "no",
            self.settings.inactivity_seconds,
        )
        return self._target

    def build_monitor(self, cancel_token: CancelToken) -> InactivityMonitor:
        target = self.resolve_target()
        machine = InactivityStateMachine(
            target.device_id,
            self.settings.threshold_ms,
            self.directory.set_default_playback_device,
        )
        monitor = InactivityMonitor(
            machine,
            self.directory,
            cancel_token=cancel_token,
            idle_ms_provider=self.idle_ms_provider,
            poll_interval_ms=self.poll_interval_ms,
        )
        monitor.statusTick.connect(self._on_status_tick)
        monitor.switchAttempted.connect(self._on_switch_attempted)
        monitor.switchSucceeded.connect(self._on_switch_succeeded)
        monitor.switchFailed.connect(self._on_switch_failed)
        monitor.rearmed.connect(self._on_rearmed)
        self._monitor = monitor
        return monitor

    def run(self, cancel_token: Optional[CancelToken] = None) -> int:
        """
        Resolve the target, then monitor until cancelled.

        Startup failures propagate to the caller before the event loop starts.
        """
        token = cancel_token or CancelToken()
        monitor = self.build_monitor(token)

        app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
        self._exit_code = EXIT_OK

        def _on_stopped() -> None:
            self._logger.info("{} stopped.", APP_NAME)
            app.exit(self._exit_code)

        def _on_fatal(exc: Exception) -> None:
            self._exit_code = EXIT_DIRECTORY_FAILURE
            app.exit(self._exit_code)

        monitor.stopped.connect(_on_stopped)
        monitor.fatalError.connect(_on_fatal)

        previous_handlers = _install_interrupt_handlers(token)
        try:
            self._logger.info("{} v{} monitoring. Press Ctrl+C to exit.", APP_NAME, APP_VERSION)
            monitor.start()
            app.exec()
        finally:
            monitor.stopped.disconnect(_on_stopped)
            monitor.stop()
            _restore_interrupt_handlers(previous_handlers)
        return self._exit_code

    def _on_status_tick(self, event: SwitchEvent) -> None:
        self._logger.debug(event.describe())

    def _on_switch_attempted(self, event: SwitchEvent) -> None:
        self._logger.info(event.describe())

    def _on_switch_succeeded(self, event: SwitchEvent) -> None:
        self._logger.success(event.describe())

    def _on_switch_failed(self, event: SwitchEvent) -> None:
        self._logger.warning(event.describe())

    def _on_rearmed(self, event: SwitchEvent) -> None:
        self._logger.info(event.describe())


def _interrupt_signals():
    signals = [signal.SIGINT]
    if hasattr(signal, "SIGBREAK"):
        signals.append(signal.SIGBREAK)  # type: ignore[attr-defined]
    return signals


def _install_interrupt_handlers(token: CancelToken) -> Dict[int, object]:
    def _handler(signum, frame) -> None:
        token.cancel()

    previous: Dict[int, object] = {}
    for signum in _interrupt_signals():
        previous[signum] = signal.signal(signum, _handler)
    return previous


def _restore_interrupt_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        # None means the handler was not installed from Python.
        signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
