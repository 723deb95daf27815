"""
Inactivity-triggered switching state machine.

The machine is either ARMED (a switch will be performed once idle time
reaches the threshold) or SWITCHED (already switched for the current idle
period, waiting for fresh activity). Each call to ``tick`` performs at most
one transition and at most one device switch.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from shared.events import SwitchEvent, SwitchEventType, SwitchState
from audio_switcher.errors import SwitchError
from audio_switcher import logger as app_logger

_LOGGER = app_logger.get_logger()

DEFAULT_ACTIVITY_RESET_MS = 1000


def percent_complete(idle_ms: int, threshold_ms: int) -> float:
    """Progress towards the switch threshold, clamped to 100."""
    return min(100.0, max(0, idle_ms) / threshold_ms * 100.0)


class InactivityStateMachine:
    def __init__(
        self,
        target_device_id: str,
        threshold_ms: int,
        switch_device: Callable[[str], None],
        *,
        activity_reset_ms: int = DEFAULT_ACTIVITY_RESET_MS,
    ) -> None:
        if threshold_ms <= 0:
            raise ValueError(f"threshold_ms must be positive, got {threshold_ms}")
        if activity_reset_ms <= 0:
            raise ValueError(f"activity_reset_ms must be positive, got {activity_reset_ms}")
        self._target_device_id = target_device_id
        self._threshold_ms = threshold_ms
        self._activity_reset_ms = activity_reset_ms
        self._switch_device = switch_device
        self._state = SwitchState.ARMED

    @property
    def target_device_id(self) -> str:
        return self._target_device_id

    @property
    def threshold_ms(self) -> int:
        return self._threshold_ms

    @property
    def activity_reset_ms(self) -> int:
        return self._activity_reset_ms

    @property
    def state(self) -> SwitchState:
        return self._state

    @property
    def armed(self) -> bool:
        return self._state is SwitchState.ARMED

    def tick(self, idle_ms: int, current_default_id: Optional[str]) -> List[SwitchEvent]:
        """
        Apply one sample of idle time and the current default device.

        Returns the events produced by this tick: transition events first,
        followed by a single status event reflecting the resulting state.
        """
        idle_ms = max(0, int(idle_ms))
        events: List[SwitchEvent] = []

        if self._state is SwitchState.ARMED and idle_ms >= self._threshold_ms:
            if current_default_id == self._target_device_id:
                self._state = SwitchState.SWITCHED
                events.append(self._event(SwitchEventType.SWITCH_SUCCEEDED, idle_ms, already_default=True))
            else:
                events.append(self._event(SwitchEventType.SWITCH_ATTEMPTED, idle_ms))
                try:
                    self._switch_device(self._target_device_id)
                except SwitchError as exc:
                    _LOGGER.debug("Switch to {} raised {!r}", self._target_device_id, exc)
                    events.append(self._event(SwitchEventType.SWITCH_FAILED, idle_ms, error=str(exc)))
                else:
                    self._state = SwitchState.SWITCHED
                    events.append(self._event(SwitchEventType.SWITCH_SUCCEEDED, idle_ms))
        elif self._state is SwitchState.SWITCHED and idle_ms < self._activity_reset_ms:
            self._state = SwitchState.ARMED
            events.append(self._event(SwitchEventType.REARMED, idle_ms))

        events.append(self._event(SwitchEventType.STATUS_TICK, idle_ms))
        return events

    def _event(self, event_type: SwitchEventType, idle_ms: int, **extra) -> SwitchEvent:
        return SwitchEvent(
            type=event_type,
            idle_ms=idle_ms,
            percent_complete=percent_complete(idle_ms, self._threshold_ms),
            state=self._state,
            device_id=self._target_device_id,
            **extra,
        )
