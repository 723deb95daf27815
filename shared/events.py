"""
Event payloads produced by the inactivity state machine.

Consumers (console reporter, tests) receive these through the monitor's Qt
signals. Payloads are immutable snapshots of a single tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SwitchState(str, Enum):
    ARMED = "armed"
    SWITCHED = "switched"


class SwitchEventType(str, Enum):
    STATUS_TICK = "StatusTick"
    SWITCH_ATTEMPTED = "SwitchAttempted"
    SWITCH_SUCCEEDED = "SwitchSucceeded"
    SWITCH_FAILED = "SwitchFailed"
    REARMED = "Rearmed"


@dataclass(frozen=True, slots=True)
class SwitchEvent:
    type: SwitchEventType
    idle_ms: int
    percent_complete: float
    state: SwitchState
    device_id: Optional[str] = None
    already_default: bool = False
    error: Optional[str] = None

    @property
    def idle_seconds(self) -> float:
        return self.idle_ms / 1000.0

    def describe(self) -> str:
        """Return the human-readable status line for this event."""
        if self.type is SwitchEventType.SWITCH_ATTEMPTED:
            return f"Idle for {self.idle_seconds:.0f}s; switching playback to {self.device_id}."
        if self.type is SwitchEventType.SWITCH_SUCCEEDED:
            if self.already_default:
                return f"Idle for {self.idle_seconds:.0f}s; {self.device_id} is already the default device."
            return f"Switched default playback device to {self.device_id}."
        if self.type is SwitchEventType.SWITCH_FAILED:
            return f"Failed to switch to {self.device_id}: {self.error}. Retrying next tick."
        if self.type is SwitchEventType.REARMED:
            return "Activity detected; armed for the next idle period."
        return (
            f"Idle {self.idle_seconds:.1f}s ({self.percent_complete:.0f}%), "
            f"state={self.state.value}"
        )
