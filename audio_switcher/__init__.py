"""
Idle audio switcher runtime.

Watches keyboard/mouse inactivity and switches the default playback device
once per idle period.
"""

from .errors import (  # noqa: F401
    DependencyMissing,
    DeviceNotFound,
    EnumerationError,
    QueryError,
    SwitchError,
    SwitcherError,
)
from .state_machine import InactivityStateMachine, percent_complete  # noqa: F401
