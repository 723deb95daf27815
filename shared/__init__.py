"""
Shared data types for the idle audio switcher runtime.
"""

from .device_definition import PlaybackDevice  # noqa: F401
from .events import SwitchEvent, SwitchEventType, SwitchState  # noqa: F401
