"""
Exception taxonomy for device discovery, target resolution and switching.
"""

from __future__ import annotations

from typing import Iterable, List


class SwitcherError(Exception):
    pass


class DependencyMissing(SwitcherError):
    pass


class DeviceNotFound(SwitcherError):
    def __init__(self, query: str, available: Iterable[str]) -> None:
        self.query = query
        self.available: List[str] = list(available)
        super().__init__(f"No playback device name contains '{query}'")


class EnumerationError(SwitcherError):
    pass


class QueryError(SwitcherError):
    pass


class SwitchError(SwitcherError):
    pass
