"""
Shared representation of a playback endpoint reported by the device directory.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PlaybackDevice:
    """A single audio render endpoint as listed by the operating system."""

    device_id: str
    name: str
    is_default: bool = False

    def matches(self, query: str, *, case_sensitive: bool = False) -> bool:
        if case_sensitive:
            return query in self.name
        return query.casefold() in self.name.casefold()
