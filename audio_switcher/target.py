"""
One-shot resolution of the configured device name to a playback endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from shared.device_definition import PlaybackDevice
from audio_switcher import logger as app_logger
from audio_switcher.errors import DeviceNotFound

_LOGGER = app_logger.get_logger()


@dataclass(frozen=True, slots=True)
class TargetResolution:
    device: PlaybackDevice
    matches: Tuple[PlaybackDevice, ...]

    @property
    def is_ambiguous(self) -> bool:
        return len(self.matches) > 1


def resolve_target(
    query: str,
    devices: Sequence[PlaybackDevice],
    *,
    case_sensitive: bool = False,
) -> TargetResolution:
    """
    Pick the playback device whose name contains ``query``.

    The first match in listing order wins when several devices match.
    Raises DeviceNotFound, carrying every available name, when none do.
    """
    needle = query.strip()
    if not needle:
        raise ValueError("Target device name must not be empty.")

    matches = tuple(d for d in devices if d.matches(needle, case_sensitive=case_sensitive))
    if not matches:
        raise DeviceNotFound(needle, (d.name for d in devices))

    chosen = matches[0]
    if len(matches) > 1:
        _LOGGER.warning(
            "'{}' matches {} devices ({}); using the first: {}",
            needle,
            len(matches),
            ", ".join(d.name for d in matches),
            chosen.name,
        )
    return TargetResolution(device=chosen, matches=matches)
