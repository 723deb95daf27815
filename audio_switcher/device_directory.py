"""
Windows Core Audio device directory.

Lists render endpoints and changes the default playback device through
pycaw/comtypes. The rest of the application only sees the
``DeviceDirectory`` protocol, so tests can substitute an in-memory fake.
"""

from __future__ import annotations

import sys
import warnings
from types import SimpleNamespace
from typing import List, Optional, Protocol

from shared.device_definition import PlaybackDevice
from audio_switcher import logger as app_logger
from audio_switcher.errors import DependencyMissing, EnumerationError, QueryError, SwitchError

_LOGGER = app_logger.get_logger()

E_RENDER = 0
E_MULTIMEDIA = 1
DEVICE_STATE_ACTIVE = 0x00000001
# ERole member names, in the order roles are switched.
ROLES = ("eConsole", "eMultimedia", "eCommunications")


class DeviceDirectory(Protocol):
    def list_playback_devices(self) -> List[PlaybackDevice]:
        ...

    def get_current_default_playback_device(self) -> str:
        ...

    def set_default_playback_device(self, device_id: str) -> None:
        ...


class WindowsDeviceDirectory:
    """Playback endpoint access backed by pycaw's AudioUtilities."""

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise DependencyMissing("Switching the default playback device requires Windows.")
        self._api = _load_audio_api()

    def list_playback_devices(self) -> List[PlaybackDevice]:
        """Active render endpoints in enumerator order."""
        try:
            enumerator = self._enumerator()
            default_id = self._default_id_or_none(enumerator)
            collection = enumerator.EnumAudioEndpoints(E_RENDER, DEVICE_STATE_ACTIVE)
            devices: List[PlaybackDevice] = []
            for index in range(collection.GetCount()):
                endpoint = collection.Item(index)
                device_id = endpoint.GetId()
                devices.append(
                    PlaybackDevice(
                        device_id=device_id,
                        name=self._friendly_name(endpoint) or device_id,
                        is_default=device_id == default_id,
                    )
                )
        except (OSError, self._api.COMError) as exc:
            raise EnumerationError(f"Unable to enumerate playback devices: {exc}") from exc
        return devices

    def get_current_default_playback_device(self) -> str:
        try:
            endpoint = self._enumerator().GetDefaultAudioEndpoint(E_RENDER, E_MULTIMEDIA)
            return endpoint.GetId()
        except (OSError, self._api.COMError) as exc:
            raise QueryError(f"Unable to read the default playback device: {exc}") from exc

    def set_default_playback_device(self, device_id: str) -> None:
        """Make ``device_id`` the default for every role."""
        failed = []
        last_error: Optional[BaseException] = None
        for role_name in ROLES:
            role = getattr(self._api.ERole, role_name)
            try:
                self._api.AudioUtilities.SetDefaultDevice(device_id, roles=[role])
            except (OSError, self._api.COMError) as exc:
                failed.append(role_name)
                last_error = exc
        if failed:
            raise SwitchError(
                f"SetDefaultEndpoint failed for role(s) {', '.join(failed)}: {last_error}"
            )
        _LOGGER.debug("SetDefaultEndpoint succeeded for {}", device_id)

    def _enumerator(self):
        return self._api.AudioUtilities.GetDeviceEnumerator()

    def _default_id_or_none(self, enumerator) -> Optional[str]:
        try:
            return enumerator.GetDefaultAudioEndpoint(E_RENDER, E_MULTIMEDIA).GetId()
        except self._api.COMError:
            # No default render endpoint at all.
            return None

    def _friendly_name(self, endpoint) -> Optional[str]:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UserWarning)
                return self._api.AudioUtilities.CreateDevice(endpoint).FriendlyName
        except self._api.COMError as exc:
            _LOGGER.debug("Could not read friendly name for endpoint: {}", exc)
            return None


def _load_audio_api() -> SimpleNamespace:
    try:
        from comtypes import COMError
        from pycaw.constants import ERole
        from pycaw.pycaw import AudioUtilities
    except ImportError as exc:
        raise DependencyMissing(
            f"pycaw and comtypes are required to control audio devices ({exc})."
        ) from exc

    if not hasattr(AudioUtilities, "SetDefaultDevice"):
        raise DependencyMissing("The installed pycaw is too old to change the default device; upgrade pycaw.")

    return SimpleNamespace(AudioUtilities=AudioUtilities, COMError=COMError, ERole=ERole)
