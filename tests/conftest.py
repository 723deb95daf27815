"""Shared fixtures: fake device directory, scripted idle source, Qt core app."""

from __future__ import annotations

import os
import tempfile

os.environ.setdefault("IDLE_AUDIO_SWITCHER_LOG_DIR", tempfile.mkdtemp(prefix="idle-audio-switcher-"))

import pytest

from shared.device_definition import PlaybackDevice
from audio_switcher.errors import EnumerationError, QueryError, SwitchError

HEADSET = PlaybackDevice("{0.0.0.00000000}.{headset}", "Headphones (USB Headset)", is_default=True)
SPEAKERS = PlaybackDevice("{0.0.0.00000000}.{speakers}", "Speakers (Realtek(R) Audio)")
MONITOR = PlaybackDevice("{0.0.0.00000000}.{monitor}", "DELL U2720Q (NVIDIA High Definition Audio)")


class FakeDirectory:
    def __init__(self, devices=None, *, default_id=None) -> None:
        self.devices = list(devices if devices is not None else [HEADSET, SPEAKERS, MONITOR])
        self.default_id = default_id or next(
            (d.device_id for d in self.devices if d.is_default), None
        )
        self.switch_calls = []
        self.fail_switches = 0
        self.fail_query = False
        self.fail_enumeration = False

    def list_playback_devices(self):
        if self.fail_enumeration:
            raise EnumerationError("audio service unavailable")
        return list(self.devices)

    def get_current_default_playback_device(self):
        if self.fail_query:
            raise QueryError("audio service unavailable")
        return self.default_id

    def set_default_playback_device(self, device_id):
        self.switch_calls.append(device_id)
        if self.fail_switches:
            self.fail_switches -= 1
            raise SwitchError("SetDefaultEndpoint rejected")
        self.default_id = device_id


class ScriptedIdle:
    """Returns queued idle samples, repeating the last one once exhausted."""

    def __init__(self, *samples: int) -> None:
        self.samples = list(samples) or [0]
        self._index = 0

    def __call__(self) -> int:
        value = self.samples[min(self._index, len(self.samples) - 1)]
        self._index += 1
        return value


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture(scope="session")
def qt_app():
    from PySide6.QtCore import QCoreApplication

    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def log_messages():
    from loguru import logger

    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


class FakeWinreg:
    HKEY_CURRENT_USER = 0x80000001
    KEY_READ = 0x20019
    REG_SZ = 1
    REG_DWORD = 4

    def __init__(self, values=None, *, key_exists=True) -> None:
        self.values = values or {}
        self.key_exists = key_exists
        self.opened = []
        self.closed = 0

    def OpenKey(self, hive, subkey, reserved, access):
        if not self.key_exists:
            raise FileNotFoundError(subkey)
        self.opened.append((hive, subkey))
        return object()

    def CloseKey(self, key):
        self.closed += 1

    def QueryValueEx(self, key, name):
        if name not in self.values:
            raise FileNotFoundError(name)
        return self.values[name]
