"""
Registry-backed configuration for the idle audio switcher.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from audio_switcher import logger as app_logger

_LOGGER = app_logger.get_logger()

_BASE_SUBKEY = r"Software\IdleAudioSwitcher"
DEFAULT_TARGET_DEVICE = "Speakers"
DEFAULT_INACTIVITY_SECONDS = 60
_MIN_INACTIVITY_SECONDS = 1
_MAX_INACTIVITY_SECONDS = 86400


@dataclass(eq=True)
class SwitcherSettings:
    target_device: str = DEFAULT_TARGET_DEVICE
    inactivity_seconds: int = DEFAULT_INACTIVITY_SECONDS
    case_sensitive: bool = False

    @property
    def threshold_ms(self) -> int:
        return self.inactivity_seconds * 1000

    def with_overrides(
        self,
        *,
        target_device: Optional[str] = None,
        inactivity_seconds: Optional[int] = None,
        case_sensitive: Optional[bool] = None,
    ) -> "SwitcherSettings":
        """Return a copy with every non-None argument applied."""
        changes = {}
        if target_device is not None:
            changes["target_device"] = target_device
        if inactivity_seconds is not None:
            changes["inactivity_seconds"] = inactivity_seconds
        if case_sensitive is not None:
            changes["case_sensitive"] = case_sensitive
        return replace(self, **changes)


class SettingsManager:
    """Loads persisted settings from HKCU and clamps invalid data."""

    def __init__(self, *, hive: Optional[int] = None, winreg_module=None) -> None:
        self._winreg = winreg_module
        self.hive = hive

    def read_settings(self) -> SwitcherSettings:
        winreg = self._winreg_module()
        if winreg is None:
            return SwitcherSettings()

        key = self._open_key(winreg)
        if key is None:
            return SwitcherSettings()

        try:
            return SwitcherSettings(
                target_device=self._read_target(winreg, key),
                inactivity_seconds=self._read_inactivity(winreg, key),
                case_sensitive=self._read_bool(winreg, key, "CaseSensitive", False),
            )
        finally:
            winreg.CloseKey(key)

    def _winreg_module(self):
        if self._winreg is None:
            try:
                import winreg
            except ModuleNotFoundError:  # pragma: no cover - non-Windows environments
                _LOGGER.debug("winreg unavailable; using default settings.")
                return None
            self._winreg = winreg
        return self._winreg

    def _open_key(self, winreg):
        hive = self.hive if self.hive is not None else winreg.HKEY_CURRENT_USER
        try:
            return winreg.OpenKey(hive, _BASE_SUBKEY, 0, winreg.KEY_READ)
        except FileNotFoundError:
            return None

    def _read_target(self, winreg, key) -> str:
        raw = self._read_value(winreg, key, "TargetDevice", winreg.REG_SZ)
        if raw is None or not str(raw).strip():
            return DEFAULT_TARGET_DEVICE
        return str(raw)

    def _read_bool(self, winreg, key, name: str, default: bool) -> bool:
        raw = self._read_value(winreg, key, name, winreg.REG_DWORD)
        if raw is None:
            return default
        return bool(raw)

    def _read_inactivity(self, winreg, key) -> int:
        raw = self._read_value(winreg, key, "InactivitySeconds", winreg.REG_DWORD)
        if raw is None:
            return DEFAULT_INACTIVITY_SECONDS
        raw = int(raw)
        if raw < _MIN_INACTIVITY_SECONDS or raw > _MAX_INACTIVITY_SECONDS:
            _LOGGER.warning(
                "Invalid inactivity threshold {} found in registry. Clamping to safe bounds.",
                raw,
            )
        return max(_MIN_INACTIVITY_SECONDS, min(_MAX_INACTIVITY_SECONDS, raw))

    def _read_value(self, winreg, key, name: str, expected_type: int):
        try:
            value, value_type = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        if value_type != expected_type:
            _LOGGER.warning("Registry value {} has unexpected type {}.", name, value_type)
            return None
        return value
