"""
Entry point for the idle audio switcher.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from shared.device_definition import PlaybackDevice
from audio_switcher import logger as app_logger
from audio_switcher.app import APP_NAME, APP_VERSION, EXIT_DIRECTORY_FAILURE, EXIT_OK, SwitcherApp
from audio_switcher.device_directory import DeviceDirectory, WindowsDeviceDirectory
from audio_switcher.errors import DependencyMissing, DeviceNotFound, EnumerationError, QueryError
from audio_switcher.settings import SettingsManager

_LOGGER = app_logger.get_logger()

EXIT_CONFIG_ERROR = 2
EXIT_DEPENDENCY_MISSING = 3


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number of seconds, got '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError("inactivity threshold must be greater than zero")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idle-audio-switcher",
        description="Switch the default playback device after a period of keyboard and mouse inactivity.",
    )
    parser.add_argument(
        "-d",
        "--device",
        help="name (or part of the name) of the playback device to switch to",
    )
    parser.add_argument(
        "-t",
        "--inactivity-seconds",
        type=_positive_int,
        help="seconds without input before switching",
    )
    parser.add_argument(
        "--case-sensitive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="match the device name case-sensitively (default: ignore case)",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="print the available playback devices and exit",
    )
    parser.add_argument("--log-file", type=Path, help="write the log file here instead of the default location")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every status tick to the console")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def _print_devices(devices: Sequence[PlaybackDevice]) -> None:
    if not devices:
        print("No active playback devices found.")
        return
    for index, device in enumerate(devices, start=1):
        marker = "*" if device.is_default else " "
        print(f"{marker} {index:>2}. {device.name}")
        print(f"       {device.device_id}")


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    directory_factory: Callable[[], DeviceDirectory] = WindowsDeviceDirectory,
    settings_manager: Optional[SettingsManager] = None,
) -> int:
    """Parse arguments, resolve the target device and monitor until cancelled."""
    args = build_parser().parse_args(argv)
    try:
        app_logger.configure(args.log_file, verbose=args.verbose, force=True)
    except OSError as exc:
        print(f"Cannot write log file {args.log_file}: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    settings = (settings_manager or SettingsManager()).read_settings().with_overrides(
        target_device=args.device,
        inactivity_seconds=args.inactivity_seconds,
        case_sensitive=args.case_sensitive,
    )

    try:
        directory = directory_factory()
    except DependencyMissing as exc:
        _LOGGER.error("Missing dependency: {}", exc)
        return EXIT_DEPENDENCY_MISSING

    if args.list_devices:
        try:
            _print_devices(directory.list_playback_devices())
        except EnumerationError as exc:
            _LOGGER.error("{}", exc)
            return EXIT_DIRECTORY_FAILURE
        return EXIT_OK

    switcher = SwitcherApp(settings=settings, directory=directory)
    try:
        switcher.resolve_target()
    except DeviceNotFound as exc:
        _LOGGER.error("{}. Available playback devices:", exc)
        for name in exc.available:
            _LOGGER.error("  - {}", name)
        return EXIT_CONFIG_ERROR
    except ValueError as exc:
        _LOGGER.error("Invalid configuration: {}", exc)
        return EXIT_CONFIG_ERROR
    except (EnumerationError, QueryError) as exc:
        _LOGGER.error("{}", exc)
        return EXIT_DIRECTORY_FAILURE

    return switcher.run()


if __name__ == "__main__":
    raise SystemExit(main())
