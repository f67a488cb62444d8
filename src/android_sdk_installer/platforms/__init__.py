"""Host platform implementations."""

from __future__ import annotations

import sys

from android_sdk_installer.errors import UnsupportedPlatformError

from .base import BasePlatform
from .linux import LinuxPlatform
from .macos import MacOSPlatform
from .windows import WindowsPlatform

__all__ = [
    "BasePlatform",
    "LinuxPlatform",
    "MacOSPlatform",
    "WindowsPlatform",
    "PLATFORMS",
    "get_platform",
]


# Keyed by sys.platform.
PLATFORMS: dict[str, type[BasePlatform]] = {
    "linux": LinuxPlatform,
    "darwin": MacOSPlatform,
    "win32": WindowsPlatform,
}


def get_platform(os_identity: str | None = None) -> BasePlatform:
    """Get a host platform instance.

    Args:
        os_identity: A sys.platform value. Defaults to the running host.

    Returns:
        Platform instance.

    Raises:
        UnsupportedPlatformError: If the host is not supported.
    """
    if os_identity is None:
        os_identity = sys.platform
    if os_identity not in PLATFORMS:
        raise UnsupportedPlatformError(os_identity)
    return PLATFORMS[os_identity]()
