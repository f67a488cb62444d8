"""Linux host platform."""

from __future__ import annotations

from pathlib import Path

from .base import BasePlatform


class LinuxPlatform(BasePlatform):
    """Linux host: SDK under ~/Android/Sdk."""

    name = "linux"
    archive_host_os = "linux"

    @property
    def default_sdk_root(self) -> Path:
        """Get the default SDK root.

        Returns:
            Path to ~/Android/Sdk
        """
        return Path.home() / "Android" / "Sdk"
