"""macOS host platform."""

from __future__ import annotations

from pathlib import Path

from .base import BasePlatform


class MacOSPlatform(BasePlatform):
    """macOS host: SDK under the user's Library, where Android Studio puts it."""

    name = "macos"
    archive_host_os = "macosx"

    @property
    def default_sdk_root(self) -> Path:
        """Get the default SDK root.

        Returns:
            Path to ~/Library/Android/Sdk
        """
        return Path.home() / "Library" / "Android" / "Sdk"
