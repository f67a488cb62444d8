"""Windows host platform."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from .base import BasePlatform

logger = logging.getLogger(__name__)

PATH_SETTINGS_COMMAND = ["rundll32.exe", "sysdm.cpl,EditEnvironmentVariables"]


class WindowsPlatform(BasePlatform):
    """Windows host platform handler."""

    name = "windows"
    archive_host_os = "windows"
    script_suffix = ".bat"

    @property
    def default_sdk_root(self) -> Path:
        """Get the default SDK root.

        Returns:
            Path to %LOCALAPPDATA%\\Android\\Sdk
        """
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            base = Path(local_app_data)
        else:
            base = Path.home() / "AppData" / "Local"
        return base / "Android" / "Sdk"

    def open_path_settings(self) -> None:
        """Open the environment variables dialog without waiting for it."""
        try:
            subprocess.Popen(PATH_SETTINGS_COMMAND)
        except OSError as e:
            logger.warning("Could not open path settings: %s", e)
