"""Base host platform with shared behavior.

Hosts vary only in where the SDK lives by default, how the remote
repository tags their archives, how SDK tool launchers are named, and
whether there is a settings UI for editing PATH.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class BasePlatform(ABC):
    """Base class for host platform implementations."""

    name: str
    archive_host_os: str
    script_suffix: str = ""

    @property
    @abstractmethod
    def default_sdk_root(self) -> Path:
        """Get the conventional SDK root for this host."""
        ...

    def tool_script(self, tools_dir: Path, tool: str) -> Path:
        """Get the launcher script for an SDK tool.

        Args:
            tools_dir: A cmdline-tools directory containing bin/.
            tool: Tool name, e.g. "sdkmanager".

        Returns:
            Path to the launcher.
        """
        return tools_dir / "bin" / f"{tool}{self.script_suffix}"

    def open_path_settings(self) -> None:
        """Open the system PATH settings, if this host has such a UI."""
        logger.debug("No path settings UI on %s", self.name)
