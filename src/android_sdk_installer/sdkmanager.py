"""sdkmanager invocation."""

from __future__ import annotations

import logging
from collections.abc import Generator, Sequence
from pathlib import Path

from android_sdk_installer.extract import COMMAND_NOT_FOUND
from android_sdk_installer.platforms import BasePlatform
from android_sdk_installer.process import stream_command

logger = logging.getLogger(__name__)

# sdkmanager asks once per unaccepted license; answer more times than it asks.
LICENSE_ANSWERS = "y\n" * 32


class SdkManager:
    """Installs SDK packages with an unpacked cmdline-tools directory."""

    def __init__(self, host: BasePlatform) -> None:
        """Initialize with the host that decides the launcher's name.

        Args:
            host: Host platform.
        """
        self.host = host

    def build_argv(
        self, tools_dir: Path, sdk_root: Path, packages: Sequence[str], verbose: bool
    ) -> list[str]:
        """Build the sdkmanager command line.

        Args:
            tools_dir: The cmdline-tools directory containing bin/.
            sdk_root: SDK root to install into.
            packages: sdkmanager package paths.
            verbose: Add sdkmanager's --verbose flag.

        Returns:
            Command and arguments.
        """
        argv = [
            str(self.host.tool_script(tools_dir, "sdkmanager")),
            f"--sdk_root={sdk_root}",
            "--install",
            *packages,
        ]
        if verbose:
            argv.append("--verbose")
        return argv

    def install(
        self,
        tools_dir: Path,
        sdk_root: Path,
        packages: Sequence[str],
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        """Install packages, accepting their licenses.

        Yields:
            sdkmanager's output lines, when not inheriting stdio.

        Returns:
            sdkmanager's exit code, or 127 if it could not be started.
        """
        argv = self.build_argv(tools_dir, sdk_root, packages, verbose)
        try:
            return (
                yield from stream_command(
                    argv, inherit_stdio=inherit_stdio, input_text=LICENSE_ANSWERS
                )
            )
        except OSError as e:
            logger.error("Could not run sdkmanager: %s", e)
            return COMMAND_NOT_FOUND
