"""Zip decompression capabilities.

Two extractors satisfy the Extractor protocol: NativeUnzip drives the
host's own archive tool, and PortableUnzip uses the zipfile module so an
installation can proceed on hosts without one.
"""

from __future__ import annotations

import logging
import shutil
import sys
import zipfile
from collections.abc import Generator
from pathlib import Path

from android_sdk_installer.process import stream_command

logger = logging.getLogger(__name__)

# Conventional shell status for a command that could not be run.
COMMAND_NOT_FOUND = 127


class NativeUnzip:
    """Extracts with the host's archive tool.

    Uses ``unzip`` on POSIX hosts and the bsdtar-based ``tar`` that ships
    with Windows 10 and later.
    """

    name = "native"

    def __init__(self, command: str | None = None) -> None:
        """Initialize the extractor.

        Args:
            command: Executable to run. Defaults to the host's usual tool.
        """
        self.command = command or ("tar" if sys.platform == "win32" else "unzip")

    def is_available(self) -> bool:
        """Check whether the archive tool is on PATH."""
        return shutil.which(self.command) is not None

    def build_argv(self, archive: Path, destination: Path, verbose: bool) -> list[str]:
        """Build the extraction command line.

        Args:
            archive: Zip file to unpack.
            destination: Directory to unpack into.
            verbose: List entries as they are extracted.

        Returns:
            Command and arguments.
        """
        if Path(self.command).stem == "tar":
            flags = "-xvf" if verbose else "-xf"
            return [self.command, flags, str(archive), "-C", str(destination)]
        argv = [self.command, "-o"]
        if not verbose:
            argv.append("-q")
        argv += [str(archive), "-d", str(destination)]
        return argv

    def extract(
        self,
        archive: Path,
        destination: Path,
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        """Unpack an archive with the native tool.

        Yields:
            The tool's output lines, when not inheriting stdio.

        Returns:
            The tool's exit code, or 127 if it could not be started.
        """
        argv = self.build_argv(archive, destination, verbose)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            return (yield from stream_command(argv, inherit_stdio=inherit_stdio))
        except OSError as e:
            logger.debug("Could not run %s: %s", self.command, e)
            return COMMAND_NOT_FOUND


class PortableUnzip:
    """Extracts with the zipfile module, restoring Unix permission bits."""

    name = "portable"

    def is_available(self) -> bool:
        """The zipfile module is always present."""
        return True

    def extract(
        self,
        archive: Path,
        destination: Path,
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        """Unpack an archive in-process.

        There is no child process, so ``inherit_stdio`` has no effect.

        Yields:
            One line per extracted entry when ``verbose`` is set.

        Returns:
            0 on success, 1 if the archive is unreadable or a file cannot be
            written.
        """
        try:
            destination.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive) as zf:
                for info in zf.infolist():
                    target = Path(zf.extract(info, destination))
                    # zipfile drops the executable bits that the tool scripts need.
                    mode = (info.external_attr >> 16) & 0o777
                    if mode and not info.is_dir():
                        target.chmod(mode)
                    if verbose:
                        yield f"  inflating: {target}"
        except (zipfile.BadZipFile, OSError) as e:
            logger.error("Could not extract %s: %s", archive, e)
            return 1
        return 0
