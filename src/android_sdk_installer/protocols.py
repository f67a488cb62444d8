"""Protocol definitions for the installer's collaborators.

The pipeline and orchestrator depend on these interfaces rather than on
concrete classes, so tests can substitute doubles for the download
transport, the decompressors, sdkmanager, and the filesystem.

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class ArchiveDownloader(Protocol):
    """Protocol for fetching the latest command-line tools archive."""

    def download(self, target_root: Path, on_progress: ProgressCallback | None = None) -> Path:
        """Download the archive into a directory.

        Args:
            target_root: Directory to write the archive into.
            on_progress: Called with (bytes received, bytes total). The total
                is 0 while unknown.

        Returns:
            Path to the downloaded archive file.
        """
        ...


@runtime_checkable
class Extractor(Protocol):
    """Protocol for a zip decompression capability."""

    name: str

    def is_available(self) -> bool:
        """Check whether this extractor can run on the current system."""
        ...

    def extract(
        self,
        archive: Path,
        destination: Path,
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        """Unpack an archive.

        Args:
            archive: Zip file to unpack.
            destination: Directory to unpack into (created if missing).
            verbose: List extracted entries.
            inherit_stdio: Let output go straight to the parent's streams
                instead of yielding it.

        Yields:
            Output lines, when not inheriting stdio.

        Returns:
            Exit code; 0 on success.
        """
        ...


@runtime_checkable
class PackageInstaller(Protocol):
    """Protocol for installing SDK packages with the unpacked tools."""

    def install(
        self,
        tools_dir: Path,
        sdk_root: Path,
        packages: Sequence[str],
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        """Install SDK packages.

        Args:
            tools_dir: The cmdline-tools directory containing bin/.
            sdk_root: SDK root to install into.
            packages: sdkmanager package paths.
            verbose: Run sdkmanager verbosely.
            inherit_stdio: Let output go straight to the parent's streams.

        Yields:
            Output lines, when not inheriting stdio.

        Returns:
            sdkmanager's exit code.
        """
        ...


@runtime_checkable
class PathSettingsLauncher(Protocol):
    """Protocol for opening the OS environment-variable settings."""

    def open_path_settings(self) -> None:
        """Open the settings UI, best effort."""
        ...


@runtime_checkable
class OutputSink(Protocol):
    """Protocol for a line-oriented message destination."""

    def writeln(self, text: str) -> None:
        """Write one line of text."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Abstracts filesystem access to enable testing without real I/O.
    """

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory.

        Args:
            path: Path to create.
            parents: Create parent directories if needed.
            exist_ok: Don't raise if directory exists.
        """
        ...

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        ...

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        ...

    def move(self, src: Path, dst: Path) -> None:
        """Move a file or directory tree.

        Args:
            src: Existing path.
            dst: New location; must not exist.
        """
        ...
