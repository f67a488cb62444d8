"""Installation pipeline for the SDK command-line tools.

The pipeline is a generator of progress events. Stages run strictly in
order and each finishes, child processes included, before the next
begins:

1. Extracting: unpack the archive into a staging directory in the SDK root,
   falling back to the portable extractor when the native one is missing
   or fails.
2. Reconciling: the archive unpacks to ``cmdline-tools/`` but sdkmanager
   only recognises its own location as ``cmdline-tools/latest/``, so the
   unpacked directory is moved there, replacing any earlier install.
3. Installing platform tools (optional): run the unpacked sdkmanager.
4. Completed: report the directories to add to PATH.

Failures raise the matching InstallError from the stage that failed and
end the run. Nothing is retried; running again starts from stage 1.
"""

from __future__ import annotations

import errno
import logging
import tempfile
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from android_sdk_installer.errors import (
    CmdlineToolsExtractError,
    CmdlineToolsPrepareError,
    PlatformToolsInstallError,
)
from android_sdk_installer.extract import NativeUnzip, PortableUnzip
from android_sdk_installer.filesystem import RealFileSystem
from android_sdk_installer.platforms import BasePlatform
from android_sdk_installer.protocols import (
    Extractor,
    FileSystem,
    PackageInstaller,
    PathSettingsLauncher,
)
from android_sdk_installer.sdkmanager import SdkManager
from android_sdk_installer.types import (
    Completed,
    Extracting,
    InstallingPlatformTools,
    Message,
    ProgressEvent,
    Reconciling,
)

logger = logging.getLogger(__name__)

CMDLINE_TOOLS_DIR = "cmdline-tools"
LATEST_DIR = "latest"
PLATFORM_TOOLS_DIR = "platform-tools"
PLATFORM_TOOLS_PACKAGES = ("platform-tools",)

E = TypeVar("E")


@dataclass(frozen=True)
class ArchiveHandle:
    """A local command-line tools archive.

    Attributes:
        path: The zip file.
        owned: True if the installer downloaded it and may delete it.
    """

    path: Path
    owned: bool = False


def cmdline_tools_dir(sdk_root: Path) -> Path:
    """Get where the command-line tools live once installed."""
    return sdk_root / CMDLINE_TOOLS_DIR / LATEST_DIR


def _relay(lines: Generator[str, None, int], to_event: Callable[[str], E]) -> Generator[E, None, int]:
    """Re-emit output lines as events and pass on the generator's result."""
    while True:
        try:
            line = next(lines)
        except StopIteration as stop:
            return stop.value
        yield to_event(line)


class InstallPipeline:
    """Runs the installation stages against an SDK root.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.
    """

    def __init__(
        self,
        native_extractor: Extractor,
        fallback_extractor: Extractor,
        package_installer: PackageInstaller,
        path_settings_launcher: PathSettingsLauncher,
        filesystem: FileSystem,
    ) -> None:
        """Initialize the pipeline with its collaborators.

        Args:
            native_extractor: Preferred decompressor.
            fallback_extractor: Decompressor used when the native one is
                unavailable or fails.
            package_installer: Runs sdkmanager.
            path_settings_launcher: Opens the OS path settings.
            filesystem: Filesystem abstraction.
        """
        self.native_extractor = native_extractor
        self.fallback_extractor = fallback_extractor
        self.package_installer = package_installer
        self.path_settings_launcher = path_settings_launcher
        self.fs = filesystem

    @classmethod
    def create(
        cls,
        host: BasePlatform,
        filesystem: FileSystem | None = None,
    ) -> InstallPipeline:
        """Factory method for production instantiation.

        Args:
            host: Host platform, which also opens its path settings.
            filesystem: Optional filesystem abstraction (created if not provided).

        Returns:
            Configured InstallPipeline instance.
        """
        return cls(
            native_extractor=NativeUnzip(),
            fallback_extractor=PortableUnzip(),
            package_installer=SdkManager(host),
            path_settings_launcher=host,
            filesystem=filesystem or RealFileSystem(),
        )

    def run(
        self,
        sdk_root: Path,
        archive: ArchiveHandle,
        *,
        delete_archive: bool = True,
        install_platform_tools: bool = True,
        launch_path_settings: bool = True,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Iterator[ProgressEvent]:
        """Install the command-line tools from an archive.

        Args:
            sdk_root: Existing SDK root directory.
            archive: Archive to install from.
            delete_archive: Delete an owned archive once it is unpacked.
            install_platform_tools: Install platform-tools with sdkmanager.
            launch_path_settings: Open the OS path settings at the end.
            verbose: Run child processes verbosely.
            inherit_stdio: Let child processes write to this process's
                streams instead of emitting their output as events.

        Yields:
            Progress events, ending with Completed on success.

        Raises:
            CmdlineToolsExtractError: If both extractors fail.
            CmdlineToolsPrepareError: If the tools cannot be moved into place.
            PlatformToolsInstallError: If sdkmanager fails.
        """
        staging = self._make_staging_dir(sdk_root)
        try:
            yield from self._extract(archive.path, staging, verbose, inherit_stdio)
            tools_dir = yield from self._reconcile(staging, sdk_root)
        finally:
            self._remove_staging_dir(staging)

        if archive.owned and delete_archive:
            yield from self._delete_archive(archive.path)

        path_entries = [tools_dir / "bin"]
        if install_platform_tools:
            yield from self._install_platform_tools(tools_dir, sdk_root, verbose, inherit_stdio)
            path_entries.append(sdk_root / PLATFORM_TOOLS_DIR)

        if launch_path_settings:
            try:
                self.path_settings_launcher.open_path_settings()
            except OSError as e:
                logger.warning("Could not open path settings: %s", e)

        yield Completed(path_entries=tuple(dict.fromkeys(path_entries)))

    def _make_staging_dir(self, sdk_root: Path) -> Path:
        try:
            return Path(tempfile.mkdtemp(prefix=f".{CMDLINE_TOOLS_DIR}-", dir=sdk_root))
        except OSError as e:
            raise CmdlineToolsPrepareError(e) from e

    def _remove_staging_dir(self, staging: Path) -> None:
        try:
            if self.fs.exists(staging):
                self.fs.rmtree(staging)
        except OSError as e:
            logger.warning("Could not remove staging directory %s: %s", staging, e)

    def _extract(
        self, archive: Path, staging: Path, verbose: bool, inherit_stdio: bool
    ) -> Generator[Extracting, None, None]:
        if self.native_extractor.is_available():
            yield Extracting(using_native_unzip=True)
            code = yield from _relay(
                self.native_extractor.extract(
                    archive, staging, verbose=verbose, inherit_stdio=inherit_stdio
                ),
                lambda line: Extracting(using_native_unzip=True, message=Message(line)),
            )
            if code == 0:
                return
            logger.debug("Native unzip failed with exit code %d", code)
        else:
            logger.debug("Native unzip is not available")

        yield Extracting(
            using_native_unzip=False,
            message=Message("Could not use native unzip tool", is_error=True),
        )
        code = yield from _relay(
            self.fallback_extractor.extract(
                archive, staging, verbose=verbose, inherit_stdio=inherit_stdio
            ),
            lambda line: Extracting(using_native_unzip=False, message=Message(line)),
        )
        if code != 0:
            raise CmdlineToolsExtractError(code)

    def _reconcile(self, staging: Path, sdk_root: Path) -> Generator[Reconciling, None, Path]:
        yield Reconciling()
        unpacked = staging / CMDLINE_TOOLS_DIR
        target = cmdline_tools_dir(sdk_root)
        try:
            if not self.fs.is_dir(unpacked):
                raise FileNotFoundError(
                    errno.ENOENT, "Archive did not contain a cmdline-tools directory", str(unpacked)
                )
            self.fs.mkdir(target.parent, parents=True, exist_ok=True)
            if self.fs.is_dir(target):
                self.fs.rmtree(target)
            elif self.fs.exists(target):
                self.fs.unlink(target)
            self.fs.move(unpacked, target)
        except OSError as e:
            raise CmdlineToolsPrepareError(e) from e
        yield Reconciling(message=Message(f"Command-line tools moved to {target}"))
        return target

    def _delete_archive(self, archive: Path) -> Generator[Reconciling, None, None]:
        try:
            self.fs.unlink(archive)
        except OSError as e:
            logger.debug("Could not delete %s: %s", archive, e)
            yield Reconciling(message=Message(f"Could not delete {archive}: {e}", is_error=True))
        else:
            yield Reconciling(message=Message(f"Deleted {archive}"))

    def _install_platform_tools(
        self, tools_dir: Path, sdk_root: Path, verbose: bool, inherit_stdio: bool
    ) -> Generator[InstallingPlatformTools, None, None]:
        yield InstallingPlatformTools()
        code = yield from _relay(
            self.package_installer.install(
                tools_dir,
                sdk_root,
                PLATFORM_TOOLS_PACKAGES,
                verbose=verbose,
                inherit_stdio=inherit_stdio,
            ),
            lambda line: InstallingPlatformTools(message=Message(line)),
        )
        if code != 0:
            raise PlatformToolsInstallError(code)
