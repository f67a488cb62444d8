"""Installation orchestration for the Android SDK tools."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskProgressColumn,
    TransferSpeedColumn,
)

from android_sdk_installer.config import InstallOptions
from android_sdk_installer.download import CmdlineToolsDownloader
from android_sdk_installer.output import ConsoleSink
from android_sdk_installer.paths import resolve_default_root
from android_sdk_installer.pipeline import ArchiveHandle, InstallPipeline
from android_sdk_installer.platforms import get_platform
from android_sdk_installer.protocols import ArchiveDownloader, OutputSink
from android_sdk_installer.types import STAGE_HEADINGS, STAGE_IS_VERBOSE, Stage

logger = logging.getLogger(__name__)

MessageFormatter = Callable[..., str]

# Textual progress for unknown sizes is reported once per this many bytes.
UNKNOWN_SIZE_REPORT_INTERVAL = 1024 * 1024


def plain_message(message: str, *, is_error: bool) -> str:
    """Format a message unchanged."""
    return message


class TextProgress:
    """Turns download progress callbacks into occasional text lines.

    A line is written whenever the whole percentage changes, or, while
    the total is unknown, every UNKNOWN_SIZE_REPORT_INTERVAL bytes.
    """

    def __init__(self, write: Callable[[str], None]) -> None:
        self.write = write
        self._last_mark: tuple[bool, int] | None = None

    def __call__(self, count: int, total: int) -> None:
        if total:
            percent = count * 100 // total
            mark = (True, percent)
            line = f"Downloading SDK command-line tools: {count}/{total} ({percent}%)"
        else:
            mark = (False, count // UNKNOWN_SIZE_REPORT_INTERVAL)
            line = f"Downloading SDK command-line tools: {count} bytes"
        if mark != self._last_mark:
            self._last_mark = mark
            self.write(line)


class SdkInstaller:
    """Installs the SDK command-line tools and reports what to add to PATH.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.
    """

    def __init__(
        self,
        os_identity: str,
        downloader: ArchiveDownloader,
        pipeline: InstallPipeline,
        console: Console,
        error_console: Console,
    ) -> None:
        """Initialize the installer with required dependencies.

        Args:
            os_identity: sys.platform value of the host.
            downloader: Archive provider used when no archive is supplied.
            pipeline: Installation pipeline.
            console: Default destination for messages.
            error_console: Default destination for warnings and errors.
        """
        self.os_identity = os_identity
        self.downloader = downloader
        self.pipeline = pipeline
        self.console = console
        self.error_console = error_console

    @classmethod
    def create(
        cls,
        os_identity: str | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> SdkInstaller:
        """Factory method for production instantiation.

        Args:
            os_identity: sys.platform value. Defaults to the running host.
            console: Optional stdout console (created if not provided).
            error_console: Optional stderr console (created if not provided).

        Returns:
            Configured SdkInstaller instance.

        Raises:
            UnsupportedPlatformError: If the host is not supported.
        """
        os_identity = os_identity or sys.platform
        host = get_platform(os_identity)
        return cls(
            os_identity=os_identity,
            downloader=CmdlineToolsDownloader.create(host),
            pipeline=InstallPipeline.create(host),
            console=console or Console(),
            error_console=error_console or Console(stderr=True),
        )

    def install(
        self,
        options: InstallOptions,
        output: OutputSink | None = None,
        message_formatter: MessageFormatter = plain_message,
    ) -> tuple[Path, ...]:
        """Install the command-line tools, and the platform tools if requested.

        If ``output`` is given, every message goes to it and child process
        output is captured and shown as messages. Otherwise messages go to
        the consoles and child processes write to this process's streams
        directly, so their output is shown even when not verbose.

        Args:
            options: Installation options.
            output: Optional sink for all messages.
            message_formatter: Called as ``formatter(text, is_error=...)``
                before each message is written.

        Returns:
            The directories to add to PATH.

        Raises:
            UnsupportedPlatformError: If no SDK root was given and the host
                has no default.
            ArchiveDownloadError: If the archive cannot be downloaded.
            CmdlineToolsExtractError: If the archive cannot be extracted.
            CmdlineToolsPrepareError: If the tools cannot be moved into place.
            PlatformToolsInstallError: If sdkmanager fails.
        """
        message_sink = output or ConsoleSink(self.console)
        error_sink = output or ConsoleSink(self.error_console)

        def write_message(text: str) -> None:
            message_sink.writeln(message_formatter(text, is_error=False))

        def write_error(text: str) -> None:
            error_sink.writeln(message_formatter(text, is_error=True))

        sdk_root = self._resolve_sdk_root(options.sdk_root)

        if options.archive is not None:
            archive = ArchiveHandle(options.archive, owned=False)
        else:
            archive = self._download_archive(sdk_root, output, write_message)

        path_entries: tuple[Path, ...] = ()
        current_stage: Stage | None = None
        for event in self.pipeline.run(
            sdk_root,
            archive,
            delete_archive=options.delete_archive,
            install_platform_tools=options.install_platform_tools,
            launch_path_settings=options.launch_path_settings,
            verbose=options.verbose,
            inherit_stdio=output is None,
        ):
            if event.stage is not current_stage:
                current_stage = event.stage
                heading = STAGE_HEADINGS[event.stage]
                if heading:
                    write_message(heading)

            if event.stage is Stage.COMPLETED:
                path_entries = event.path_entries

            message = event.message
            if message is None:
                continue
            if message.is_error:
                write_error(message.text)
            elif options.verbose or not STAGE_IS_VERBOSE[event.stage]:
                write_message(message.text)

        write_message(
            "Android SDK installed. Remember to add the following directories to your PATH:"
        )
        for path in path_entries:
            message_sink.writeln(f"  {path}")
        return path_entries

    def _resolve_sdk_root(self, sdk_root: Path | None) -> Path:
        if sdk_root is None:
            return resolve_default_root(self.os_identity)
        sdk_root.mkdir(parents=True, exist_ok=True)
        return sdk_root

    def _download_archive(
        self,
        sdk_root: Path,
        output: OutputSink | None,
        write_message: Callable[[str], None],
    ) -> ArchiveHandle:
        if output is None and self.console.is_terminal:
            write_message("Downloading SDK command-line tools:")
            with Progress(
                BarColumn(),
                TaskProgressColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=self.console,
            ) as progress:
                task = progress.add_task("Downloading", total=None)

                def on_progress(count: int, total: int) -> None:
                    progress.update(task, completed=count, total=total or None)

                path = self.downloader.download(sdk_root, on_progress)
        else:
            path = self.downloader.download(sdk_root, TextProgress(write_message))
        logger.debug("Downloaded archive %s", path)
        return ArchiveHandle(path, owned=True)
