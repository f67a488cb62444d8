"""CLI command using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from android_sdk_installer import __version__
from android_sdk_installer.config import InstallOptions
from android_sdk_installer.context import create_context
from android_sdk_installer.download import ArchiveDownloadError
from android_sdk_installer.errors import (
    CmdlineToolsExtractError,
    CmdlineToolsPrepareError,
    PlatformToolsInstallError,
    UnsupportedPlatformError,
)
from android_sdk_installer.output import ConsoleSink

app = typer.Typer(
    name="android-sdk-installer",
    help="Install the Android SDK command-line and platform tools.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Exit codes; 2 (usage error) comes from Click.
EXIT_INVALID_OPTIONS = -1
EXIT_UNSUPPORTED_PLATFORM = -2
EXIT_EXTRACT_FAILED = -3
EXIT_PREPARE_FAILED = -4
EXIT_PLATFORM_TOOLS_FAILED = -5
EXIT_DOWNLOAD_FAILED = -6


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        Console().print(f"android-sdk-installer v{__version__}")
        raise typer.Exit()


def format_message(message: str, *, is_error: bool) -> str:
    """Prefix a message with its severity marker."""
    return f"{'!' if is_error else '*'} {message}"


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich.

    Args:
        verbose: Log debug records instead of warnings and above.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _validation_messages(error: ValidationError) -> list[str]:
    """Get the validators' own messages from a ValidationError."""
    messages = []
    for detail in error.errors():
        cause = detail.get("ctx", {}).get("error")
        messages.append(str(cause) if cause is not None else detail["msg"])
    return messages


@app.command()
def install(
    sdk_root: Annotated[
        Path | None,
        typer.Argument(
            help="SDK installation directory. A common, platform-specific location "
            "is chosen if omitted.",
            show_default=False,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show more installation details.")
    ] = False,
    launch_path_settings: Annotated[
        bool,
        typer.Option(
            "--launch-path-settings/--no-launch-path-settings",
            help="Open the system path settings after installation.",
        ),
    ] = True,
    platform_tools: Annotated[
        bool,
        typer.Option(
            "--platform-tools/--no-platform-tools",
            help="Install the SDK platform tools as well as the base SDK command-line tools.",
        ),
    ] = True,
    archive: Annotated[
        Path | None,
        typer.Option(
            "--archive",
            "-a",
            metavar="ARCHIVE",
            help="Use an existing SDK command-line tools archive, instead of downloading one.",
        ),
    ] = None,
    keep_archive: Annotated[
        bool,
        typer.Option("--keep-archive", help="Don't delete the SDK command-line tools archive."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    _context=typer.Option(None, hidden=True),
) -> None:
    """Install the Android SDK command-line and platform tools."""
    configure_logging(verbose)
    error_console = _context.error_console if _context else Console(stderr=True)
    errors = ConsoleSink(error_console)

    def write_error(message: str) -> None:
        errors.writeln(format_message(message, is_error=True))

    try:
        options = InstallOptions(
            sdk_root=sdk_root,
            archive=archive,
            delete_archive=not keep_archive,
            launch_path_settings=launch_path_settings,
            install_platform_tools=platform_tools,
            verbose=verbose,
        )
    except ValidationError as e:
        for message in _validation_messages(e):
            write_error(message)
        raise typer.Exit(EXIT_INVALID_OPTIONS) from e

    try:
        ctx = _context or create_context()
        ctx.installer.install(options, message_formatter=format_message)
    except UnsupportedPlatformError as e:
        write_error("Could not install command-line tools: Unsupported platform!")
        raise typer.Exit(EXIT_UNSUPPORTED_PLATFORM) from e
    except ArchiveDownloadError as e:
        write_error(f"Could not download command-line tools: {e}")
        raise typer.Exit(EXIT_DOWNLOAD_FAILED) from e
    except CmdlineToolsExtractError as e:
        write_error(f"Could not extract command-line tools: error {e.error_code}")
        raise typer.Exit(EXIT_EXTRACT_FAILED) from e
    except CmdlineToolsPrepareError as e:
        write_error("Could not prepare command-line tools.")
        write_error(str(e.os_error))
        raise typer.Exit(EXIT_PREPARE_FAILED) from e
    except PlatformToolsInstallError as e:
        write_error(f"Could not install platform tools: error {e.error_code}")
        raise typer.Exit(EXIT_PLATFORM_TOOLS_FAILED) from e


if __name__ == "__main__":
    app()
