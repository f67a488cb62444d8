"""Application context for dependency injection.

This module separates object creation from object use. It is the only
place where the process's real output streams become the installer's
defaults; tests construct AppContext directly with their own doubles.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from android_sdk_installer.install import SdkInstaller


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for the services the CLI uses.
    """

    installer: SdkInstaller
    console: Console = field(default_factory=Console)
    error_console: Console = field(default_factory=lambda: Console(stderr=True))


def create_context(os_identity: str | None = None) -> AppContext:
    """Factory for application dependencies.

    Args:
        os_identity: Override the host's sys.platform value (for testing).

    Returns:
        Configured AppContext with all dependencies.

    Raises:
        UnsupportedPlatformError: If the host is not supported.
    """
    console = Console()
    error_console = Console(stderr=True)
    installer = SdkInstaller.create(
        os_identity=os_identity,
        console=console,
        error_console=error_console,
    )
    return AppContext(installer=installer, console=console, error_console=error_console)
