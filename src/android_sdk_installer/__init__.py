"""Installer for the Android SDK command-line and platform tools."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from android_sdk_installer.protocols import (
    ArchiveDownloader,
    Extractor,
    OutputSink,
    PackageInstaller,
    PathSettingsLauncher,
)

__all__ = [
    "__version__",
    "ArchiveDownloader",
    "Extractor",
    "OutputSink",
    "PackageInstaller",
    "PathSettingsLauncher",
]
