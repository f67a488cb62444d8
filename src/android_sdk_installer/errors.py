"""Errors raised while installing the SDK tools."""

from __future__ import annotations

__all__ = [
    "InstallError",
    "UnsupportedPlatformError",
    "CmdlineToolsExtractError",
    "CmdlineToolsPrepareError",
    "PlatformToolsInstallError",
]


class InstallError(Exception):
    """Base class for failures that abort an installation run."""

    pass


class UnsupportedPlatformError(InstallError):
    """The host operating system has no known SDK layout."""

    def __init__(self, os_identity: str | None = None) -> None:
        self.os_identity = os_identity
        super().__init__(f"Unsupported platform: {os_identity}")


class CmdlineToolsExtractError(InstallError):
    """The command-line tools archive could not be extracted."""

    def __init__(self, error_code: int) -> None:
        self.error_code = error_code
        super().__init__(f"Extraction failed with error {error_code}")


class CmdlineToolsPrepareError(InstallError):
    """The extracted command-line tools could not be moved into place.

    Attributes:
        os_error: The filesystem error that stopped the move.
    """

    def __init__(self, os_error: OSError) -> None:
        self.os_error = os_error
        super().__init__(f"Could not prepare command-line tools: {os_error}")


class PlatformToolsInstallError(InstallError):
    """sdkmanager exited unsuccessfully while installing platform tools."""

    def __init__(self, error_code: int) -> None:
        self.error_code = error_code
        super().__init__(f"Platform tools installation failed with error {error_code}")
