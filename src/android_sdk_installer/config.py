"""Installation options."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class InstallOptions(BaseModel):
    """Options for one installation run.

    Attributes:
        sdk_root: SDK installation directory. None picks the host default.
        archive: Existing command-line tools archive. None downloads one.
        delete_archive: Delete a downloaded archive once it is unpacked.
        launch_path_settings: Open the OS path settings afterwards.
        install_platform_tools: Install platform-tools with sdkmanager.
        verbose: Show child process output and run them verbosely.
    """

    model_config = ConfigDict(frozen=True)

    sdk_root: Path | None = None
    archive: Path | None = None
    delete_archive: bool = True
    launch_path_settings: bool = True
    install_platform_tools: bool = True
    verbose: bool = False

    @field_validator("archive")
    @classmethod
    def _archive_exists(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        value = value.expanduser().absolute()
        if not value.is_file():
            raise ValueError("The specified command-line tools archive file does not exist.")
        return value

    @field_validator("sdk_root")
    @classmethod
    def _sdk_root_parent_exists(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        value = value.expanduser().absolute()
        if not value.parent.is_dir():
            raise ValueError("The specified SDK installation parent directory does not exist.")
        return value
