"""Progress events emitted by the installation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Union

__all__ = [
    "Stage",
    "Message",
    "Extracting",
    "Reconciling",
    "InstallingPlatformTools",
    "Completed",
    "ProgressEvent",
    "STAGE_IS_VERBOSE",
    "STAGE_HEADINGS",
]


class Stage(str, Enum):
    """Pipeline stages, in the order they run."""

    EXTRACTING = "extracting"
    RECONCILING = "reconciling"
    INSTALLING_PLATFORM_TOOLS = "installing-platform-tools"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Message:
    """A human-readable line attached to an event.

    Attributes:
        text: Message text.
        is_error: True for warnings and errors, which go to the error sink.
    """

    text: str
    is_error: bool = False


@dataclass(frozen=True)
class Extracting:
    """The archive is being unpacked.

    Attributes:
        using_native_unzip: False once extraction has fallen back to the
            portable extractor.
        message: Optional output line or warning.
    """

    using_native_unzip: bool
    message: Message | None = None

    stage: ClassVar[Stage] = Stage.EXTRACTING


@dataclass(frozen=True)
class Reconciling:
    """The unpacked tools are being moved to the layout sdkmanager expects."""

    message: Message | None = None

    stage: ClassVar[Stage] = Stage.RECONCILING


@dataclass(frozen=True)
class InstallingPlatformTools:
    """sdkmanager is installing the platform tools."""

    message: Message | None = None

    stage: ClassVar[Stage] = Stage.INSTALLING_PLATFORM_TOOLS


@dataclass(frozen=True)
class Completed:
    """Terminal event of a successful run.

    Attributes:
        path_entries: Directories to add to PATH, in discovery order.
    """

    path_entries: tuple[Path, ...]
    message: Message | None = None

    stage: ClassVar[Stage] = Stage.COMPLETED


ProgressEvent = Union[Extracting, Reconciling, InstallingPlatformTools, Completed]

# Messages from verbose stages are only shown when running verbosely.
STAGE_IS_VERBOSE: dict[Stage, bool] = {
    Stage.EXTRACTING: True,
    Stage.RECONCILING: True,
    Stage.INSTALLING_PLATFORM_TOOLS: False,
    Stage.COMPLETED: False,
}

STAGE_HEADINGS: dict[Stage, str | None] = {
    Stage.EXTRACTING: "Extracting SDK tools...",
    Stage.RECONCILING: "Preparing SDK command-line tools...",
    Stage.INSTALLING_PLATFORM_TOOLS: "Installing platform tools...",
    Stage.COMPLETED: None,
}
