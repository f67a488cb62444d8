"""Shared test fixtures."""

from __future__ import annotations

import zipfile
from collections.abc import Callable, Generator, Iterable, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from android_sdk_installer.extract import PortableUnzip
from android_sdk_installer.filesystem import RealFileSystem
from android_sdk_installer.pipeline import InstallPipeline


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Override home directory for testing."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def sdk_root(tmp_path: Path) -> Path:
    """Create an empty SDK root."""
    root = tmp_path / "sdk"
    root.mkdir()
    return root


# ============================================================================
# Archive Fixtures
# ============================================================================


def write_cmdline_tools_zip(path: Path, top_dir: str = "cmdline-tools") -> Path:
    """Write a zip laid out like the real command-line tools archive."""
    with zipfile.ZipFile(path, "w") as zf:
        script = zipfile.ZipInfo(f"{top_dir}/bin/sdkmanager")
        script.external_attr = 0o755 << 16
        zf.writestr(script, "#!/bin/sh\necho sdkmanager\n")
        zf.writestr(f"{top_dir}/bin/sdkmanager.bat", "@echo sdkmanager\r\n")
        zf.writestr(f"{top_dir}/lib/sdkmanager-classpath.jar", b"PK\x05\x06" + b"\x00" * 18)
        zf.writestr(f"{top_dir}/source.properties", "Pkg.Revision=12.0\n")
    return path


@pytest.fixture
def make_archive() -> Callable[..., Path]:
    """Get the archive writer, for archives with a custom location or layout."""
    return write_cmdline_tools_zip


@pytest.fixture
def cmdline_tools_archive(tmp_path: Path) -> Path:
    """Create a command-line tools archive outside the SDK root."""
    return write_cmdline_tools_zip(tmp_path / "commandlinetools-linux-11076708_latest.zip")


@pytest.fixture
def drain() -> Callable[[Generator[Any, None, Any]], tuple[list[Any], Any]]:
    """Run a generator to completion, returning (yielded items, return value)."""

    def _drain(gen: Generator[Any, None, Any]) -> tuple[list[Any], Any]:
        items = []
        while True:
            try:
                items.append(next(gen))
            except StopIteration as stop:
                return items, stop.value

    return _drain


# ============================================================================
# Collaborator Doubles
# ============================================================================


class FakeExtractor:
    """Extractor double that reports a fixed outcome.

    On success it can delegate the real work to another extractor so the
    SDK root ends up with real files.
    """

    def __init__(
        self,
        available: bool = True,
        exit_code: int = 0,
        lines: Iterable[str] = (),
        delegate: Any = None,
    ) -> None:
        self.name = "fake"
        self.available = available
        self.exit_code = exit_code
        self.lines = list(lines)
        self.delegate = delegate
        self.calls: list[dict[str, Any]] = []

    def is_available(self) -> bool:
        return self.available

    def extract(
        self,
        archive: Path,
        destination: Path,
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        self.calls.append(
            {
                "archive": archive,
                "destination": destination,
                "verbose": verbose,
                "inherit_stdio": inherit_stdio,
            }
        )
        yield from self.lines
        if self.exit_code == 0 and self.delegate is not None:
            return (yield from self.delegate.extract(archive, destination, verbose=verbose))
        return self.exit_code


class FakePackageInstaller:
    """sdkmanager double that creates package directories on success."""

    def __init__(self, exit_code: int = 0, lines: Iterable[str] = ()) -> None:
        self.exit_code = exit_code
        self.lines = list(lines)
        self.calls: list[dict[str, Any]] = []

    def install(
        self,
        tools_dir: Path,
        sdk_root: Path,
        packages: Sequence[str],
        *,
        verbose: bool = False,
        inherit_stdio: bool = False,
    ) -> Generator[str, None, int]:
        self.calls.append(
            {
                "tools_dir": tools_dir,
                "sdk_root": sdk_root,
                "packages": tuple(packages),
                "verbose": verbose,
                "inherit_stdio": inherit_stdio,
            }
        )
        yield from self.lines
        if self.exit_code == 0:
            for package in packages:
                (sdk_root / package.replace(";", "/")).mkdir(parents=True, exist_ok=True)
        return self.exit_code


@pytest.fixture
def fake_extractor() -> type[FakeExtractor]:
    """Get the extractor double class."""
    return FakeExtractor


@pytest.fixture
def fake_package_installer() -> type[FakePackageInstaller]:
    """Get the sdkmanager double class."""
    return FakePackageInstaller


@pytest.fixture
def package_installer() -> FakePackageInstaller:
    """Create a succeeding sdkmanager double."""
    return FakePackageInstaller()


@pytest.fixture
def launcher() -> MagicMock:
    """Create a path settings launcher double."""
    return MagicMock()


@pytest.fixture
def make_pipeline(
    package_installer: FakePackageInstaller, launcher: MagicMock
) -> Callable[..., InstallPipeline]:
    """Build pipelines whose native extractor is unavailable by default."""

    def _make(
        native: Any = None,
        fallback: Any = None,
        installer: Any = None,
        filesystem: Any = None,
    ) -> InstallPipeline:
        return InstallPipeline(
            native_extractor=native or FakeExtractor(available=False),
            fallback_extractor=fallback or PortableUnzip(),
            package_installer=installer or package_installer,
            path_settings_launcher=launcher,
            filesystem=filesystem or RealFileSystem(),
        )

    return _make


@pytest.fixture
def pipeline(make_pipeline: Callable[..., InstallPipeline]) -> InstallPipeline:
    """Create a pipeline that extracts with the portable extractor."""
    return make_pipeline()
