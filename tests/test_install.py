"""Tests for installation orchestration."""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from android_sdk_installer.config import InstallOptions
from android_sdk_installer.download import ArchiveDownloadError
from android_sdk_installer.errors import (
    CmdlineToolsExtractError,
    PlatformToolsInstallError,
    UnsupportedPlatformError,
)
from android_sdk_installer.install import (
    UNKNOWN_SIZE_REPORT_INTERVAL,
    SdkInstaller,
    TextProgress,
    plain_message,
)
from android_sdk_installer.output import StreamSink
from android_sdk_installer.pipeline import InstallPipeline

ARCHIVE_NAME = "commandlinetools-linux-11076708_latest.zip"
SUMMARY = "Android SDK installed. Remember to add the following directories to your PATH:"


def tagged(message: str, *, is_error: bool) -> str:
    return f"{'E' if is_error else 'I'}: {message}"


def make_console() -> Console:
    return Console(file=StringIO(), force_terminal=False, width=200)


@pytest.fixture
def downloader(make_archive) -> MagicMock:
    """Create a downloader double that writes a real archive."""

    def download(target_root: Path, on_progress=None) -> Path:
        if on_progress:
            on_progress(0, 2048)
            on_progress(1024, 2048)
            on_progress(2048, 2048)
        return make_archive(target_root / ARCHIVE_NAME)

    mock = MagicMock()
    mock.download.side_effect = download
    return mock


@pytest.fixture
def make_installer(
    downloader: MagicMock, pipeline: InstallPipeline
) -> Callable[..., SdkInstaller]:
    """Build installers around the test pipeline."""

    def _make(
        os_identity: str = "linux",
        console: Console | None = None,
        error_console: Console | None = None,
        pipeline_: InstallPipeline | None = None,
    ) -> SdkInstaller:
        return SdkInstaller(
            os_identity=os_identity,
            downloader=downloader,
            pipeline=pipeline_ or pipeline,
            console=console or make_console(),
            error_console=error_console or make_console(),
        )

    return _make


@pytest.fixture
def output() -> StringIO:
    """Capture everything written to the installer's sink."""
    return StringIO()


class TestSuppliedArchive:
    """Tests for installing from an existing archive."""

    def test_no_download(
        self,
        make_installer,
        downloader: MagicMock,
        sdk_root: Path,
        cmdline_tools_archive: Path,
        output: StringIO,
    ) -> None:
        """Test a supplied archive is used as is and kept."""
        options = InstallOptions(
            sdk_root=sdk_root, archive=cmdline_tools_archive, install_platform_tools=False
        )

        entries = make_installer().install(options, StreamSink(output))

        downloader.download.assert_not_called()
        assert cmdline_tools_archive.exists()
        assert entries == (sdk_root / "cmdline-tools" / "latest" / "bin",)

    def test_output(
        self, make_installer, sdk_root: Path, cmdline_tools_archive: Path, output: StringIO
    ) -> None:
        """Test headings, summary and path lines in order."""
        options = InstallOptions(sdk_root=sdk_root, archive=cmdline_tools_archive)

        make_installer().install(options, StreamSink(output), tagged)

        assert output.getvalue().splitlines() == [
            "I: Extracting SDK tools...",
            "E: Could not use native unzip tool",
            "I: Preparing SDK command-line tools...",
            "I: Installing platform tools...",
            f"I: {SUMMARY}",
            f"  {sdk_root / 'cmdline-tools' / 'latest' / 'bin'}",
            f"  {sdk_root / 'platform-tools'}",
        ]

    def test_verbose_shows_stage_details(
        self, make_installer, sdk_root: Path, cmdline_tools_archive: Path, output: StringIO
    ) -> None:
        """Test verbose runs show extraction and preparation details."""
        options = InstallOptions(
            sdk_root=sdk_root,
            archive=cmdline_tools_archive,
            install_platform_tools=False,
            verbose=True,
        )

        make_installer().install(options, StreamSink(output))

        text = output.getvalue()
        assert "  inflating: " in text
        assert "Command-line tools moved to" in text

    def test_sdkmanager_output_always_shown(
        self,
        make_installer,
        make_pipeline,
        fake_package_installer,
        sdk_root: Path,
        cmdline_tools_archive: Path,
        output: StringIO,
    ) -> None:
        """Test platform tools output is shown without verbose."""
        pipeline = make_pipeline(installer=fake_package_installer(lines=["[=====] 100%"]))
        options = InstallOptions(sdk_root=sdk_root, archive=cmdline_tools_archive)

        make_installer(pipeline_=pipeline).install(options, StreamSink(output))

        assert "[=====] 100%" in output.getvalue().splitlines()


class TestDownloadedArchive:
    """Tests for installing from a downloaded archive."""

    def test_downloads_into_sdk_root_and_deletes(
        self, make_installer, downloader: MagicMock, sdk_root: Path, output: StringIO
    ) -> None:
        """Test the downloaded archive is removed after extraction."""
        options = InstallOptions(sdk_root=sdk_root, install_platform_tools=False)

        make_installer().install(options, StreamSink(output))

        assert downloader.download.call_args.args[0] == sdk_root
        assert not (sdk_root / ARCHIVE_NAME).exists()
        assert (sdk_root / "cmdline-tools" / "latest" / "bin" / "sdkmanager").is_file()

    def test_keep_archive(
        self, make_installer, sdk_root: Path, output: StringIO
    ) -> None:
        """Test the downloaded archive survives when asked."""
        options = InstallOptions(
            sdk_root=sdk_root, delete_archive=False, install_platform_tools=False
        )

        make_installer().install(options, StreamSink(output))

        assert (sdk_root / ARCHIVE_NAME).exists()

    def test_text_progress(
        self, make_installer, sdk_root: Path, output: StringIO
    ) -> None:
        """Test progress is reported as text lines to a sink."""
        options = InstallOptions(sdk_root=sdk_root, install_platform_tools=False)

        make_installer().install(options, StreamSink(output))

        lines = output.getvalue().splitlines()
        assert lines[:3] == [
            "Downloading SDK command-line tools: 0/2048 (0%)",
            "Downloading SDK command-line tools: 1024/2048 (50%)",
            "Downloading SDK command-line tools: 2048/2048 (100%)",
        ]

    def test_download_failure(
        self, make_installer, downloader: MagicMock, sdk_root: Path, output: StringIO
    ) -> None:
        """Test download errors propagate before any extraction."""
        downloader.download.side_effect = ArchiveDownloadError("offline")

        with pytest.raises(ArchiveDownloadError):
            make_installer().install(InstallOptions(sdk_root=sdk_root), StreamSink(output))

        assert not (sdk_root / "cmdline-tools").exists()


class TestSdkRoot:
    """Tests for SDK root resolution."""

    def test_default_root(self, make_installer, temp_home: Path, output: StringIO) -> None:
        """Test the host default is used and created."""
        entries = make_installer("linux").install(
            InstallOptions(install_platform_tools=False), StreamSink(output)
        )

        assert entries == (temp_home / "Android" / "Sdk" / "cmdline-tools" / "latest" / "bin",)

    def test_creates_missing_root(
        self, make_installer, tmp_path: Path, output: StringIO
    ) -> None:
        """Test a missing root under an existing parent is created."""
        sdk_root = tmp_path / "new-sdk"

        make_installer().install(
            InstallOptions(sdk_root=sdk_root, install_platform_tools=False), StreamSink(output)
        )

        assert (sdk_root / "cmdline-tools" / "latest").is_dir()

    def test_unsupported_default_root(
        self, make_installer, temp_home: Path, output: StringIO
    ) -> None:
        """Test an unsupported host without a root fails."""
        with pytest.raises(UnsupportedPlatformError):
            make_installer("plan9").install(InstallOptions(), StreamSink(output))


class TestWarningsAndErrors:
    """Tests for warnings and failures."""

    def test_fallback_warning_shown_without_verbose(
        self,
        make_installer,
        make_pipeline,
        fake_extractor,
        sdk_root: Path,
        cmdline_tools_archive: Path,
        output: StringIO,
    ) -> None:
        """Test warnings are shown whatever the verbosity."""
        pipeline = make_pipeline(native=fake_extractor(exit_code=9))
        options = InstallOptions(
            sdk_root=sdk_root, archive=cmdline_tools_archive, install_platform_tools=False
        )

        make_installer(pipeline_=pipeline).install(options, StreamSink(output), tagged)

        assert "E: Could not use native unzip tool" in output.getvalue().splitlines()

    def test_extract_failure(
        self,
        make_installer,
        sdk_root: Path,
        tmp_path: Path,
        output: StringIO,
    ) -> None:
        """Test extraction errors propagate."""
        archive = tmp_path / "broken.zip"
        archive.write_bytes(b"garbage")

        with pytest.raises(CmdlineToolsExtractError):
            make_installer().install(
                InstallOptions(sdk_root=sdk_root, archive=archive), StreamSink(output)
            )

        assert SUMMARY not in output.getvalue()

    def test_platform_tools_failure(
        self,
        make_installer,
        make_pipeline,
        fake_package_installer,
        sdk_root: Path,
        cmdline_tools_archive: Path,
        output: StringIO,
    ) -> None:
        """Test sdkmanager errors propagate."""
        pipeline = make_pipeline(installer=fake_package_installer(exit_code=1))

        with pytest.raises(PlatformToolsInstallError):
            make_installer(pipeline_=pipeline).install(
                InstallOptions(sdk_root=sdk_root, archive=cmdline_tools_archive),
                StreamSink(output),
            )


class TestConsoleOutput:
    """Tests for writing to consoles instead of a sink."""

    def test_messages_go_to_consoles(
        self,
        make_installer,
        make_pipeline,
        fake_extractor,
        sdk_root: Path,
        cmdline_tools_archive: Path,
    ) -> None:
        """Test messages go to stdout and warnings to stderr."""
        console, error_console = make_console(), make_console()
        pipeline = make_pipeline(native=fake_extractor(exit_code=9))
        options = InstallOptions(
            sdk_root=sdk_root, archive=cmdline_tools_archive, install_platform_tools=False
        )

        make_installer(console=console, error_console=error_console, pipeline_=pipeline).install(
            options
        )

        assert SUMMARY in console.file.getvalue()
        assert "Could not use native unzip tool" in error_console.file.getvalue()
        assert "Could not use native unzip tool" not in console.file.getvalue()

    def test_child_processes_inherit_stdio(
        self,
        make_installer,
        make_pipeline,
        fake_package_installer,
        sdk_root: Path,
        cmdline_tools_archive: Path,
    ) -> None:
        """Test child processes write directly without a sink."""
        package_installer = fake_package_installer()
        pipeline = make_pipeline(installer=package_installer)

        make_installer(pipeline_=pipeline).install(
            InstallOptions(sdk_root=sdk_root, archive=cmdline_tools_archive)
        )

        assert package_installer.calls[0]["inherit_stdio"] is True

    def test_non_terminal_download_uses_text_progress(
        self, make_installer, sdk_root: Path
    ) -> None:
        """Test redirected output gets text progress instead of a bar."""
        console = make_console()

        make_installer(console=console).install(
            InstallOptions(sdk_root=sdk_root, install_platform_tools=False)
        )

        assert "Downloading SDK command-line tools: 2048/2048 (100%)" in console.file.getvalue()


class TestTextProgress:
    """Tests for TextProgress."""

    def test_reports_percentage_changes(self) -> None:
        """Test a line is written only when the percentage changes."""
        lines: list[str] = []
        progress = TextProgress(lines.append)

        for count in (0, 1, 2, 50, 51, 100):
            progress(count, 100)

        assert lines == [
            "Downloading SDK command-line tools: 0/100 (0%)",
            "Downloading SDK command-line tools: 1/100 (1%)",
            "Downloading SDK command-line tools: 2/100 (2%)",
            "Downloading SDK command-line tools: 50/100 (50%)",
            "Downloading SDK command-line tools: 51/100 (51%)",
            "Downloading SDK command-line tools: 100/100 (100%)",
        ]

    def test_repeated_percentage_suppressed(self) -> None:
        """Test small steps within one percent write nothing."""
        lines: list[str] = []
        progress = TextProgress(lines.append)

        for count in range(0, 1000, 3):
            progress(count, 100_000)

        assert lines == ["Downloading SDK command-line tools: 0/100000 (0%)"]

    def test_unknown_total(self) -> None:
        """Test unknown sizes report once per interval."""
        lines: list[str] = []
        progress = TextProgress(lines.append)
        step = UNKNOWN_SIZE_REPORT_INTERVAL // 4

        for count in range(0, UNKNOWN_SIZE_REPORT_INTERVAL * 2 + 1, step):
            progress(count, 0)

        assert lines == [
            "Downloading SDK command-line tools: 0 bytes",
            f"Downloading SDK command-line tools: {UNKNOWN_SIZE_REPORT_INTERVAL} bytes",
            f"Downloading SDK command-line tools: {UNKNOWN_SIZE_REPORT_INTERVAL * 2} bytes",
        ]


class TestCreate:
    """Tests for the factory method."""

    def test_create(self) -> None:
        """Test production wiring for a supported host."""
        installer = SdkInstaller.create(os_identity="darwin")

        assert installer.os_identity == "darwin"
        assert installer.downloader.host.archive_host_os == "macosx"

    def test_create_unsupported(self) -> None:
        """Test unsupported hosts fail at creation."""
        with pytest.raises(UnsupportedPlatformError):
            SdkInstaller.create(os_identity="os2")


def test_plain_message() -> None:
    """Test the default formatter leaves messages unchanged."""
    assert plain_message("hello", is_error=True) == "hello"
