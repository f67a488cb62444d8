"""Command-line tools archive download."""

from __future__ import annotations

import hashlib
import logging
import ssl
import urllib.error
import urllib.parse
import urllib.request
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from android_sdk_installer.platforms import BasePlatform
from android_sdk_installer.protocols import ProgressCallback

logger = logging.getLogger(__name__)

# Google's SDK repository manifest; archive URLs in it are relative to this.
REPOSITORY_URL = "https://dl.google.com/android/repository/repository2-1.xml"

CMDLINE_TOOLS_PACKAGE = "cmdline-tools;latest"
STABLE_CHANNEL = "channel-0"
CHUNK_SIZE = 64 * 1024


class ArchiveDownloadError(Exception):
    """Error locating or downloading the command-line tools archive."""

    pass


@dataclass(frozen=True)
class RemoteArchive:
    """A downloadable archive listed in the repository manifest.

    Attributes:
        url: Absolute download URL.
        size: Size in bytes from the manifest (0 if absent).
        sha1: Expected SHA-1 hex digest, if listed.
    """

    url: str
    size: int = 0
    sha1: str | None = None

    @property
    def filename(self) -> str:
        """Get the archive's file name."""
        return Path(urllib.parse.urlparse(self.url).path).name


class CmdlineToolsDownloader:
    """Downloads the latest command-line tools archive for a host."""

    def __init__(self, host: BasePlatform, repository_url: str = REPOSITORY_URL) -> None:
        """Initialize the downloader.

        Args:
            host: Host platform whose archive is wanted.
            repository_url: Repository manifest URL.

        Note:
            Prefer using the factory method `create()` for construction.
        """
        self.host = host
        self.repository_url = repository_url

    @classmethod
    def create(cls, host: BasePlatform) -> CmdlineToolsDownloader:
        """Create a downloader for Google's repository.

        Args:
            host: Host platform whose archive is wanted.

        Returns:
            Configured CmdlineToolsDownloader instance.
        """
        return cls(host)

    def _open(self, url: str):
        request = urllib.request.Request(url, headers={"User-Agent": "android-sdk-installer"})
        return urllib.request.urlopen(request, context=ssl.create_default_context())

    def fetch_manifest(self) -> bytes:
        """Fetch the repository manifest.

        Returns:
            Raw manifest XML.

        Raises:
            ArchiveDownloadError: If the manifest cannot be fetched.
        """
        logger.debug("Fetching repository manifest %s", self.repository_url)
        try:
            with self._open(self.repository_url) as response:
                return response.read()
        except (urllib.error.URLError, OSError) as e:
            raise ArchiveDownloadError(f"Could not fetch repository manifest: {e}") from e

    def find_archive(self, manifest: bytes) -> RemoteArchive:
        """Locate the stable cmdline-tools archive for this host.

        Archives without a host-os element are host-independent and match
        any host.

        Args:
            manifest: Raw manifest XML.

        Returns:
            The archive to download.

        Raises:
            ArchiveDownloadError: If the manifest is malformed or lists no
                matching archive.
        """
        try:
            root = ET.fromstring(manifest)
        except ET.ParseError as e:
            raise ArchiveDownloadError(f"Malformed repository manifest: {e}") from e

        for package in root.iter("remotePackage"):
            if package.get("path") != CMDLINE_TOOLS_PACKAGE:
                continue
            channel = package.find("channelRef")
            if channel is not None and channel.get("ref") != STABLE_CHANNEL:
                continue
            for archive in package.iter("archive"):
                host_os = archive.findtext("host-os")
                if host_os and host_os != self.host.archive_host_os:
                    continue
                complete = archive.find("complete")
                if complete is None or not complete.findtext("url"):
                    continue
                return RemoteArchive(
                    url=urllib.parse.urljoin(self.repository_url, complete.findtext("url").strip()),
                    size=int(complete.findtext("size") or 0),
                    sha1=complete.findtext("checksum"),
                )

        raise ArchiveDownloadError(
            f"No {CMDLINE_TOOLS_PACKAGE} archive for {self.host.archive_host_os} in manifest"
        )

    def download(self, target_root: Path, on_progress: ProgressCallback | None = None) -> Path:
        """Download the latest archive into a directory.

        Args:
            target_root: Directory to write the archive into.
            on_progress: Called with (bytes received, bytes total) after each
                chunk. The total is 0 while unknown.

        Returns:
            Path to the downloaded archive.

        Raises:
            ArchiveDownloadError: If the download fails or the checksum
                does not match. No partial file is left behind.
        """
        remote = self.find_archive(self.fetch_manifest())
        archive_path = target_root / remote.filename
        logger.info("Downloading %s to %s", remote.url, archive_path)

        hasher = hashlib.sha1()
        received = 0
        try:
            with self._open(remote.url) as response, archive_path.open("wb") as out:
                total = int(response.headers.get("Content-Length") or remote.size or 0)
                if on_progress:
                    on_progress(0, total)
                while chunk := response.read(CHUNK_SIZE):
                    out.write(chunk)
                    hasher.update(chunk)
                    received += len(chunk)
                    if on_progress:
                        on_progress(received, max(total, received) if total else 0)
        except (urllib.error.URLError, OSError) as e:
            archive_path.unlink(missing_ok=True)
            raise ArchiveDownloadError(f"Could not download {remote.url}: {e}") from e

        if remote.sha1 and hasher.hexdigest() != remote.sha1.strip().lower():
            archive_path.unlink(missing_ok=True)
            raise ArchiveDownloadError(f"Checksum mismatch for {remote.filename}")

        logger.debug("Downloaded %d bytes", received)
        return archive_path
