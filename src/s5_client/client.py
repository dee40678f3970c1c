# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/client.py

"""
S5 Client

Wires the portal transport, the uploader and the downloader together.
Client-level options given here apply to every call; keyword arguments to
a call override them for that call only.
"""

import logging
from dataclasses import fields
from pathlib import Path

import requests

from s5_client.config import ClientConfig, DownloadOptions, MetadataOptions, UploadOptions
from s5_client.domain import build_url, extract_domain
from s5_client.download import Downloader
from s5_client.engine import ResumableEngine
from s5_client.errors import InvalidArgument
from s5_client.portal_api import PortalClient
from s5_client.tus import TusEngine
from s5_client.types import MetadataResult, UploadFile, UploadResult
from s5_client.upload import Uploader
from s5_client.url import DEFAULT_PORTAL_URL

logger = logging.getLogger(__name__)

_KNOWN_OPTIONS = {
    f.name
    for options_class in (UploadOptions, DownloadOptions, MetadataOptions)
    for f in fields(options_class)
}


class S5Client:
    """Client for an S5 portal."""

    def __init__(
        self,
        portal_url: str = DEFAULT_PORTAL_URL,
        engine: ResumableEngine = None,
        session: requests.Session = None,
        **custom_options,
    ):
        """
        Args:
            portal_url: Portal origin
            engine: Resumable upload engine for large files (a TusEngine
                sharing the portal session by default)
            session: requests.Session to use for portal requests
            **custom_options: Client-level overrides of any upload, download
                or metadata option
        """
        unknown = sorted(set(custom_options) - _KNOWN_OPTIONS)
        if unknown:
            raise InvalidArgument(f"Unknown client options: {', '.join(unknown)}")

        self.custom_options = dict(custom_options)
        self.portal = PortalClient(portal_url, session=session)
        if engine is None:
            engine = TusEngine(session=self.portal.session)
        self.engine = engine
        self.uploader = Uploader(self.portal, engine, self.custom_options)
        self.downloader = Downloader(self.portal, self.custom_options)

    @classmethod
    def from_config(cls, config: ClientConfig, engine: ResumableEngine = None) -> "S5Client":
        """Create a client from a loaded ClientConfig."""
        return cls(config.portal_url, engine=engine, **config.custom_options())

    @property
    def portal_url(self) -> str:
        return self.portal.portal_url

    # Uploads

    def upload_file(self, file, **custom_options) -> UploadResult:
        """Upload an UploadFile or a path to a file."""
        if not isinstance(file, UploadFile):
            file = UploadFile.from_path(Path(file))
        return self.uploader.upload_file(file, **custom_options)

    def upload_bytes(self, data: bytes, name: str, **custom_options) -> UploadResult:
        """Upload in-memory bytes under the given file name."""
        return self.uploader.upload_file(UploadFile.from_bytes(name, data), **custom_options)

    def upload_directory(
        self, directory: dict[str, UploadFile], filename: str, **custom_options
    ) -> UploadResult:
        """Upload files keyed by their path inside the directory."""
        return self.uploader.upload_directory(directory, filename, **custom_options)

    def upload_path(self, path: Path, **custom_options) -> UploadResult:
        """
        Upload a file or a directory from disk.

        Directories are walked recursively; files are keyed by their path
        relative to the directory and the directory name is used as filename.
        """
        path = Path(path)
        if path.is_file():
            return self.upload_file(UploadFile.from_path(path), **custom_options)
        if path.is_dir():
            directory = {
                file_path.relative_to(path).as_posix(): UploadFile.from_path(file_path)
                for file_path in sorted(path.rglob("*"))
                if file_path.is_file()
            }
            logger.debug(f"upload_path: {len(directory)} files under {path}")
            return self.upload_directory(directory, path.name, **custom_options)
        raise InvalidArgument(f"Path {path} is not a file or directory")

    # Downloads

    def get_cid_url(self, cid_url: str, **custom_options) -> str:
        return self.downloader.get_cid_url(cid_url, **custom_options)

    def download(self, cid_url: str, **custom_options) -> bytes:
        return self.downloader.download(cid_url, **custom_options)

    def download_file(self, cid_url: str, dest: Path, **custom_options) -> Path:
        return self.downloader.download_file(cid_url, dest, **custom_options)

    def get_metadata(self, cid_url: str, **custom_options) -> MetadataResult:
        return self.downloader.get_metadata(cid_url, **custom_options)

    # Domains

    def build_domain_url(self, domain: str) -> str:
        """Full URL of a domain on this client's portal."""
        return build_url(self.portal_url, domain)

    def extract_domain(self, full_url: str) -> str:
        """Domain served at full_url on this client's portal."""
        return extract_domain(self.portal_url, full_url)
