# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/download.py

"""
S5 Downloads

Builds portal URLs for CIDs and fetches content and metadata. Downloaded
content is returned as served; it is not checked against the CID.
"""

import logging
from pathlib import Path
from urllib.parse import quote

import requests

from s5_client.cid import parse_cid, require_cid
from s5_client.config import DownloadOptions, MetadataOptions
from s5_client.errors import InvalidArgument, TransportFailure
from s5_client.portal_api import PortalClient
from s5_client.types import MetadataResult
from s5_client.upload import CID_HEADER
from s5_client.url import _validate_string, add_subdomain, ensure_scheme_prefix, join_all, merge_query

logger = logging.getLogger(__name__)

PORTAL_API_HEADER = "s5-portal-api"

DOWNLOAD_CHUNK_SIZE = 1 << 20


def _encode_path(path: str) -> str:
    """URL-encode each path segment, keeping the slashes."""
    if not isinstance(path, str):
        raise InvalidArgument(f"path has to be a string, {type(path).__name__} provided")
    # Encode '?', '#' etc. too: they are valid in S5 file names.
    return "/".join(quote(element, safe="!'()*") for element in path.split("/"))


def get_cid_url_for_portal(
    portal_url: str, cid_url: str, options: DownloadOptions = None
) -> str:
    """
    Build the full URL for a CID on a portal, without a client.

    Args:
        portal_url: Portal origin
        cid_url: CID, optionally followed by a path, or a URL containing one
        options: DownloadOptions (endpoint_download, download, path, subdomain)

    Returns:
        The full URL.

    Raises:
        InvalidArgument: If no CID can be found in cid_url
    """
    _validate_string("portal_url", portal_url)
    _validate_string("cid_url", cid_url)
    opts = options or DownloadOptions()

    query = {}
    if opts.download:
        query["attachment"] = "true"

    path = _encode_path(opts.path) if opts.path else ""

    if opts.subdomain:
        cid_path = parse_cid(cid_url, only_path=True) or ""
        cid = require_cid(cid_url)
        url = add_subdomain(ensure_scheme_prefix(portal_url), cid)
        url = join_all(url, cid_path, path)
    else:
        cid = require_cid(cid_url, include_path=True)
        url = join_all(portal_url, opts.endpoint_download, cid)
        url = join_all(url, path)

    return merge_query(url, query)


class Downloader:
    """Fetches content and metadata from a portal."""

    def __init__(self, client: PortalClient, client_options: dict = None):
        self.client = client
        self.client_options = dict(client_options or {})

    def get_cid_url(self, cid_url: str, **custom_options) -> str:
        """Full URL for a CID on this client's portal."""
        opts = DownloadOptions.resolve(self.client_options, custom_options)
        return get_cid_url_for_portal(self.client.portal_url, cid_url, opts)

    def download(self, cid_url: str, **custom_options) -> bytes:
        """
        Download content by CID.

        Set range="bytes=0-99" to fetch part of the content.
        """
        opts = DownloadOptions.resolve(self.client_options, custom_options)
        url = get_cid_url_for_portal(self.client.portal_url, cid_url, opts)
        headers = {"Range": opts.range} if opts.range else None
        response = self.client.execute("GET", opts, url=url, headers=headers)
        return response.content

    def download_file(self, cid_url: str, dest: Path, **custom_options) -> Path:
        """
        Stream content by CID into a file.

        Reports progress through on_download_progress when the portal sends
        a Content-Length.
        """
        opts = DownloadOptions.resolve(self.client_options, custom_options)
        url = get_cid_url_for_portal(self.client.portal_url, cid_url, opts)
        headers = {"Range": opts.range} if opts.range else None
        dest = Path(dest)

        with self.client.execute("GET", opts, url=url, headers=headers, stream=True) as response:
            total = int(response.headers.get("Content-Length", 0) or 0)
            loaded = 0
            try:
                with open(dest, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        loaded += len(chunk)
                        if opts.on_download_progress and total:
                            opts.on_download_progress(loaded / total, {"loaded": loaded, "total": total})
            except requests.RequestException as e:
                # Never leave a truncated file behind.
                dest.unlink(missing_ok=True)
                raise TransportFailure(f"Network error: {e}") from e

        logger.debug(f"download_file: wrote {loaded} bytes to {dest}")
        return dest

    def get_metadata(self, cid_url: str, **custom_options) -> MetadataResult:
        """
        Get the metadata of a CID without its content.

        Raises:
            InvalidArgument: If the CID string contains a path
        """
        opts = MetadataOptions.resolve(self.client_options, custom_options)

        if parse_cid(cid_url, only_path=True):
            raise InvalidArgument("CID string should not contain a path")

        url = get_cid_url_for_portal(
            self.client.portal_url,
            cid_url,
            DownloadOptions(endpoint_download=opts.endpoint_get_metadata),
        )
        response = self.client.execute("GET", opts, url=url)

        metadata = response.json() if response.content else {}
        return MetadataResult(
            metadata=metadata,
            portal_url=response.headers.get(PORTAL_API_HEADER),
            cid=response.headers.get(CID_HEADER),
        )
