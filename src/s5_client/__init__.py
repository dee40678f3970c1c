# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/__init__.py

"""
S5 Client Library

A Python client for S5 content-addressed storage portals: upload files
and directories to get a CID, turn CIDs and domains into portal URLs, and
download content and metadata.

Basic usage:
    from s5_client import S5Client

    client = S5Client("https://s5.example.com")
    result = client.upload_file("/path/to/file")
    print(client.get_cid_url(result.cid))

For more control:
    from s5_client.url import join_all, merge_query
    from s5_client.domain import build_url, extract_domain
    from s5_client.partition import split_into_chunk_aligned_parts
"""

# Config
from s5_client.config import (
    ClientConfig,
    DownloadOptions,
    MetadataOptions,
    UploadOptions,
    TUS_CHUNK_SIZE,
    load_config,
)

# Errors
from s5_client.errors import (
    ConfigError,
    InvalidArgument,
    ProtocolViolation,
    S5Error,
    TransferFailure,
    TransportFailure,
)

# Types
from s5_client.types import (
    MetadataResult,
    UploadFile,
    UploadResult,
)

# URLs and domains
from s5_client.url import (
    DEFAULT_PORTAL_URL,
    URI_S5_PREFIX,
    add_subdomain,
    ensure_prefix,
    ensure_scheme_prefix,
    join_all,
    join_path,
    merge_query,
)
from s5_client.domain import build_url, extract_domain
from s5_client.cid import parse_cid

# Uploads
from s5_client.partition import UploadPart, split_into_chunk_aligned_parts
from s5_client.engine import DetailedError, PartUploadRequest, ResumableEngine
from s5_client.tus import TusEngine

# Client
from s5_client.client import S5Client
from s5_client.download import get_cid_url_for_portal

__all__ = [
    # Config
    "ClientConfig",
    "DownloadOptions",
    "MetadataOptions",
    "UploadOptions",
    "TUS_CHUNK_SIZE",
    "load_config",
    # Errors
    "ConfigError",
    "InvalidArgument",
    "ProtocolViolation",
    "S5Error",
    "TransferFailure",
    "TransportFailure",
    # Types
    "MetadataResult",
    "UploadFile",
    "UploadResult",
    # URLs and domains
    "DEFAULT_PORTAL_URL",
    "URI_S5_PREFIX",
    "add_subdomain",
    "ensure_prefix",
    "ensure_scheme_prefix",
    "join_all",
    "join_path",
    "merge_query",
    "build_url",
    "extract_domain",
    "parse_cid",
    # Uploads
    "UploadPart",
    "split_into_chunk_aligned_parts",
    "DetailedError",
    "PartUploadRequest",
    "ResumableEngine",
    "TusEngine",
    # Client
    "S5Client",
    "get_cid_url_for_portal",
]
