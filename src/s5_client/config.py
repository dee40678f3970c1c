# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/config.py

"""
S5 Configuration Management

Two kinds of configuration live here:

1. Per-call options (UploadOptions, DownloadOptions, MetadataOptions).
   Every call resolves one immutable options value from three layers,
   merged left to right: class defaults -> client-level overrides ->
   call-level overrides.

2. The client config file, TOML:
     /etc/s5/common.toml        -- shared config (optional)
     ~/.config/s5/config.toml   -- user config (required)
   Deep merge: common.toml is base, config.toml overrides at section level.
   Keys live in separate files: [portal].api_key_file holds the S5 API
   key (Bearer token), [portal].basic_auth_key_file the basic auth key.
"""

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Callable, Optional

from s5_client.errors import InvalidArgument
from s5_client.url import DEFAULT_PORTAL_URL


DEFAULT_COMMON = Path("/etc/s5/common.toml")
DEFAULT_CONFIG = Path("~/.config/s5/config.toml").expanduser()

# The tus chunk size is (4MiB - encryptionOverhead) * dataPieces on the portal.
TUS_CHUNK_SIZE = (1 << 22) * 10

DEFAULT_TUS_CHUNK_SIZE_MULTIPLIER = 3
DEFAULT_TUS_PARALLEL_UPLOADS = 2
# In milliseconds. The portal keeps partial uploads for about 20 minutes, so
# the delays should add up to less than that.
DEFAULT_TUS_RETRY_DELAYS = (0, 5_000, 15_000, 60_000, 300_000, 600_000)
DEFAULT_TUS_STAGGER_PERCENT = 50


@dataclass(frozen=True)
class BaseOptions:
    """Options shared by every request to the portal."""
    api_key: str = ""                       # Sent as basic auth password
    s5_api_key: str = ""                    # Sent as bearer token
    custom_user_agent: str = ""
    custom_cookie: str = ""
    on_upload_progress: Optional[Callable] = None    # fn(fraction, {"loaded", "total"})
    on_download_progress: Optional[Callable] = None  # fn(fraction, {"loaded", "total"})

    @classmethod
    def resolve(cls, client_options: dict = None, custom_options: dict = None):
        """
        Build the options for one call.

        Args:
            client_options: Client-level overrides. Keys that belong to other
                option classes are ignored, so one dict can carry upload and
                download settings at once.
            custom_options: Call-level overrides. Unknown keys are an error.

        Returns:
            A new options instance. Keys present in a layer always win,
            including an explicit None.
        """
        known = {f.name for f in fields(cls)}
        merged = {}
        for key, value in (client_options or {}).items():
            if key in known:
                merged[key] = value
        for key, value in (custom_options or {}).items():
            if key not in known:
                raise InvalidArgument(f"Unknown option '{key}' for {cls.__name__}")
            merged[key] = value
        return cls(**merged)

    def to_client_options(self) -> dict:
        """Return the fields as a plain dict."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class UploadOptions(BaseOptions):
    """
    Upload options.

    large_file_size * chunk_size_multiplier is the size from which files are
    uploaded with the resumable protocol. num_parallel_uploads=1 disables
    parallel parts. stagger_percent (0-100) is how far a part must get
    before the next part starts; None runs all parts at once. retry_delays
    (ms) are handed to the upload engine; their count is the retry budget.
    """
    endpoint_upload: str = "/s5/upload"
    endpoint_directory_upload: str = "/s5/upload/directory"
    endpoint_large_upload: str = "/s5/upload/tus"

    custom_filename: str = ""
    error_pages: Optional[dict] = None
    try_files: Optional[list] = None

    chunk_size_multiplier: int = DEFAULT_TUS_CHUNK_SIZE_MULTIPLIER
    large_file_size: int = TUS_CHUNK_SIZE
    num_parallel_uploads: int = DEFAULT_TUS_PARALLEL_UPLOADS
    stagger_percent: Optional[float] = DEFAULT_TUS_STAGGER_PERCENT
    retry_delays: tuple = DEFAULT_TUS_RETRY_DELAYS

    def __post_init__(self):
        if isinstance(self.retry_delays, list):
            object.__setattr__(self, "retry_delays", tuple(self.retry_delays))

    def validate(self) -> None:
        """Raise InvalidArgument if any large-upload setting is out of range."""
        if not isinstance(self.num_parallel_uploads, int) or self.num_parallel_uploads < 1:
            raise InvalidArgument(
                f"num_parallel_uploads must be an integer >= 1, was '{self.num_parallel_uploads}'"
            )
        if not isinstance(self.chunk_size_multiplier, int) or self.chunk_size_multiplier < 1:
            raise InvalidArgument(
                f"chunk_size_multiplier must be an integer >= 1, was '{self.chunk_size_multiplier}'"
            )
        if not isinstance(self.large_file_size, int) or self.large_file_size < 1:
            raise InvalidArgument(
                f"large_file_size must be an integer >= 1, was '{self.large_file_size}'"
            )
        if self.stagger_percent is not None and not 0 <= self.stagger_percent <= 100:
            raise InvalidArgument(
                f"stagger_percent must be between 0 and 100, was '{self.stagger_percent}'"
            )
        if not isinstance(self.retry_delays, tuple) or any(
            isinstance(d, bool) or not isinstance(d, (int, float)) or d < 0
            for d in self.retry_delays
        ):
            raise InvalidArgument(
                f"retry_delays must be a list of non-negative numbers, was '{self.retry_delays}'"
            )


@dataclass(frozen=True)
class DownloadOptions(BaseOptions):
    """
    Download options.

    download=True asks the portal to serve the file as an attachment. path is
    appended to the CID, each segment URL-encoded. subdomain=True puts the
    CID in a subdomain of the portal instead of the path.
    """
    endpoint_download: str = "/"
    download: bool = False
    path: Optional[str] = None
    range: Optional[str] = None
    subdomain: bool = False


@dataclass(frozen=True)
class MetadataOptions(BaseOptions):
    """Metadata options."""
    endpoint_get_metadata: str = "/s5/metadata"


@dataclass
class ClientConfig:
    """Complete client configuration loaded from the TOML files."""
    portal_url: str = DEFAULT_PORTAL_URL
    api_key: str = ""
    s5_api_key: str = ""
    custom_user_agent: str = ""
    custom_cookie: str = ""
    upload: dict = field(default_factory=dict)
    download: dict = field(default_factory=dict)

    def custom_options(self) -> dict:
        """Client-level option overrides for S5Client."""
        options = {}
        for key in ("api_key", "s5_api_key", "custom_user_agent", "custom_cookie"):
            value = getattr(self, key)
            if value:
                options[key] = value
        options.update(self.download)
        options.update(self.upload)
        return options

    def validate(self) -> tuple[list[str], list[str]]:
        """
        Validate configuration, return (errors, warnings).
        Empty errors list means config is usable.
        """
        errors = []
        warnings = []

        if not self.portal_url:
            errors.append("portal url is not set")

        upload_fields = {f.name for f in fields(UploadOptions)}
        for key in self.upload:
            if key not in upload_fields:
                errors.append(f"unknown upload option '{key}'")

        download_fields = {f.name for f in fields(DownloadOptions)} | {"endpoint_get_metadata"}
        for key in self.download:
            if key not in download_fields:
                errors.append(f"unknown download option '{key}'")

        known_upload = {key: value for key, value in self.upload.items() if key in upload_fields}
        try:
            UploadOptions(**known_upload).validate()
        except InvalidArgument as e:
            errors.append(str(e))

        if not self.api_key and not self.s5_api_key:
            warnings.append("no portal api key configured")

        return errors, warnings


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base at section level.

    For top-level keys that are both dicts (TOML sections), merge their
    contents with override winning on key conflict.
    For non-dict values, override replaces base.
    """
    merged = dict(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = {**merged[key], **val}
        else:
            merged[key] = val
    return merged


def _load_api_key(key_file: Path) -> str:
    """Read an API key file.

    Raises:
        FileNotFoundError: If the key file doesn't exist
        ValueError: If the key file is empty
    """
    if not key_file.exists():
        raise FileNotFoundError(f"API key file not found: {key_file}")

    key = key_file.read_text().strip()
    if not key:
        raise ValueError(f"API key file is empty: {key_file}")
    return key


def load_config(
    common_path: Path = None, config_path: Path = None
) -> ClientConfig:
    """Load config from common.toml + config.toml. Returns ClientConfig.

    Args:
        common_path: Path to common.toml. Default: /etc/s5/common.toml
        config_path: Path to config.toml. Default: ~/.config/s5/config.toml

    Returns:
        ClientConfig object

    Raises:
        FileNotFoundError: If the config file or the API key file don't exist
        ValueError: If the config files are invalid
    """
    common_file = common_path or DEFAULT_COMMON
    config_file = config_path or DEFAULT_CONFIG

    # common.toml is optional
    common = {}
    if common_file.exists():
        with open(common_file, "rb") as f:
            common = tomllib.load(f)

    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_file, "rb") as f:
        specific = tomllib.load(f)

    config = _deep_merge(common, specific)

    portal = config.get("portal", {})

    s5_api_key = ""
    if "api_key_file" in portal:
        s5_api_key = _load_api_key(Path(portal["api_key_file"]).expanduser())

    api_key = ""
    if "basic_auth_key_file" in portal:
        api_key = _load_api_key(Path(portal["basic_auth_key_file"]).expanduser())

    return ClientConfig(
        portal_url=portal.get("url", DEFAULT_PORTAL_URL),
        api_key=api_key,
        s5_api_key=s5_api_key,
        custom_user_agent=portal.get("user_agent", ""),
        custom_cookie=portal.get("cookie", ""),
        upload=dict(config.get("upload", {})),
        download=dict(config.get("download", {})),
    )
