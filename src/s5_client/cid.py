# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/cid.py

"""
CID string parsing.

CIDs are opaque to this package. We only ever split a CID string into its
bare identifier and an optional trailing path, e.g. "zCID/dir/file" ->
("zCID", "dir/file"). Accepted forms:

    zCID
    zCID/dir/file
    s5://zCID/dir/file
    https://portal.example/zCID/dir/file
    https://zcid.portal.example           (subdomain form, no path)
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from s5_client.errors import InvalidArgument
from s5_client.url import URI_S5_PREFIX, _validate_string, trim_forward_slash, trim_uri_prefix


CID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _split_cid(value: str) -> tuple:
    """Return (identifier, path) with path possibly empty."""
    value = trim_uri_prefix(value.strip(), URI_S5_PREFIX)

    parts = urlsplit(value)
    if parts.scheme in ("http", "https") and parts.netloc:
        path = trim_forward_slash(parts.path)
        if not path:
            # Subdomain form: the CID is the leftmost host label.
            return parts.hostname.split(".", 1)[0], ""
        head, _, rest = path.partition("/")
        return head, trim_forward_slash(rest)

    # Not a URL; drop any query or fragment.
    value = re.split(r"[?#]", value, maxsplit=1)[0]
    head, _, rest = trim_forward_slash(value).partition("/")
    return head, trim_forward_slash(rest)


def parse_cid(
    value: str, include_path: bool = False, only_path: bool = False
) -> Optional[str]:
    """
    Parse the CID (and/or its path) out of a CID string or URL.

    Args:
        value: CID string or portal URL containing a CID
        include_path: Return "CID/path" instead of the bare CID
        only_path: Return only the path (without leading slash), or None

    Returns:
        The requested part, or None if no CID could be found.
    """
    _validate_string("value", value)
    if include_path and only_path:
        raise InvalidArgument("include_path and only_path cannot both be set")

    cid, path = _split_cid(value)
    if not CID_RE.match(cid):
        return None

    if only_path:
        return path or None
    if include_path and path:
        return f"{cid}/{path}"
    return cid


def require_cid(value: str, **kwargs) -> str:
    """Like parse_cid() but raise InvalidArgument instead of returning None."""
    result = parse_cid(value, **kwargs)
    if result is None:
        raise InvalidArgument(f"Could not get CID out of input '{value}'")
    return result
