# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/url.py

"""
URL helpers.

Pure string/URL transformations used to build portal URLs: scheme
prefixing, path joining, query merging and subdomain insertion.
None of these functions touch the network.
"""

import re
from functools import reduce
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from s5_client.errors import InvalidArgument


DEFAULT_PORTAL_URL = "https://localhost:5522"

URI_HANDSHAKE_PREFIX = "hns://"
URI_S5_PREFIX = "s5://"

_SCHEME_RE = re.compile(r"^https?:(//)?", re.IGNORECASE)

# Characters a WHATWG URL leaves alone when the pathname is set.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"


def _validate_string(name: str, value) -> None:
    if not isinstance(value, str):
        raise InvalidArgument(
            f"Expected parameter '{name}' to be type 'string', "
            f"was type '{type(value).__name__}'"
        )


def trim_prefix(s: str, prefix: str, limit: int = None) -> str:
    """Remove `prefix` from the start of `s`, at most `limit` times."""
    if not prefix:
        return s
    count = 0
    while s.startswith(prefix):
        if limit is not None and count >= limit:
            break
        s = s[len(prefix):]
        count += 1
    return s


def trim_suffix(s: str, suffix: str, limit: int = None) -> str:
    """Remove `suffix` from the end of `s`, at most `limit` times."""
    if not suffix:
        return s
    count = 0
    while s.endswith(suffix):
        if limit is not None and count >= limit:
            break
        s = s[:-len(suffix)]
        count += 1
    return s


def trim_forward_slash(s: str) -> str:
    """Remove all leading and trailing slashes."""
    return trim_prefix(trim_suffix(s, "/"), "/")


def trim_uri_prefix(s: str, prefix: str) -> str:
    """Remove a URI prefix such as "http://" (or its short form "http:").

    Matching is case-insensitive.
    """
    long_prefix = prefix.lower()
    short_prefix = trim_suffix(long_prefix, "/")
    lowered = s.lower()
    if lowered.startswith(long_prefix):
        return s[len(long_prefix):]
    if lowered.startswith(short_prefix):
        return s[len(short_prefix):]
    return s


def ensure_prefix(s: str, prefix: str) -> str:
    """Prepend `prefix` unless `s` already starts with it."""
    if not s.startswith(prefix):
        s = f"{prefix}{s}"
    return s


def ensure_url(url: str) -> str:
    """Return `url` with https:// prepended, unless it is already http://."""
    if url.startswith("http://"):
        return url
    return ensure_prefix(url, "https://")


def ensure_scheme_prefix(url: str) -> str:
    """
    Make sure `url` has an http(s) scheme.

    The bare host "localhost" maps to "http://localhost/" since local
    portals usually run without TLS; everything else defaults to https.
    """
    _validate_string("url", url)
    if url == "localhost":
        return "http://localhost/"
    if not _SCHEME_RE.match(url):
        return f"https://{url}"
    return url


def _split_absolute(url: str):
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise InvalidArgument(f"Invalid URL: '{url}'")
    return parts


def _replace_hostname(parts, hostname: str):
    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    if "@" in parts.netloc:
        userinfo = parts.netloc.rsplit("@", 1)[0]
        netloc = f"{userinfo}@{netloc}"
    return parts._replace(netloc=netloc)


def join_path(url: str, path: str) -> str:
    """
    Set the path of `url` to `path`.

    Args:
        url: Absolute URL, or the bare string "localhost"
        path: Path to set; surrounding slashes are ignored

    Returns:
        The new URL, never ending in a slash.
    """
    _validate_string("url", url)
    _validate_string("path", path)
    path = trim_forward_slash(path)

    if url == "localhost":
        # "localhost" alone does not parse as an absolute URL.
        s = f"localhost/{path}"
    else:
        parts = _split_absolute(url)
        parts = _replace_hostname(parts, parts.hostname)
        s = urlunsplit(parts._replace(path="/" + quote(path, safe=_PATH_SAFE)))

    return trim_suffix(s, "/")


def add_subdomain(url: str, subdomain: str) -> str:
    """Prepend `subdomain` to the hostname of `url`."""
    _validate_string("url", url)
    _validate_string("subdomain", subdomain)
    parts = _split_absolute(url)
    if ":" in parts.hostname:
        raise InvalidArgument(f"Cannot add a subdomain to an IPv6 address: '{url}'")
    parts = _replace_hostname(parts, f"{subdomain}.{parts.hostname}".lower())
    if parts.path == "/":
        parts = parts._replace(path="")
    return trim_suffix(urlunsplit(parts), "/")


def merge_query(url: str, query: dict) -> str:
    """
    Merge `query` into the query string of `url`.

    New values win on key collisions. Keys whose value is None are dropped.
    """
    parts = urlsplit(url)
    merged = dict(parse_qsl(parts.query, keep_blank_values=True))
    merged.update(query or {})
    merged = {key: value for key, value in merged.items() if value is not None}
    return urlunsplit(parts._replace(query=urlencode(merged)))


def _join_two(left: str, right: str) -> str:
    if not right:
        return left
    if not left:
        return right
    if right.startswith(("?", "#", "&")):
        return trim_suffix(left, "/") + right
    return f"{trim_suffix(left, '/')}/{trim_prefix(right, '/')}"


def join_all(*parts: str) -> str:
    """
    Join URL parts together and make sure the result has a scheme.

    Empty parts are skipped. Raises InvalidArgument when called with no parts.
    """
    if len(parts) == 0:
        raise InvalidArgument(
            "Expected parameter 'args' to be non-empty, was type 'array'"
        )
    for part in parts:
        _validate_string("args", part)
    return ensure_scheme_prefix(reduce(_join_two, parts))
