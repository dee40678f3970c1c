# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/domain.py

"""
Domain resolution against a portal.

A logical domain such as "app.hns" is served by a portal as a subdomain,
e.g. ("https://portal.example", "app.hns/dir/file") maps to
"https://app.hns.portal.example/dir/file". build_url() goes one way and
extract_domain() goes back.
"""

from urllib.parse import urlsplit

from s5_client.url import (
    URI_S5_PREFIX,
    _validate_string,
    add_subdomain,
    ensure_scheme_prefix,
    join_path,
    trim_forward_slash,
    trim_suffix,
    trim_uri_prefix,
)


def _split_first(s: str) -> tuple:
    """Split on the first slash, returning (head, rest or None)."""
    head, sep, rest = s.partition("/")
    return head, (rest if sep and rest else None)


def _parse_absolute(url: str):
    """Return (hostname, path) if `url` is an absolute URL, else None."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc or hostname is None:
        return None
    return hostname, trim_forward_slash(parts.path)


def build_url(portal_url: str, domain: str) -> str:
    """
    Build the full URL for a domain or CID served by a portal.

    Args:
        portal_url: Portal origin, with or without scheme
        domain: Domain or CID, optionally followed by /path

    Returns:
        Full URL, never ending in a slash. The domain "localhost" gives the
        literal "localhost" (plus path) without a scheme.

    Example:
        build_url("https://portal.example", "abc.hns/dir/file")
        -> "https://abc.hns.portal.example/dir/file"
    """
    _validate_string("portal_url", portal_url)
    _validate_string("domain", domain)

    portal_url = ensure_scheme_prefix(trim_uri_prefix(portal_url, "http://"))

    domain = trim_uri_prefix(domain, URI_S5_PREFIX)
    domain = trim_forward_slash(domain)
    label, path = _split_first(domain)

    if label == "localhost":
        url = "localhost"
    else:
        url = add_subdomain(portal_url, label)

    if path:
        url = join_path(url, path)
    return url


def extract_domain(portal_url: str, full_url: str) -> str:
    """
    Extract the logical domain from a full URL served by a portal.

    Inverse of build_url():
        extract_domain("https://portal.example",
                       "https://abc.hns.portal.example/dir/file")
        -> "abc.hns/dir/file"

    When full_url is not an absolute URL (e.g. "abc.hns.portal.example/Dir"),
    only the host part is lowercased; the path is kept as given.
    """
    _validate_string("portal_url", portal_url)
    _validate_string("full_url", full_url)

    parsed = _parse_absolute(full_url)
    if parsed is not None:
        host, path = parsed
    else:
        host, path = _split_first(trim_forward_slash(full_url))
        host = host.lower()

    portal_host = _parse_absolute(ensure_scheme_prefix(portal_url))
    portal_domain = trim_forward_slash(portal_host[0]) if portal_host else ""

    domain = trim_suffix(host, portal_domain, limit=1)
    domain = trim_suffix(domain, ".")

    if path:
        domain = f"{domain}/{trim_forward_slash(path)}"
    return domain
