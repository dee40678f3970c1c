# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/portal_api.py

"""
HTTP client for the S5 portal REST API.

Every request to the portal goes through PortalClient.execute(), which
builds the URL from the portal origin, attaches credentials and custom
headers, and turns HTTP errors into TransportFailure.

Debug logging:
    Enable with: S5_DEBUG=1 or by setting log level to DEBUG
    Example: S5_DEBUG=1 s5 upload /path/to/file
"""

import logging
import os

import requests
from requests.auth import HTTPBasicAuth

from s5_client.config import BaseOptions
from s5_client.errors import TransportFailure
from s5_client.url import DEFAULT_PORTAL_URL, ensure_scheme_prefix, join_all, merge_query, trim_suffix

# Configure logger for this module
logger = logging.getLogger(__name__)

# Enable debug logging via environment variable
if os.environ.get("S5_DEBUG"):
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    logger.setLevel(logging.DEBUG)


def build_request_headers(
    base_headers: dict = None,
    custom_user_agent: str = "",
    custom_cookie: str = "",
    s5_api_key: str = "",
) -> dict:
    """Build request headers from the custom request options."""
    headers = dict(base_headers or {})
    if custom_user_agent:
        headers["User-Agent"] = custom_user_agent
    if custom_cookie:
        headers["Cookie"] = custom_cookie
    if s5_api_key:
        headers["Authorization"] = f"Bearer {s5_api_key}"
    return headers


def _error_message(response: requests.Response) -> str:
    try:
        error_data = response.json()
    except ValueError:
        return response.text
    if isinstance(error_data, dict):
        return error_data.get("message", response.text)
    return response.text


class PortalClient:
    """HTTP client for an S5 portal."""

    def __init__(self, portal_url: str = DEFAULT_PORTAL_URL, session: requests.Session = None):
        """
        Initialize portal client.

        Args:
            portal_url: Portal origin, e.g. "https://s5.example.com"
            session: requests.Session to reuse (a new one by default)
        """
        self.portal_url = trim_suffix(ensure_scheme_prefix(portal_url), "/")
        self.session = session or requests.Session()

    def build_url(self, endpoint_path: str = None, extra_path: str = None, query: dict = None) -> str:
        """Build a full URL on this portal."""
        url = join_all(self.portal_url, endpoint_path or "", extra_path or "")
        if query:
            url = merge_query(url, query)
        return url

    def attach_credentials(self, request, options: BaseOptions):
        """
        Add auth and custom headers to an outgoing request.

        `request` is anything with a `headers` mapping, such as a
        requests.PreparedRequest handed to us by the resumable upload engine.
        """
        request.headers.update(
            build_request_headers(
                None, options.custom_user_agent, options.custom_cookie, options.s5_api_key
            )
        )
        if options.api_key:
            request = HTTPBasicAuth("", options.api_key)(request)
        return request

    def execute(
        self,
        method: str,
        options: BaseOptions,
        endpoint_path: str = None,
        url: str = None,
        extra_path: str = None,
        query: dict = None,
        headers: dict = None,
        **kwargs,
    ) -> requests.Response:
        """
        Make an HTTP request to the portal.

        Args:
            method: HTTP method
            options: Resolved options carrying credentials and custom headers
            endpoint_path: Endpoint relative to the portal URL
            url: Full URL; takes precedence over endpoint_path
            extra_path: Path appended after the endpoint
            query: Query parameters merged into the URL
            headers: Extra request headers
            **kwargs: Passed through to requests (data, files, stream, ...)

        Returns:
            The requests.Response.

        Raises:
            TransportFailure: On HTTP status >= 400 or network error
        """
        if url is None:
            url = self.build_url(endpoint_path, extra_path, query)
        elif query:
            url = merge_query(url, query)

        headers = build_request_headers(
            headers, options.custom_user_agent, options.custom_cookie, options.s5_api_key
        )
        auth = HTTPBasicAuth("", options.api_key) if options.api_key else None

        logger.debug(f"Request: {method.upper()} {url}")

        try:
            response = self.session.request(method.upper(), url, headers=headers, auth=auth, **kwargs)
        except requests.RequestException as e:
            raise TransportFailure(f"Network error: {e}") from e

        logger.debug(f"Response status: {response.status_code}")
        logger.debug(f"Response headers: {dict(response.headers)}")
        if not kwargs.get("stream"):
            # Truncate body for logging (first 2000 chars)
            body_preview = response.text[:2000] if response.text else "(empty)"
            logger.debug(f"Response body: {body_preview}")

        if response.status_code == 401:
            raise TransportFailure("Unauthorized: check portal api key", 401, response)
        if response.status_code >= 400:
            raise TransportFailure(_error_message(response), response.status_code, response)

        return response
