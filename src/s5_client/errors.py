# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/errors.py

"""
S5 client exceptions.

All library errors inherit from S5Error so callers can catch anything the
client raises with a single except clause.
"""


class S5Error(Exception):
    """Base exception for S5 client operations."""
    pass


class InvalidArgument(S5Error, ValueError):
    """Raised when an argument has the wrong shape or is out of range."""
    pass


class ConfigError(S5Error):
    """Raised when config is missing required fields."""
    pass


class ProtocolViolation(S5Error):
    """Raised when a collaborator broke its contract.

    Examples: a resumable upload that reported success without an upload
    location, or a portal response without the CID header.
    """
    pass


class TransferFailure(S5Error):
    """Raised when a resumable transfer failed after all retries.

    The message is the last error body reported by the upload engine.
    """

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class TransportFailure(S5Error):
    """Raised when the portal returns an HTTP error or cannot be reached."""

    def __init__(self, message: str, status_code: int = None, response=None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response
