# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/engine.py

"""
Resumable upload engine interface.

The tus wire protocol (upload creation, PATCHing chunks, offsets, retry
timers) is not implemented here. Large uploads are handed to an engine
object that implements ResumableEngine; the uploader only decides how the
file is split, feeds progress back to the caller and reacts to the
engine's result.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, runtime_checkable

from s5_client.types import UploadFile


TUS_RESUMABLE_VERSION = "1.0.0"

ProgressCallback = Callable[[int, int], None]
BeforeRequestCallback = Callable[[object], object]


@dataclass
class PartUploadRequest:
    """One resumable upload session: the byte range [start, end) of a file."""
    endpoint: str                           # Creation URL (tus endpoint)
    file: UploadFile
    start: int
    end: int
    chunk_size: int
    metadata: dict = field(default_factory=dict)
    retry_delays: tuple = ()                # ms to wait before each retry
    partial: bool = False                   # Part of a concatenated upload
    on_progress: Optional[ProgressCallback] = None        # fn(bytes_sent, bytes_total)
    on_before_request: Optional[BeforeRequestCallback] = None  # fn(request)

    @property
    def size(self) -> int:
        return self.end - self.start


class DetailedError(Exception):
    """Engine error carrying the portal response that caused it.

    Engines should raise this (or any exception with an `original_response`
    or `response` attribute) so the uploader can report the portal's error
    body instead of a generic message.
    """

    def __init__(self, message: str, original_response=None):
        super().__init__(message)
        self.original_response = original_response


@runtime_checkable
class ResumableEngine(Protocol):
    """Resumable upload engine (e.g. a tus client)."""

    def upload(self, request: PartUploadRequest) -> Optional[str]:
        """
        Upload one byte range, retrying per request.retry_delays.

        Must call request.on_progress as bytes are sent and
        request.on_before_request on every HTTP request it makes.

        Returns:
            The upload location URL.

        Raises:
            Exception: When the upload failed after all retries.
        """
        ...

    def concatenate(
        self,
        endpoint: str,
        locations: list[str],
        metadata: dict,
        on_before_request: Optional[BeforeRequestCallback] = None,
    ) -> Optional[str]:
        """
        Join finished partial uploads into the final upload.

        Returns:
            The location URL of the final upload.
        """
        ...


def error_body(error: Exception) -> str:
    """Return the portal's error body for an engine error, if it has one."""
    response = getattr(error, "original_response", None)
    if response is None:
        response = getattr(error, "response", None)
    if response is not None:
        body = getattr(response, "text", None)
        if body is None and callable(getattr(response, "get_body", None)):
            body = response.get_body()
    else:
        # tusclient errors carry the raw response body
        body = getattr(error, "response_content", None)
    if response is not None or body is not None:
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if body and body.strip():
            return body.strip()
    return str(error)
