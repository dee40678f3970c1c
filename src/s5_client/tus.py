# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/tus.py

"""
Resumable upload engine backed by tuspy.

TusEngine uploads one byte range per call with tusclient, one chunk at a
time, so that progress can be reported after every chunk and credentials
refreshed before every request. Failed chunks are retried after the
delays in PartUploadRequest.retry_delays, resuming from the offset the
server reports. Partial uploads are joined with a tus "final" upload
(concatenation extension).
"""

import base64
import logging
import os
import time
from types import SimpleNamespace
from typing import Optional
from urllib.parse import urljoin

import requests
from tusclient.client import TusClient
from tusclient.exceptions import TusCommunicationError

from s5_client.engine import DetailedError, PartUploadRequest, TUS_RESUMABLE_VERSION

logger = logging.getLogger(__name__)


class ByteRange:
    """Read-only, seekable view of bytes [start, end) of a binary stream."""

    def __init__(self, stream, start: int, end: int):
        self._stream = stream
        self.start = start
        self.end = end
        self._pos = 0

    @property
    def size(self) -> int:
        return self.end - self.start

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        if whence == os.SEEK_CUR:
            offset += self._pos
        elif whence == os.SEEK_END:
            offset += self.size
        self._pos = max(0, min(offset, self.size))
        return self._pos

    def tell(self) -> int:
        return self._pos

    def read(self, size: int = -1) -> bytes:
        remaining = self.size - self._pos
        if size is None or size < 0 or size > remaining:
            size = remaining
        self._stream.seek(self.start + self._pos)
        data = self._stream.read(size)
        self._pos += len(data)
        return data

    def close(self) -> None:
        self._stream.close()


def encode_metadata(metadata: dict) -> str:
    """Encode metadata as an Upload-Metadata header value."""
    pairs = []
    for key, value in metadata.items():
        encoded = base64.b64encode(str(value).encode("utf-8")).decode("ascii")
        pairs.append(f"{key} {encoded}")
    return ",".join(pairs)


def _request_headers(on_before_request) -> dict:
    """Headers an on_before_request hook wants on the next request."""
    holder = SimpleNamespace(headers={})
    if on_before_request:
        holder = on_before_request(holder) or holder
    return dict(holder.headers)


class TusEngine:
    """ResumableEngine implementation on top of tuspy."""

    def __init__(self, session: requests.Session = None, sleep=time.sleep):
        """
        Args:
            session: requests.Session used for concatenation requests
            sleep: Called with seconds to wait between retries
        """
        self.session = session or requests.Session()
        self.sleep = sleep

    def upload(self, request: PartUploadRequest) -> str:
        stream = ByteRange(request.file.open(), request.start, request.end)
        try:
            tus_client = TusClient(request.endpoint)
            uploader = tus_client.uploader(
                file_stream=stream,
                chunk_size=request.chunk_size,
                metadata=dict(request.metadata),
                retries=0,
            )
            self._upload_chunks(tus_client, uploader, request)
        finally:
            stream.close()
        logger.debug(f"tus upload of bytes {request.start}-{request.end} at {uploader.url}")
        return uploader.url

    def _upload_chunks(self, tus_client, uploader, request: PartUploadRequest) -> None:
        delays = list(request.retry_delays)
        resync = False
        while uploader.url is None or uploader.offset < request.size:
            headers = _request_headers(request.on_before_request)
            if request.partial and uploader.url is None:
                headers["Upload-Concat"] = "partial"
            tus_client.headers = headers
            try:
                if resync:
                    uploader.offset = uploader.get_offset()
                    resync = False
                uploader.upload_chunk()
            except (TusCommunicationError, requests.RequestException) as e:
                if not delays:
                    raise
                delay = delays.pop(0)
                logger.debug(f"tus chunk failed ({e}), retrying in {delay} ms")
                self.sleep(delay / 1000)
                resync = uploader.url is not None
                continue
            if request.on_progress:
                request.on_progress(uploader.offset, request.size)

    def concatenate(self, endpoint, locations, metadata, on_before_request=None) -> Optional[str]:
        headers = _request_headers(on_before_request)
        headers.update({
            "Tus-Resumable": TUS_RESUMABLE_VERSION,
            "Upload-Concat": "final;" + " ".join(locations),
            "Upload-Metadata": encode_metadata(metadata),
        })
        response = self.session.post(endpoint, headers=headers)
        if response.status_code >= 400:
            raise DetailedError(
                f"tus concatenation failed with status {response.status_code}", response
            )
        location = response.headers.get("Location")
        if not location:
            return None
        return urljoin(endpoint, location)
