# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/upload.py

"""
S5 Uploads

Small files go to the portal in a single multipart POST. Files of at least
large_file_size * chunk_size_multiplier bytes go through the resumable
(tus) upload engine, optionally split into chunk-aligned parts that are
uploaded in parallel and staggered. Directories are a single multipart
POST with one field per file.

Large uploads run through these states:

    INIT -> TRANSFERRING -> PROBING -> DONE
                 |             |
                 +-> FAILED <--+
"""

import json
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import requests
from requests_toolbelt import MultipartEncoder, MultipartEncoderMonitor

from s5_client.config import TUS_CHUNK_SIZE, UploadOptions
from s5_client.engine import PartUploadRequest, ResumableEngine, TUS_RESUMABLE_VERSION, error_body
from s5_client.errors import ConfigError, InvalidArgument, ProtocolViolation, S5Error, TransferFailure
from s5_client.partition import UploadPart, split_into_chunk_aligned_parts
from s5_client.portal_api import PortalClient
from s5_client.types import UploadFile, UploadResult

logger = logging.getLogger(__name__)

PORTAL_FILE_FIELD_NAME = "file"
PORTAL_DIRECTORY_FILE_FIELD_NAME = "files[]"

# Response header carrying the CID of a finished resumable upload.
CID_HEADER = "s5-skylink"


class SessionState(Enum):
    INIT = "init"
    TRANSFERRING = "transferring"
    PROBING = "probing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class UploadSession:
    """State of one large upload. Lives for a single upload call."""
    endpoint: str
    file: UploadFile
    parts: list[UploadPart]
    bytes_sent: list[int] = field(default_factory=list)
    state: SessionState = SessionState.INIT
    error: Optional[str] = None

    def __post_init__(self):
        # One slot per part; each part's worker only writes its own slot.
        if not self.bytes_sent:
            self.bytes_sent = [0] * len(self.parts)

    @property
    def loaded(self) -> int:
        return sum(self.bytes_sent)

    @property
    def progress(self) -> float:
        if self.file.size == 0:
            return 1.0
        return self.loaded / self.file.size

    def transition(self, state: SessionState) -> None:
        logger.debug(f"upload {self.file.name}: {self.state.value} -> {state.value}")
        self.state = state

    def fail(self, reason: str) -> None:
        if self.state is SessionState.FAILED:
            return
        self.error = reason
        self.transition(SessionState.FAILED)


def _cid_from_json(response: requests.Response) -> str:
    """Read the CID out of an upload response body."""
    try:
        data = response.json()
    except ValueError:
        raise ProtocolViolation(f"Upload response is not JSON: {response.text[:200]}")
    cid = data.get("cid") if isinstance(data, dict) else None
    if not cid:
        raise ProtocolViolation(f"Upload response did not contain a CID: {data}")
    return str(cid)


def _with_progress(encoder: MultipartEncoder, opts: UploadOptions):
    """Wrap encoder in a monitor that reports upload progress, if requested."""
    if not opts.on_upload_progress:
        return encoder

    def callback(monitor):
        total = monitor.len
        loaded = monitor.bytes_read
        opts.on_upload_progress(loaded / total if total else 1.0, {"loaded": loaded, "total": total})

    return MultipartEncoderMonitor(encoder, callback)


class Uploader:
    """Uploads files and directories to a portal."""

    def __init__(
        self,
        client: PortalClient,
        engine: ResumableEngine = None,
        client_options: dict = None,
    ):
        """
        Args:
            client: Portal transport
            engine: Resumable upload engine used for large files (optional;
                large uploads raise ConfigError without one)
            client_options: Client-level option overrides
        """
        self.client = client
        self.engine = engine
        self.client_options = dict(client_options or {})

    def resolve_options(self, custom_options: dict = None) -> UploadOptions:
        opts = UploadOptions.resolve(self.client_options, custom_options)
        opts.validate()
        return opts

    def upload_file(self, file: UploadFile, **custom_options) -> UploadResult:
        """
        Upload a file, choosing the small or the large upload path by size.

        Returns:
            UploadResult with the CID assigned by the portal.
        """
        opts = self.resolve_options(custom_options)
        if file.size < opts.large_file_size * opts.chunk_size_multiplier:
            return self._upload_small(file, opts)
        return self._upload_large(file, opts)

    def upload_small_file(self, file: UploadFile, **custom_options) -> UploadResult:
        """Upload a file with a single multipart request."""
        return self._upload_small(file, self.resolve_options(custom_options))

    def upload_large_file(self, file: UploadFile, **custom_options) -> UploadResult:
        """Upload a file through the resumable upload engine."""
        return self._upload_large(file, self.resolve_options(custom_options))

    def upload_directory(
        self, directory: dict[str, UploadFile], filename: str, **custom_options
    ) -> UploadResult:
        """
        Upload a directory.

        Args:
            directory: Files keyed by their path inside the directory
            filename: Name of the directory
            **custom_options: Call-level UploadOptions overrides (try_files,
                error_pages, endpoint_directory_upload, ...)

        Returns:
            UploadResult with the CID of the directory.
        """
        if not isinstance(filename, str):
            raise InvalidArgument(f"Expected parameter 'filename' to be type 'string', was '{filename!r}'")
        if not isinstance(directory, dict):
            raise InvalidArgument("Expected parameter 'directory' to be type 'object'")

        opts = self.resolve_options(custom_options)

        query = {"filename": filename}
        if opts.try_files:
            query["tryfiles"] = json.dumps(opts.try_files)
        if opts.error_pages:
            query["errorpages"] = json.dumps(opts.error_pages)

        logger.debug(f"upload_directory: {len(directory)} files, filename={filename}")

        file_handles = []
        fields = []
        try:
            for path, file in directory.items():
                fh = file.open()
                file_handles.append(fh)
                fields.append((PORTAL_DIRECTORY_FILE_FIELD_NAME, (path, fh, file.content_type)))

            encoder = MultipartEncoder(fields=fields)
            response = self.client.execute(
                "POST",
                opts,
                endpoint_path=opts.endpoint_directory_upload,
                query=query,
                data=_with_progress(encoder, opts),
                headers={"Content-Type": encoder.content_type},
            )
        finally:
            for fh in file_handles:
                fh.close()

        return UploadResult(cid=_cid_from_json(response))

    # -------------------------------------------------------------------------
    # Small files
    # -------------------------------------------------------------------------

    def _upload_small(self, file: UploadFile, opts: UploadOptions) -> UploadResult:
        filename = opts.custom_filename or file.name
        logger.debug(f"_upload_small: {filename} ({file.size} bytes)")

        with file.open() as fh:
            encoder = MultipartEncoder(
                fields=[(PORTAL_FILE_FIELD_NAME, (filename, fh, file.content_type))]
            )
            response = self.client.execute(
                "POST",
                opts,
                endpoint_path=opts.endpoint_upload,
                data=_with_progress(encoder, opts),
                headers={"Content-Type": encoder.content_type},
            )

        return UploadResult(cid=_cid_from_json(response))

    # -------------------------------------------------------------------------
    # Large files
    # -------------------------------------------------------------------------

    def _upload_large(self, file: UploadFile, opts: UploadOptions) -> UploadResult:
        if self.engine is None:
            raise ConfigError("No resumable upload engine configured for large uploads")

        chunk_size = TUS_CHUNK_SIZE
        session = UploadSession(
            endpoint=self.client.build_url(opts.endpoint_large_upload),
            file=file,
            parts=plan_parts(file.size, opts.num_parallel_uploads, chunk_size),
        )
        metadata = {
            "filename": opts.custom_filename or file.name,
            "filetype": file.content_type,
        }
        logger.debug(
            f"_upload_large: {file.name} ({file.size} bytes) in {len(session.parts)} part(s)"
        )

        location = self._transfer(session, opts, metadata, chunk_size)

        session.transition(SessionState.PROBING)
        try:
            cid = self._probe(location, opts)
        except S5Error as e:
            session.fail(str(e))
            raise

        session.transition(SessionState.DONE)
        return UploadResult(cid=cid)

    def _transfer(
        self, session: UploadSession, opts: UploadOptions, metadata: dict, chunk_size: int
    ) -> str:
        """Run one engine session per part. Returns the final upload location."""
        session.transition(SessionState.TRANSFERRING)

        parts = session.parts
        partial = len(parts) > 1
        threshold = None
        if partial and opts.stagger_percent is not None:
            threshold = opts.stagger_percent / 100

        def on_before_request(request):
            return self.client.attach_credentials(request, opts)

        # gates[i] opens once part i is far enough along for part i+1 to start
        gates = [threading.Event() for _ in parts]
        futures = []
        executor = ThreadPoolExecutor(max_workers=len(parts), thread_name_prefix="s5-upload")
        try:
            for index, part in enumerate(parts):
                if index > 0 and threshold:
                    while not gates[index - 1].wait(timeout=0.1):
                        if session.state is SessionState.FAILED:
                            break
                    if session.state is SessionState.FAILED:
                        break
                request = PartUploadRequest(
                    endpoint=session.endpoint,
                    file=session.file,
                    start=part.start,
                    end=part.end,
                    chunk_size=chunk_size,
                    metadata=dict(metadata),
                    retry_delays=opts.retry_delays,
                    partial=partial,
                    on_progress=self._progress_handler(session, index, gates[index], threshold, opts),
                    on_before_request=on_before_request,
                )
                futures.append(executor.submit(self._run_part, session, request, gates[index]))

            wait(futures, return_when=FIRST_EXCEPTION)
        finally:
            # Fail fast: never block on sibling parts still in flight.
            executor.shutdown(wait=False, cancel_futures=True)

        for future in futures:
            if future.done() and future.exception() is not None:
                error = future.exception()
                session.fail(str(error))
                raise error

        locations = [future.result() for future in futures]
        if not partial:
            return locations[0]

        try:
            location = self.engine.concatenate(
                session.endpoint, locations, dict(metadata), on_before_request
            )
        except Exception as e:
            message = error_body(e)
            session.fail(message)
            raise TransferFailure(message, cause=e) from e
        if not location:
            session.fail("final upload location was not set")
            raise ProtocolViolation("Resumable upload engine did not return a final upload location")
        return location

    def _run_part(self, session: UploadSession, request: PartUploadRequest, gate: threading.Event) -> str:
        try:
            location = self.engine.upload(request)
        except Exception as e:
            message = error_body(e)
            session.fail(message)
            raise TransferFailure(message, cause=e) from e
        finally:
            gate.set()

        if not location:
            session.fail("upload location was not set")
            raise ProtocolViolation(
                f"Resumable upload of bytes {request.start}-{request.end} succeeded "
                f"without an upload location"
            )
        logger.debug(f"_run_part: bytes {request.start}-{request.end} done at {location}")
        return location

    @staticmethod
    def _progress_handler(
        session: UploadSession,
        index: int,
        gate: threading.Event,
        threshold: Optional[float],
        opts: UploadOptions,
    ):
        def on_progress(bytes_sent: int, bytes_total: int) -> None:
            session.bytes_sent[index] = bytes_sent
            if threshold is not None and bytes_total and bytes_sent / bytes_total >= threshold:
                gate.set()
            if opts.on_upload_progress:
                loaded = session.loaded
                total = session.file.size
                opts.on_upload_progress(session.progress, {"loaded": loaded, "total": total})

        return on_progress

    def _probe(self, location: str, opts: UploadOptions) -> str:
        """HEAD the finished upload to get the CID the portal assigned."""
        response = self.client.execute(
            "HEAD",
            opts,
            url=location,
            headers={"Tus-Resumable": TUS_RESUMABLE_VERSION},
        )
        cid = response.headers.get(CID_HEADER)
        if not cid:
            raise ProtocolViolation(f"Response from {location} has no '{CID_HEADER}' header")
        return cid


def plan_parts(total_size: int, num_parallel_uploads: int, chunk_size: int) -> list[UploadPart]:
    """
    Decide the byte ranges of a large upload.

    A single part covers the whole file unless parallel uploads are enabled
    and the file is bigger than one chunk. Empty parts are dropped.
    """
    if num_parallel_uploads == 1 or total_size <= chunk_size:
        return [UploadPart(start=0, end=total_size)]
    parts = split_into_chunk_aligned_parts(total_size, num_parallel_uploads, chunk_size)
    return [part for part in parts if part.size > 0]
