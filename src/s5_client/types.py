# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/types.py

"""
S5 Type Definitions

Dataclasses for upload inputs and library return types with
serialization support.
"""

import io
import json
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional


DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(name: str) -> str:
    """Guess a MIME type from a file name."""
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


@dataclass
class UploadFile:
    """A file to upload: either a path on disk or in-memory bytes."""
    name: str                               # File name sent to the portal
    size: int                               # Size in bytes
    content_type: str = DEFAULT_CONTENT_TYPE
    path: Optional[Path] = None             # Set for files on disk
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path, name: str = None) -> "UploadFile":
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Not a file: {path}")
        name = name or path.name
        return cls(
            name=name,
            size=path.stat().st_size,
            content_type=guess_content_type(name),
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: str = None) -> "UploadFile":
        return cls(
            name=name,
            size=len(data),
            content_type=content_type or guess_content_type(name),
            data=data,
        )

    def open(self) -> BinaryIO:
        """Open a fresh binary stream positioned at the start of the file."""
        if self.path is not None:
            return open(self.path, "rb")
        return io.BytesIO(self.data or b"")


@dataclass
class UploadResult:
    """Result of uploading a file or directory."""
    cid: str                                # CID assigned by the portal

    def to_dict(self) -> dict:
        return {"cid": self.cid}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> "UploadResult":
        return cls(cid=data["cid"])


@dataclass
class MetadataResult:
    """Metadata of an uploaded object."""
    metadata: dict                          # Metadata JSON (empty if none)
    portal_url: Optional[str]               # Portal that served the request
    cid: Optional[str]                      # CID reported by the portal

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata,
            "portal_url": self.portal_url,
            "cid": self.cid,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> "MetadataResult":
        return cls(
            metadata=data.get("metadata", {}),
            portal_url=data.get("portal_url"),
            cid=data.get("cid"),
        )
