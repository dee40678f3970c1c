# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# src/s5_client/partition.py

"""
Splitting of large uploads into chunk-aligned parts.

Each parallel upload part must start on a chunk boundary, so every part is
a whole number of chunks except the one that takes the non-aligned
leftover.
"""

from dataclasses import dataclass

from s5_client.errors import InvalidArgument


@dataclass(frozen=True)
class UploadPart:
    """Half-open byte range [start, end) of the source object."""
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


def split_into_chunk_aligned_parts(
    total_size: int, part_count: int, chunk_size: int
) -> list[UploadPart]:
    """
    Split `total_size` bytes into `part_count` chunk-aligned parts.

    Full chunks are dealt round-robin across the parts, so part sizes
    differ by at most one chunk. The leftover (total_size % chunk_size) goes
    to the part after the last one that received a chunk, or to the last
    part if every part received one. Parts can be empty when there are
    fewer chunks than parts.

    Args:
        total_size: Size of the whole upload in bytes
        part_count: Number of parts (the number of parallel uploads)
        chunk_size: Chunk size in bytes

    Returns:
        Ordered list of UploadPart covering [0, total_size) with no gaps.

    Raises:
        InvalidArgument: If part_count < 1, chunk_size < 1, or
            total_size <= chunk_size.
    """
    if part_count < 1:
        raise InvalidArgument(
            f"Expected parameter 'part_count' to be greater than or equal to 1, was '{part_count}'"
        )
    if chunk_size < 1:
        raise InvalidArgument(
            f"Expected parameter 'chunk_size' to be greater than or equal to 1, was '{chunk_size}'"
        )
    if total_size <= chunk_size:
        raise InvalidArgument(
            f"Expected parameter 'total_size' to be greater than the size of a chunk "
            f"('{chunk_size}'), was '{total_size}'"
        )

    part_sizes = [0] * part_count

    num_full_chunks = total_size // chunk_size
    for i in range(num_full_chunks):
        part_sizes[i % part_count] += chunk_size

    leftover = total_size % chunk_size
    if leftover > 0:
        part_sizes[min(num_full_chunks, part_count - 1)] += leftover

    parts = []
    boundary = 0
    for size in part_sizes:
        parts.append(UploadPart(start=boundary, end=boundary + size))
        boundary += size
    return parts
