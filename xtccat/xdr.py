# xdr.py
from __future__ import annotations

from typing import BinaryIO

import numpy as np

# Every xtc frame starts with a fixed 92 byte header.
HEADER_SIZE = 92
# Byte length of the compressed coordinates, stored in the last header word.
SIZE_FIELD_OFFSET = 88
# XDR pads opaque data to whole 4 byte words.
XDR_ALIGNMENT = 4

_BE_U32 = np.dtype(">u4")


def read_be_u32(data: bytes) -> int:
    """
    Decode a big-endian unsigned 32 bit integer.

    Missing trailing bytes are treated as zeros, so a short read at the end of
    a file decodes the same way a zero-filled buffer would.
    """
    word = bytes(data[:4]).ljust(4, b"\x00")
    return int(np.frombuffer(word, dtype=_BE_U32)[0])


def read_xdr_int(handle: BinaryIO, pos: int) -> int:
    # moves the cursor; callers seek again before reading anything else
    handle.seek(pos)
    return read_be_u32(handle.read(4))


def frame_boundary_offset(payload_length: int) -> int:
    start = HEADER_SIZE + payload_length
    if start % XDR_ALIGNMENT != 0:
        start += XDR_ALIGNMENT - (start % XDR_ALIGNMENT)
    return start


def first_frame_end(handle: BinaryIO) -> int:
    """Byte offset at which the second frame of an open xtc file begins."""
    return frame_boundary_offset(read_xdr_int(handle, SIZE_FIELD_OFFSET))
