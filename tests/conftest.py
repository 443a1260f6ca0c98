from pathlib import Path
from typing import List, Sequence

import pytest

XTC_MAGIC = 1995


def make_frame(step: int, payload_length: int, fill: int) -> bytes:
    """One synthetic xtc frame: 92 byte header, payload, zero padding to 4 bytes."""
    header = bytearray(92)
    header[0:4] = XTC_MAGIC.to_bytes(4, "big")
    header[12:16] = step.to_bytes(4, "big")
    header[88:92] = payload_length.to_bytes(4, "big")
    padding = (-(92 + payload_length)) % 4
    return bytes(header) + bytes([fill]) * payload_length + b"\x00" * padding


@pytest.fixture
def xtc_factory(tmp_path):
    """Write a trajectory made of frames with the given payload lengths; returns (path, frames)."""

    def _make(name: str, payload_lengths: Sequence[int], first_step: int = 0):
        frames: List[bytes] = [
            make_frame(first_step + i, length, fill=(first_step + i) % 251 + 1)
            for i, length in enumerate(payload_lengths)
        ]
        path = Path(tmp_path) / name
        path.write_bytes(b"".join(frames))
        return path, frames

    return _make
