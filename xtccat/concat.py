# concat.py
"""
Join xtc trajectories end to end.

The first file is copied whole. Every following file is assumed to start with
the frame its predecessor ended on, so its first frame is dropped: the copy
starts at the first frame boundary, found from the payload size stored in the
frame header.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Union

from tqdm import tqdm

from .xdr import first_frame_end

PathLike = Union[str, os.PathLike]

DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024


class XtcCatError(RuntimeError):
    """Any failure that aborts a concatenation run."""


class InputOpenError(XtcCatError):
    pass


class OutputOpenError(XtcCatError):
    pass


class TruncatedFrameError(XtcCatError, ValueError):
    """A file ends before its first frame does."""


@dataclass(frozen=True)
class ConcatOptions:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_inputs: Optional[int] = None  # None: no limit
    overwrite: bool = False
    silent: bool = False

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.max_inputs is not None and self.max_inputs < 1:
            raise ValueError(f"max_inputs must be at least 1, got {self.max_inputs}")


def _report(msg: str, silent: bool) -> None:
    if not silent:
        # goes through tqdm so an active progress bar is not torn
        tqdm.write(msg)


def backup_output(output_path: PathLike) -> Optional[Path]:
    """
    Move an existing output file out of the way as '#name.N#'.

    N is the smallest positive integer not already taken in the same folder.
    Returns the backup path, or None if there was nothing to back up.
    """
    path = Path(output_path)
    if not path.is_file():
        return None

    n = 1
    while True:
        candidate = path.with_name(f"#{path.name}.{n}#")
        if not candidate.exists():
            break
        n += 1

    path.rename(candidate)
    return candidate


def _write(output: BinaryIO, data: bytes, input_path: PathLike) -> None:
    try:
        output.write(data)
    except OSError as e:
        raise XtcCatError(f"Could not write file {input_path} to the output [{e}]") from e


def append_xtc(
    input_path: PathLike,
    output: BinaryIO,
    skip_first_frame: bool,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    silent: bool = True,
) -> int:
    """
    Stream one xtc file into `output`, optionally without its first frame.

    Returns the number of bytes written. Nothing is written if the file is
    shorter than its first frame.
    """
    try:
        handle = open(input_path, "rb")
    except OSError as e:
        raise InputOpenError(f"Could not open file {input_path} [{e}]") from e

    written = 0
    with handle:
        try:
            start = first_frame_end(handle) if skip_first_frame else 0

            file_len = handle.seek(0, os.SEEK_END)
            remaining = file_len - start
            if remaining < 0:
                raise TruncatedFrameError(
                    f"File {input_path} is {file_len} bytes long but its first frame "
                    f"ends at byte {start}. Is the trajectory truncated?"
                )

            handle.seek(start)
            with tqdm(
                total=remaining,
                unit="B",
                unit_scale=True,
                desc=Path(input_path).name,
                leave=False,
                disable=True if silent else None,
            ) as bar:
                while True:
                    chunk = handle.read(chunk_size)
                    if not chunk:
                        break
                    _write(output, chunk, input_path)
                    written += len(chunk)
                    bar.update(len(chunk))
        except OSError as e:
            # write failures are already XtcCatError, so only reads land here
            raise XtcCatError(f"Could not read file {input_path} [{e}]") from e

    try:
        output.flush()
    except OSError as e:
        raise XtcCatError(f"Could not write file {input_path} to the output [{e}]") from e
    return written


def concatenate(
    inputs: Sequence[PathLike],
    output_path: PathLike,
    options: Optional[ConcatOptions] = None,
) -> int:
    """
    Concatenate `inputs` into `output_path`, in order.

    Stops at the first failing input; whatever was written before the failure
    stays in the output file. Returns the total number of bytes written.
    """
    options = options or ConcatOptions()
    input_files: List[str] = [str(p) for p in inputs]

    if options.max_inputs is not None and len(input_files) > options.max_inputs:
        raise XtcCatError(
            f"Got {len(input_files)} input files, at most {options.max_inputs} are allowed."
        )

    _report(f"Concatenating {len(input_files)} files: " + " ".join(input_files), options.silent)
    _report(f"Output file: {output_path}\n", options.silent)

    if not options.overwrite:
        backup = backup_output(output_path)
        if backup is not None:
            _report(f"Backed up {output_path} to {backup}", options.silent)

    try:
        output = open(output_path, "wb")
    except OSError as e:
        raise OutputOpenError(
            f"Output file {output_path} could not be opened for writing [{e}]"
        ) from e

    total = 0
    with output:
        for i, path in enumerate(input_files):
            _report(f"Concatenating file {path}...", options.silent)
            total += append_xtc(
                path,
                output,
                skip_first_frame=i > 0,
                chunk_size=options.chunk_size,
                silent=options.silent,
            )

    return total
