# driver.py
from __future__ import annotations

import sys
import argparse
from typing import List, Optional

from .concat import ConcatOptions, XtcCatError, DEFAULT_CHUNK_SIZE, concatenate

PROG = "xtccat"
USAGE = "Usage: {prog} -f XTC_FILE1 XTC_FILE2 ... -o OUTPUT_XTC"


class _UsageParser(argparse.ArgumentParser):
    # bad arguments are a usage error: usage on stdout, exit status 1
    def error(self, message):
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        print(USAGE.format(prog=self.prog))
        raise SystemExit(1)


def _positive_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {s!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = _UsageParser(
        prog=PROG,
        allow_abbrev=False,
        description="Concatenate xtc trajectories. Always skips the first frame of every file after the first.",
    )
    p.add_argument("-f", dest="inputs", nargs="+", action="extend", required=True, metavar="XTC_FILE",
                   help="Input xtc files, in the order they should be joined.")
    p.add_argument("-o", dest="output", default="output.xtc", metavar="OUTPUT_XTC",
                   help="Output xtc file (default: output.xtc).")
    p.add_argument("--overwrite", action="store_true",
                   help="Overwrite an existing output file instead of backing it up as #OUTPUT.N#.")
    p.add_argument("--silent", action="store_true", help="Do not print anything to standard output.")
    p.add_argument("--chunk-size", type=_positive_int, default=DEFAULT_CHUNK_SIZE,
                   help="Bytes copied per read.")
    p.add_argument("--max-inputs", type=_positive_int, default=None,
                   help="Refuse to run with more input files than this.")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = build_parser()

    # help wins over the argument count check
    if any(a in ("-h", "--help") for a in argv):
        p.parse_args(argv)

    if len(argv) < 2:
        print("Incorrect number of arguments.", file=sys.stderr)
        print(USAGE.format(prog=PROG))
        return 1

    args = p.parse_args(argv)

    options = ConcatOptions(
        chunk_size=args.chunk_size,
        max_inputs=args.max_inputs,
        overwrite=args.overwrite,
        silent=args.silent,
    )

    try:
        concatenate(args.inputs, args.output, options)
    except MemoryError:
        print("Error. Could not allocate memory for the copy buffer. Try a smaller --chunk-size.", file=sys.stderr)
        return 1
    except (XtcCatError, OSError) as e:
        print(f"Error. {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
