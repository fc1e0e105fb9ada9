"""
Prints the contents of a Marshal file as JSON.

    python -m marshal_reader data.bin
"""
import argparse
import json
import logging
import re
import sys
from pathlib import Path

from .decoder import load
from .errors import MarshalDecodeError
from .tags import DEFAULT_MAX_DEPTH


def _json_default(obj):
    if isinstance(obj, re.Pattern):
        return obj.pattern
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="marshal_reader", description=__doc__.strip().splitlines()[0])
    ap.add_argument("path", type=Path, help="file written by Marshal.dump")
    ap.add_argument("--lenient", action="store_true", help="decode unknown type tags as null")
    ap.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH, help="deepest allowed value nesting")
    ap.add_argument("--truncate-bignums", action="store_true", help="wrap bignums to 64 bits")
    ap.add_argument("-v", "--verbose", action="store_true", help="log decoder progress")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(name)s] %(levelname)s %(message)s",
    )

    try:
        with args.path.open("rb") as fh:
            value = load(
                fh,
                strict=not args.lenient,
                max_depth=args.max_depth,
                truncate_bignums=args.truncate_bignums,
            )
    except (OSError, MarshalDecodeError) as e:
        print(f"[marshal_reader] {args.path}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(value, indent=2, default=_json_default))
    return 0


if __name__ == "__main__":
    sys.exit(main())
