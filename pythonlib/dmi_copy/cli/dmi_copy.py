#!/usr/bin/env python3
import sys
from pathlib import Path

import shtab

import dmi_copy as dc
from dmi_copy.cli.args import build_parser, request_from_namespace
from dmi_copy.errors import (
    ArgumentError,
    DecodeError,
    DmiCopyError,
    EncodeError,
    FileAccessError,
)


def load_dmi(path: Path, role: str):
    try:
        with path.open("rb") as f:
            return dc.load(f)
    except OSError as e:
        raise FileAccessError(
            f"failed to read {role} file {path}: {e.strerror or e}", path
        ) from e
    except DecodeError as e:
        raise DecodeError(f"failed to load dmi from {role} file {path}: {e}") from e


def save_dmi(icon, path: Path) -> None:
    try:
        dc.commit(icon, path)
    except EncodeError as e:
        raise EncodeError(f"failed to save dmi to {path}: {e}") from e
    except OSError as e:
        raise FileAccessError(f"failed to save dmi to {path}: {e}", path) from e


def run(request, verbose=False) -> None:
    if verbose:
        print(f"[INFO] source: {request.source}")
        print(f"[INFO] destination: {request.destination}")
        print(f"[INFO] states: {', '.join(request.icon_states)}")

    source = load_dmi(request.source, "input")
    destination = load_dmi(request.destination, "output")

    report = dc.merge_states(source, destination, request.icon_states)
    for line in report.lines():
        print(line)
    for name in report.missing:
        print(f"[WARN] state '{name}' not found in {request.source}", file=sys.stderr)

    save_dmi(destination, request.destination)
    if verbose:
        print(f"[INFO] wrote {len(destination.states)} states to {request.destination}")
    print("done!")


def main(argv=None):
    parser = build_parser()

    try:
        args = parser.parse_intermixed_args(argv)
        if args.generate_completion:
            print(shtab.complete(parser, shell=args.generate_completion))
            return 0
        request = request_from_namespace(args)
    except ArgumentError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 2

    if request is None:
        parser.print_help()
        return 0

    try:
        run(request, verbose=args.verbose)
    except DmiCopyError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
