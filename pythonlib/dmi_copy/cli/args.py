from __future__ import annotations
import argparse
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import shtab

from dmi_copy.errors import ArgumentError

FROM_KEYWORD = "from"
TO_KEYWORD = "to"

USAGE = (
    "%(prog)s <STATES>... from <FROM> to <TO>\n"
    "       %(prog)s --from <FROM> --to <TO> --state <STATES>..."
)

EPILOG = """\
examples:
  natural syntax:
    dmi-copy state1 state2 state3 from original.dmi to target.dmi

  flag syntax:
    dmi-copy --from original.dmi --to target.dmi --state state1,state2,state3
    dmi-copy --from original.dmi --to target.dmi --state state1 --state state2
"""


@dataclass(frozen=True)
class Request:
    source: Path
    destination: Path
    icon_states: Tuple[str, ...]


class DmiCopyArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ArgumentError instead of exiting."""

    def error(self, message):
        raise ArgumentError(message)


def parse_state_arg(value: str) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    return [p.strip() for p in value.split(",") if p.strip()]


def build_parser() -> DmiCopyArgumentParser:
    parser = DmiCopyArgumentParser(
        prog="dmi-copy",
        usage=USAGE,
        description="Copy icon states between DMI files",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("natural_args", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument(
        "--from",
        dest="from_file",
        metavar="FILE",
        help="The source .dmi file to copy states from",
    ).complete = shtab.FILE
    parser.add_argument(
        "--to",
        dest="to_file",
        metavar="FILE",
        help="The target .dmi file to copy states into",
    ).complete = shtab.FILE
    parser.add_argument(
        "--state",
        "--states",
        dest="states",
        metavar="STATE",
        type=parse_state_arg,
        action="append",
        help="Icon states to copy (can be comma-separated, can be repeated)",
    )
    parser.add_argument(
        "--generate-completion",
        metavar="SHELL",
        choices=shtab.SUPPORTED_SHELLS,
        help="Generate completion script for the given shell ({%(choices)s})",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print extra progress information"
    )
    return parser


# ---------- natural syntax ----------
class ParseMode(enum.Enum):
    COLLECTING_STATES = "collecting states"
    AWAITING_FROM_VALUE = "awaiting source file"
    AWAITING_TO_KEYWORD = "awaiting 'to'"
    AWAITING_TO_VALUE = "awaiting destination file"
    DONE = "done"


class _NaturalParse:
    def __init__(self):
        self.mode = ParseMode.COLLECTING_STATES
        self.states: List[str] = []
        self.source: Optional[str] = None
        self.destination: Optional[str] = None


def _step(p: _NaturalParse, token: str) -> ParseMode:
    """Consume one token and return the next mode."""
    mode = p.mode

    if mode is ParseMode.COLLECTING_STATES:
        if token == FROM_KEYWORD:
            if not p.states:
                raise ArgumentError(f"no icon states specified before '{FROM_KEYWORD}'")
            return ParseMode.AWAITING_FROM_VALUE
        if token == TO_KEYWORD:
            raise ArgumentError(f"source file not specified before '{TO_KEYWORD}'")
        p.states.append(token)
        return mode

    if mode is ParseMode.AWAITING_FROM_VALUE:
        if token == TO_KEYWORD:
            raise ArgumentError(f"source file not specified before '{TO_KEYWORD}'")
        if token == FROM_KEYWORD:
            raise ArgumentError(f"expected source file after '{FROM_KEYWORD}'")
        p.source = token
        return ParseMode.AWAITING_TO_KEYWORD

    if mode is ParseMode.AWAITING_TO_KEYWORD:
        if token != TO_KEYWORD:
            raise ArgumentError(f"expected keyword '{TO_KEYWORD}', got {token!r}")
        return ParseMode.AWAITING_TO_VALUE

    if mode is ParseMode.AWAITING_TO_VALUE:
        if token in (FROM_KEYWORD, TO_KEYWORD):
            raise ArgumentError(f"expected destination file after '{TO_KEYWORD}'")
        p.destination = token
        return ParseMode.DONE

    raise ArgumentError(f"unexpected trailing arguments starting at {token!r}")


def parse_natural_syntax(tokens: List[str]) -> Request:
    p = _NaturalParse()
    for token in tokens:
        p.mode = _step(p, token)

    if p.source is not None and p.destination is not None:
        return Request(Path(p.source), Path(p.destination), tuple(p.states))
    if p.source is not None:
        raise ArgumentError("missing destination file")
    if p.destination is not None:
        raise ArgumentError("missing source file")
    raise ArgumentError("missing both source and destination file")


# ---------- flag syntax ----------
def parse_flag_syntax(ns: argparse.Namespace) -> Request:
    missing = [
        flag
        for flag, value in (
            ("--from", ns.from_file),
            ("--to", ns.to_file),
            ("--state", ns.states),
        )
        if value is None
    ]
    if missing:
        raise ArgumentError(f"missing required argument(s): {', '.join(missing)}")

    states = [s for group in ns.states for s in group]
    if not states:
        raise ArgumentError("no icon states specified")
    return Request(Path(ns.from_file), Path(ns.to_file), tuple(states))


def uses_flag_syntax(ns: argparse.Namespace) -> bool:
    return any(v is not None for v in (ns.from_file, ns.to_file, ns.states))


def request_from_namespace(ns: argparse.Namespace) -> Optional[Request]:
    """Build the Request, or return None when no arguments were given at all."""
    if ns.natural_args and uses_flag_syntax(ns):
        raise ArgumentError(
            "natural syntax (STATES... from FROM to TO) cannot be combined "
            "with --from/--to/--state"
        )
    if ns.natural_args:
        return parse_natural_syntax(ns.natural_args)
    if uses_flag_syntax(ns):
        return parse_flag_syntax(ns)
    return None


def parse_args(argv=None) -> Request:
    ns = build_parser().parse_intermixed_args(argv)
    request = request_from_namespace(ns)
    if request is None:
        raise ArgumentError("missing required arguments")
    return request
