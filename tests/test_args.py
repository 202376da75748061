from pathlib import Path

import pytest

from dmi_copy.cli.args import (
    ParseMode,
    build_parser,
    parse_args,
    parse_natural_syntax,
    parse_state_arg,
)
from dmi_copy.errors import ArgumentError


def test_natural_syntax():
    args = parse_args(["state1", "state2", "from", "original.dmi", "to", "target.dmi"])
    assert args.icon_states == ("state1", "state2")
    assert args.source == Path("original.dmi")
    assert args.destination == Path("target.dmi")


def test_natural_syntax_allows_options_between_tokens():
    args = parse_args(["s1", "-v", "s2", "from", "a.dmi", "to", "b.dmi"])
    assert args.icon_states == ("s1", "s2")
    assert args.source == Path("a.dmi")
    assert args.destination == Path("b.dmi")


def test_natural_syntax_keeps_order_and_duplicates():
    args = parse_args(["c", "a", "c", "b", "from", "x.dmi", "to", "y.dmi"])
    assert args.icon_states == ("c", "a", "c", "b")


def test_flag_syntax():
    args = parse_args(
        ["--from", "original.dmi", "--to", "target.dmi", "--state", "state1,state2"]
    )
    assert args.icon_states == ("state1", "state2")
    assert args.source == Path("original.dmi")
    assert args.destination == Path("target.dmi")


def test_flag_syntax_multiple_flags():
    args = parse_args(
        [
            "--from",
            "original.dmi",
            "--to",
            "target.dmi",
            "--state",
            "state1",
            "--state",
            "state2,state3",
            "--states",
            "state1",
        ]
    )
    assert args.icon_states == ("state1", "state2", "state3", "state1")


def test_flag_syntax_empty_states():
    args = parse_args(
        ["--from", "original.dmi", "--to", "target.dmi", "--state", "state1,,state2"]
    )
    assert args.icon_states == ("state1", "state2")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("a", ["a"]),
        (" a , b ", ["a", "b"]),
        ("a,,b", ["a", "b"]),
        (",,", []),
        ("with space", ["with space"]),
    ],
)
def test_parse_state_arg(value, expected):
    assert parse_state_arg(value) == expected


@pytest.mark.parametrize(
    "argv, message",
    [
        (["state1", "original.dmi", "to", "target.dmi"], "source file not specified"),
        (["state1", "from", "original.dmi", "target.dmi"], "expected keyword 'to'"),
        (["from", "original.dmi", "to", "target.dmi"], "no icon states specified"),
        (["s", "from", "to", "target.dmi"], "source file not specified"),
        (["s", "from", "a.dmi", "to", "b.dmi", "extra"], "unexpected trailing"),
        (["s", "from", "a.dmi", "to"], "missing destination file"),
        (["s", "from", "a.dmi"], "missing destination file"),
        (["s1", "s2"], "missing both source and destination file"),
        (["s", "from"], "missing both source and destination file"),
    ],
)
def test_invalid_natural_syntax(argv, message):
    with pytest.raises(ArgumentError, match=message):
        parse_args(argv)


@pytest.mark.parametrize(
    "argv, missing",
    [
        (["--to", "target.dmi", "--state", "state1"], "--from"),
        (["--from", "original.dmi", "--to", "target.dmi"], "--state"),
        (["--from", "original.dmi", "--state", "state1"], "--to"),
    ],
)
def test_invalid_flag_syntax(argv, missing):
    with pytest.raises(ArgumentError, match="missing required argument") as excinfo:
        parse_args(argv)
    assert missing in str(excinfo.value)


def test_flag_syntax_reports_every_missing_flag():
    with pytest.raises(ArgumentError) as excinfo:
        parse_args(["--state", "a"])
    assert "--from, --to" in str(excinfo.value)


def test_flag_syntax_only_empty_states():
    with pytest.raises(ArgumentError, match="no icon states specified"):
        parse_args(["--from", "a.dmi", "--to", "b.dmi", "--state", " , "])


def test_syntaxes_are_exclusive():
    with pytest.raises(ArgumentError, match="cannot be combined"):
        parse_args(["state1", "--from", "a.dmi", "--to", "b.dmi", "--state", "x"])
    with pytest.raises(ArgumentError, match="cannot be combined"):
        parse_args(["state1", "from", "a.dmi", "to", "b.dmi", "--state", "x"])


def test_no_arguments_is_an_error_for_parse_args():
    with pytest.raises(ArgumentError):
        parse_args([])


def test_unknown_option_raises_instead_of_exiting():
    with pytest.raises(ArgumentError):
        parse_args(["--nope"])


def test_generate_completion_rejects_unknown_shell():
    with pytest.raises(ArgumentError):
        build_parser().parse_args(["--generate-completion", "cmd.exe"])


def test_keywords_are_case_sensitive():
    args = parse_natural_syntax(["FROM", "To", "from", "a.dmi", "to", "b.dmi"])
    assert args.icon_states == ("FROM", "To")


def test_parse_modes_cover_the_state_machine():
    assert [m.name for m in ParseMode] == [
        "COLLECTING_STATES",
        "AWAITING_FROM_VALUE",
        "AWAITING_TO_KEYWORD",
        "AWAITING_TO_VALUE",
        "DONE",
    ]
