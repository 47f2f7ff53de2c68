import pytest

from fwpackage.arguments import (
    Argument,
    ArgumentError,
    ArgumentType,
    Arguments,
    parse_unsigned_int,
)

TYPES = {
    "verbose": ArgumentType.FLAG,
    "pit": ArgumentType.STRING,
    "delay": ArgumentType.UNSIGNED_INTEGER,
}


def make(types=None, short=None, aliases=None):
    return Arguments(types or TYPES, short, aliases)


def test_parse_unsigned_int_accepts_digits():
    assert parse_unsigned_int("42") == 42
    assert parse_unsigned_int("4294967295") == 0xFFFFFFFF


@pytest.mark.parametrize("text", ["", "-1", "abc", "1.5", "4294967296"])
def test_parse_unsigned_int_rejects(text):
    with pytest.raises(ValueError):
        parse_unsigned_int(text)


def test_flag_string_and_integer():
    args = make()
    args.parse_arguments(["--verbose", "--pit", "file.pit", "--delay", "7"])
    assert args.get_argument("verbose") == Argument("verbose", ArgumentType.FLAG)
    assert args.get_argument("pit").value == "file.pit"
    assert args.get_argument("delay").value == 7
    assert [a.name for a in args] == ["verbose", "pit", "delay"]


def test_start_index_skips_leading_items():
    args = make()
    args.parse_arguments(["heimdall", "flash", "--verbose"], 2)
    assert [a.name for a in args] == ["verbose"]


def test_missing_argument_returns_none():
    args = make()
    args.parse_arguments([])
    assert args.get_argument("pit") is None
    assert list(args) == []


def test_short_alias():
    args = make(short={"v": "verbose"})
    args.parse_arguments(["-v"])
    assert args.get_argument("verbose").type is ArgumentType.FLAG


def test_unknown_short_alias():
    with pytest.raises(ArgumentError, match="Unknown argument: -x"):
        make(short={"v": "verbose"}).parse_arguments(["-x"])


def test_long_alias():
    args = make(aliases={"PIT": "pit"})
    args.parse_arguments(["--PIT", "a.pit"])
    assert args.get_argument("pit").value == "a.pit"


def test_invalid_argument_without_dash():
    with pytest.raises(ArgumentError, match="Invalid argument: foo"):
        make().parse_arguments(["foo"])


def test_unknown_argument():
    with pytest.raises(ArgumentError, match="Unknown argument: --nope"):
        make().parse_arguments(["--nope"])


def test_missing_parameter():
    with pytest.raises(ArgumentError, match="Missing parameter for argument: --pit"):
        make().parse_arguments(["--pit"])


def test_integer_must_be_positive():
    with pytest.raises(ArgumentError, match="must be a positive integer"):
        make().parse_arguments(["--delay", "x"])


def test_duplicate_argument():
    with pytest.raises(ArgumentError, match="Duplicate argument"):
        make().parse_arguments(["--verbose", "--verbose"])


def test_unsigned_wildcard_keeps_real_name():
    types = {"%d": ArgumentType.STRING}
    args = make(types)
    args.parse_arguments(["--5", "boot.img"])
    assert args.get_argument("5") == Argument("5", ArgumentType.STRING, "boot.img")
    assert args.get_argument("%d") is None


def test_unsigned_wildcard_does_not_match_names():
    with pytest.raises(ArgumentError, match="Unknown argument"):
        make({"%d": ArgumentType.STRING}).parse_arguments(["--KERNEL", "k.img"])


def test_string_wildcard_matches_any_name():
    types = {"%d": ArgumentType.STRING, "%s": ArgumentType.STRING}
    args = make(types)
    args.parse_arguments(["--KERNEL", "k.img", "--3", "m.bin"])
    assert args.get_argument("KERNEL").value == "k.img"
    assert args.get_argument("3").value == "m.bin"