"""Command-line argument parsing driven by a table of argument types."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

_UINT_MAX = 0xFFFFFFFF
_DIGITS = re.compile(r"[0-9]+")

UNSIGNED_WILDCARD = "%d"
STRING_WILDCARD = "%s"


class ArgumentType(enum.Enum):
    """The kinds of value an argument can carry."""

    FLAG = 0
    STRING = 1
    UNSIGNED_INTEGER = 2


class ArgumentError(ValueError):
    """Raised when a command line cannot be parsed."""


@dataclass(frozen=True)
class Argument:
    """One parsed argument: its name, its type and its value (None for flags)."""

    name: str
    type: ArgumentType
    value: str | int | None = None


def parse_unsigned_int(text: str) -> int:
    """Parse *text* as a decimal unsigned 32-bit integer.

    Raises ValueError when *text* is not made of digits or is out of range.
    """
    if not _DIGITS.fullmatch(text):
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(text)
    if value > _UINT_MAX:
        raise ValueError(f"unsigned integer out of range: {text!r}")
    return value


def _is_unsigned_int(text: str) -> bool:
    try:
        parse_unsigned_int(text)
    except ValueError:
        return False
    return True


class Arguments:
    """Parses arguments against known names, aliases and wildcards.

    The names "%d" and "%s" in *argument_types* act as wildcards: "%d"
    accepts any argument whose name is an unsigned integer, "%s" any name.
    """

    def __init__(
        self,
        argument_types: Mapping[str, ArgumentType],
        short_argument_aliases: Mapping[str, str] | None = None,
        argument_aliases: Mapping[str, str] | None = None,
    ) -> None:
        self.argument_types = dict(argument_types)
        self.short_argument_aliases = dict(short_argument_aliases or {})
        self.argument_aliases = dict(argument_aliases or {})
        self._ordered: list[Argument] = []
        self._by_name: dict[str, Argument] = {}

    def _resolve(self, token: str) -> tuple[str, ArgumentType | None]:
        if token.startswith("--"):
            name = token[2:]
        elif token.startswith("-"):
            try:
                name = self.short_argument_aliases[token[1:]]
            except KeyError:
                raise ArgumentError(f"Unknown argument: {token}") from None
        else:
            raise ArgumentError(f"Invalid argument: {token}")

        argument_type = self.argument_types.get(name)
        if argument_type is None and name in self.argument_aliases:
            name = self.argument_aliases[name]
            argument_type = self.argument_types.get(name)

        if argument_type is None and _is_unsigned_int(name):
            argument_type = self.argument_types.get(UNSIGNED_WILDCARD)
        if argument_type is None:
            argument_type = self.argument_types.get(STRING_WILDCARD)
        return name, argument_type

    def parse_arguments(self, argv: Sequence[str], start: int = 0) -> None:
        """Parse ``argv[start:]``, raising ArgumentError on the first problem."""
        index = start
        while index < len(argv):
            token = argv[index]
            name, argument_type = self._resolve(token)

            if argument_type is None:
                raise ArgumentError(f"Unknown argument: {token}")

            if argument_type is ArgumentType.FLAG:
                argument = Argument(name, argument_type)
            else:
                index += 1
                if index >= len(argv):
                    raise ArgumentError(f"Missing parameter for argument: {token}")
                parameter = argv[index]
                if argument_type is ArgumentType.STRING:
                    argument = Argument(name, argument_type, parameter)
                else:
                    try:
                        value = parse_unsigned_int(parameter)
                    except ValueError:
                        raise ArgumentError(f"{token} must be a positive integer.") from None
                    argument = Argument(name, argument_type, value)

            if name in self._by_name:
                raise ArgumentError(f"Duplicate argument: {token} ({name})")

            self._by_name[name] = argument
            self._ordered.append(argument)
            index += 1

    def get_argument(self, name: str) -> Argument | None:
        """Return the parsed argument called *name*, or None."""
        return self._by_name.get(name)

    def __iter__(self) -> Iterator[Argument]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)