"""Choose archive entry names that do not collide with one another."""

from __future__ import annotations

import itertools
import random
import re
import string
from collections.abc import Sequence

_UINT_MAX = 0xFFFFFFFF
_RENAME_SUFFIX = re.compile(r"-[0-9]+")
_DIGITS = re.compile(r"[0-9]+")


def base_name(path: str) -> str:
    """Return the last component of *path*, split on '/' or else on '\\'."""
    slash = path.rfind("/")
    if slash < 0:
        slash = path.rfind("\\")
    return path[slash + 1:]


def _split_extension(filename: str) -> tuple[str, str]:
    period = filename.rfind(".")
    if period >= 0:
        return filename[:period], filename[period:]
    return filename, ""


def _strip_extension(filename: str) -> str:
    return _split_extension(filename)[0]


def _last_rename_suffix_start(text: str) -> int:
    start = -1
    for match in _RENAME_SUFFIX.finditer(text):
        start = match.start()
    return start


def _parse_uint(text: str) -> int | None:
    if not _DIGITS.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _UINT_MAX else None


def _highest_rename_index(
    names: Sequence[str], prefix: str, short_name: str, min_length: int
) -> int | None:
    """Largest existing '-N' suffix on names starting with *prefix*.

    Returns None when a suffix cannot be read as an unsigned 32-bit integer.
    """
    highest = 0
    for other in names:
        if len(other) <= min_length or other[: len(prefix)] != prefix:
            continue
        short_other = _strip_extension(other)
        if _last_rename_suffix_start(short_other) != len(short_name):
            continue
        trailing = _parse_uint(short_other[len(short_name) + 1:])
        if trailing is None:
            return None
        highest = max(highest, trailing)
    return highest


def _numbered_name(short_name: str, extension: str, rename_index: int, offset: int | None) -> str | None:
    if offset is None or rename_index > _UINT_MAX - offset:
        return None
    return f"{short_name}-{offset + rename_index}{extension}"


def clashless_filename_at(filenames: Sequence[str], index: int) -> str:
    """Return an entry name for ``filenames[index]`` unique among the earlier files.

    Files sharing a base name but living at different paths are renamed by
    appending a numeric suffix before the extension.
    """
    path = filenames[index]
    filename = base_name(path)
    names = [base_name(other) for other in filenames]

    rename_index = sum(
        1
        for other_path, other_name in zip(filenames[:index], names)
        if other_name == filename and other_path != path
    )
    if rename_index <= 0:
        return filename

    short_name, extension = _split_extension(filename)
    offset = _highest_rename_index(names, short_name, short_name, len(filename) + 1)
    numbered = _numbered_name(short_name, extension, rename_index, offset)
    if numbered is not None:
        return numbered

    taken = set(names)
    for width in itertools.count(1):
        prefix = "+" * width
        for number in range(_UINT_MAX):
            candidate = f"{short_name}{prefix}{number}{extension}"
            if candidate not in taken:
                return candidate
    raise AssertionError("unreachable")


def clashless_filename(filenames: Sequence[str], filename: str) -> str:
    """Return a variant of *filename* that clashes with none of *filenames*' base names."""
    names = [base_name(other) for other in filenames]

    rename_index = sum(1 for other in names if other == filename)
    if rename_index <= 0:
        return filename

    short_name, extension = _split_extension(filename)
    offset = _highest_rename_index(names, filename, short_name, len(filename) + 1)
    numbered = _numbered_name(short_name, extension, rename_index, offset)
    if numbered is not None:
        return numbered

    taken = set(names)
    while True:
        letters = "".join(random.choice(string.ascii_uppercase) for _ in range(8))
        candidate = f"{short_name}-{letters}"
        if candidate not in taken:
            return candidate