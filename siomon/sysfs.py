"""Helpers for reading small values out of sysfs-style files."""

from __future__ import annotations

import glob
import os
import re
from pathlib import Path, PurePath

_PLACEHOLDERS = frozenset(
    {"N/A", "To Be Filled By O.E.M.", "Default string", "Not Specified"}
)
_DECIMAL = re.compile(r"\+?[0-9]+")
_HEX = re.compile(r"\+?[0-9a-fA-F]+")
_U64_LIMIT = 1 << 64


def read_string_optional(path: str | os.PathLike) -> str | None:
    """Read and trim a file; missing, empty or placeholder contents give None."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    trimmed = text.strip()
    if not trimmed or trimmed in _PLACEHOLDERS:
        return None
    return trimmed


def parse_int_flexible(text: str) -> int:
    """Parse an unsigned 64-bit integer, decimal or ``0x``-prefixed hex.

    Raises ValueError when the text is not such a number.
    """
    if text.startswith(("0x", "0X")):
        digits, base, pattern = text[2:], 16, _HEX
    else:
        digits, base, pattern = text, 10, _DECIMAL
    if not pattern.fullmatch(digits):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(digits, base)
    if value >= _U64_LIMIT:
        raise ValueError(f"number too large for 64 bits: {text!r}")
    return value


def read_u64_optional(path: str | os.PathLike) -> int | None:
    """Read a file holding an unsigned integer, or None."""
    text = read_string_optional(path)
    if text is None:
        return None
    try:
        return parse_int_flexible(text)
    except ValueError:
        return None


def read_u32_optional(path: str | os.PathLike) -> int | None:
    """Like read_u64_optional, truncated to 32 bits."""
    value = read_u64_optional(path)
    return None if value is None else value & 0xFFFF_FFFF


def read_link_basename(path: str | os.PathLike) -> str | None:
    """Return the last component of a symlink's target, or None."""
    try:
        target = os.readlink(path)
    except OSError:
        return None
    name = PurePath(target).name
    if not name or name == "..":
        return None
    return name


def glob_paths(pattern: str) -> list[Path]:
    """Return the paths matching a glob pattern, sorted."""
    return sorted(Path(p) for p in glob.glob(pattern))