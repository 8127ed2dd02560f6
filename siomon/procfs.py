"""Parsers for /proc/meminfo and /proc/cpuinfo."""

from __future__ import annotations

import re
from pathlib import Path

MEMINFO_PATH = "/proc/meminfo"
CPUINFO_PATH = "/proc/cpuinfo"

_UNSIGNED = re.compile(r"\+?[0-9]+")
_U64_LIMIT = 1 << 64


def _lines(content: str) -> list[str]:
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_u64(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        return 0
    value = int(text)
    return value if value < _U64_LIMIT else 0


def _read(path: str) -> str | None:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def parse_meminfo() -> dict[str, int]:
    """Parse /proc/meminfo; values are in bytes. Empty if unreadable."""
    content = _read(MEMINFO_PATH)
    return {} if content is None else parse_meminfo_content(content)


def parse_meminfo_content(content: str) -> dict[str, int]:
    """Parse meminfo text into a mapping of key to value in bytes."""
    result: dict[str, int] = {}
    for line in _lines(content):
        key, sep, rest = line.partition(":")
        if not sep:
            continue
        rest = rest.strip()
        if rest.endswith("kB"):
            value = _parse_u64(rest[:-2].strip()) * 1024
        else:
            value = _parse_u64(rest)
        result[key] = value
    return result


def parse_cpuinfo() -> list[dict[str, str]]:
    """Parse /proc/cpuinfo into one mapping per processor. Empty if unreadable."""
    content = _read(CPUINFO_PATH)
    return [] if content is None else parse_cpuinfo_content(content)


def parse_cpuinfo_content(content: str) -> list[dict[str, str]]:
    """Parse cpuinfo text; blank lines separate processors."""
    processors: list[dict[str, str]] = []
    current: dict[str, str] = {}
    for line in _lines(content):
        if not line.strip():
            if current:
                processors.append(current)
                current = {}
            continue
        key, sep, value = line.partition(":")
        if sep:
            current[key.strip()] = value.strip()
    if current:
        processors.append(current)
    return processors