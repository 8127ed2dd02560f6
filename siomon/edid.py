"""Decoder for EDID blocks describing attached displays."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path

EDID_HEADER = b"\x00\xff\xff\xff\xff\xff\xff\x00"
EDID_BLOCK_SIZE = 128

_DESCRIPTOR_OFFSET = 54
_DESCRIPTOR_SIZE = 18
_DESCRIPTOR_COUNT = 4
_MONITOR_NAME_TAG = 0xFC


@dataclass(frozen=True)
class EdidInfo:
    """Identification and preferred mode of a display."""

    manufacturer: str
    product_code: int
    serial_number: int | None
    manufacture_week: int | None
    manufacture_year: int | None
    monitor_name: str | None
    max_horizontal_cm: int
    max_vertical_cm: int
    preferred_width: int | None
    preferred_height: int | None
    preferred_refresh_hz: float | None


def parse_from_drm(connector_path: str | os.PathLike) -> EdidInfo | None:
    """Parse the ``edid`` file of a DRM connector directory.

    Returns None if the file is missing, unreadable or not a valid EDID.
    """
    try:
        data = Path(connector_path, "edid").read_bytes()
        return parse_edid(data)
    except (OSError, ValueError):
        return None


def _decode_manufacturer(high: int, low: int) -> str:
    raw = (high << 8) | low
    return "".join(chr(((raw >> shift) & 0x1F) + ord("A") - 1) for shift in (10, 5, 0))


def _decode_monitor_name(block: bytes) -> str | None:
    chars = []
    for byte in block[5:18]:
        if byte in (0x0A, 0x00):
            break
        chars.append(chr(byte))
    name = "".join(chars).strip()
    return name or None


def parse_edid(data: bytes) -> EdidInfo:
    """Parse a raw EDID block of at least 128 bytes.

    Raises ValueError if the data is too short or lacks the EDID header.
    """
    data = bytes(data)
    if len(data) < EDID_BLOCK_SIZE:
        raise ValueError(f"EDID too short: {len(data)} bytes")
    if data[:8] != EDID_HEADER:
        raise ValueError("missing EDID header")

    manufacturer = _decode_manufacturer(data[8], data[9])
    product_code, serial_raw = struct.unpack_from("<HI", data, 10)
    week, year_offset = data[16], data[17]

    monitor_name = None
    width = height = None
    refresh = None

    for i in range(_DESCRIPTOR_COUNT):
        base = _DESCRIPTOR_OFFSET + i * _DESCRIPTOR_SIZE
        block = data[base : base + _DESCRIPTOR_SIZE]
        if len(block) < _DESCRIPTOR_SIZE:
            break

        if block[0] or block[1]:
            if width is not None:
                continue
            pixel_clock_khz = struct.unpack_from("<H", block, 0)[0] * 10
            h_active = ((block[4] & 0xF0) << 4) | block[2]
            h_blank = ((block[4] & 0x0F) << 8) | block[3]
            v_active = ((block[7] & 0xF0) << 4) | block[5]
            v_blank = ((block[7] & 0x0F) << 8) | block[6]
            if h_active and v_active and pixel_clock_khz:
                width, height = h_active, v_active
                h_total = h_active + h_blank
                v_total = v_active + v_blank
                refresh = pixel_clock_khz * 1000.0 / (h_total * v_total)
        elif block[3] == _MONITOR_NAME_TAG:
            name = _decode_monitor_name(block)
            if name is not None:
                monitor_name = name

    return EdidInfo(
        manufacturer=manufacturer,
        product_code=product_code,
        serial_number=serial_raw or None,
        manufacture_week=week if 0 < week <= 54 else None,
        manufacture_year=1990 + year_offset if year_offset else None,
        monitor_name=monitor_name,
        max_horizontal_cm=data[21],
        max_vertical_cm=data[22],
        preferred_width=width,
        preferred_height=height,
        preferred_refresh_hz=refresh,
    )