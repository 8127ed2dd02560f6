"""Low-level helpers for decoding fields of raw SMBIOS structures."""

from __future__ import annotations

import struct

_PLACEHOLDERS = frozenset(
    {
        "Not Specified",
        "Unknown",
        "Not Provided",
        "No Module Installed",
        "To Be Filled By O.E.M.",
        "Default string",
        "N/A",
    }
)

_MEMORY_TYPES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "DRAM",
    0x04: "EDRAM",
    0x05: "VRAM",
    0x06: "SRAM",
    0x07: "RAM",
    0x08: "ROM",
    0x09: "Flash",
    0x0A: "EEPROM",
    0x0B: "FEPROM",
    0x0C: "EPROM",
    0x0D: "CDRAM",
    0x0E: "3DRAM",
    0x0F: "SDRAM",
    0x10: "SGRAM",
    0x11: "RDRAM",
    0x12: "DDR",
    0x13: "DDR2",
    0x14: "DDR2 FB-DIMM",
    0x18: "DDR3",
    0x19: "FBD2",
    0x1A: "DDR4",
    0x1B: "LPDDR",
    0x1C: "LPDDR2",
    0x1D: "LPDDR3",
    0x1E: "DDR5",
    0x1F: "LPDDR4",
    0x20: "Logical non-volatile device",
    0x21: "HBM",
    0x22: "LPDDR5",
    0x23: "HBM2",
    0x24: "HBM3",
    0x25: "LPDDR5X",
}

_FORM_FACTORS = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "SIMM",
    0x04: "SIP",
    0x05: "Chip",
    0x06: "DIP",
    0x07: "ZIP",
    0x08: "Proprietary Card",
    0x09: "DIMM",
    0x0A: "TSOP",
    0x0B: "Row of chips",
    0x0C: "RIMM",
    0x0D: "SODIMM",
    0x0E: "SRIMM",
    0x0F: "FB-DIMM",
    0x10: "Die",
}

_TYPE_DETAIL_BITS = (
    (1 << 1, "Other"),
    (1 << 2, "Unknown"),
    (1 << 3, "Fast-paged"),
    (1 << 4, "Static column"),
    (1 << 5, "Pseudo-static"),
    (1 << 6, "RAMBUS"),
    (1 << 7, "Synchronous"),
    (1 << 8, "CMOS"),
    (1 << 9, "EDO"),
    (1 << 10, "Window DRAM"),
    (1 << 11, "Cache DRAM"),
    (1 << 12, "Non-volatile"),
    (1 << 13, "Registered (Buffered)"),
    (1 << 14, "Unbuffered (Unregistered)"),
    (1 << 15, "LRDIMM"),
)


def find_structure_end(data: bytes, strings_start: int) -> int:
    """Return the offset just past the double null ending a structure's strings."""
    size = len(data)
    pos = strings_start
    if pos + 1 < size and data[pos] == 0 and data[pos + 1] == 0:
        return pos + 2
    while pos < size:
        if data[pos] == 0 and (pos + 1 >= size or data[pos + 1] == 0):
            return pos + 2
        pos += 1
    return size


def _filter_placeholder(text: str) -> str | None:
    value = text.strip()
    if not value or all(c in "0 " for c in value) or value in _PLACEHOLDERS:
        return None
    return value


def get_string(structure: bytes, header_len: int, index: int) -> str | None:
    """Return the 1-based string ``index`` from a structure's string section.

    Index 0, out-of-range indices and OEM placeholder values give ``None``.
    """
    if index == 0:
        return None
    start = header_len & 0xFF
    if start >= len(structure):
        return None

    area = bytes(structure[start:])
    current = 1
    pos = 0
    while pos < len(area):
        end = area.find(b"\x00", pos)
        if end < 0:
            end = len(area)
        if current == index:
            raw = area[pos:end].decode("utf-8", errors="replace")
            return _filter_placeholder(raw)
        current = min(current + 1, 255)
        pos = end + 1
        if pos < len(area) and area[pos] == 0:
            break
    return None


def _read_u8(data: bytes, offset: int) -> int | None:
    return data[offset] if 0 <= offset < len(data) else None


def _read_u16_le(data: bytes, offset: int) -> int | None:
    if offset + 2 > len(data):
        return None
    return struct.unpack_from("<H", data, offset)[0]


def _read_u32_le(data: bytes, offset: int) -> int | None:
    if offset + 4 > len(data):
        return None
    return struct.unpack_from("<I", data, offset)[0]


def _read_u16_nonzero(data: bytes, offset: int) -> int | None:
    value = _read_u16_le(data, offset)
    if value in (None, 0, 0xFFFF):
        return None
    return value


def format_uuid(data: bytes) -> str | None:
    """Format a 16-byte SMBIOS UUID with its mixed-endian leading fields."""
    if len(data) < 16:
        return None
    raw = bytes(data[:16])
    if raw == b"\xff" * 16 or raw == b"\x00" * 16:
        return None
    ordered = raw[3::-1] + raw[5:3:-1] + raw[7:5:-1] + raw[8:16]
    hexed = ordered.hex()
    return f"{hexed[:8]}-{hexed[8:12]}-{hexed[12:16]}-{hexed[16:20]}-{hexed[20:]}"


def decode_memory_size(raw_size: int, data: bytes, header_len: int) -> int:
    """Decode a Type 17 Size field into bytes; 0 means an empty slot."""
    if raw_size in (0, 0xFFFF):
        return 0
    if raw_size == 0x7FFF:
        if header_len > 0x1F:
            ext = _read_u32_le(data, 0x1C)
            if ext is not None:
                return (ext & 0x7FFF_FFFF) * 1024 * 1024
        return 0
    value = raw_size & 0x7FFF
    if raw_size & 0x8000:
        return value * 1024
    return value * 1024 * 1024


def memory_type_name(code: int) -> str:
    """Human-readable memory type name for an SMBIOS type byte."""
    return _MEMORY_TYPES.get(code, "Unknown")


def form_factor_name(code: int) -> str:
    """Human-readable memory form factor name."""
    return _FORM_FACTORS.get(code, "Unknown")


def type_detail_string(bits: int) -> str | None:
    """Decode the Type Detail bitmask into a comma-separated description."""
    parts = [name for mask, name in _TYPE_DETAIL_BITS if bits & mask]
    return ", ".join(parts) if parts else None