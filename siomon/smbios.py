"""Parser for the raw SMBIOS/DMI tables exposed by the kernel.

Extracts BIOS, system, baseboard and memory device information from the
binary structures found at ``/sys/firmware/dmi/tables/DMI``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from siomon.smbios_fields import (
    _read_u8,
    _read_u16_le,
    _read_u16_nonzero,
    decode_memory_size,
    find_structure_end,
    form_factor_name,
    format_uuid,
    get_string,
)

log = logging.getLogger(__name__)

DMI_TABLE_PATH = "/sys/firmware/dmi/tables/DMI"

_END_OF_TABLE = 127


@dataclass
class BiosEntry:
    """BIOS Information (SMBIOS Type 0)."""

    vendor: str | None = None
    version: str | None = None
    release_date: str | None = None
    major_release: int | None = None
    minor_release: int | None = None


@dataclass
class SystemEntry:
    """System Information (SMBIOS Type 1)."""

    manufacturer: str | None = None
    product_name: str | None = None
    uuid: str | None = None
    sku_number: str | None = None
    family: str | None = None


@dataclass
class BaseboardEntry:
    """Baseboard Information (SMBIOS Type 2)."""

    manufacturer: str | None = None
    product: str | None = None
    version: str | None = None
    serial_number: str | None = None


@dataclass
class MemoryDeviceEntry:
    """Memory Device (SMBIOS Type 17)."""

    size_bytes: int = 0
    form_factor: str = "Unknown"
    memory_type: int = 0
    type_detail: int = 0
    total_width_bits: int | None = None
    data_width_bits: int | None = None
    device_locator: str | None = None
    bank_locator: str | None = None
    speed_mts: int | None = None
    manufacturer: str | None = None
    serial_number: str | None = None
    part_number: str | None = None
    rank: int | None = None
    configured_speed_mts: int | None = None
    configured_voltage_mv: int | None = None


@dataclass
class SmbiosData:
    """All SMBIOS information extracted from one table."""

    bios: BiosEntry | None = None
    system: SystemEntry | None = None
    baseboard: BaseboardEntry | None = None
    memory_devices: list[MemoryDeviceEntry] = field(default_factory=list)


def parse() -> SmbiosData | None:
    """Parse the system's SMBIOS table; None if it cannot be read."""
    return parse_from_path(DMI_TABLE_PATH)


def parse_from_path(path: str | os.PathLike) -> SmbiosData | None:
    """Parse SMBIOS structures from a DMI table file; None if unreadable."""
    try:
        data = Path(path).read_bytes()
    except OSError:
        return None
    return parse_table(data)


def parse_table(data: bytes) -> SmbiosData:
    """Walk a raw SMBIOS table and collect the structures of interest."""
    data = bytes(data)
    result = SmbiosData()
    offset = 0
    while offset + 4 <= len(data):
        struct_type = data[offset]
        struct_len = data[offset + 1]
        if struct_len < 4:
            log.warning(
                "SMBIOS: invalid structure length %d at offset %#x, stopping",
                struct_len,
                offset,
            )
            break
        if offset + struct_len > len(data):
            break
        end = find_structure_end(data, offset + struct_len)
        if end > len(data):
            break
        if struct_type == _END_OF_TABLE:
            break

        structure = data[offset:end]
        if struct_type == 0 and result.bios is None:
            result.bios = parse_bios(structure, struct_len)
        elif struct_type == 1 and result.system is None:
            result.system = parse_system(structure, struct_len)
        elif struct_type == 2 and result.baseboard is None:
            result.baseboard = parse_baseboard(structure, struct_len)
        elif struct_type == 17:
            device = parse_memory_device(structure, struct_len)
            if device is not None:
                result.memory_devices.append(device)

        offset = end
    return result


def _string_at(data: bytes, header_len: int, offset: int) -> str | None:
    return get_string(data, header_len, _read_u8(data, offset) or 0)


def parse_bios(data: bytes, header_len: int) -> BiosEntry:
    """Decode a Type 0 (BIOS Information) structure."""
    return BiosEntry(
        vendor=_string_at(data, header_len, 0x04),
        version=_string_at(data, header_len, 0x05),
        release_date=_string_at(data, header_len, 0x08),
        major_release=_read_u8(data, 0x12) if header_len > 0x12 else None,
        minor_release=_read_u8(data, 0x13) if header_len > 0x13 else None,
    )


def parse_system(data: bytes, header_len: int) -> SystemEntry:
    """Decode a Type 1 (System Information) structure."""
    return SystemEntry(
        manufacturer=_string_at(data, header_len, 0x04),
        product_name=_string_at(data, header_len, 0x05),
        uuid=format_uuid(data[0x08:0x18]) if header_len >= 0x18 else None,
        sku_number=_string_at(data, header_len, 0x19) if header_len > 0x19 else None,
        family=_string_at(data, header_len, 0x1A) if header_len > 0x1A else None,
    )


def parse_baseboard(data: bytes, header_len: int) -> BaseboardEntry:
    """Decode a Type 2 (Baseboard Information) structure."""
    return BaseboardEntry(
        manufacturer=_string_at(data, header_len, 0x04),
        product=_string_at(data, header_len, 0x05),
        version=_string_at(data, header_len, 0x06),
        serial_number=_string_at(data, header_len, 0x07),
    )


def parse_memory_device(data: bytes, header_len: int) -> MemoryDeviceEntry | None:
    """Decode a Type 17 (Memory Device) structure.

    Returns None for structures too short to be useful and for empty slots.
    """
    if header_len < 0x15:
        return None

    size_bytes = decode_memory_size(_read_u16_le(data, 0x0C) or 0, data, header_len)
    if size_bytes == 0:
        return None

    rank = None
    if header_len > 0x1B:
        attributes = _read_u8(data, 0x1B)
        if attributes is not None and attributes & 0x0F:
            rank = attributes & 0x0F

    return MemoryDeviceEntry(
        total_width_bits=_read_u16_nonzero(data, 0x08),
        data_width_bits=_read_u16_nonzero(data, 0x0A),
        size_bytes=size_bytes,
        form_factor=form_factor_name(_read_u8(data, 0x0E) or 0),
        device_locator=_string_at(data, header_len, 0x10),
        bank_locator=_string_at(data, header_len, 0x11),
        memory_type=_read_u8(data, 0x12) or 0,
        type_detail=_read_u16_le(data, 0x13) or 0,
        speed_mts=_read_u16_nonzero(data, 0x15) if header_len > 0x16 else None,
        manufacturer=_string_at(data, header_len, 0x17) if header_len > 0x17 else None,
        serial_number=_string_at(data, header_len, 0x18) if header_len > 0x18 else None,
        part_number=_string_at(data, header_len, 0x1A) if header_len > 0x1A else None,
        rank=rank,
        configured_speed_mts=(
            _read_u16_nonzero(data, 0x20) if header_len > 0x21 else None
        ),
        configured_voltage_mv=(
            _read_u16_nonzero(data, 0x26) if header_len > 0x27 else None
        ),
    )