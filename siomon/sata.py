"""SATA SMART data retrieval through SG_IO and ATA PASS-THROUGH(12).

Sends an ATA SMART READ DATA command through the SCSI generic interface
and decodes the 512-byte SMART data page.
"""

from __future__ import annotations

import array
import fcntl
import logging
import os
import struct
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

SG_IO = 0x2285
SG_DXFER_FROM_DEV = -3
SMART_DATA_SIZE = 512
MAX_SMART_ATTRS = 30
SMART_ATTR_SIZE = 12
SENSE_BUFFER_SIZE = 32
SG_IO_TIMEOUT_MS = 5000

_ATTRIBUTE = struct.Struct("<BHBB6sB")
# Native layout of the kernel's sg_io_hdr; the trailing "0P" pads the
# structure to pointer alignment the way the C compiler does.
_SG_IO_HDR = struct.Struct("@iiBBHIPPPIIiPBBBBHHiII0P")


@dataclass(frozen=True)
class AtaSmartAttribute:
    """One 12-byte entry of the SMART attribute table."""

    id: int
    flags: int
    current_value: int
    worst_value: int
    raw_value: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> AtaSmartAttribute:
        """Decode a 12-byte attribute entry; raises ValueError on other sizes."""
        data = bytes(data)
        if len(data) != SMART_ATTR_SIZE:
            raise ValueError(
                f"SMART attribute must be {SMART_ATTR_SIZE} bytes, got {len(data)}"
            )
        attr_id, flags, current, worst, raw, _ = _ATTRIBUTE.unpack(data)
        return cls(attr_id, flags, current, worst, raw)

    def raw_u48(self) -> int:
        """The 6-byte raw value as an unsigned little-endian integer."""
        return int.from_bytes(self.raw_value, "little")


@dataclass(frozen=True)
class AtaSmartData:
    """Decoded SMART data page: revision and the used attribute entries."""

    revision: int
    attributes: list[AtaSmartAttribute] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> AtaSmartData:
        """Decode a 512-byte SMART data page; raises ValueError on other sizes."""
        data = bytes(data)
        if len(data) != SMART_DATA_SIZE:
            raise ValueError(
                f"SMART data page must be {SMART_DATA_SIZE} bytes, got {len(data)}"
            )
        revision = int.from_bytes(data[0:2], "little")
        table_end = 2 + MAX_SMART_ATTRS * SMART_ATTR_SIZE
        entries = (
            AtaSmartAttribute.from_bytes(data[offset : offset + SMART_ATTR_SIZE])
            for offset in range(2, table_end, SMART_ATTR_SIZE)
        )
        return cls(revision, [attr for attr in entries if attr.id != 0])

    def find_attr(self, attr_id: int) -> AtaSmartAttribute | None:
        """The first attribute with the given SMART id, or None."""
        return next((a for a in self.attributes if a.id == attr_id), None)


def build_smart_read_cdb() -> bytes:
    """The 12-byte ATA PASS-THROUGH(12) CDB for SMART READ DATA."""
    return bytes(
        [
            0xA1,  # ATA PASS-THROUGH(12)
            0x08,  # protocol: PIO Data-In
            0x2E,  # T_DIR from device, BYT_BLOK, T_LENGTH in sector count
            0xD0,  # feature: SMART READ DATA
            0x01,  # sector count
            0x00,  # LBA low
            0x4F,  # LBA mid: SMART signature
            0xC2,  # LBA high: SMART signature
            0x00,  # device
            0xB0,  # command: SMART
            0x00,
            0x00,
        ]
    )


def read_sata_smart(device_path: str | os.PathLike) -> AtaSmartData | None:
    """Read SMART data from a block device such as ``/dev/sda``.

    Returns None if the device cannot be opened, the ioctl fails or the
    device reports an error status.
    """
    data_buf = array.array("B", bytes(SMART_DATA_SIZE))
    sense_buf = array.array("B", bytes(SENSE_BUFFER_SIZE))
    cdb_buf = array.array("B", build_smart_read_cdb())

    header = bytearray(
        _SG_IO_HDR.pack(
            ord("S"),
            SG_DXFER_FROM_DEV,
            len(cdb_buf),
            len(sense_buf),
            0,
            SMART_DATA_SIZE,
            data_buf.buffer_info()[0],
            cdb_buf.buffer_info()[0],
            sense_buf.buffer_info()[0],
            SG_IO_TIMEOUT_MS,
            0,
            0,
            0,
            0,
            0,
            0,
            0,
            0,
            0,
            0,
            0,
            0,
        )
    )

    try:
        with open(device_path, "rb", buffering=0) as device:
            fcntl.ioctl(device.fileno(), SG_IO, header, True)
    except OSError as exc:
        log.debug("SG_IO SMART read failed on %s: %s", device_path, exc)
        return None

    fields = _SG_IO_HDR.unpack(bytes(header))
    status, host_status, driver_status = fields[13], fields[17], fields[18]
    if status or host_status or driver_status:
        log.debug(
            "SG_IO SMART returned error status on %s: scsi=%d host=%d driver=%d",
            device_path,
            status,
            host_status,
            driver_status,
        )
        return None

    return AtaSmartData.from_bytes(data_buf.tobytes())