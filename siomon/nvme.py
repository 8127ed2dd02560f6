"""NVMe SMART/Health log page (0x02) decoding and retrieval."""

from __future__ import annotations

import array
import fcntl
import logging
import os
import struct
from dataclasses import dataclass

log = logging.getLogger(__name__)

NVME_IOCTL_ADMIN_CMD = 0xC0484E41
NVME_ADMIN_GET_LOG_PAGE = 0x02
NVME_LOG_SMART = 0x02
SMART_LOG_SIZE = 512
DATA_UNIT_BYTES = 512_000

_U128_MAX = (1 << 128) - 1
_ADMIN_CMD = struct.Struct("<BBHIIIQQII6III")
_HEADER = struct.Struct("<B2sBBBB25s")
_COUNTERS_OFFSET = 32
_TAIL = struct.Struct("<II8H")
_TAIL_OFFSET = 192


@dataclass(frozen=True)
class NvmeSmartLog:
    """The 512-byte SMART/Health Information log as stored by the controller.

    ``temperature`` holds the raw 2 bytes; the counters hold 16 raw
    little-endian bytes each.
    """

    critical_warning: int
    temperature: bytes
    avail_spare: int
    spare_thresh: int
    percent_used: int
    endu_grp_crit_warn_sumry: int
    data_units_read: bytes
    data_units_written: bytes
    host_reads: bytes
    host_writes: bytes
    ctrl_busy_time: bytes
    power_cycles: bytes
    power_on_hours: bytes
    unsafe_shutdowns: bytes
    media_errors: bytes
    num_err_log_entries: bytes
    warning_temp_time: int
    critical_comp_time: int
    temp_sensor: tuple[int, ...]

    @classmethod
    def from_bytes(cls, data: bytes) -> NvmeSmartLog:
        """Decode a log page; raises ValueError unless it is 512 bytes."""
        data = bytes(data)
        if len(data) != SMART_LOG_SIZE:
            raise ValueError(f"SMART log must be {SMART_LOG_SIZE} bytes, got {len(data)}")
        warning, temperature, spare, thresh, used, endu, _ = _HEADER.unpack_from(data)
        counters = [
            data[_COUNTERS_OFFSET + i * 16 : _COUNTERS_OFFSET + (i + 1) * 16]
            for i in range(10)
        ]
        warn_time, crit_time, *sensors = _TAIL.unpack_from(data, _TAIL_OFFSET)
        return cls(
            warning,
            temperature,
            spare,
            thresh,
            used,
            endu,
            *counters,
            warn_time,
            crit_time,
            tuple(sensors),
        )


def read_nvme_smart(device_path: str | os.PathLike) -> NvmeSmartLog | None:
    """Read the SMART/Health log from a controller such as ``/dev/nvme0``.

    Returns None if the device cannot be opened or the command fails.
    """
    buffer = array.array("B", bytes(SMART_LOG_SIZE))
    address, _ = buffer.buffer_info()
    numdl = SMART_LOG_SIZE // 4 - 1
    command = bytearray(
        _ADMIN_CMD.pack(
            NVME_ADMIN_GET_LOG_PAGE,
            0,
            0,
            0xFFFF_FFFF,
            0,
            0,
            0,
            address,
            0,
            SMART_LOG_SIZE,
            NVME_LOG_SMART | (numdl << 16),
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
            fcntl.ioctl(device.fileno(), NVME_IOCTL_ADMIN_CMD, command, True)
    except OSError as exc:
        log.debug("NVMe SMART read failed on %s: %s", device_path, exc)
        return None
    return NvmeSmartLog.from_bytes(buffer.tobytes())


def nvme_smart_temperature_celsius(log: NvmeSmartLog) -> int:
    """Composite temperature in degrees Celsius (the log stores Kelvin)."""
    return int.from_bytes(log.temperature, "little") - 273


def nvme_smart_read_u128(data: bytes) -> int:
    """Decode a 16-byte little-endian counter."""
    if len(data) != 16:
        raise ValueError(f"expected 16 bytes, got {len(data)}")
    return int.from_bytes(data, "little")


def nvme_smart_data_bytes(data_units: int) -> int:
    """Convert NVMe data units (512,000 bytes each) to bytes, saturating at 2**128-1."""
    return min(data_units * DATA_UNIT_BYTES, _U128_MAX)