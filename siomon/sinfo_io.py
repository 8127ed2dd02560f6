"""Atomic banked register access to Super I/O monitoring chips.

Uses the ``/dev/sinfo_io`` kernel module, which performs bank-select and
register-read sequences under a spinlock, and falls back to ``/dev/port``
when the module is not loaded.
"""

from __future__ import annotations

import fcntl
import logging
import os
import struct
from pathlib import Path
from typing import BinaryIO, Sequence

from siomon.port_io import PortIo

log = logging.getLogger(__name__)

SINFO_IO_PATH = "/dev/sinfo_io"
SINFO_IO_MAGIC = ord("S")
SINFO_IO_BATCH_MAX = 32

_SETUP = struct.Struct("=HH")
_REG = struct.Struct("=HBB")
_BATCH = struct.Struct(f"=B3x{SINFO_IO_BATCH_MAX}H{SINFO_IO_BATCH_MAX}B")

_REG_BANK = 0x4E
_STATUS_UNSET = 0xFF


def _ioc(direction: int, nr: int, size: int) -> int:
    return (direction << 30) | (size << 16) | (SINFO_IO_MAGIC << 8) | nr


def iow(nr: int, size: int) -> int:
    """Encode a write-direction ioctl number for the sinfo_io magic."""
    return _ioc(1, nr, size)


def iowr(nr: int, size: int) -> int:
    """Encode a read-write ioctl number for the sinfo_io magic."""
    return _ioc(3, nr, size)


SINFO_IO_SETUP = iow(0x01, _SETUP.size)
SINFO_IO_READ_REG = iowr(0x02, _REG.size)
SINFO_IO_READ_BATCH = iowr(0x03, _BATCH.size)


class SinfoIo:
    """Handle on the sinfo_io kernel module device."""

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    @classmethod
    def open(cls, hwm_base: int) -> SinfoIo | None:
        """Open the device and configure the HWM base address.

        Returns None if the device is missing, access is denied or the
        setup command fails.
        """
        try:
            file = open(SINFO_IO_PATH, "r+b", buffering=0)
        except OSError:
            return None
        try:
            fcntl.ioctl(file.fileno(), SINFO_IO_SETUP, _SETUP.pack(hwm_base, 0))
        except (OSError, struct.error) as exc:
            log.debug("sinfo_io SETUP failed for base 0x%04X: %s", hwm_base, exc)
            file.close()
            return None
        log.info("sinfo_io: opened with HWM base 0x%04X", hwm_base)
        return cls(file)

    @classmethod
    def is_available(cls) -> bool:
        """Whether the kernel module's device node exists."""
        return Path(SINFO_IO_PATH).exists()

    def read_register(self, reg: int) -> int | None:
        """Read one banked register (high byte bank, low byte offset)."""
        try:
            buf = bytearray(_REG.pack(reg, 0, _STATUS_UNSET))
            fcntl.ioctl(self._file.fileno(), SINFO_IO_READ_REG, buf, True)
        except (OSError, struct.error):
            return None
        _, value, status = _REG.unpack(buf)
        return value if status == 0 else None

    def read_batch(self, regs: Sequence[int]) -> list[int] | None:
        """Read 1 to 32 banked registers in one atomic operation.

        Values come back in the order of ``regs``; None on failure.
        """
        count = len(regs)
        if count == 0 or count > SINFO_IO_BATCH_MAX:
            return None
        padded = list(regs) + [0] * (SINFO_IO_BATCH_MAX - count)
        try:
            buf = bytearray(
                _BATCH.pack(count, *padded, *([0] * SINFO_IO_BATCH_MAX))
            )
            fcntl.ioctl(self._file.fileno(), SINFO_IO_READ_BATCH, buf, True)
        except (OSError, struct.error):
            return None
        values = _BATCH.unpack(buf)[1 + SINFO_IO_BATCH_MAX :]
        return list(values[:count])

    def close(self) -> None:
        """Close the device handle."""
        self._file.close()

    def __enter__(self) -> SinfoIo:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class HwmAccess:
    """Hardware monitor register access over the best available path.

    Prefers the atomic kernel module; otherwise uses non-atomic port I/O.
    """

    def __init__(self, backend: SinfoIo | PortIo) -> None:
        self._backend = backend

    @classmethod
    def open(cls, hwm_base: int) -> HwmAccess | None:
        """Open sinfo_io for ``hwm_base``, falling back to the port device."""
        sio = SinfoIo.open(hwm_base)
        if sio is not None:
            return cls(sio)
        log.debug("sinfo_io unavailable, falling back to /dev/port")
        pio = PortIo.open()
        return None if pio is None else cls(pio)

    def read_register(self, hwm_base: int, reg: int) -> int | None:
        """Read one banked register; None on failure."""
        backend = self._backend
        if isinstance(backend, SinfoIo):
            return backend.read_register(reg)
        bank = (reg >> 8) & 0xFF
        offset = reg & 0xFF
        addr_port = hwm_base + 5
        data_port = hwm_base + 6
        try:
            backend.write_byte(addr_port, _REG_BANK)
            backend.write_byte(data_port, bank)
            backend.write_byte(addr_port, offset)
            return backend.read_byte(data_port)
        except OSError:
            return None

    def read_batch(self, hwm_base: int, regs: Sequence[int]) -> list[int] | None:
        """Read several banked registers; None if any read fails."""
        if isinstance(self._backend, SinfoIo):
            return self._backend.read_batch(regs)
        values = []
        for reg in regs:
            value = self.read_register(hwm_base, reg)
            if value is None:
                return None
            values.append(value)
        return values

    def is_atomic(self) -> bool:
        """Whether reads go through the atomic kernel module."""
        return isinstance(self._backend, SinfoIo)

    def close(self) -> None:
        """Close the underlying device handle."""
        self._backend.close()

    def __enter__(self) -> HwmAccess:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()