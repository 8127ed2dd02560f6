"""Byte-wide x86 I/O port access through the ``/dev/port`` character device.

Each port number is a file offset into the device. Access needs root or
``CAP_SYS_RAWIO``. Super I/O monitoring chips are reached this way.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO

DEV_PORT = "/dev/port"

_PORT_MAX = 0xFFFF
_BYTE_MAX = 0xFF


def _check_port(port: int) -> int:
    if not 0 <= port <= _PORT_MAX:
        raise ValueError(f"I/O port out of range: {port:#x}")
    return port


class PortIo:
    """An open handle on the port device, kept open across register accesses."""

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    @classmethod
    def open(cls, path: str | os.PathLike | None = None) -> PortIo | None:
        """Open the port device for reading and writing.

        Returns None if the device does not exist or access is denied.
        """
        try:
            file = open(DEV_PORT if path is None else path, "r+b", buffering=0)
        except OSError:
            return None
        return cls(file)

    @classmethod
    def is_available(cls) -> bool:
        """Whether the port device exists and the process runs as root."""
        return Path(DEV_PORT).exists() and os.geteuid() == 0

    def read_byte(self, port: int) -> int:
        """Read one byte from an I/O port; raises OSError on failure."""
        self._file.seek(_check_port(port))
        data = self._file.read(1)
        if not data:
            raise OSError(f"short read from I/O port {port:#06x}")
        return data[0]

    def write_byte(self, port: int, value: int) -> None:
        """Write one byte to an I/O port; raises OSError on failure."""
        if not 0 <= value <= _BYTE_MAX:
            raise ValueError(f"byte value out of range: {value:#x}")
        self._file.seek(_check_port(port))
        written = self._file.write(bytes([value]))
        if written != 1:
            raise OSError(f"short write to I/O port {port:#06x}")

    def write_read(self, write_port: int, write_value: int, read_port: int) -> int:
        """Write a byte to one port, then read a byte from another.

        The usual address/data register pair access pattern.
        """
        self.write_byte(write_port, write_value)
        return self.read_byte(read_port)

    def close(self) -> None:
        """Close the device handle."""
        self._file.close()

    def __enter__(self) -> PortIo:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()