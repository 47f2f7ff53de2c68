"""Outbound packets: fixed-size byte buffers with little-endian field packing."""

from __future__ import annotations

import io
import struct
from abc import ABC, abstractmethod
from typing import BinaryIO


class OutboundPacket(ABC):
    """A zero-initialised packet of a fixed size, packed before it is sent."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("packet size must not be negative")
        self.data = bytearray(size)

    @property
    def size(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return bytes(self.data)

    def _check_range(self, offset: int, width: int) -> None:
        if offset < 0 or offset + width > len(self.data):
            raise IndexError(f"field at offset {offset} does not fit in a {len(self.data)} byte packet")

    def pack_integer(self, offset: int, value: int) -> None:
        """Store *value* as an unsigned 32-bit little-endian integer at *offset*."""
        self._check_range(offset, 4)
        struct.pack_into("<I", self.data, offset, value & 0xFFFFFFFF)

    def pack_short(self, offset: int, value: int) -> None:
        """Store *value* as an unsigned 16-bit little-endian integer at *offset*."""
        self._check_range(offset, 2)
        struct.pack_into("<H", self.data, offset, value & 0xFFFF)

    @abstractmethod
    def pack(self) -> bytes:
        """Write the packet's fields into ``data`` and return the packed bytes."""


class SendFilePartPacket(OutboundPacket):
    """A packet carrying one part of a file's contents."""

    def pack(self) -> bytes:
        """Return the file part; its contents are already in place."""
        return bytes(self.data)

    @classmethod
    def from_file(cls, file: BinaryIO, size: int) -> SendFilePartPacket:
        """Read up to *size* bytes from *file*'s current position; the rest stays zero."""
        packet = cls(size)
        position = file.tell()
        file_size = file.seek(0, io.SEEK_END)
        file.seek(position, io.SEEK_SET)

        to_read = file_size - position if file_size < size else size
        chunk = file.read(max(to_read, 0))
        packet.data[: len(chunk)] = chunk
        return packet

    @classmethod
    def from_buffer(cls, buffer: bytes) -> SendFilePartPacket:
        """Build a packet holding a copy of *buffer*."""
        packet = cls(len(buffer))
        packet.data[:] = buffer
        return packet