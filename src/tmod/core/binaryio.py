"""Primitive field decoding for the TMOD layout.

Wraps a seekable binary stream and reads the handful of field kinds the
format is made of: raw byte blocks, little-endian int32s, and .NET style
length-prefixed strings.
"""

from __future__ import annotations

import os
import struct
from typing import BinaryIO, Optional

from tmod.core.errors import FormatError, MagicMismatchError, TruncatedDataError

_INT32 = struct.Struct("<i")
_INT32_MAX = 0x7FFFFFFF
_MAX_7BIT_BYTES = 5


class TmodBinaryReader:
    def __init__(self, stream: BinaryIO):
        self._stream = stream

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    @property
    def name(self) -> Optional[str]:
        name = getattr(self._stream, "name", None)
        return name if isinstance(name, str) and name != "" else None

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._stream.seek(offset, whence)

    def bytes_remaining(self) -> int:
        jump_back = self._stream.tell()
        end = self._stream.seek(0, os.SEEK_END)
        self._stream.seek(jump_back)
        return max(0, end - jump_back)

    def read_at_most(self, size: int) -> bytes:
        """Read up to `size` bytes, returning fewer only if the stream is exhausted."""
        if size < 0:
            raise ValueError("The number of bytes to read cannot be negative")
        if size == 0:
            return b""

        parts = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                break
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)

    def read_bytes(self, size: int, meaning: str = "data") -> bytes:
        """
        Reads exactly `size` bytes.

        :param size: The number of bytes to read.
        :param meaning: What the bytes represent; used in error messages.

        :raises TruncatedDataError: The stream ended before `size` bytes were read.
        """
        buffer = self.read_at_most(size)
        if len(buffer) != size:
            raise TruncatedDataError(meaning, size, len(buffer))
        return buffer

    def expect_magic(self, magic: bytes) -> None:
        buffer = self.read_at_most(len(magic))
        if buffer != magic:
            raise MagicMismatchError(buffer, magic)

    def read_int32(self, meaning: str = "int32") -> int:
        buffer = self.read_bytes(_INT32.size, meaning)
        value: int = _INT32.unpack(buffer)[0]
        return value

    def read_7bit_int(self, meaning: str = "7-bit encoded int") -> int:
        # .NET BinaryWriter.Write7BitEncodedInt; low groups first
        value = 0
        for index in range(_MAX_7BIT_BYTES):
            byte = self.read_bytes(1, meaning)[0]
            value |= (byte & 0x7F) << (7 * index)
            if not byte & 0x80:
                break
        else:
            raise FormatError(f"Bad 7-bit encoded int while reading {meaning}!")

        if value > _INT32_MAX:
            raise FormatError(
                f"7-bit encoded int out of range while reading {meaning}: {value}"
            )
        return value

    def read_string(self, meaning: str = "string") -> str:
        size = self.read_7bit_int(f"length of {meaning}")
        buffer = self.read_bytes(size, meaning)
        return buffer.decode("utf-8", errors="replace")


__all__ = ["TmodBinaryReader"]
