from __future__ import annotations

import zlib
from typing import BinaryIO

from tmod.core.binaryio import TmodBinaryReader
from tmod.core.definitions import FileEntry
from tmod.core.errors import DecompressedSizeMismatch, DecompressionError

# Raw deflate; no zlib or gzip framing
_DEFLATE_WBITS = -zlib.MAX_WBITS


def inflate(buffer: bytes, expected_size: int) -> bytes:
    """Inflates a raw deflate stream that must expand to exactly `expected_size` bytes."""
    decompressor = zlib.decompressobj(_DEFLATE_WBITS)
    try:
        # One byte of headroom so oversized output is detectable
        out_buffer = decompressor.decompress(buffer, expected_size + 1)
    except zlib.error as e:
        raise DecompressionError(f"Corrupt deflate stream: {e}") from e

    if len(out_buffer) != expected_size:
        raise DecompressedSizeMismatch(len(out_buffer), expected_size)
    if not decompressor.eof:
        raise DecompressionError(
            "Deflate stream ends beyond the compressed span of the entry!"
        )
    return out_buffer


def read_entry(stream: BinaryIO, entry: FileEntry, decompress: bool = True) -> bytes:
    """
    Reads an entry's payload from the archive stream.

    Stored entries (compressed length == length) are returned as-is.

    :param stream: The archive stream; its position is left after the entry's span.
    :param entry: A resolved entry with an absolute offset.
    :param decompress: When False, the raw span is returned even for compressed entries.

    :raises TruncatedDataError: The span runs past the end of the stream.
    :raises DecompressionError: The payload is corrupt or inflates to the wrong size.
    """
    reader = TmodBinaryReader(stream)
    reader.seek(entry.offset)
    in_buffer = reader.read_bytes(entry.compressed_length, f"data of '{entry.name}'")
    if not decompress or entry.is_stored:
        return in_buffer
    return inflate(in_buffer, entry.length)


__all__ = ["inflate", "read_entry"]
