"""Readers for the TMOD header and file table."""

from __future__ import annotations

import dataclasses
from typing import BinaryIO, List, Union

from tmod.core.binaryio import TmodBinaryReader
from tmod.core.definitions import (
    MAGIC_WORD,
    HASH_SIZE,
    SIGNATURE_SIZE,
    FileEntry,
    TmodHeader,
    Version,
)
from tmod.core.errors import FormatError

# name prefix (>= 1 byte) + length + compressed length
_MIN_ENTRY_SIZE = 1 + 4 + 4


def _as_reader(stream: Union[BinaryIO, TmodBinaryReader]) -> TmodBinaryReader:
    if isinstance(stream, TmodBinaryReader):
        return stream
    return TmodBinaryReader(stream)


class TmodHeaderSerializer:
    @classmethod
    def read(cls, stream: Union[BinaryIO, TmodBinaryReader]) -> TmodHeader:
        reader = _as_reader(stream)
        reader.expect_magic(MAGIC_WORD)
        tml_version = reader.read_string("tModLoader version")
        sha1_hash = reader.read_bytes(HASH_SIZE, "SHA-1 hash")
        signature = reader.read_bytes(SIGNATURE_SIZE, "signature")
        # Data length; never needed to locate anything
        _ = reader.read_int32("data length")
        hashed_pos = reader.tell()
        name = reader.read_string("mod name")
        version = Version.parse(reader.read_string("mod version"))
        return TmodHeader(
            tml_version=tml_version,
            sha1_hash=sha1_hash,
            signature=signature,
            name=name,
            version=version,
            hashed_pos=hashed_pos,
        )


class FileTableSerializer:
    @classmethod
    def read(cls, stream: Union[BinaryIO, TmodBinaryReader]) -> List[FileEntry]:
        """
        Reads the file table and resolves every entry's absolute data offset.

        Offsets are not stored; payloads follow the table back to back in
        table order. Entries are first built relative to the end of the table,
        then rebased once the table has been consumed.

        :raises FormatError: The count is negative or larger than the data could hold,
            a length is negative, or the table is truncated.
        """
        reader = _as_reader(stream)
        file_count = reader.read_int32("file count")
        if file_count < 0:
            raise FormatError(f"Negative file count: {file_count}")
        if file_count * _MIN_ENTRY_SIZE > reader.bytes_remaining():
            raise FormatError(
                f"File count {file_count} exceeds what the remaining data can hold!"
            )

        relative: List[FileEntry] = []
        offset = 0
        for index in range(file_count):
            name = reader.read_string(f"name of file #{index}")
            length = reader.read_int32(f"length of '{name}'")
            compressed_length = reader.read_int32(f"compressed length of '{name}'")
            if length < 0 or compressed_length < 0:
                raise FormatError(
                    f"Negative size for '{name}': length={length}, compressed length={compressed_length}"
                )
            relative.append(FileEntry(name, offset, length, compressed_length))
            offset += compressed_length

        base = reader.tell()
        return [dataclasses.replace(entry, offset=base + entry.offset) for entry in relative]


__all__ = ["TmodHeaderSerializer", "FileTableSerializer"]
