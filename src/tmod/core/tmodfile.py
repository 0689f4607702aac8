"""The TMOD archive handle."""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import BinaryIO, Dict, Iterable, List, Optional, Type

from relic.core.logmsg import BraceMessage

from tmod.core.binaryio import TmodBinaryReader
from tmod.core.definitions import ASSEMBLY_EXT, FileEntry, TmodHeader, Version
from tmod.core.errors import ArchiveNotFoundError, EntryNotFoundError
from tmod.core.hashtools import validate_hash, verify_hash
from tmod.core.lazyio import read_entry
from tmod.core.serialization import FileTableSerializer, TmodHeaderSerializer

logger = logging.getLogger(__name__)


def _index_entries(entries: Iterable[FileEntry]) -> Dict[str, FileEntry]:
    lookup: Dict[str, FileEntry] = {}
    for entry in entries:
        if entry.name in lookup:
            logger.warning(
                BraceMessage(
                    "Duplicate entry `{0}` in file table; later row replaces the earlier one",
                    entry.name,
                )
            )
            # Re-insert so ordering follows the row that won
            del lookup[entry.name]
        lookup[entry.name] = entry
    return lookup


class TmodFile:
    """
    An open TMOD archive.

    The handle owns its stream; closing the handle closes the stream.
    Extraction seeks the shared stream, so callers using one handle from
    several threads must serialize access themselves.
    """

    def __init__(
        self,
        stream: BinaryIO,
        header: TmodHeader,
        entries: Iterable[FileEntry],
        path: Optional[str] = None,
    ):
        self._stream = stream
        self._header = header
        self._files = _index_entries(entries)
        self._path = path
        self._closed = False

    @classmethod
    def open(cls, path: str) -> TmodFile:
        """
        Opens a TMOD file for reading.

        :raises ArchiveNotFoundError: No file exists at `path`.
        :raises FormatError: The header or file table is malformed.
        :raises InvalidVersionError: The mod version is not a dotted numeric version.
        """
        if not os.path.isfile(path):
            raise ArchiveNotFoundError(path)

        handle = open(path, "rb")
        try:
            return cls.from_stream(handle, path=path)
        except BaseException:
            handle.close()
            raise

    @classmethod
    def from_stream(cls, stream: BinaryIO, path: Optional[str] = None) -> TmodFile:
        """Reads the header and file table from `stream`; the returned handle takes ownership of it."""
        reader = TmodBinaryReader(stream)
        header = TmodHeaderSerializer.read(reader)
        entries = FileTableSerializer.read(reader)
        tmod = cls(stream, header, entries, path=path or reader.name)
        logger.debug(
            BraceMessage(
                "Opened `{0}` ({1} entries, data starts at {2})",
                tmod.path or "<stream>",
                len(entries),
                reader.tell(),
            )
        )
        return tmod

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def header(self) -> TmodHeader:
        return self._header

    @property
    def tml_version(self) -> str:
        return self._header.tml_version

    @property
    def sha1_hash(self) -> bytes:
        return self._header.sha1_hash

    @property
    def signature(self) -> bytes:
        return self._header.signature

    @property
    def name(self) -> str:
        return self._header.name

    @property
    def version(self) -> Version:
        return self._header.version

    @property
    def assembly_name(self) -> str:
        """Name of the main assembly; by convention the mod name plus `.dll`."""
        return f"{self.name}{ASSEMBLY_EXT}"

    @property
    def closed(self) -> bool:
        return self._closed

    def entries(self) -> List[FileEntry]:
        return list(self._files.values())

    def names(self) -> List[str]:
        return list(self._files.keys())

    def get_entry(self, name: str) -> FileEntry:
        try:
            return self._files[name]
        except KeyError:
            raise EntryNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def __len__(self) -> int:
        return len(self._files)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed TMOD file.")

    def extract(self, name: str, decompress: bool = True) -> bytes:
        """
        Extracts a file from the archive.

        :raises EntryNotFoundError: `name` is not in the archive.
        :raises DecompressionError: The entry's payload could not be inflated.
        """
        self._check_open()
        entry = self.get_entry(name)
        return read_entry(self._stream, entry, decompress=decompress)

    def extract_assembly(self) -> bytes:
        return self.extract(self.assembly_name)

    def verify_hash(self) -> bool:
        self._check_open()
        return verify_hash(
            self._stream, self._header.hashed_pos, self._header.sha1_hash
        )

    def validate_hash(self) -> None:
        """:raises HashMismatchError: The stored SHA-1 does not match the archive contents."""
        self._check_open()
        validate_hash(self._stream, self._header.hashed_pos, self._header.sha1_hash)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream.close()
        logger.debug(BraceMessage("Closed `{0}`", self._path or "<stream>"))

    def __enter__(self) -> TmodFile:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} version='{self.version}' entries={len(self)}>"


__all__ = ["TmodFile"]
