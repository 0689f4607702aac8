"""Definitions expressed concretely in core."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Iterator, List, Optional, Tuple, Union

from tmod.core.errors import InvalidVersionError

MAGIC_WORD = b"TMOD"
HASH_SIZE = 20
SIGNATURE_SIZE = 256
ASSEMBLY_EXT = ".dll"

_VERSION_PART = re.compile(r"[0-9]+")


@dataclass(frozen=True)
@total_ordering
class Version:
    """A dotted numeric version, as written by tModLoader.

    Two to four components are allowed; unset trailing components sort
    before any explicit value, so ``1.0 < 1.0.0``.

    Args:
        major (int): The Major Version.
        minor (int): The Minor Version.
        build (Optional[int]): The Build number, if present.
        revision (Optional[int]): The Revision number, if present.
    """

    major: int
    minor: int = 0
    build: Optional[int] = None
    revision: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> Version:
        parts = text.split(".")
        if not (2 <= len(parts) <= 4) or not all(
            _VERSION_PART.fullmatch(part) for part in parts
        ):
            raise InvalidVersionError(text)
        return cls(*(int(part) for part in parts))

    def __str__(self) -> str:
        return ".".join(str(part) for part in self)

    def __iter__(self) -> Iterator[int]:
        return iter(self.as_tuple())

    def __len__(self) -> int:
        return len(self.as_tuple())

    def __getitem__(self, item: Union[int, slice]) -> Union[int, Tuple[int, ...]]:
        return self.as_tuple()[item]

    def as_tuple(self) -> Tuple[int, ...]:
        if self.build is None:
            return (self.major, self.minor)
        if self.revision is None:
            return (self.major, self.minor, self.build)
        return (self.major, self.minor, self.build, self.revision)

    def __eq__(self, other: object) -> bool:
        return self.as_tuple() == (
            other.as_tuple() if isinstance(other, Version) else other
        )

    def __lt__(self, other: Any) -> bool:
        cmp: bool = self.as_tuple() < (
            other.as_tuple() if isinstance(other, Version) else other
        )
        return cmp

    def __hash__(self) -> int:
        return self.as_tuple().__hash__()


@dataclass(frozen=True)
class TmodHeader:
    """Archive metadata decoded from the fixed header."""

    tml_version: str
    sha1_hash: bytes = field(repr=False)
    signature: bytes = field(repr=False)
    name: str
    version: Version
    # Start of the SHA-1 covered region (everything after the unused length field)
    hashed_pos: int = 0


@dataclass(frozen=True, slots=True)
class FileEntry:
    """File entry with absolute byte offset in the TMOD file."""

    name: str
    offset: int
    length: int
    compressed_length: int

    @property
    def is_stored(self) -> bool:
        return self.compressed_length == self.length


__all__: List[str] = [
    "MAGIC_WORD",
    "HASH_SIZE",
    "SIGNATURE_SIZE",
    "ASSEMBLY_EXT",
    "Version",
    "TmodHeader",
    "FileEntry",
]
