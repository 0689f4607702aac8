import hashlib
from typing import BinaryIO, Optional, Union

from relic.core.lazyio import read_chunks

from tmod.core.errors import HashMismatchError

Hashable = Union[BinaryIO, bytes, bytearray]


class sha1:
    HASHER_NAME = "SHA-1"

    def __init__(self, start: Optional[int] = None, size: Optional[int] = None):
        self._start = start
        self._size = size

    def hash(self, stream: Hashable) -> bytes:
        hasher = hashlib.sha1(usedforsecurity=False)
        for chunk in read_chunks(stream, self._start, self._size):
            hasher.update(chunk)
        return hasher.digest()

    def check(self, stream: Hashable, expected: bytes) -> bool:
        return self.hash(stream) == expected

    def validate(self, stream: Hashable, expected: bytes) -> None:
        result = self.hash(stream)
        if result != expected:
            raise HashMismatchError(self.HASHER_NAME, result, expected)


def verify_hash(stream: BinaryIO, hashed_pos: int, expected: bytes) -> bool:
    """Checks a TMOD hash; the digest covers everything from `hashed_pos` to the end of the stream."""
    jump_back = stream.tell()
    try:
        return sha1(start=hashed_pos).check(stream, expected)
    finally:
        stream.seek(jump_back)


def validate_hash(stream: BinaryIO, hashed_pos: int, expected: bytes) -> None:
    jump_back = stream.tell()
    try:
        sha1(start=hashed_pos).validate(stream, expected)
    finally:
        stream.seek(jump_back)


__all__ = ["Hashable", "sha1", "verify_hash", "validate_hash"]
