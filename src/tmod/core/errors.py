"""Errors raised while reading TMOD archives."""

from __future__ import annotations

from typing import Optional

from relic.core.errors import MismatchError, RelicToolError


class TmodError(RelicToolError):
    """Base error for everything raised by the TMOD reader."""


class NotFoundError(TmodError, FileNotFoundError):
    """An archive path or an archive entry does not exist."""


class ArchiveNotFoundError(NotFoundError):
    def __init__(self, path: str):
        super().__init__(f"TMOD file not found: '{path}'")
        self.path = path


class EntryNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"File not found in TMOD archive: '{name}'")
        self.name = name


class FormatError(TmodError):
    """The archive does not follow the TMOD layout."""


class MagicMismatchError(MismatchError, FormatError):
    def __init__(self, received: Optional[bytes], expected: Optional[bytes] = None):
        super().__init__("Magic Word", received, expected)


class TruncatedDataError(FormatError):
    def __init__(self, meaning: str, expected: int, received: int):
        super().__init__(
            f"Unexpected end of data while reading {meaning};"
            f" expected {expected} byte(s), got {received}!"
        )
        self.meaning = meaning
        self.expected = expected
        self.received = received


class InvalidVersionError(TmodError, ValueError):
    def __init__(self, text: str):
        super().__init__(f"Invalid version string: '{text}'")
        self.text = text


class DecompressionError(TmodError):
    """A compressed entry could not be inflated."""


class DecompressedSizeMismatch(MismatchError, DecompressionError):
    def __init__(self, received: Optional[int] = None, expected: Optional[int] = None):
        super().__init__("Decompressed Size", received, expected)


class HashMismatchError(MismatchError, TmodError):
    def __init__(
        self, name: str, received: Optional[bytes], expected: Optional[bytes] = None
    ):
        super().__init__(name, received, expected)


__all__ = [
    "TmodError",
    "NotFoundError",
    "ArchiveNotFoundError",
    "EntryNotFoundError",
    "FormatError",
    "MagicMismatchError",
    "TruncatedDataError",
    "InvalidVersionError",
    "DecompressionError",
    "DecompressedSizeMismatch",
    "HashMismatchError",
]
