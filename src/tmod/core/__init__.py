"""
Reader for TMOD mod-package archives.
"""
from tmod.core.definitions import MAGIC_WORD, Version, TmodHeader, FileEntry
from tmod.core.errors import (
    TmodError,
    NotFoundError,
    FormatError,
    InvalidVersionError,
    DecompressionError,
)
from tmod.core.tmodfile import TmodFile

__version__ = "1.0.0"

__all__ = [
    "MAGIC_WORD",
    "Version",
    "TmodHeader",
    "FileEntry",
    "TmodFile",
    "TmodError",
    "NotFoundError",
    "FormatError",
    "InvalidVersionError",
    "DecompressionError",
]
