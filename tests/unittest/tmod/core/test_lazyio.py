import os
import zlib
from io import BytesIO

import pytest

from fake_tmod import deflate
from tmod.core.definitions import FileEntry
from tmod.core.errors import (
    DecompressedSizeMismatch,
    DecompressionError,
    TruncatedDataError,
)
from tmod.core.lazyio import inflate, read_entry

_PADDING = b"\xee" * 8


def _stream_with(payload: bytes) -> BytesIO:
    return BytesIO(_PADDING + payload + _PADDING)


def test_read_stored_entry():
    payload = b"hello, world!"
    stream = _stream_with(payload)
    entry = FileEntry("info.json", len(_PADDING), len(payload), len(payload))
    assert read_entry(stream, entry) == payload


@pytest.mark.parametrize("size", [0, 1, 50, 4096, 100_000])
def test_read_compressed_entry(size: int):
    data = os.urandom(size // 2) * 2
    payload = deflate(data)
    stream = _stream_with(payload)
    entry = FileEntry("blob.bin", len(_PADDING), len(data), len(payload))
    assert len(payload) != len(data)
    assert read_entry(stream, entry) == data


def test_read_entry_without_decompressing():
    data = b"abc" * 100
    payload = deflate(data)
    entry = FileEntry("blob.bin", len(_PADDING), len(data), len(payload))
    assert read_entry(_stream_with(payload), entry, decompress=False) == payload


def test_read_entry_is_repeatable():
    data = b"abc" * 100
    payload = deflate(data)
    stream = _stream_with(payload)
    entry = FileEntry("blob.bin", len(_PADDING), len(data), len(payload))
    stream.seek(0)
    assert read_entry(stream, entry) == data
    assert read_entry(stream, entry) == data


def test_read_entry_past_end_of_stream():
    stream = BytesIO(b"\0" * 10)
    entry = FileEntry("missing.bin", 8, 16, 16)
    with pytest.raises(TruncatedDataError):
        read_entry(stream, entry)


def test_inflate_rejects_zlib_framing():
    with pytest.raises(DecompressionError):
        inflate(zlib.compress(b"x" * 64), 64)


def test_inflate_corrupt_stream():
    with pytest.raises(DecompressionError):
        inflate(b"\xff" * 16, 64)


def test_inflate_truncated_stream():
    data = os.urandom(512)
    payload = deflate(data)
    with pytest.raises(DecompressionError):
        inflate(payload[: len(payload) // 2], len(data))


@pytest.mark.parametrize("delta", [-1, 1, 100])
def test_inflate_size_mismatch(delta: int):
    data = b"0123456789" * 10
    with pytest.raises(DecompressedSizeMismatch):
        inflate(deflate(data), len(data) + delta)


def test_inflate_ignores_trailing_bytes():
    data = b"0123456789" * 10
    assert inflate(deflate(data) + b"\0\0", len(data)) == data
