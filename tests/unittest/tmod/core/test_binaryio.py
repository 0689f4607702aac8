from io import BytesIO

import pytest

from fake_tmod import write_7bit_int, write_string, write_int32
from tmod.core.binaryio import TmodBinaryReader
from tmod.core.errors import FormatError, MagicMismatchError, TruncatedDataError


@pytest.mark.parametrize(
    ["value", "encoded"],
    [
        (0, b"\x00"),
        (1, b"\x01"),
        (127, b"\x7f"),
        (128, b"\x80\x01"),
        (300, b"\xac\x02"),
        (0x7FFFFFFF, b"\xff\xff\xff\xff\x07"),
    ],
)
def test_read_7bit_int(value: int, encoded: bytes):
    reader = TmodBinaryReader(BytesIO(encoded))
    assert reader.read_7bit_int() == value
    assert reader.tell() == len(encoded)


@pytest.mark.parametrize(
    "encoded",
    [
        b"\xff\xff\xff\xff\xff\x01",  # sixth byte
        b"\xff\xff\xff\xff\x0f",  # exceeds int32
    ],
)
def test_read_7bit_int_invalid(encoded: bytes):
    reader = TmodBinaryReader(BytesIO(encoded))
    with pytest.raises(FormatError):
        reader.read_7bit_int()


def test_read_7bit_int_truncated():
    reader = TmodBinaryReader(BytesIO(b"\x80"))
    with pytest.raises(TruncatedDataError):
        reader.read_7bit_int()


@pytest.mark.parametrize("text", ["", "TestMod", "ünïcødé", "x" * 300])
def test_read_string(text: str):
    reader = TmodBinaryReader(BytesIO(write_string(text) + b"trailing"))
    assert reader.read_string() == text
    assert reader.read_at_most(8) == b"trailing"


def test_read_string_truncated():
    buffer = write_string("TestMod")[:-2]
    reader = TmodBinaryReader(BytesIO(buffer))
    with pytest.raises(TruncatedDataError) as exc_info:
        reader.read_string("mod name")
    assert exc_info.value.meaning == "mod name"
    assert exc_info.value.expected == 7
    assert exc_info.value.received == 5


def test_read_string_invalid_utf8_is_replaced():
    reader = TmodBinaryReader(BytesIO(write_7bit_int(2) + b"\xff\xfe"))
    assert reader.read_string() == "\ufffd\ufffd"


@pytest.mark.parametrize("value", [0, 1, -1, 13, 0x7FFFFFFF, -0x80000000])
def test_read_int32(value: int):
    reader = TmodBinaryReader(BytesIO(write_int32(value)))
    assert reader.read_int32() == value


def test_read_int32_truncated():
    reader = TmodBinaryReader(BytesIO(b"\x01\x02"))
    with pytest.raises(TruncatedDataError):
        reader.read_int32("file count")


def test_read_bytes_exact():
    reader = TmodBinaryReader(BytesIO(b"abcdef"))
    assert reader.read_bytes(4) == b"abcd"
    assert reader.bytes_remaining() == 2
    with pytest.raises(TruncatedDataError):
        reader.read_bytes(3)


class _TrickleStream(BytesIO):
    def read(self, size=-1):
        return super().read(min(size, 1) if size and size > 0 else size)


def test_read_bytes_handles_short_reads():
    reader = TmodBinaryReader(_TrickleStream(b"TMOD"))
    assert reader.read_bytes(4) == b"TMOD"


@pytest.mark.parametrize("data", [b"TMOX", b"TMO", b"", b"tmod"])
def test_expect_magic_mismatch(data: bytes):
    reader = TmodBinaryReader(BytesIO(data))
    with pytest.raises(MagicMismatchError):
        reader.expect_magic(b"TMOD")


def test_name():
    stream = BytesIO()
    assert TmodBinaryReader(stream).name is None
    stream.name = "archive.tmod"
    assert TmodBinaryReader(stream).name == "archive.tmod"
