import hashlib
from io import BytesIO
from typing import Optional

import pytest

from tmod.core.errors import HashMismatchError
from tmod.core.hashtools import sha1, validate_hash, verify_hash

_DATA = bytes(range(256)) * 4


@pytest.mark.parametrize("start", [None, 0, 10])
@pytest.mark.parametrize("size", [None, 0, 100])
def test_sha1_region(start: Optional[int], size: Optional[int]):
    buffer = _DATA[start or 0 :]
    if size is not None:
        buffer = buffer[:size]
    expected = hashlib.sha1(buffer).digest()
    with BytesIO(_DATA) as stream:
        assert sha1(start, size).hash(stream) == expected
        stream.seek(0)
        assert sha1(start, size).check(stream, expected)


def test_sha1_validate():
    with BytesIO(_DATA) as stream:
        with pytest.raises(HashMismatchError):
            sha1().validate(stream, b"\0" * 20)


def test_verify_hash_restores_position():
    expected = hashlib.sha1(_DATA[16:]).digest()
    with BytesIO(_DATA) as stream:
        stream.seek(5)
        assert verify_hash(stream, 16, expected)
        assert stream.tell() == 5
        validate_hash(stream, 16, expected)
        assert stream.tell() == 5
        assert not verify_hash(stream, 17, expected)
        with pytest.raises(HashMismatchError):
            validate_hash(stream, 17, expected)
