import os
import tempfile


class TempFileHandle:
    def __init__(self):
        with tempfile.NamedTemporaryFile("x", delete=False) as h:
            self._filename = h.name

    @property
    def path(self):
        return self._filename

    def open(self, mode: str):
        return open(self._filename, mode)

    def write(self, data: bytes) -> None:
        with self.open("wb") as h:
            h.write(data)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            os.unlink(self._filename)
        except Exception as e:
            print(e)
