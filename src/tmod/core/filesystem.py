"""A read-only PyFilesystem2 view over a TMOD archive."""

from __future__ import annotations

import logging
import os
from io import BytesIO
from os.path import expanduser
from typing import Any, BinaryIO, Collection, Dict, List, Mapping, Optional

import fs.opener.errors
from fs import ResourceType, errors
from fs.base import FS
from fs.info import Info
from fs.mode import Mode
from fs.opener import Opener
from fs.opener.parse import ParseResult
from fs.path import abspath, basename, dirname, normpath, recursepath
from relic.core.logmsg import BraceMessage

from tmod.core.definitions import FileEntry
from tmod.core.tmodfile import TmodFile

TMOD_NAMESPACE = "tmod"

logger = logging.getLogger(__name__)


def _entry_path(name: str) -> str:
    return abspath(normpath(name.replace("\\", "/")))


class TmodFS(FS):
    """
    Exposes the entries of an open `TmodFile` as a read-only filesystem.

    Directories are implied by `/` separators in entry names.
    The filesystem takes ownership of the archive and closes it on `close`.
    """

    _meta = {
        "case_insensitive": False,
        "invalid_path_chars": "\0",
        "max_path_length": None,
        "max_sys_path_length": None,
        "network": False,
        "read_only": True,
        "supports_rename": False,
        "thread_safe": True,
        "unicode_paths": True,
        "virtual": False,
    }

    def __init__(self, tmod: TmodFile):
        super().__init__()
        self._tmod = tmod
        self._files: Dict[str, FileEntry] = {}
        self._dirs: Dict[str, List[str]] = {"/": []}
        try:
            for entry in tmod.entries():
                self._add_entry(entry)
        except BaseException:
            tmod.close()
            raise

    def _add_entry(self, entry: FileEntry) -> None:
        """Indexes an entry; names that escape the root or clash with an indexed path are skipped."""
        try:
            path = _entry_path(entry.name)
        except errors.IllegalBackReference:
            logger.warning(
                BraceMessage("Skipping entry `{0}`; it points outside the archive", entry.name)
            )
            return

        parents = recursepath(dirname(path))
        if (
            path in self._files
            or path in self._dirs
            or any(parent in self._files for parent in parents)
        ):
            logger.warning(
                BraceMessage(
                    "Skipping entry `{0}`; `{1}` clashes with another entry", entry.name, path
                )
            )
            return

        for parent in parents:
            if parent not in self._dirs:
                self._dirs[parent] = []
                self._dirs[dirname(parent)].append(basename(parent))
        self._files[path] = entry
        self._dirs[dirname(path)].append(basename(path))

    @property
    def tmod(self) -> TmodFile:
        return self._tmod

    def getmeta(self, namespace: str = "standard") -> Mapping[str, object]:
        if namespace == TMOD_NAMESPACE:
            header = self._tmod.header
            return {
                "name": header.name,
                "version": str(header.version),
                "tml_version": header.tml_version,
                "sha1_hash": header.sha1_hash.hex(),
            }
        return super().getmeta(namespace)

    def getinfo(self, path: str, namespaces: Optional[Collection[str]] = None) -> Info:
        namespaces = namespaces or ()
        _path = self.validatepath(path)
        with self._lock:
            if _path in self._dirs:
                raw_info: Dict[str, Any] = {
                    "basic": {"name": basename(_path), "is_dir": True}
                }
                if "details" in namespaces:
                    raw_info["details"] = {
                        "size": 0,
                        "type": int(ResourceType.directory),
                    }
                return Info(raw_info)

            entry = self._files.get(_path)
            if entry is None:
                raise errors.ResourceNotFound(path)
            raw_info = {"basic": {"name": basename(_path), "is_dir": False}}
            if "details" in namespaces:
                raw_info["details"] = {
                    "size": entry.length,
                    "type": int(ResourceType.file),
                }
            if TMOD_NAMESPACE in namespaces:
                raw_info[TMOD_NAMESPACE] = {
                    "offset": entry.offset,
                    "size": entry.length,
                    "compressed_size": entry.compressed_length,
                    "stored": entry.is_stored,
                }
            return Info(raw_info)

    def listdir(self, path: str) -> List[str]:
        _path = self.validatepath(path)
        with self._lock:
            if _path in self._files:
                raise errors.DirectoryExpected(path)
            children = self._dirs.get(_path)
            if children is None:
                raise errors.ResourceNotFound(path)
            return list(children)

    def openbin(
        self, path: str, mode: str = "r", buffering: int = -1, **options: Any
    ) -> BinaryIO:
        _mode = Mode(mode)
        _mode.validate_bin()
        _path = self.validatepath(path)
        if _mode.writing:
            raise errors.ResourceReadOnly(path)
        with self._lock:
            if _path in self._dirs:
                raise errors.FileExpected(path)
            entry = self._files.get(_path)
            if entry is None:
                raise errors.ResourceNotFound(path)
            return BytesIO(self._tmod.extract(entry.name))

    def makedir(self, path, permissions=None, recreate=False):
        raise errors.ResourceReadOnly(path)

    def remove(self, path):
        raise errors.ResourceReadOnly(path)

    def removedir(self, path):
        raise errors.ResourceReadOnly(path)

    def setinfo(self, path, info):
        raise errors.ResourceReadOnly(path)

    def close(self) -> None:
        if not self.isclosed():
            self._tmod.close()
        super().close()

    def __repr__(self) -> str:
        return f"TmodFS({self._tmod.path or self._tmod.name!r})"


class TmodFsOpener(Opener):
    protocols = ["tmod"]

    def open_fs(
        self,
        fs_url: str,
        parse_result: ParseResult,
        writeable: bool,
        create: bool,
        cwd: str,
    ) -> FS:
        if create:
            raise fs.opener.errors.OpenerError("TMOD archives cannot be created!")
        if fs_url == "tmod://":
            raise fs.opener.errors.OpenerError("No path was given!")

        _path = os.path.abspath(os.path.join(cwd, expanduser(parse_result.resource)))
        path = os.path.normpath(_path)
        return TmodFS(TmodFile.open(path))


__all__ = ["TMOD_NAMESPACE", "TmodFS", "TmodFsOpener"]
