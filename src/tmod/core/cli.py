from __future__ import annotations

import dataclasses
import json
import os.path
from argparse import ArgumentParser, Namespace
from json import JSONEncoder
from logging import Logger
from typing import Optional, Any, Dict

from fs import open_fs
from fs.base import FS
from fs.copy import copy_fs
from relic.core.cli import CliPluginGroup, _SubParsersAction, CliPlugin, RelicArgParser
from relic.core.cli import get_file_type_validator, get_dir_type_validator
from relic.core.logmsg import BraceMessage

from tmod.core.definitions import Version
from tmod.core.errors import TmodError
from tmod.core.filesystem import TmodFS
from tmod.core.tmodfile import TmodFile

_SUCCESS = 0
_FAILURE = 1


class RelicTmodCli(CliPluginGroup):
    GROUP = "relic.cli.tmod"

    def _create_parser(
        self, command_group: Optional[_SubParsersAction] = None
    ) -> ArgumentParser:
        name = "tmod"
        if command_group is None:
            return RelicArgParser(name)
        return command_group.add_parser(name)


class RelicTmodUnpackCli(CliPlugin):
    def _create_parser(
        self, command_group: Optional[_SubParsersAction] = None
    ) -> ArgumentParser:
        parser: ArgumentParser
        desc = "Unpack every file in a TMOD archive to a directory."
        if command_group is None:
            parser = RelicArgParser("unpack", description=desc)
        else:
            parser = command_group.add_parser("unpack", description=desc)

        parser.add_argument(
            "src_tmod",
            type=get_file_type_validator(exists=True),
            help="Source TMOD File",
        )
        parser.add_argument(
            "out_dir",
            type=get_dir_type_validator(exists=False),
            help="Output Directory",
        )
        return parser

    def command(self, ns: Namespace, *, logger: Logger) -> Optional[int]:
        infile: str = ns.src_tmod
        outdir: str = ns.out_dir

        logger.info(BraceMessage("Unpacking `{0}`", infile))

        def _callback(_1: FS, srcfile: str, _2: FS, dstfile: str) -> None:
            logger.info(
                BraceMessage("\t\tUnpacking File `{0}`\n\t\tWrote to `{1}`", srcfile, dstfile)
            )

        try:
            tmod = TmodFile.open(infile)
        except TmodError as e:
            logger.error(BraceMessage("Could not open `{0}`: {1}", infile, e))
            return _FAILURE

        with tmod, TmodFS(tmod) as tmod_fs:
            with open_fs(outdir, writeable=True, create=True) as osfs:
                copy_fs(tmod_fs, osfs, on_copy=_callback)

        return _SUCCESS


class TmodInfoEncoder(JSONEncoder):
    def default(self, o: Any) -> Any:
        if isinstance(o, Version):
            return str(o)
        if isinstance(o, (bytes, bytearray)):
            return o.hex()
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)  # type: ignore
        return super().default(o)


def _info_dict(tmod: TmodFile) -> Dict[str, Any]:
    header = tmod.header
    return {
        "name": header.name,
        "version": header.version,
        "tml_version": header.tml_version,
        "sha1_hash": header.sha1_hash,
        "hash_valid": tmod.verify_hash(),
        "signature": header.signature,
        "files": [
            {**dataclasses.asdict(entry), "stored": entry.is_stored}
            for entry in tmod.entries()
        ],
    }


class RelicTmodInfoCli(CliPlugin):
    _JSON_MINIFY_KWARGS: Dict[str, Any] = {"separators": (",", ":"), "indent": None}
    _JSON_MAXIFY_KWARGS: Dict[str, Any] = {"separators": (", ", ": "), "indent": 4}

    def _create_parser(
        self, command_group: Optional[_SubParsersAction] = None
    ) -> ArgumentParser:
        parser: ArgumentParser
        desc = """Reads a TMOD archive and writes its header and file table as json.
            If out_json is omitted, the json is logged instead.
            If out_json is a directory; the name of the file will be '[name of tmod].json'
        """
        if command_group is None:
            parser = RelicArgParser("info", description=desc)
        else:
            parser = command_group.add_parser("info", description=desc)

        parser.add_argument(
            "src_tmod",
            type=get_file_type_validator(exists=True),
            help="Source TMOD File",
        )
        parser.add_argument(
            "out_json",
            nargs="?",
            default=None,
            help="Output File or Directory",
        )
        parser.add_argument(
            "-m",
            "--minify",
            action="store_true",
            default=False,
            help="Minifies the resulting json by stripping whitespace, newlines, and indentations.",
        )
        return parser

    def command(self, ns: Namespace, *, logger: Logger) -> Optional[int]:
        infile: str = ns.src_tmod
        outjson: Optional[str] = ns.out_json
        minify: bool = ns.minify

        logger.info(BraceMessage("Reading Info `{0}`", infile))

        try:
            tmod = TmodFile.open(infile)
        except TmodError as e:
            logger.error(BraceMessage("Could not open `{0}`: {1}", infile, e))
            return _FAILURE

        with tmod:
            info = _info_dict(tmod)

        json_kwargs: Dict[str, Any] = (
            self._JSON_MINIFY_KWARGS if minify else self._JSON_MAXIFY_KWARGS
        )
        if outjson is None:
            logger.info(json.dumps(info, cls=TmodInfoEncoder, **json_kwargs))
            return _SUCCESS

        outjson_dir, outjson_file = os.path.split(outjson)
        if len(outjson_file) == 0 or os.path.isdir(outjson):
            outjson_dir = outjson
            outjson_file = os.path.splitext(os.path.basename(infile))[0] + ".json"

        if outjson_dir:
            os.makedirs(outjson_dir, exist_ok=True)
        outjson = os.path.join(outjson_dir, outjson_file)

        with open(outjson, "w", encoding="utf-8") as info_h:
            json.dump(info, info_h, cls=TmodInfoEncoder, **json_kwargs)

        return _SUCCESS


class RelicTmodAssemblyCli(CliPlugin):
    def _create_parser(
        self, command_group: Optional[_SubParsersAction] = None
    ) -> ArgumentParser:
        parser: ArgumentParser
        desc = "Extracts the main assembly ('[mod name].dll') of a TMOD archive."
        if command_group is None:
            parser = RelicArgParser("assembly", description=desc)
        else:
            parser = command_group.add_parser("assembly", description=desc)

        parser.add_argument(
            "src_tmod",
            type=get_file_type_validator(exists=True),
            help="Source TMOD File",
        )
        parser.add_argument(
            "out_dir",
            type=get_dir_type_validator(exists=False),
            help="Output Directory",
        )
        return parser

    def command(self, ns: Namespace, *, logger: Logger) -> Optional[int]:
        infile: str = ns.src_tmod
        outdir: str = ns.out_dir

        try:
            with TmodFile.open(infile) as tmod:
                filename = tmod.assembly_name
                data = tmod.extract_assembly()
        except TmodError as e:
            logger.error(BraceMessage("Could not extract assembly from `{0}`: {1}", infile, e))
            return _FAILURE

        os.makedirs(outdir, exist_ok=True)
        outfile = os.path.join(outdir, filename)
        with open(outfile, "wb") as h:
            h.write(data)

        logger.info(BraceMessage("Wrote `{0}` ({1} bytes)", outfile, len(data)))
        return _SUCCESS
