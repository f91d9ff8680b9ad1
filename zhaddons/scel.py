"""Reader for .scel pinyin dictionaries and a converter to word lists."""

from __future__ import annotations

import getopt
import logging
import struct
import sys
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

_log = logging.getLogger(__name__)

HEADER = b"\x40\x15\x00\x00\x44\x43\x53\x01\x01\x00\x00\x00"
PINYIN_MAGIC = b"\x9d\x01\x00\x00"
DELTBL_MAGIC = b"\x4c\x00\x54\x00\x42\x00\x4c\x00"

DESC_START = 0x130
DESC_LENGTH = 0x338 - 0x130
LDESC_LENGTH = 0x540 - 0x338
NEXT_LENGTH = 0x1540 - 0x540

_MAX_SYMBOLS = 128
_DELTBL_SYMCOUNT = 0x44
_DELTBL_COUNT = 0x45

USAGE = (
    "scel2org - Convert .scel file to libime compatible file (SEE NOTES BELOW)\n"
    "\n"
    "  usage: scel2org [OPTION] [scel file]\n"
    "\n"
    "  -o <file>  specify the output file, if not specified, the output will\n"
    "             be stdout.\n"
    "  -h         display this help.\n"
    "\n"
    "NOTES:\n"
    "   Always check the produced output for errors.\n"
)


class ScelFormatError(ValueError):
    """Raised when a .scel file is malformed."""


class _EndOfInput(Exception):
    """The data ended where the format allows it to end."""


@dataclass(frozen=True)
class ScelEntry:
    """One word with its syllables."""

    text: str
    pinyin: Tuple[str, ...]


@dataclass
class ScelDictionary:
    """Everything read from a .scel file."""

    description: str = ""
    long_description: str = ""
    extra_description: str = ""
    pinyins: List[str] = field(default_factory=list)
    entries: List[ScelEntry] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


def decode_utf16(data: bytes) -> str:
    """Decode little-endian UTF-16 up to the first NUL code unit."""
    if len(data) % 2:
        raise ScelFormatError("Invalid size of string")
    units = len(data) // 2
    end = units
    for i in range(units):
        if data[2 * i] == 0 and data[2 * i + 1] == 0:
            end = i
            break
    try:
        return data[: 2 * end].decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise ScelFormatError(f"Invalid UTF-16 text: {exc}") from exc


def format_entry(entry: ScelEntry) -> str:
    """Render an entry as a tab separated word list line."""
    return f"{entry.text}\t{chr(39).join(entry.pinyin)}\t0"


class _Scanner:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0
        self.maybe_deltbl = False

    def _read(self, size: int, error: Optional[str] = None) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            if error:
                raise ScelFormatError(error)
            raise _EndOfInput()
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _u16(self, error: Optional[str] = None) -> int:
        return struct.unpack("<H", self._read(2, error))[0]

    def header(self) -> Tuple[str, str, str]:
        if self._read(len(HEADER), "Failed to read header") != HEADER:
            raise ScelFormatError("format error.")
        self._pos = DESC_START
        desc = decode_utf16(self._read(DESC_LENGTH, "Failed to read description"))
        ldesc = decode_utf16(
            self._read(LDESC_LENGTH, "Failed to read long description")
        )
        nxt = decode_utf16(self._read(NEXT_LENGTH, "Failed to read next description"))
        return desc, ldesc, nxt

    def pinyins(self) -> List[str]:
        if self._read(len(PINYIN_MAGIC), "Failed to read py") != PINYIN_MAGIC:
            raise ScelFormatError("Invalid pinyin table header")
        result = []
        while True:
            self._u16("failed to read index")
            count = self._u16("failed to read pinyin count")
            py = decode_utf16(self._read(count, "Failed to read py"))
            if py in ("lue", "nue"):
                py = py[:-2] + "ve"
            result.append(py)
            if py == "zuo":
                return result

    def entries(self, pinyins: Sequence[str]) -> Iterator[ScelEntry]:
        while True:
            symcount = self._u16()
            if symcount > _MAX_SYMBOLS:
                _log.error("Error at offset: %d", self._pos)
                return
            count = self._u16("Failed to read count")
            if symcount == _DELTBL_SYMCOUNT and count == _DELTBL_COUNT:
                self.maybe_deltbl = True
                return
            indices = []
            for _ in range(count // 2):
                index = self._u16("Failed to read pyindex")
                if index >= len(pinyins):
                    raise ScelFormatError("Invalid pinyin index")
                indices.append(index)
            syllables = tuple(pinyins[i] for i in indices)
            for _ in range(symcount):
                size = self._u16("Failed to read count")
                text = decode_utf16(self._read(size, "Failed to read text"))
                yield ScelEntry(text, syllables)
                extra = self._u16("failed to read count")
                self._read(extra, "failed to read buf")

    def has_deltbl(self) -> bool:
        chunk = self._data[self._pos:self._pos + len(DELTBL_MAGIC)]
        self._pos += len(chunk)
        return chunk == DELTBL_MAGIC

    def deletions(self) -> Iterator[str]:
        total = self._u16()
        for _ in range(total):
            size = (self._u16() * 2) & 0xFFFF
            yield decode_utf16(self._read(size, "Failed to read text"))


def parse_scel(data: bytes) -> ScelDictionary:
    """Parse the bytes of a .scel file."""
    scanner = _Scanner(data)
    result = ScelDictionary()
    try:
        (
            result.description,
            result.long_description,
            result.extra_description,
        ) = scanner.header()
        result.pinyins = scanner.pinyins()
        for entry in scanner.entries(result.pinyins):
            result.entries.append(entry)
        if scanner.maybe_deltbl and scanner.has_deltbl():
            for word in scanner.deletions():
                result.deleted.append(word)
    except _EndOfInput:
        pass
    return result


def read_scel(path: Union[str, Path]) -> ScelDictionary:
    """Read and parse a .scel file from disk."""
    return parse_scel(Path(path).read_bytes())


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Convert a .scel file to a word list; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, rest = getopt.gnu_getopt(args, "o:hd")
    except getopt.GetoptError:
        sys.stdout.write(USAGE)
        return 1

    output_file = None
    print_del = False
    for opt, value in opts:
        if opt == "-o":
            output_file = value
        elif opt == "-d":
            print_del = True
        else:
            sys.stdout.write(USAGE)
            return 1

    with ExitStack() as stack:
        if output_file is None or output_file == "-":
            out = sys.stdout
        else:
            out = stack.enter_context(
                open(output_file, "w", encoding="utf-8", newline="\n")
            )
        if not rest:
            sys.stdout.write(USAGE)
            return 1
        try:
            data = Path(rest[0]).read_bytes()
        except OSError:
            print(f"Cannot open file: {rest[0]}", file=sys.stderr)
            return 1

        scanner = _Scanner(data)
        try:
            desc, ldesc, nxt = scanner.header()
            print(f"DESC:{desc}", file=sys.stderr)
            print(f"LDESC:{ldesc}", file=sys.stderr)
            print(f"NEXT:{nxt}", file=sys.stderr)
            pinyins = scanner.pinyins()
            for entry in scanner.entries(pinyins):
                out.write(format_entry(entry) + "\n")
            if scanner.maybe_deltbl and scanner.has_deltbl() and print_del:
                for word in scanner.deletions():
                    print(f"DEL:{word}", file=sys.stderr)
        except _EndOfInput:
            return 0
        except ScelFormatError as exc:
            print(exc, file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())