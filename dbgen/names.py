"""Named choices accepted on the command line: seeds, RNGs, formats, compression, components."""

from __future__ import annotations

import enum
import gzip
import lzma
import os
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterable

import zstandard

from dbgen.errors import UnsupportedCliParameterError
from dbgen.formatting import CsvFormat, Format, Options, SqlFormat, SqlInsertSetFormat

SEED_LENGTH = 32
_SEED_PATTERN = re.compile(r"[0-9a-fA-F]*")


@dataclass(frozen=True)
class Seed:
    """A 32-byte random number generator seed, written as 64 hex digits."""

    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != SEED_LENGTH:
            raise ValueError(f"seed must be {SEED_LENGTH} bytes long, got {len(self.data)}")

    @classmethod
    def parse(cls, text: str) -> "Seed":
        """Parses a 64-digit hex string (either case) into a seed."""
        if len(text) != SEED_LENGTH * 2:
            raise ValueError(f"invalid seed length at position {len(text)}")
        if not _SEED_PATTERN.fullmatch(text):
            position = next(
                index for index, ch in enumerate(text) if ch not in "0123456789abcdefABCDEF"
            )
            raise ValueError(f"invalid hex symbol at position {position}")
        return cls(bytes.fromhex(text))

    @classmethod
    def random(cls) -> "Seed":
        """Creates a seed from the operating system's random source."""
        return cls(os.urandom(SEED_LENGTH))

    def __str__(self) -> str:
        return self.data.hex()


def _unsupported(kind: str, name: str) -> UnsupportedCliParameterError:
    return UnsupportedCliParameterError(kind, name)


class RngName(str, enum.Enum):
    """Random number generator engines."""

    CHACHA12 = "chacha12"
    CHACHA20 = "chacha20"
    HC128 = "hc128"
    ISAAC = "isaac"
    ISAAC64 = "isaac64"
    XORSHIFT = "xorshift"
    PCG32 = "pcg32"
    STEP = "step"

    @classmethod
    def parse(cls, name: str) -> "RngName":
        if name == "chacha":
            return cls.CHACHA20
        try:
            return cls(name)
        except ValueError:
            raise _unsupported("RNG", name) from None

    def __str__(self) -> str:
        return self.value


class FormatName(str, enum.Enum):
    """Output formats."""

    SQL = "sql"
    CSV = "csv"
    SQL_INSERT_SET = "sql-insert-set"

    @classmethod
    def parse(cls, name: str) -> "FormatName":
        try:
            return cls(name)
        except ValueError:
            raise _unsupported("output format", name) from None

    def extension(self) -> str:
        """The file extension used for this format."""
        return "csv" if self is FormatName.CSV else "sql"

    def create(self, options: Options) -> Format:
        """Creates the formatter for this format."""
        if self is FormatName.CSV:
            return CsvFormat(options)
        if self is FormatName.SQL_INSERT_SET:
            return SqlInsertSetFormat(options)
        return SqlFormat(options)

    def default_true_string(self) -> str:
        return "1"

    def default_false_string(self) -> str:
        return "0"

    def default_null_string(self) -> str:
        return "\\N" if self is FormatName.CSV else "NULL"

    def __str__(self) -> str:
        return self.value


class CompressionName(str, enum.Enum):
    """Compression formats for data files."""

    GZIP = "gzip"
    XZ = "xz"
    ZSTD = "zstd"

    @classmethod
    def parse(cls, name: str) -> "CompressionName":
        aliases = {"gz": cls.GZIP, "zst": cls.ZSTD}
        if name in aliases:
            return aliases[name]
        try:
            return cls(name)
        except ValueError:
            raise _unsupported("compression format", name) from None

    def extension(self) -> str:
        """The file extension used for this compression."""
        return {"gzip": "gz", "xz": "xz", "zstd": "zst"}[self.value]

    def wrap(self, inner: BinaryIO, level: int) -> BinaryIO:
        """Wraps a binary writer with a compressing layer.

        Closing the returned writer finishes the compressed stream but leaves
        ``inner`` open.
        """
        if self is CompressionName.GZIP:
            return gzip.GzipFile(fileobj=inner, mode="wb", compresslevel=level)  # type: ignore[return-value]
        if self is CompressionName.XZ:
            return lzma.LZMAFile(inner, mode="wb", preset=level)  # type: ignore[return-value]
        compressor = zstandard.ZstdCompressor(level=level)
        return compressor.stream_writer(inner, closefd=False)  # type: ignore[return-value]

    def __str__(self) -> str:
        return self.value


class ComponentName(enum.IntEnum):
    """Components which can be produced, as bits of a mask."""

    SCHEMA = 1
    TABLE = 2
    DATA = 4

    @property
    def label(self) -> str:
        """The name used on the command line."""
        return self.name.lower()

    @classmethod
    def parse(cls, name: str) -> "ComponentName":
        for member in cls:
            if member.label == name:
                return member
        raise _unsupported("component", name)

    @classmethod
    def union_all(cls, components: Iterable["ComponentName"]) -> int:
        """Combines components into a bit mask."""
        mask = 0
        for component in components:
            mask |= int(component)
        return mask

    def remove_from(self, mask: int) -> int:
        """Returns ``mask`` without this component."""
        return mask & ~int(self)

    def is_in(self, mask: int) -> bool:
        return bool(mask & int(self))

    def __str__(self) -> str:
        return self.label