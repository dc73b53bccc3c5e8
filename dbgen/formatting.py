"""Serialization of generated values into SQL and CSV output."""

from __future__ import annotations

import abc
import datetime
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import BinaryIO, Iterator, Sequence, Tuple, Union

from dbgen.bytestring import ByteString, Encoding

_I64_MIN = -(2**63)


@dataclass(frozen=True)
class Escape:
    """Replace the matched byte by ``replacement``."""

    replacement: bytes


@dataclass(frozen=True)
class Unescape:
    """Collapse a doubled ``byte`` into a single one."""

    byte: int


EscapeRule = Union[Escape, Unescape]


@dataclass(frozen=True)
class Interval:
    """A time interval measured in microseconds."""

    microseconds: int


@dataclass(frozen=True)
class Schema:
    """Schema information of a table: its name, definition and column spans."""

    name: str
    content: str
    column_name_ranges: Sequence[Tuple[int, int]] = field(default_factory=tuple)

    def column_names(self) -> Iterator[str]:
        """Yields the column names as they appear in ``content``."""
        for start, end in self.column_name_ranges:
            yield self.content[start:end]


def _write(writer: BinaryIO, text: str) -> None:
    writer.write(text.encode("utf-8"))


def write_with_escape(
    writer: BinaryIO, data: bytes, rules: Sequence[Tuple[int, EscapeRule]]
) -> None:
    """Writes ``data`` with every byte named in ``rules`` escaped by its rule."""
    data = bytes(data)
    lookup: dict[int, EscapeRule] = {}
    for byte, rule in rules:
        lookup.setdefault(byte, rule)
    if not lookup:
        writer.write(data)
        return

    pattern = re.compile(
        b"[" + b"".join(re.escape(bytes([b])) for b in lookup) + b"]"
    )
    prev_end = 0
    prev_byte = 0
    unescape_ready = False
    for match in pattern.finditer(data):
        cur = match.start()
        cur_byte = data[cur]
        writer.write(data[prev_end:cur])
        rule = lookup[cur_byte]
        if isinstance(rule, Escape):
            unescape_ready = False
            writer.write(rule.replacement)
        elif unescape_ready and rule.byte == prev_byte and cur == prev_end:
            unescape_ready = False
        else:
            unescape_ready = True
            writer.write(bytes([rule.byte]))
        prev_end = cur + 1
        prev_byte = cur_byte
    writer.write(data[prev_end:])


def write_timestamp(writer: BinaryIO, quote: str, timestamp: datetime.datetime) -> None:
    """Writes a timestamp as ``YYYY-mm-dd HH:MM:SS[.ffffff]`` in its own zone."""
    text = (
        f"{quote}{timestamp.year:04}-{timestamp.month:02}-{timestamp.day:02} "
        f"{timestamp.hour:02}:{timestamp.minute:02}:{timestamp.second:02}"
    )
    if timestamp.microsecond:
        text += f".{timestamp.microsecond:06}"
    _write(writer, text + quote)


def _interval_microseconds(interval: Union[int, Interval, datetime.timedelta]) -> int:
    if isinstance(interval, Interval):
        return interval.microseconds
    if isinstance(interval, datetime.timedelta):
        return (interval.days * 86_400 + interval.seconds) * 1_000_000 + interval.microseconds
    return int(interval)


def write_interval(
    writer: BinaryIO, quote: str, interval: Union[int, Interval, datetime.timedelta]
) -> None:
    """Writes a time interval (in microseconds) in the standard SQL format."""
    micros = _interval_microseconds(interval)
    if micros == _I64_MIN:
        _write(writer, f"{quote}-106751991 04:00:54.775808{quote}")
        return

    parts = [quote]
    if micros < 0:
        micros = -micros
        parts.append("-")
    seconds, microseconds = divmod(micros, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    if days > 0:
        parts.append(f"{days} ")
    parts.append(f"{hours:02}:{minutes:02}:{seconds:02}")
    if microseconds > 0:
        parts.append(f".{microseconds:06}")
    parts.append(quote)
    _write(writer, "".join(parts))


def _format_float(value: float) -> str:
    text = repr(value)
    if text.endswith(".0"):
        return text[:-2]
    if "e" in text:
        return format(Decimal(text), "f")
    return text


def _write_number(
    writer: BinaryIO, value: Union[bool, int, float], true_string: str, false_string: str
) -> None:
    if isinstance(value, bool):
        _write(writer, true_string if value else false_string)
    elif isinstance(value, int):
        _write(writer, str(value))
    else:
        _write(writer, _format_float(value))


def _as_byte_string(value: Union[str, bytes, bytearray, ByteString]) -> ByteString:
    return value if isinstance(value, ByteString) else ByteString(value)


def _is_bytes(value: object) -> bool:
    return isinstance(value, (str, bytes, bytearray, ByteString))


def _is_interval(value: object) -> bool:
    return isinstance(value, (Interval, datetime.timedelta))


@dataclass
class Options:
    """Options shared by all formatters."""

    escape_backslash: bool = False
    headers: bool = False
    true_string: str = "1"
    false_string: str = "0"
    null_string: str = "NULL"

    def _write_sql_bytes(self, writer: BinaryIO, value: ByteString) -> None:
        if value.encoding() == Encoding.BINARY:
            writer.write(b"X'")
            writer.write(bytes(value).hex().upper().encode("ascii"))
        else:
            writer.write(b"'")
            if self.escape_backslash:
                rules = [
                    (ord("'"), Escape(b"''")),
                    (ord("\\"), Escape(b"\\\\")),
                    (0, Escape(b"\\0")),
                ]
            else:
                rules = [(ord("'"), Escape(b"''"))]
            write_with_escape(writer, bytes(value), rules)
        writer.write(b"'")

    def write_sql_value(self, writer: BinaryIO, value: object) -> None:
        """Writes a value as an SQL literal."""
        if value is None:
            _write(writer, self.null_string)
        elif isinstance(value, (bool, int, float)):
            _write_number(writer, value, self.true_string, self.false_string)
        elif _is_bytes(value):
            self._write_sql_bytes(writer, _as_byte_string(value))  # type: ignore[arg-type]
        elif isinstance(value, datetime.datetime):
            write_timestamp(writer, "'", value)
        elif _is_interval(value):
            write_interval(writer, "'", value)  # type: ignore[arg-type]
        elif isinstance(value, (list, tuple)):
            writer.write(b"ARRAY[")
            for index, item in enumerate(value):
                if index:
                    writer.write(b", ")
                self.write_sql_value(writer, item)
            writer.write(b"]")
        else:
            raise TypeError(f"cannot format value of type {type(value).__name__}")


class Format(abc.ABC):
    """How to serialize rows of values into an output stream."""

    def __init__(self, options: Options) -> None:
        self.options = options

    @abc.abstractmethod
    def write_value(self, writer: BinaryIO, value: object) -> None:
        """Writes a single value."""

    @abc.abstractmethod
    def write_file_header(self, writer: BinaryIO, schema: Schema) -> None:
        """Writes the content at the beginning of each file."""

    @abc.abstractmethod
    def write_header(self, writer: BinaryIO, schema: Schema) -> None:
        """Writes the content of an INSERT statement before all rows."""

    @abc.abstractmethod
    def write_value_header(self, writer: BinaryIO, column: str) -> None:
        """Writes the column name before a value."""

    @abc.abstractmethod
    def write_value_separator(self, writer: BinaryIO) -> None:
        """Writes the separator between values."""

    @abc.abstractmethod
    def write_row_separator(self, writer: BinaryIO) -> None:
        """Writes the separator between rows."""

    @abc.abstractmethod
    def write_trailer(self, writer: BinaryIO) -> None:
        """Writes the content of an INSERT statement after all rows."""


class SqlFormat(Format):
    """SQL ``INSERT INTO … VALUES`` output."""

    def write_value(self, writer: BinaryIO, value: object) -> None:
        self.options.write_sql_value(writer, value)

    def write_file_header(self, writer: BinaryIO, schema: Schema) -> None:
        pass

    def write_header(self, writer: BinaryIO, schema: Schema) -> None:
        _write(writer, f"INSERT INTO {schema.name} ")
        if self.options.headers:
            _write(writer, "(" + ", ".join(schema.column_names()) + ") ")
        writer.write(b"VALUES\n(")

    def write_value_header(self, writer: BinaryIO, column: str) -> None:
        pass

    def write_value_separator(self, writer: BinaryIO) -> None:
        writer.write(b", ")

    def write_row_separator(self, writer: BinaryIO) -> None:
        writer.write(b"),\n(")

    def write_trailer(self, writer: BinaryIO) -> None:
        writer.write(b");\n")


class SqlInsertSetFormat(Format):
    """SQL ``INSERT INTO … SET`` output, one statement per row."""

    def write_value(self, writer: BinaryIO, value: object) -> None:
        self.options.write_sql_value(writer, value)

    def write_file_header(self, writer: BinaryIO, schema: Schema) -> None:
        pass

    def write_header(self, writer: BinaryIO, schema: Schema) -> None:
        _write(writer, f"INSERT INTO {schema.name} SET\n")

    def write_value_header(self, writer: BinaryIO, column: str) -> None:
        _write(writer, f"{column} = ")

    def write_value_separator(self, writer: BinaryIO) -> None:
        writer.write(b",\n")

    def write_row_separator(self, writer: BinaryIO) -> None:
        writer.write(b";\n\n")

    def write_trailer(self, writer: BinaryIO) -> None:
        writer.write(b";\n\n")


class CsvFormat(Format):
    """Comma-separated values output."""

    def _write_bytes(self, writer: BinaryIO, value: ByteString) -> None:
        writer.write(b'"')
        rules: list[Tuple[int, EscapeRule]] = [(ord('"'), Escape(b'""'))]
        if self.options.escape_backslash:
            rules.append((ord("\\"), Escape(b"\\\\")))
        write_with_escape(writer, bytes(value), rules)
        writer.write(b'"')

    def _write_column_name(self, writer: BinaryIO, name: str) -> None:
        raw = name.encode("utf-8")
        writer.write(b'"')
        rules: list[Tuple[int, EscapeRule]] = []
        first = raw[:1]
        if first == b'"':
            raw = raw[1:-1]
        elif first == b"`":
            rules = [(ord("`"), Unescape(ord("`"))), (ord('"'), Escape(b'""'))]
            raw = raw[1:-1]
        elif first == b"[":
            rules = [(ord('"'), Escape(b'""'))]
            raw = raw[1:-1]
        if self.options.escape_backslash:
            rules.append((ord("\\"), Escape(b"\\\\")))
        write_with_escape(writer, raw, rules)
        writer.write(b'"')

    def write_value(self, writer: BinaryIO, value: object) -> None:
        if value is None:
            _write(writer, self.options.null_string)
        elif isinstance(value, (bool, int, float)):
            _write_number(writer, value, self.options.true_string, self.options.false_string)
        elif _is_bytes(value):
            self._write_bytes(writer, _as_byte_string(value))  # type: ignore[arg-type]
        elif isinstance(value, datetime.datetime):
            write_timestamp(writer, "", value)
        elif _is_interval(value):
            write_interval(writer, "", value)  # type: ignore[arg-type]
        elif isinstance(value, (list, tuple)):
            writer.write(b"{")
            for index, item in enumerate(value):
                if index:
                    writer.write(b",")
                self.write_value(writer, item)
            writer.write(b"}")
        else:
            raise TypeError(f"cannot format value of type {type(value).__name__}")

    def write_file_header(self, writer: BinaryIO, schema: Schema) -> None:
        if not self.options.headers:
            return
        for index, column in enumerate(schema.column_names()):
            if index:
                self.write_value_separator(writer)
            self._write_column_name(writer, column)
        self.write_row_separator(writer)

    def write_header(self, writer: BinaryIO, schema: Schema) -> None:
        pass

    def write_value_header(self, writer: BinaryIO, column: str) -> None:
        pass

    def write_value_separator(self, writer: BinaryIO) -> None:
        writer.write(b",")

    def write_row_separator(self, writer: BinaryIO) -> None:
        writer.write(b"\n")

    def write_trailer(self, writer: BinaryIO) -> None:
        writer.write(b"\n")