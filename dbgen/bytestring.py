"""A byte string which tracks whether its content is ASCII or UTF-8."""

from __future__ import annotations

import enum
import functools
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class Encoding(enum.IntEnum):
    """The narrowest encoding describing a byte string, ordered narrow to wide."""

    ASCII = 0
    UTF8 = 1
    BINARY = 2


class TryIntoStringError(ValueError):
    """Raised when a byte string is not valid UTF-8 and cannot become a ``str``."""

    def __init__(self, byte_string: "ByteString") -> None:
        super().__init__("byte string is not valid UTF-8")
        self.byte_string = byte_string


def _is_leading_byte(b: int) -> bool:
    """Whether the byte starts a UTF-8 sequence (``0x00..=0x7F``, ``0xC0..=0xFF``)."""
    return b < 0x80 or b >= 0xC0


def _ascii_len(data: BytesLike, start: int = 0) -> int:
    """Index of the first non-ASCII byte at or after ``start``, or the length."""
    for index in range(start, len(data)):
        if data[index] >= 0x80:
            return index
    return len(data)


def _is_utf8(data: BytesLike) -> bool:
    try:
        bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


@functools.total_ordering
class ByteString:
    """A string which potentially contains invalid UTF-8.

    The prefix ``bytes[:ascii_len]`` is always pure ASCII, and ``is_utf8``
    records whether the whole content decodes as UTF-8.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, data: Union[str, BytesLike, "ByteString"] = b"") -> None:
        if isinstance(data, ByteString):
            self._bytes = bytearray(data._bytes)
            self._ascii_len = data._ascii_len
            self._is_utf8 = data._is_utf8
        elif isinstance(data, str):
            self._bytes = bytearray(data.encode("utf-8"))
            self._ascii_len = _ascii_len(self._bytes)
            self._is_utf8 = True
        else:
            self._bytes = bytearray(data)
            self._ascii_len = _ascii_len(self._bytes)
            self._is_utf8 = _is_utf8(self._bytes[self._ascii_len:])

    def __len__(self) -> int:
        return len(self._bytes)

    def __bytes__(self) -> bytes:
        return bytes(self._bytes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteString):
            return NotImplemented
        return self._bytes == other._bytes

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ByteString):
            return NotImplemented
        return self._bytes < other._bytes

    def __repr__(self) -> str:
        return f"ByteString({bytes(self._bytes)!r})"

    @property
    def ascii_len(self) -> int:
        """Length of the leading pure-ASCII prefix."""
        return self._ascii_len

    def encoding(self) -> Encoding:
        """Returns the narrowest encoding of the entire byte string."""
        if len(self._bytes) == self._ascii_len:
            return Encoding.ASCII
        if self._is_utf8:
            return Encoding.UTF8
        return Encoding.BINARY

    def to_str(self) -> str:
        """Decodes the content, raising ``TryIntoStringError`` if it is not UTF-8."""
        if not self._is_utf8:
            raise TryIntoStringError(self)
        return self._bytes.decode("utf-8")

    def char_len(self) -> int:
        """Number of code points; for invalid UTF-8, the number of leading bytes."""
        return self._ascii_len + sum(
            1 for b in self._bytes[self._ascii_len:] if _is_leading_byte(b)
        )

    def copy(self) -> "ByteString":
        return ByteString(self)

    def write(self, data: Union[str, BytesLike]) -> int:
        """Appends text or bytes and returns the number of units written."""
        if isinstance(data, str):
            self.extend_str(data)
        else:
            self.extend_bytes(data)
        return len(data)

    def extend_str(self, s: str) -> None:
        """Appends a string; UTF-8 validity of the whole is unchanged."""
        encoded = s.encode("utf-8")
        if self._ascii_len == len(self._bytes):
            self._ascii_len += _ascii_len(encoded)
        self._bytes.extend(encoded)

    def extend_number(self, n: object) -> None:
        """Formats a number as a string and appends it."""
        self.extend_str(str(n))

    def extend_bytes(self, b: BytesLike) -> None:
        """Appends raw bytes."""
        if self._ascii_len == len(self._bytes):
            self._ascii_len += _ascii_len(b)
        self._bytes.extend(b)
        self._is_utf8 = _is_utf8(self._bytes[self._ascii_len:])

    def extend_byte_string(self, other: "ByteString") -> None:
        """Appends another byte string."""
        if self._ascii_len == len(self._bytes):
            self._ascii_len += other._ascii_len
        self._bytes.extend(other._bytes)
        if self._is_utf8 and other._is_utf8:
            self._is_utf8 = True
        elif self._is_utf8 or other._is_utf8:
            self._is_utf8 = False
        else:
            self._is_utf8 = _is_utf8(self._bytes[self._ascii_len:])

    def clear(self) -> None:
        self._bytes.clear()
        self._ascii_len = 0
        self._is_utf8 = True

    def truncate(self, length: int) -> None:
        """Shortens the byte string to ``length`` bytes; longer lengths are ignored."""
        if length >= len(self._bytes):
            return
        if length <= 0:
            self.clear()
            return
        if length <= self._ascii_len:
            self._ascii_len = length
            self._is_utf8 = True
        elif self._is_utf8:
            self._is_utf8 = _is_leading_byte(self._bytes[length])
        else:
            self._is_utf8 = _is_utf8(self._bytes[:length])
        del self._bytes[length:]

    def drain_init(self, length: int) -> None:
        """Drops the first ``length`` bytes."""
        if length <= 0:
            return
        if length >= len(self._bytes):
            self.clear()
            return
        del self._bytes[:length]
        if length < self._ascii_len:
            self._ascii_len -= length
        else:
            if self._is_utf8:
                self._is_utf8 = _is_leading_byte(self._bytes[0])
            else:
                self._is_utf8 = _is_utf8(self._bytes)
            self._ascii_len = _ascii_len(self._bytes)

    def clamp_range(self, start: int, end: int) -> tuple[int, int]:
        """Clamps a byte range by the length."""
        size = len(self._bytes)
        return min(start, size), min(end, size)

    def char_range(self, start: int, end: int) -> tuple[int, int]:
        """Translates a range of characters into a range of bytes.

        Ends beyond the content are clamped to ``len(self)``.
        """
        ascii_len = self._ascii_len
        if end <= ascii_len:
            return start, end

        size = len(self._bytes)
        leads = [
            index
            for index in range(ascii_len, size)
            if _is_leading_byte(self._bytes[index])
        ]

        def nth(k: int) -> int:
            return leads[k] if k < len(leads) else size

        if start >= ascii_len:
            byte_start = nth(start - ascii_len)
            byte_end = nth(end - ascii_len) if end > start else byte_start
        else:
            byte_start = start
            byte_end = nth(end - ascii_len)
        return byte_start, byte_end

    def _is_char_boundary(self, index: int) -> bool:
        if index == 0 or index == len(self._bytes):
            return True
        return _is_leading_byte(self._bytes[index])

    def splice(
        self, start: int, end: int, replacement: Union["ByteString", str, BytesLike]
    ) -> None:
        """Replaces the bytes in ``start:end`` by ``replacement``."""
        if not 0 <= start <= end <= len(self._bytes):
            raise IndexError(
                f"splice range {start}..{end} out of bounds for length {len(self._bytes)}"
            )
        if not isinstance(replacement, ByteString):
            replacement = ByteString(replacement)

        rep_all_ascii = replacement._ascii_len == len(replacement._bytes)
        ascii_into_ascii = end <= self._ascii_len and rep_all_ascii
        utf8_into_utf8 = self._is_utf8 and replacement._is_utf8
        if utf8_into_utf8 and not ascii_into_ascii:
            self._is_utf8 = self._is_char_boundary(start) and self._is_char_boundary(end)

        old_ascii_len = self._ascii_len
        self._bytes[start:end] = replacement._bytes

        if ascii_into_ascii:
            self._ascii_len = old_ascii_len - (end - start) + len(replacement._bytes)
        elif start <= old_ascii_len:
            self._ascii_len = _ascii_len(self._bytes, start)

        if not utf8_into_utf8:
            self._is_utf8 = _is_utf8(self._bytes[self._ascii_len:])