"""Byte buffer that frames messages for a connection."""

from __future__ import annotations

import enum
import struct
from typing import Optional

_LENGTH = struct.Struct("!I")


class Separator(enum.IntEnum):
    """How messages are delimited inside a buffer."""

    NONE = 0
    LENGTH_PREFIX = 1
    CRLF = 2


class Buffer:
    """Accumulates bytes and splits them into messages."""

    def __init__(self, separator: Separator = Separator.CRLF) -> None:
        self.separator = Separator(separator)
        self._data = bytearray()

    def append(self, data: bytes) -> None:
        """Append raw bytes."""
        self._data += data

    def append_with_head(self, data: bytes) -> None:
        """Append a message with the framing this buffer's separator needs.

        For ``CRLF`` framing nothing is written.
        """
        if self.separator is Separator.NONE:
            self._data += data
        elif self.separator is Separator.LENGTH_PREFIX:
            self._data += _LENGTH.pack(len(data))
            self._data += data

    def erase(self, pos: int, length: int) -> None:
        """Remove ``length`` bytes starting at ``pos``."""
        self._data[pos:pos + length] = b""

    def data(self) -> bytes:
        """Return a copy of the buffered bytes."""
        return bytes(self._data)

    def clear(self) -> None:
        """Drop all buffered bytes."""
        self._data.clear()

    def get_message(self) -> Optional[bytes]:
        """Take the next complete message, or return None if there is none yet."""
        if not self._data:
            return None
        if self.separator is Separator.LENGTH_PREFIX:
            if len(self._data) < _LENGTH.size:
                return None
            (length,) = _LENGTH.unpack_from(self._data)
            end = _LENGTH.size + length
            if len(self._data) < end:
                return None
            message = bytes(self._data[_LENGTH.size:end])
            del self._data[:end]
            return message
        message = bytes(self._data)
        self._data.clear()
        return message

    def __len__(self) -> int:
        return len(self._data)