"""Parsing of HTTP request messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

_CRLF = "\r\n"


class HttpParseError(ValueError):
    """Raised when a request message is malformed."""


@dataclass
class HttpRequest:
    """A parsed HTTP request; header names are stored in lower case."""

    method: str = ""
    path: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def header(self, key: str) -> Optional[str]:
        """Return the header stored under exactly ``key``, or None."""
        return self.headers.get(key)


def _split_sections(message: str) -> Tuple[str, str, str]:
    line_end = message.find(_CRLF)
    if line_end == -1:
        raise HttpParseError("request line is not terminated")
    line_end += len(_CRLF)
    head_end = message.find(_CRLF * 2, line_end)
    if head_end == -1:
        raise HttpParseError("header section is not terminated")
    line = message[:line_end]
    head = message[line_end:head_end + len(_CRLF)]
    rest = message[head_end + 2 * len(_CRLF):]
    body = rest + _CRLF if rest else ""
    return line, head, body


def _parse_line(line: str) -> Tuple[str, str]:
    method, sep, rest = line.partition(" ")
    if not sep:
        raise HttpParseError("request line has no method")
    path, sep, version = rest.partition(" ")
    if not sep:
        raise HttpParseError("request line has no path")
    if _CRLF not in version:
        raise HttpParseError("request line has no version")
    return method, path


def _parse_headers(head: str) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for line in head.split(_CRLF)[:-1]:
        key, sep, rest = line.partition(":")
        if not sep:
            raise HttpParseError(f"header line without a colon: {line!r}")
        value = rest.lstrip(" ")
        if not value:
            raise HttpParseError(f"header {key!r} has no value")
        headers[key.lower()] = value
    return headers


def parse_request(message: Union[str, bytes]) -> HttpRequest:
    """Parse a full HTTP request message.

    A non-empty body is kept with a trailing CRLF.
    """
    if isinstance(message, (bytes, bytearray)):
        message = bytes(message).decode("utf-8", errors="replace")
    line, head, body = _split_sections(message)
    method, path = _parse_line(line)
    headers = _parse_headers(head)
    return HttpRequest(method=method, path=path, headers=headers, body=body)