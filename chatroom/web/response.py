"""HTTP response model and its wire encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class HttpResponse:
    """Status line, headers and body of an HTTP response."""

    status_code: int = 0
    status_message: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def set_header(self, key: str, value: str) -> None:
        """Set or replace a header."""
        self.headers[key] = value

    def header(self, key: str) -> Optional[str]:
        """Return a header's value, or None if it is not set."""
        return self.headers.get(key)

    def header_block(self) -> str:
        """Return the headers as ``key: value`` lines, each ending in CRLF."""
        return "".join(f"{key}: {value}\r\n" for key, value in self.headers.items())

    def header_text(self) -> str:
        """Return the headers as ``key: value`` pairs run together."""
        return "".join(f"{key}: {value}" for key, value in self.headers.items())

    def set_not_found(self) -> None:
        """Make this a 404 response."""
        self.status_code = 404
        self.status_message = "NOT Found"

    def set_ok(self) -> None:
        """Make this a 200 response."""
        self.status_code = 200
        self.status_message = "OK"

    def encode(self) -> bytes:
        """Serialise the response as it is sent on the wire."""
        text = (
            f"HTTP/1.1 {self.status_code} {self.status_message}\r\n"
            f"{self.header_block()}\r\n{self.body}"
        )
        return text.encode("utf-8")