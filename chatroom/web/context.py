"""Per-request context tying a request, its response and the connection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from chatroom.web.request import HttpRequest
from chatroom.web.response import HttpResponse


class _Sender(Protocol):
    def send(self, message: bytes) -> None: ...


class HttpConnection:
    """Sends HTTP responses over an underlying connection."""

    def __init__(self, connection: _Sender) -> None:
        self.connection = connection

    def send(self, response: HttpResponse) -> None:
        """Encode ``response`` and hand it to the connection."""
        self.connection.send(response.encode())


@dataclass
class HttpContext:
    """Everything a handler needs to answer one request."""

    request: HttpRequest
    response: HttpResponse
    connection: HttpConnection

    def set_status(self, code: int, message: str) -> None:
        """Set the status line and the JSON content headers.

        Content-Length is taken from the body as it stands, so set the
        body first.
        """
        self.response.status_code = code
        self.response.status_message = message
        self.response.set_header("Content-Type", "application/json")
        self.response.set_header(
            "Content-Length", str(len(self.response.body.encode("utf-8")))
        )

    def set_body(self, body: str) -> None:
        """Set the response body."""
        self.response.body = body

    def add_header(self, key: str, value: str) -> None:
        """Add or replace a response header."""
        self.response.set_header(key, value)

    def send(self) -> None:
        """Send the response over the connection."""
        self.connection.send(self.response)