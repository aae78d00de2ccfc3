"""IPv4 addresses and thin TCP socket wrappers."""

from __future__ import annotations

import socket
from dataclasses import dataclass


@dataclass(frozen=True)
class Address:
    """An IPv4 address and port; the defaults stand for "any address"."""

    ip: str = "0.0.0.0"
    port: int = 0


class Socket:
    """A TCP socket together with the peer or listening address it belongs to."""

    def __init__(self, sock: socket.socket, ip: str = "", port: int = 0) -> None:
        self.sock = sock
        self.ip = ip
        self.port = port

    @classmethod
    def create(cls, ip: str, port: int) -> Socket:
        """Open a new IPv4 stream socket meant to listen on ``ip:port``.

        Raises OSError if the socket cannot be created.
        """
        return cls(socket.socket(socket.AF_INET, socket.SOCK_STREAM), ip, port)

    def set_non_blocking(self) -> None:
        """Put the socket into non-blocking mode."""
        self.sock.setblocking(False)

    def set_reuse_addr(self) -> None:
        """Allow rebinding an address still in TIME_WAIT."""
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def set_reuse_port(self) -> None:
        """Allow several sockets to bind the same port, where supported."""
        if hasattr(socket, "SO_REUSEPORT"):
            self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)

    def set_tcp_no_delay(self) -> None:
        """Disable Nagle's algorithm so small writes go out at once."""
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

    def set_keep_alive(self) -> None:
        """Enable TCP keep-alive probes to detect dead peers."""
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

    def bind(self, address: Address) -> None:
        """Bind to ``address``; raises OSError on failure."""
        self.sock.bind((address.ip, address.port))

    def listen(self, backlog: int = 128) -> None:
        """Start listening; raises OSError on failure."""
        self.sock.listen(backlog)

    def accept(self) -> Socket:
        """Accept one pending connection and return it with the peer's address.

        Raises OSError (BlockingIOError when non-blocking and nothing is
        pending) if no connection can be accepted.
        """
        client, (ip, port) = self.sock.accept()
        return Socket(client, ip, port)

    def fileno(self) -> int:
        """Return the file descriptor, or -1 once closed."""
        return self.sock.fileno()

    def close(self) -> None:
        """Close the socket."""
        self.sock.close()