"""Listening socket that hands accepted clients on."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from chatroom.net.event_loop import Channel, EventLoop
from chatroom.net.sockets import Address, Socket

_log = logging.getLogger(__name__)

_BACKLOG = 128


class Acceptor:
    """Listens on a port and passes each accepted client socket to a callback."""

    def __init__(
        self,
        ip: str,
        port: int,
        loop: EventLoop,
        on_new_connection: Optional[Callable[[Socket], Any]] = None,
    ) -> None:
        self.loop = loop
        self.on_new_connection = on_new_connection
        self.sock = Socket.create(ip, port)
        try:
            self.sock.set_non_blocking()
            self.sock.set_reuse_addr()
            self.sock.set_reuse_port()
            self.sock.set_tcp_no_delay()
            self.sock.set_keep_alive()
            self.sock.bind(Address("0.0.0.0", port))
            self.sock.listen(_BACKLOG)
        except OSError:
            self.sock.close()
            raise
        self.channel = Channel(self.sock.fileno(), loop)
        self.channel.on_read = self.handle_accept
        self.channel.enable_reading()

    def handle_accept(self) -> None:
        """Accept one pending client, configure it and pass it on."""
        try:
            client = self.sock.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError:
            _log.exception("accepting a client failed")
            return
        client.set_keep_alive()
        client.set_non_blocking()
        client.set_reuse_addr()
        client.set_reuse_port()
        client.set_tcp_no_delay()
        if self.on_new_connection is not None:
            self.on_new_connection(client)
        else:
            client.close()

    def close(self) -> None:
        """Stop watching the listening socket and close it."""
        if self.sock.fileno() == -1:
            return
        self.channel.remove()
        self.sock.close()