"""A TCP server that answers each message with a prefixed copy."""

from __future__ import annotations

import logging

from chatroom.net.connection import Connection
from chatroom.net.sockets import Socket
from chatroom.net.tcp_server import TcpServer
from chatroom.thread_pool import ThreadPool

_log = logging.getLogger(__name__)

REPLY_PREFIX = "回复".encode("utf-8")


class EchoTcpServer:
    """Echoes every message back, handled on worker threads when there are any."""

    def __init__(
        self, ip: str, port: int, event_loop_num: int = 5, work_num: int = 5
    ) -> None:
        self.tcp_server = TcpServer(ip, port, event_loop_num)
        self.work_pool = ThreadPool(work_num, "work")
        self.tcp_server.on_new_connection = self.on_new_connection
        self.tcp_server.on_close = self.on_close
        self.tcp_server.on_message = self.handle_message

    def start(self) -> None:
        """Serve on the calling thread until stopped."""
        self.tcp_server.start()

    def stop(self) -> None:
        """Stop the worker threads and the TCP server."""
        self.work_pool.stop()
        self.tcp_server.stop()

    def on_new_connection(self, sock: Socket) -> None:
        """Log a new client."""
        _log.info("%d (%s:%d) connected", sock.fileno(), sock.ip, sock.port)

    def on_close(self, fd: int) -> None:
        """Log a closed client."""
        _log.info("%d closed", fd)

    def handle_message(self, connection: Connection, message: bytes) -> None:
        """Answer inline without workers, otherwise hand off to a worker."""
        _log.debug("received %r", message)
        if len(self.work_pool) == 0:
            self.on_message(connection, message)
        else:
            self.work_pool.add_task(lambda: self.on_message(connection, message))

    def on_message(self, connection: Connection, message: bytes) -> None:
        """Send the reply for ``message``."""
        connection.send(REPLY_PREFIX + message)