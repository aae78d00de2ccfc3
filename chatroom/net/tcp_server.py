"""Multi-loop TCP server: one accepting loop, several I/O loops."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from chatroom.net.acceptor import Acceptor
from chatroom.net.connection import Connection
from chatroom.net.event_loop import EventLoop
from chatroom.net.sockets import Socket
from chatroom.thread_pool import ThreadPool

_log = logging.getLogger(__name__)


class TcpServer:
    """Accepts clients on a main loop and spreads them over I/O loops.

    Each I/O loop checks every ``interval`` seconds for connections idle
    longer than ``timeout`` seconds and drops them.
    """

    def __init__(
        self,
        ip: str,
        port: int,
        thread_num: int = 5,
        interval: float = 30,
        timeout: int = 300,
    ) -> None:
        if thread_num < 1:
            raise ValueError("a TCP server needs at least one I/O loop")
        self.thread_num = thread_num
        self.on_new_connection: Optional[Callable[[Socket], Any]] = None
        self.on_close: Optional[Callable[[int], Any]] = None
        self.on_message: Optional[Callable[[Connection, bytes], Any]] = None
        self.connections: Dict[int, Connection] = {}
        self._lock = threading.Lock()
        self._started = False
        self._stopped = False
        self.main_loop = EventLoop(True)
        self.acceptor = Acceptor(ip, port, self.main_loop, self.handle_new_connection)
        self.io_pool = ThreadPool(thread_num, "io")
        self.sub_loops: List[EventLoop] = []
        for _ in range(thread_num):
            loop = EventLoop(False, interval, timeout)
            loop.on_timeout = self.connection_timeout
            self.sub_loops.append(loop)
            self.io_pool.add_task(loop.run)

    def start(self) -> None:
        """Run the accepting loop on the calling thread until stopped."""
        self._started = True
        try:
            self.main_loop.run()
        finally:
            if self.acceptor.sock.fileno() != -1:
                self.acceptor.sock.close()

    def stop(self) -> None:
        """Stop accepting, stop every loop and wait for the I/O threads."""
        if self._stopped:
            return
        self._stopped = True
        if self._started:
            self.main_loop.add_task(self.acceptor.close)
        else:
            self.acceptor.close()
        self.main_loop.stop()
        for loop in self.sub_loops:
            loop.stop()
        self.io_pool.stop()

    def handle_new_connection(self, sock: Socket) -> None:
        """Wrap an accepted socket in a connection on one of the I/O loops."""
        if self.on_new_connection is not None:
            self.on_new_connection(sock)
        fd = sock.fileno()
        loop = self.sub_loops[fd % self.thread_num]
        connection = Connection(
            loop, sock, on_message=self.handle_message, on_close=self.close
        )
        with self._lock:
            self.connections[fd] = connection
        loop.add_connection(connection)

    def close(self, fd: int) -> None:
        """Report a closed connection and forget it."""
        if self.on_close is not None:
            self.on_close(fd)
        with self._lock:
            self.connections.pop(fd, None)

    def handle_message(self, connection: Connection, message: bytes) -> None:
        """Pass a received message to the message callback."""
        if self.on_message is not None:
            self.on_message(connection, message)

    def connection_timeout(self, fd: int) -> None:
        """Forget an idle connection and release its socket."""
        with self._lock:
            connection = self.connections.pop(fd, None)
        if connection is None or connection.closed:
            return
        _log.info("dropping idle connection %d", fd)
        connection.closed = True
        connection.channel.remove()
        connection.sock.close()