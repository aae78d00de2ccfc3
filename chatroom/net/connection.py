"""A TCP connection driven by an event loop."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Union

from chatroom.net.buffer import Buffer
from chatroom.net.event_loop import Channel
from chatroom.net.sockets import Socket
from chatroom.timestamp import TimeStamp

_log = logging.getLogger(__name__)

_RECV_SIZE = 1024


class _Loop(Protocol):
    def update_channel(self, channel: Channel) -> None: ...

    def remove_channel(self, channel: Channel) -> None: ...

    def remove_connection(self, fd: int) -> None: ...

    def is_loop_thread(self) -> bool: ...

    def add_task(self, task: Callable[[], Any]) -> None: ...


MessageHandler = Callable[["Connection", bytes], Any]
CloseHandler = Callable[[int], Any]


class Connection:
    """One client connection: buffers input and output, reports messages and closes."""

    def __init__(
        self,
        loop: _Loop,
        sock: Socket,
        on_message: Optional[MessageHandler] = None,
        on_close: Optional[CloseHandler] = None,
    ) -> None:
        self.loop = loop
        self.sock = sock
        self.on_message = on_message
        self.on_close = on_close
        self.input_buffer = Buffer()
        self.output_buffer = Buffer()
        self.closed = False
        self.last_time = TimeStamp.now()
        self.channel = Channel(sock.fileno(), loop)
        self.channel.use_edge_trigger()
        self.channel.on_read = self.handle_read
        self.channel.on_write = self.handle_write
        self.channel.on_close = lambda _fd: self.handle_close()
        self.channel.enable_reading()

    def fileno(self) -> int:
        """Return the connection's file descriptor."""
        return self.channel.fileno()

    def handle_read(self) -> None:
        """Drain the socket and pass each complete message on.

        An orderly shutdown or a reset from the peer closes the connection.
        """
        if self.closed:
            return
        while True:
            try:
                data = self.sock.sock.recv(_RECV_SIZE)
            except InterruptedError:
                continue
            except BlockingIOError:
                message = self.input_buffer.get_message()
                if message is None:
                    break
                self.last_time = TimeStamp.now()
                if self.on_message is not None:
                    self.on_message(self, message)
                if self.closed:
                    break
                continue
            except OSError:
                data = b""
            if not data:
                self.channel.remove()
                self.handle_close()
                break
            self.input_buffer.append(data)

    def handle_write(self) -> None:
        """Write as much pending output as the socket takes."""
        if self.closed:
            return
        try:
            sent = self.sock.sock.send(self.output_buffer.data())
        except (BlockingIOError, InterruptedError):
            return
        except OSError:
            _log.exception("sending on fd %d failed", self.fileno())
            self.output_buffer.clear()
            self.channel.disable_writing()
            return
        self.output_buffer.erase(0, sent)
        if not len(self.output_buffer):
            self.channel.disable_writing()

    def handle_close(self) -> None:
        """Mark the connection closed, report it and release the socket."""
        if self.closed:
            return
        self.closed = True
        fd = self.fileno()
        self.loop.remove_connection(fd)
        if self.on_close is not None:
            self.on_close(fd)
        self.sock.close()

    def send(self, message: Union[bytes, str]) -> None:
        """Queue ``message`` for sending on the loop thread.

        Does nothing once the connection is closed.
        """
        if self.closed:
            _log.info("connection %d is closed, not sending", self.fileno())
            return
        data = message.encode("utf-8") if isinstance(message, str) else bytes(message)
        if self.loop.is_loop_thread():
            self.send_in_loop(data)
        else:
            self.loop.add_task(lambda: self.send_in_loop(data))

    def send_in_loop(self, message: bytes) -> None:
        """Append ``message`` to the output buffer and watch for writability."""
        if self.closed:
            return
        self.output_buffer.append(message)
        self.channel.enable_writing()

    def timed_out(self, now: int, seconds: int) -> bool:
        """Tell whether more than ``seconds`` have passed since the last message."""
        return now - self.last_time.to_int() > seconds