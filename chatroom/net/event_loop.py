"""Readiness polling, channels and the per-thread event loop."""

from __future__ import annotations

import enum
import logging
import selectors
import socket
import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol, Tuple

_log = logging.getLogger(__name__)


class Event(enum.IntFlag):
    """Readiness events a channel can be interested in or receive."""

    READ = 0x001
    WRITE = 0x004
    HANGUP = 0x2000
    EDGE = 1 << 31


class _ChannelOwner(Protocol):
    def update_channel(self, channel: Channel) -> None: ...

    def remove_channel(self, channel: Channel) -> None: ...


class Channel:
    """Binds a file descriptor to the events it watches and their handlers."""

    def __init__(self, fd: int, loop: _ChannelOwner) -> None:
        self.fd = fd
        self.loop = loop
        self.interest = Event(0)
        self.revents = Event(0)
        self.in_poller = False
        self.on_read: Optional[Callable[[], Any]] = None
        self.on_write: Optional[Callable[[], Any]] = None
        self.on_close: Optional[Callable[[int], Any]] = None

    def fileno(self) -> int:
        """Return the watched file descriptor."""
        return self.fd

    def handle_event(self, events: Event) -> None:
        """Dispatch the events that occurred to the matching handler.

        A hang-up, or an event that is neither read nor write, removes the
        channel and reports the close.
        """
        self.revents = Event(events)
        if self.revents & Event.HANGUP:
            self._close()
        elif self.revents & Event.READ:
            if self.on_read is not None:
                self.on_read()
        elif self.revents & Event.WRITE:
            if self.on_write is not None:
                self.on_write()
        else:
            _log.warning("unexpected events %r on fd %d", self.revents, self.fd)
            self._close()

    def _close(self) -> None:
        self.remove()
        if self.on_close is not None:
            self.on_close(self.fd)

    def _update(self) -> None:
        self.loop.update_channel(self)

    def enable_reading(self) -> None:
        """Start watching for readability."""
        self.interest |= Event.READ
        self._update()

    def disable_reading(self) -> None:
        """Stop watching for readability."""
        self.interest &= ~Event.READ
        self._update()

    def enable_writing(self) -> None:
        """Start watching for writability."""
        self.interest |= Event.WRITE
        self._update()

    def disable_writing(self) -> None:
        """Stop watching for writability."""
        self.interest &= ~Event.WRITE
        self._update()

    def disable_all(self) -> None:
        """Stop watching for any event."""
        self.interest = Event(0)
        self._update()

    def use_edge_trigger(self) -> None:
        """Mark the channel as edge-triggered; takes effect on the next update."""
        self.interest |= Event.EDGE

    def remove(self) -> None:
        """Stop watching all events and drop the channel from its loop."""
        self.disable_all()
        self.loop.remove_channel(self)


class Poller:
    """Waits for readiness on registered channels."""

    def __init__(self) -> None:
        self._selector = selectors.DefaultSelector()

    @staticmethod
    def _selector_mask(interest: Event) -> int:
        mask = 0
        if interest & Event.READ:
            mask |= selectors.EVENT_READ
        if interest & Event.WRITE:
            mask |= selectors.EVENT_WRITE
        return mask

    def update_channel(self, channel: Channel) -> None:
        """Register a channel or bring its watched events up to date."""
        fd = channel.fileno()
        mask = self._selector_mask(channel.interest)
        registered = fd in self._selector.get_map()
        if mask and registered:
            self._selector.modify(fd, mask, channel)
        elif mask:
            self._selector.register(fd, mask, channel)
        elif registered:
            self._selector.unregister(fd)
        channel.in_poller = True

    def remove_channel(self, channel: Channel) -> None:
        """Forget a channel; nothing happens if it was never registered."""
        if not channel.in_poller:
            return
        fd = channel.fileno()
        if fd in self._selector.get_map():
            self._selector.unregister(fd)
        channel.in_poller = False

    def poll(self, timeout: Optional[float] = None) -> List[Tuple[Channel, Event]]:
        """Wait up to ``timeout`` seconds and return the ready channels.

        Each channel's ``revents`` is set to what occurred; an empty list
        means the wait timed out.
        """
        ready: List[Tuple[Channel, Event]] = []
        for key, mask in self._selector.select(timeout):
            events = Event(0)
            if mask & selectors.EVENT_READ:
                events |= Event.READ
            if mask & selectors.EVENT_WRITE:
                events |= Event.WRITE
            channel: Channel = key.data
            channel.revents = events
            ready.append((channel, events))
        return ready

    def _close(self) -> None:
        self._selector.close()


class _TimedConnection(Protocol):
    def fileno(self) -> int: ...

    def timed_out(self, now: int, seconds: int) -> bool: ...


class EventLoop:
    """A poll loop that runs on one thread, with a task queue and idle timer.

    Every ``interval`` seconds connections that have been idle longer than
    ``timeout`` seconds are dropped and reported through ``on_timeout``.
    """

    def __init__(self, main_loop: bool, interval: float = 30, timeout: int = 300) -> None:
        self.main_loop = main_loop
        self.interval = interval
        self.timeout = timeout
        self.on_timeout: Optional[Callable[[int], Any]] = None
        self._poller = Poller()
        self._thread_id: Optional[int] = None
        self._stopped = False
        self._tasks: Deque[Callable[[], Any]] = deque()
        self._tasks_lock = threading.Lock()
        self._connections: Dict[int, _TimedConnection] = {}
        self._connections_lock = threading.Lock()
        self._wake_reader, self._wake_writer = socket.socketpair()
        self._wake_reader.setblocking(False)
        self._wake_writer.setblocking(False)
        self._wake_channel = Channel(self._wake_reader.fileno(), self)
        self._wake_channel.on_read = self._handle_wake
        self._wake_channel.enable_reading()

    def run(self) -> None:
        """Process events on the calling thread until ``stop`` is called."""
        self._thread_id = threading.get_ident()
        next_check = time.monotonic() + self.interval
        try:
            while not self._stopped:
                wait = max(0.0, next_check - time.monotonic())
                for channel, events in self._poller.poll(wait):
                    channel.handle_event(events)
                if time.monotonic() >= next_check:
                    self.check_timeouts(int(time.time()))
                    next_check = time.monotonic() + self.interval
        finally:
            self._close()

    def stop(self) -> None:
        """Ask the loop to finish and wake it up."""
        self._stopped = True
        self.wake_up()

    def update_channel(self, channel: Channel) -> None:
        """Register or update a channel with the poller."""
        self._poller.update_channel(channel)

    def remove_channel(self, channel: Channel) -> None:
        """Remove a channel from the poller."""
        self._poller.remove_channel(channel)

    def is_loop_thread(self) -> bool:
        """Tell whether the caller runs on this loop's thread."""
        return self._thread_id == threading.get_ident()

    def wake_up(self) -> None:
        """Interrupt a pending poll so queued work is seen promptly."""
        try:
            self._wake_writer.send(b"\x01")
        except (BlockingIOError, OSError):
            pass

    def _handle_wake(self) -> None:
        while True:
            try:
                if not self._wake_reader.recv(4096):
                    break
            except (BlockingIOError, InterruptedError):
                break
        with self._tasks_lock:
            tasks = list(self._tasks)
            self._tasks.clear()
        for task in tasks:
            task()

    def add_task(self, task: Callable[[], Any]) -> None:
        """Queue ``task`` to run on the loop thread and wake the loop."""
        with self._tasks_lock:
            self._tasks.append(task)
        self.wake_up()

    def check_timeouts(self, now: int) -> List[int]:
        """Drop connections idle for longer than ``timeout`` at time ``now``.

        Each dropped descriptor is passed to ``on_timeout``; the list of
        dropped descriptors is returned.
        """
        with self._connections_lock:
            expired = [
                fd
                for fd, connection in self._connections.items()
                if connection.timed_out(now, self.timeout)
            ]
        for fd in expired:
            _log.info("connection %d timed out", fd)
            if self.on_timeout is not None:
                self.on_timeout(fd)
            with self._connections_lock:
                self._connections.pop(fd, None)
        return expired

    def add_connection(self, connection: _TimedConnection) -> None:
        """Track a connection for idle timeouts."""
        with self._connections_lock:
            self._connections[connection.fileno()] = connection

    def remove_connection(self, fd: int) -> None:
        """Stop tracking the connection on ``fd``."""
        with self._connections_lock:
            self._connections.pop(fd, None)

    @property
    def connections(self) -> Dict[int, _TimedConnection]:
        """A snapshot of the tracked connections by descriptor."""
        with self._connections_lock:
            return dict(self._connections)

    def _close(self) -> None:
        self._poller.remove_channel(self._wake_channel)
        self._poller._close()
        self._wake_reader.close()
        self._wake_writer.close()