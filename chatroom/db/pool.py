"""A bounded pool of MySQL sessions with background upkeep."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Optional

import pymysql

_log = logging.getLogger(__name__)

SessionFactory = Callable[[], Any]


class PoolError(RuntimeError):
    """Raised when the pool cannot hand out a connection."""


class DataAccessError(RuntimeError):
    """Raised when a database operation fails."""


def _ping(session: Any) -> bool:
    """Tell whether ``session`` can still run a trivial query."""
    try:
        with session.cursor() as cursor:
            cursor.execute("select 1")
        return True
    except Exception:
        return False


def _close_quietly(session: Any) -> None:
    try:
        session.close()
    except Exception:
        _log.debug("closing a session failed", exc_info=True)


class PooledConnection:
    """A session borrowed from a pool; give it back with ``release`` or ``with``."""

    def __init__(self, pool: ConnectionPool, session: Any) -> None:
        self._pool = pool
        self._session: Optional[Any] = session

    def is_valid(self) -> bool:
        """Tell whether the session is still held and answers a query."""
        return self._session is not None and _ping(self._session)

    def session(self) -> Any:
        """Return the underlying database session."""
        if self._session is None:
            raise PoolError("connection has already been released")
        return self._session

    def release(self) -> bool:
        """Return the session to its pool; True if it went back to the idle set."""
        return self._pool.release(self)

    def _detach(self) -> Optional[Any]:
        session, self._session = self._session, None
        return session

    def __enter__(self) -> PooledConnection:
        return self

    def __exit__(self, *args: object) -> None:
        self.release()


class ConnectionPool:
    """Keeps between ``min_size`` idle and ``max_size`` total sessions.

    A background thread wakes every ``idle_check_interval`` seconds, drops
    idle sessions that no longer answer, closes idle sessions above
    ``min_size`` and opens new ones until ``min_size`` are idle.
    ``acquire`` waits at most ``connection_timeout`` seconds.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: str,
        max_size: int,
        min_size: int,
        idle_check_interval: float,
        connection_timeout: float,
        factory: Optional[SessionFactory] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.database = database
        self.max_size = max_size
        self.min_size = min_size
        self.idle_check_interval = idle_check_interval
        self.connection_timeout = connection_timeout
        self._password = password
        self._factory = factory if factory is not None else self._connect
        self._idle: Deque[Any] = deque()
        self._current = 0
        self._closed = False
        self._cond = threading.Condition()
        self._thread = threading.Thread(
            target=self._background_task, name="db-pool", daemon=True
        )
        self._thread.start()

    def _connect(self) -> Any:
        return pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self._password,
            database=self.database,
            charset="utf8mb4",
        )

    def _create_session(self) -> Any:
        try:
            return self._factory()
        except Exception as exc:
            raise PoolError(f"MYSQL连接错误：{exc}") from exc

    def init(self) -> bool:
        """Open ``min_size`` sessions; False if any of them could not be opened."""
        for _ in range(self.min_size):
            try:
                session = self._create_session()
            except PoolError as exc:
                _log.error("MYSQL连接池初始化发生错误：%s", exc)
                return False
            with self._cond:
                self._current += 1
                self._idle.append(session)
                self._cond.notify()
        return True

    def acquire(self) -> PooledConnection:
        """Borrow an idle session, or open one if the total allows it.

        Raises PoolError on timeout, when the pool is closed, or when a new
        session cannot be opened.
        """
        with self._cond:
            if self._closed:
                raise PoolError("连接池已关闭")
            ready = self._cond.wait_for(
                lambda: self._closed
                or bool(self._idle)
                or self._current < self.max_size,
                timeout=self.connection_timeout,
            )
            if self._closed:
                raise PoolError("连接池已关闭")
            if not ready:
                raise PoolError("请求连接超时")
            if self._idle:
                return PooledConnection(self, self._idle.popleft())
            self._current += 1
        try:
            session = self._create_session()
        except PoolError as exc:
            with self._cond:
                self._current -= 1
                self._cond.notify()
            raise PoolError(f"创建新连接失败：{exc}") from exc
        return PooledConnection(self, session)

    def release(self, connection: PooledConnection) -> bool:
        """Take a session back; a dead session is discarded and False returned."""
        session = connection._detach()
        if session is None:
            return False
        if self._closed:
            _close_quietly(session)
            return False
        if not _ping(session):
            _close_quietly(session)
            with self._cond:
                self._current -= 1
                self._cond.notify()
            return False
        with self._cond:
            self._idle.append(session)
            self._cond.notify()
        return True

    def size(self) -> int:
        """Return the number of sessions, idle and borrowed."""
        with self._cond:
            return self._current

    def idle_count(self) -> int:
        """Return the number of idle sessions."""
        with self._cond:
            return len(self._idle)

    def close(self) -> None:
        """Stop the background thread and close every idle session."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        if self._thread is not threading.current_thread():
            self._thread.join()
        with self._cond:
            while self._idle:
                _close_quietly(self._idle.popleft())
            self._current = 0

    def _background_task(self) -> None:
        while True:
            with self._cond:
                if self._cond.wait_for(
                    lambda: self._closed, timeout=self.idle_check_interval
                ):
                    return
                self._maintain()

    def _maintain(self) -> None:
        alive: Deque[Any] = deque()
        while self._idle:
            session = self._idle.popleft()
            if _ping(session):
                alive.append(session)
            else:
                _close_quietly(session)
                self._current -= 1
        self._idle = alive

        while len(self._idle) > self.min_size:
            _close_quietly(self._idle.popleft())
            self._current -= 1

        while len(self._idle) < self.min_size and self._current < self.max_size:
            try:
                session = self._create_session()
            except PoolError as exc:
                _log.error("后台线程创建新连接失败%s", exc)
                break
            self._current += 1
            self._idle.append(session)
        self._cond.notify_all()