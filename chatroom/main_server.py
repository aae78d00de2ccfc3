"""The chat-room application server: HTTP routes wired to users and posts."""

from __future__ import annotations

import argparse
import logging
import signal
from typing import Any, Callable, List, Optional

from chatroom.db.pool import ConnectionPool
from chatroom.posts.post_controller import PostController
from chatroom.posts.post_dao import PostDAO
from chatroom.posts.post_service import PostService
from chatroom.thread_pool import ThreadPool
from chatroom.users.user_controller import UserController
from chatroom.users.user_dao import UserDAO
from chatroom.users.user_service import UserService
from chatroom.web.context import HttpContext
from chatroom.web.http_server import HttpServer

_log = logging.getLogger(__name__)

PASSWORD = "password"


class MainServer:
    """Owns the HTTP server, the worker threads and the database pool.

    The database host is the same address the HTTP server listens on.
    """

    def __init__(
        self,
        ip: str,
        port: int,
        event_loop_num: int,
        work_num: int,
        mysql_port: int,
        user: str,
        passwd: str,
        database: str,
        max_size: int,
        min_size: int,
        idle_check_interval: float,
        connection_timeout: float,
        session_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.http_server = HttpServer(ip, port, event_loop_num)
        self.work_pool = ThreadPool(work_num, "工作线程")
        self.mysql_pool = ConnectionPool(
            ip,
            mysql_port,
            user,
            passwd,
            database,
            max_size,
            min_size,
            idle_check_interval,
            connection_timeout,
            factory=session_factory,
        )
        self.post_dao = PostDAO(self.mysql_pool)
        self.post_service = PostService(self.post_dao)
        self.post_controller = PostController(self.post_service)

        if not self.mysql_pool.init():
            _log.error("初始化连接池有连接创建失败")

        self.http_server.set_sign_up(self.sign_up)
        self.http_server.set_log_in(self.log_in)
        self.http_server.set_publish_post(self.publish_post)
        self.http_server.set_delete_post(self.delete_post)
        self.http_server.set_check_my_posts(self.check_my_posts)

        self.user_controller = UserController(UserService(UserDAO(self.mysql_pool)))

    def start(self) -> None:
        """Serve on the calling thread until stopped."""
        self.http_server.start()

    def stop(self) -> None:
        """Stop the workers, the HTTP server and the database pool."""
        self.work_pool.stop()
        self.http_server.stop()
        self.mysql_pool.close()

    def sign_up(self, context: HttpContext) -> bool:
        """Handle a user sign-up request."""
        return self.user_controller.handle_sign_up(context)

    def log_in(self, context: HttpContext) -> bool:
        """Handle a user log-in request."""
        return self.user_controller.handle_log_in(context)

    def publish_post(self, context: HttpContext) -> bool:
        """Handle a request to publish a post."""
        return self.post_controller.handle_publish_post(context)

    def delete_post(self, context: HttpContext) -> bool:
        """Handle a request to delete a post."""
        return self.post_controller.handle_delete_post(context)

    def check_my_posts(self, context: HttpContext) -> bool:
        """Handle a request for the user's own posts."""
        return self.post_controller.handle_my_posts(context)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the chat-room server.")
    parser.add_argument("--ip", default="192.168.38.121")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--event-loops", type=int, default=2)
    parser.add_argument("--workers", type=int, default=2)
    parser.add_argument("--mysql-port", type=int, default=33060)
    parser.add_argument("--user", default="aaa")
    parser.add_argument("--password", default=PASSWORD)
    parser.add_argument("--database", default="test")
    parser.add_argument("--max-connections", type=int, default=10)
    parser.add_argument("--min-connections", type=int, default=3)
    parser.add_argument("--idle-check-interval", type=float, default=30)
    parser.add_argument("--connection-timeout", type=float, default=300)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Start the server and run until SIGINT or SIGTERM."""
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    server = MainServer(
        args.ip,
        args.port,
        args.event_loops,
        args.workers,
        args.mysql_port,
        args.user,
        args.password,
        args.database,
        args.max_connections,
        args.min_connections,
        args.idle_check_interval,
        args.connection_timeout,
    )

    def _on_signal(signum: int, _frame: Any) -> None:
        print(f"收到信号{signum}")
        server.stop()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)
    try:
        server.start()
    finally:
        server.stop()
    print("已安全退出")
    return 0