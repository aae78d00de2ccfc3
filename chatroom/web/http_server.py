"""HTTP layer over the TCP server: parsing and routing to handlers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from chatroom.net.connection import Connection
from chatroom.net.sockets import Socket
from chatroom.net.tcp_server import TcpServer
from chatroom.web.context import HttpConnection, HttpContext
from chatroom.web.request import HttpParseError, parse_request
from chatroom.web.response import HttpResponse

_log = logging.getLogger(__name__)

HttpHandler = Callable[[HttpContext], Any]


class HttpServer:
    """Parses requests and routes them by method and path to handlers."""

    def __init__(self, ip: str, port: int, event_loop_num: int) -> None:
        self.get_handlers: Dict[str, HttpHandler] = {}
        self.post_handlers: Dict[str, HttpHandler] = {}
        self.tcp_server = TcpServer(ip, port, event_loop_num)
        self.tcp_server.on_new_connection = self._on_new_connection
        self.tcp_server.on_close = self._on_close
        self.tcp_server.on_message = self.handle_message

    def start(self) -> None:
        """Serve on the calling thread until stopped."""
        self.tcp_server.start()

    def stop(self) -> None:
        """Stop the TCP server."""
        self.tcp_server.stop()

    def _on_new_connection(self, sock: Socket) -> None:
        _log.info("%d (%s:%d) connected", sock.fileno(), sock.ip, sock.port)

    def _on_close(self, fd: int) -> None:
        _log.info("%d closed", fd)

    def handle_message(self, connection: Connection, message: bytes) -> None:
        """Parse a request and answer it with its handler, 400 or 404."""
        _log.debug("received %r", message)
        http_connection = HttpConnection(connection)
        try:
            request = parse_request(message)
        except HttpParseError:
            response = HttpResponse(status_code=400, status_message="解析http失败\n")
            http_connection.send(response)
            return

        handler: Optional[HttpHandler] = None
        if request.method == "GET":
            handler = self.get_handlers.get(request.path)
        elif request.method == "POST":
            handler = self.post_handlers.get(request.path)

        if handler is None:
            _log.info("no handler for %s %s", request.method, request.path)
            response = HttpResponse()
            response.set_not_found()
            http_connection.send(response)
            return
        handler(HttpContext(request, HttpResponse(), http_connection))

    def set_sign_up(self, handler: HttpHandler) -> None:
        """Route user sign-up requests to ``handler``."""
        self.post_handlers["/api/user/signup"] = handler

    def set_log_in(self, handler: HttpHandler) -> None:
        """Route user log-in requests to ``handler``."""
        self.post_handlers["/api/user/login"] = handler

    def set_publish_post(self, handler: HttpHandler) -> None:
        """Route post publishing requests to ``handler``."""
        self.post_handlers["/api/post/publish"] = handler

    def set_delete_post(self, handler: HttpHandler) -> None:
        """Route post deletion requests to ``handler``."""
        self.post_handlers["/api/post/delete"] = handler

    def set_check_my_posts(self, handler: HttpHandler) -> None:
        """Route requests for a user's own posts to ``handler``."""
        self.post_handlers["/api/post/check/my"] = handler