import socket
import threading

import pytest

from chatroom.net.echo_server import REPLY_PREFIX, EchoTcpServer


class RecordingConnection:
    def __init__(self):
        self.sent = []
        self.event = threading.Event()

    def send(self, message):
        self.sent.append(message)
        self.event.set()


@pytest.fixture
def inline_server():
    srv = EchoTcpServer("127.0.0.1", 0, 1, 0)
    yield srv
    srv.stop()


@pytest.fixture
def worker_server():
    srv = EchoTcpServer("127.0.0.1", 0, 1, 1)
    yield srv
    srv.stop()


def test_on_message_sends_prefixed_copy(inline_server):
    conn = RecordingConnection()
    inline_server.on_message(conn, b"hi")
    assert conn.sent == ["回复".encode("utf-8") + b"hi"]


def test_without_workers_answers_inline(inline_server):
    conn = RecordingConnection()
    inline_server.handle_message(conn, b"now")
    assert conn.sent == [REPLY_PREFIX + b"now"]


def test_with_workers_answers_on_worker(worker_server):
    conn = RecordingConnection()
    worker_server.handle_message(conn, b"later")
    assert conn.event.wait(5)
    assert conn.sent == [REPLY_PREFIX + b"later"]


def test_echo_over_network():
    srv = EchoTcpServer("127.0.0.1", 0, 1, 1)
    port = srv.tcp_server.acceptor.sock.sock.getsockname()[1]
    thread = threading.Thread(target=srv.start, daemon=True)
    thread.start()
    expected = REPLY_PREFIX + b"hello"
    try:
        with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
            client.sendall(b"hello")
            data = b""
            while len(data) < len(expected):
                chunk = client.recv(1024)
                if not chunk:
                    break
                data += chunk
        assert data == expected
    finally:
        srv.stop()
        thread.join(5)
    assert not thread.is_alive()