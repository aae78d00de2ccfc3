import queue
import socket
import threading

import pytest

from chatroom.net.sockets import Socket
from chatroom.net.tcp_server import TcpServer


@pytest.fixture
def server():
    srv = TcpServer("127.0.0.1", 0, 1)
    yield srv
    srv.stop()


@pytest.fixture
def accepted_pair():
    a, b = socket.socketpair()
    a.setblocking(False)
    yield Socket(a, "127.0.0.1", 4000), b
    a.close()
    b.close()


def port_of(srv):
    return srv.acceptor.sock.sock.getsockname()[1]


def test_zero_loops_rejected():
    with pytest.raises(ValueError):
        TcpServer("127.0.0.1", 0, 0)


def test_new_connection_is_tracked(server, accepted_pair):
    sock, _ = accepted_pair
    seen = []
    server.on_new_connection = seen.append
    server.handle_new_connection(sock)
    fd = sock.fileno()
    assert seen == [sock]
    assert server.connections[fd].sock is sock
    assert fd in server.sub_loops[0].connections


def test_close_reports_and_forgets(server, accepted_pair):
    sock, _ = accepted_pair
    closed = []
    server.on_close = closed.append
    server.handle_new_connection(sock)
    fd = sock.fileno()
    server.close(fd)
    assert closed == [fd]
    assert fd not in server.connections


def test_connection_timeout_forgets_and_closes(server, accepted_pair):
    sock, _ = accepted_pair
    server.handle_new_connection(sock)
    fd = sock.fileno()
    connection = server.connections[fd]
    server.connection_timeout(fd)
    assert fd not in server.connections
    assert connection.closed
    assert sock.fileno() == -1


def test_handle_message_forwards(server):
    got = []
    server.on_message = lambda conn, msg: got.append((conn, msg))
    marker = object()
    server.handle_message(marker, b"data")
    assert got == [(marker, b"data")]


def test_round_trip_over_network():
    received = queue.Queue()
    closed = queue.Queue()
    srv = TcpServer("127.0.0.1", 0, 1)
    srv.on_message = lambda conn, msg: received.put(msg)
    srv.on_close = closed.put
    thread = threading.Thread(target=srv.start, daemon=True)
    thread.start()
    try:
        with socket.create_connection(("127.0.0.1", port_of(srv)), timeout=5) as client:
            client.sendall(b"ping")
            assert received.get(timeout=5) == b"ping"
        fd = closed.get(timeout=5)
        assert fd not in srv.connections
    finally:
        srv.stop()
        thread.join(5)
    assert not thread.is_alive()
    assert srv.acceptor.sock.fileno() == -1