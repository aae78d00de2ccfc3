import socket

import pytest

from chatroom.net.acceptor import Acceptor
from chatroom.net.event_loop import Event


class FakeLoop:
    def __init__(self):
        self.removed = []

    def update_channel(self, channel):
        pass

    def remove_channel(self, channel):
        self.removed.append(channel.fd)


@pytest.fixture
def setup():
    loop = FakeLoop()
    accepted = []
    acceptor = Acceptor("127.0.0.1", 0, loop, on_new_connection=accepted.append)
    yield acceptor, loop, accepted
    acceptor.close()
    for sock in accepted:
        sock.close()


def port_of(acceptor):
    return acceptor.sock.sock.getsockname()[1]


def test_binds_any_address(setup):
    acceptor, _, _ = setup
    assert acceptor.sock.sock.getsockname()[0] == "0.0.0.0"
    assert Event.READ in acceptor.channel.interest


def test_accepts_client_with_peer_address(setup):
    acceptor, _, accepted = setup
    with socket.create_connection(("127.0.0.1", port_of(acceptor)), timeout=5) as client:
        acceptor.handle_accept()
        assert len(accepted) == 1
        assert accepted[0].ip == "127.0.0.1"
        assert accepted[0].port == client.getsockname()[1]
        assert accepted[0].sock.getblocking() is False


def test_nothing_pending_accepts_nothing(setup):
    acceptor, _, accepted = setup
    acceptor.handle_accept()
    assert accepted == []


def test_close_removes_channel_and_closes(setup):
    acceptor, loop, _ = setup
    fd = acceptor.sock.fileno()
    acceptor.close()
    assert acceptor.sock.fileno() == -1
    assert fd in loop.removed