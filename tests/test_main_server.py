import json

import pytest

from chatroom.client import build_request, parse_http_response
from chatroom.main_server import MainServer

EMAIL = "alice@example.com"
USER_ID = 7
POST_ID = 11


class _FakeCursor:
    def __init__(self):
        self.lastrowid = None
        self.rowcount = 0
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def execute(self, sql, params=()):
        text = sql.lower()
        self._rows = []
        if text.startswith("select 1"):
            self._rows = [(1,)]
        elif "insert into user" in text:
            self.lastrowid = USER_ID
            self.rowcount = 1
        elif "select id,passwd" in text:
            if params[0] == EMAIL:
                self._rows = [(USER_ID, "password")]
        elif "select name from user" in text:
            if params[0] == USER_ID:
                self._rows = [("alice",)]
        elif "insert into post" in text:
            self.lastrowid = POST_ID
            self.rowcount = 1
        elif "delete from post" in text:
            self.rowcount = 1 if params[0] == POST_ID else 0
        elif "from post where user_id" in text:
            self._rows = [(POST_ID, "hello", "2024-01-01 00:00:00")]

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class _FakeSession:
    def __init__(self):
        self.closed = False

    def cursor(self):
        return _FakeCursor()

    def commit(self):
        pass

    def close(self):
        self.closed = True


class _FakeConnection:
    def __init__(self):
        self.sent = []

    def send(self, message):
        if isinstance(message, (bytes, bytearray)):
            message = bytes(message).decode("utf-8")
        self.sent.append(message)


@pytest.fixture
def server():
    password = "password"
    main_server = MainServer(
        "127.0.0.1",
        0,
        1,
        1,
        3306,
        "aaa",
        password,
        "test",
        2,
        1,
        3600,
        1,
        session_factory=_FakeSession,
    )
    yield main_server
    main_server.stop()


def _call(server, path, data):
    connection = _FakeConnection()
    request = build_request("POST", path, data)
    server.http_server.handle_message(connection, request.encode("utf-8"))
    assert len(connection.sent) == 1
    return parse_http_response(connection.sent[0])


def test_routes_are_registered(server):
    assert set(server.http_server.post_handlers) == {
        "/api/user/signup",
        "/api/user/login",
        "/api/post/publish",
        "/api/post/delete",
        "/api/post/check/my",
    }


def test_pool_initialised_to_min_size(server):
    assert server.mysql_pool.size() == 1


def test_sign_up(server):
    status, body = _call(
        server,
        "/api/user/signup",
        {"name": "alice", "email": EMAIL, "passwd": "password"},
    )
    assert status == 200
    assert body == {"message": "用户注册成功", "user_id": USER_ID}


def test_log_in_success(server):
    status, body = _call(
        server, "/api/user/login", {"email": EMAIL, "passwd": "password"}
    )
    assert status == 200
    assert body["user_id"] == USER_ID


def test_log_in_wrong_password(server):
    status, body = _call(
        server, "/api/user/login", {"email": EMAIL, "passwd": "secret"}
    )
    assert status == 500
    assert body == {"message": "用户登录失败"}


def test_publish_post(server):
    status, body = _call(
        server, "/api/post/publish", {"content": "hello", "user_id": USER_ID}
    )
    assert status == 200
    assert body == {"post_id": POST_ID, "message": "发帖成功"}


def test_delete_missing_post(server):
    status, body = _call(server, "/api/post/delete", {"post_id": POST_ID + 1})
    assert status == 500
    assert body == {"message": "删除贴子失败"}


def test_check_my_posts(server):
    status, body = _call(server, "/api/post/check/my", {"user_id": USER_ID})
    assert status == 200
    assert [post["post_id"] for post in body["posts"]] == [POST_ID]
    assert body["posts"][0]["content"] == "hello"


def test_unknown_path_answers_404(server):
    status, _ = _call(server, "/api/nothing", {})
    assert status == 404


def test_direct_handler_returns_result(server):
    connection = _FakeConnection()
    request = build_request("POST", "/api/user/login", {"email": EMAIL})
    server.http_server.handle_message(connection, request.encode("utf-8"))
    status, body = parse_http_response(connection.sent[0])
    assert status == 400
    assert "error" in body


def test_stop_closes_everything(server):
    server.stop()
    assert server.mysql_pool.size() == 0
    with pytest.raises(RuntimeError):
        server.work_pool.add_task(lambda: None)
    assert json.loads("{}") == {}