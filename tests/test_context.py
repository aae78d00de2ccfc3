import json

from chatroom.web.context import HttpConnection, HttpContext
from chatroom.web.request import parse_request
from chatroom.web.response import HttpResponse


class FakeConnection:
    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)


def make_context():
    raw = FakeConnection()
    request = parse_request("POST /api/post/publish HTTP/1.1\r\nHost: h\r\n\r\n{}")
    context = HttpContext(request, HttpResponse(), HttpConnection(raw))
    return context, raw


def test_http_connection_sends_encoded_response():
    raw = FakeConnection()
    response = HttpResponse()
    response.set_not_found()
    HttpConnection(raw).send(response)
    assert raw.sent == [response.encode()]


def test_set_status_adds_useful_headers():
    context, _ = make_context()
    body = json.dumps({"message": "ok"})
    context.set_body(body)
    context.set_status(200, "OK")
    assert context.response.status_code == 200
    assert context.response.status_message == "OK"
    assert context.response.header("Content-Type") == "application/json"
    assert context.response.header("Content-Length") == str(len(body))


def test_content_length_counts_utf8_bytes():
    context, _ = make_context()
    body = json.dumps({"message": "发帖成功"}, ensure_ascii=False)
    context.set_body(body)
    context.set_status(200, "OK")
    assert context.response.header("Content-Length") == str(len(body.encode("utf-8")))


def test_add_header():
    context, _ = make_context()
    context.add_header("X-Extra", "yes")
    assert context.response.header("X-Extra") == "yes"


def test_send_writes_status_line_and_body():
    context, raw = make_context()
    context.set_body('{"error":"bad"}')
    context.set_status(400, "error")
    context.send()
    assert len(raw.sent) == 1
    wire = raw.sent[0]
    assert wire.startswith(b"HTTP/1.1 400 error\r\n")
    head, _, body = wire.partition(b"\r\n\r\n")
    assert body == b'{"error":"bad"}'
    assert b"Content-Length: " + str(len(body)).encode() in head


def test_context_keeps_request():
    context, _ = make_context()
    assert context.request.path == "/api/post/publish"
    assert context.request.body == "{}\r\n"