"""Interactive command-line client for the chat-room server."""

from __future__ import annotations

import argparse
import json
import socket
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

_RECV_SIZE = 4096
_HEAD_END = b"\r\n\r\n"

_FIELD_NAMES = ("name", "email", "passwd")
_FIELD_PROMPTS = ("请输入用户名: ", "请输入邮箱: ", "请输入密码: ")


def _dump(data: Any, indent: Optional[int] = None) -> str:
    if indent is None:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return json.dumps(data, ensure_ascii=False, indent=indent, sort_keys=True)


def _expected_length(data: bytes) -> Optional[int]:
    """Total length of the response in ``data`` once its head is complete."""
    head_end = data.find(_HEAD_END)
    if head_end == -1:
        return None
    body_start = head_end + len(_HEAD_END)
    for line in data[:head_end].split(b"\r\n")[1:]:
        name, sep, value = line.partition(b":")
        if sep and name.strip().lower() == b"content-length":
            try:
                return body_start + int(value.strip())
            except ValueError:
                return body_start
    return body_start


class HttpClient:
    """A TCP connection to the server that sends one request and reads one response."""

    def __init__(self, address: str, port: int) -> None:
        try:
            socket.inet_pton(socket.AF_INET, address)
        except OSError:
            raise ValueError("Invalid address") from None
        self.address = (address, port)
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

    def connect(self) -> bool:
        """Connect to the server; False if the connection fails."""
        try:
            self._sock.connect(self.address)
        except OSError:
            return False
        return True

    def send_request(self, request: Union[str, bytes]) -> str:
        """Send ``request`` and return the response text.

        Reading stops once the head and ``Content-Length`` bytes of body
        have arrived, or when the server closes the connection.
        """
        data = request.encode("utf-8") if isinstance(request, str) else bytes(request)
        self._sock.sendall(data)
        received = bytearray()
        while True:
            expected = _expected_length(bytes(received))
            if expected is not None and len(received) >= expected:
                break
            chunk = self._sock.recv(_RECV_SIZE)
            if not chunk:
                break
            received += chunk
        return received.decode("utf-8", errors="replace")

    def close(self) -> None:
        """Close the connection."""
        self._sock.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def build_request(method: str, path: str, data: Optional[Dict[str, Any]] = None) -> str:
    """Build an HTTP/1.1 request carrying ``data`` as a JSON body."""
    body = _dump(data if data is not None else {})
    return (
        f"{method} {path} HTTP/1.1\r\n"
        "Host: localhost:8080\r\n"
        "Connection: close\r\n"
        "User-Agent: C++HttpClient/1.0\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(body.encode('utf-8'))}\r\n"
        "\r\n"
        f"{body}"
    )


def parse_http_response(response: str) -> Tuple[int, Any]:
    """Return the status code and the JSON body of a response.

    A body that is not JSON is reported in an object with ``error`` and
    ``raw_response``. A status line without a code raises ValueError.
    """
    status_line = response.split("\r\n", 1)[0]
    _, sep, rest = status_line.partition(" ")
    if not sep:
        raise ValueError(f"malformed status line: {status_line!r}")
    status_code = int(rest[:3])
    _, sep, body = response.partition("\r\n\r\n")
    if not sep:
        body = ""
    try:
        parsed = json.loads(body)
    except ValueError:
        parsed = {"error": "Failed to parse JSON response", "raw_response": body}
    return status_code, parsed


def send_http_request(
    client: HttpClient, method: str, path: str, data: Optional[Dict[str, Any]] = None
) -> Tuple[int, Any]:
    """Send a JSON request through ``client`` and parse the answer."""
    return parse_http_response(client.send_request(build_request(method, path, data)))


def _read_choice(prompt: str) -> int:
    try:
        return int(input(prompt).strip())
    except ValueError:
        return -1


def _ask_fields(fields: Sequence[str]) -> Dict[str, str]:
    """Prompt for each named field in order and collect the answers."""
    prompts = dict(zip(_FIELD_NAMES, _FIELD_PROMPTS))
    return {field: input(prompts[field]) for field in fields}


def _show(status: int, body: Any) -> None:
    print(f"响应状态码: {status}")
    print(f"响应内容: {_dump(body, indent=4)}")


def _extract_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        return int(value)
    return None


def _post_loop(client: HttpClient, user_id: int) -> bool:
    """Run the logged-in menu; True when the whole program should end."""
    while True:
        choice = _read_choice("输入1/2/3---发帖/退出登录/退出程序: ")
        if choice == 2:
            print("退出登录")
            return False
        if choice == 3:
            print("退出程序")
            return True
        if choice != 1:
            print("无效的选择，请重新输入", file=sys.stderr)
            continue
        content = input("请输入帖子内容: ")
        post_data = {"content": content, "user_id": user_id}
        print(f"发送的消息体: {_dump(post_data)}")
        status, response = send_http_request(client, "POST", "/api/post/publish", post_data)
        _show(status, response)
        if status == 200 and isinstance(response, dict) and "post_id" in response:
            print(f"发帖成功，帖子ID: {response['post_id']}")


def _run(client: HttpClient) -> int:
    while True:
        choice = _read_choice("输入1/2/3---注册/登录/退出: ")
        if choice == 3:
            print("退出程序")
            return 0
        if choice == 1:
            request_data = _ask_fields(_FIELD_NAMES)
            path = "/api/user/signup"
        elif choice == 2:
            request_data = _ask_fields(_FIELD_NAMES[1:])
            path = "/api/user/login"
        else:
            print("无效的选择，请重新输入", file=sys.stderr)
            continue

        status, response = send_http_request(client, "POST", path, request_data)
        _show(status, response)
        if status != 200:
            print("操作失败")
            continue
        print("注册成功" if choice == 1 else "登录成功")
        user_id = 0
        if isinstance(response, dict) and "user_id" in response:
            extracted = _extract_id(response["user_id"])
            if extracted is not None:
                user_id = extracted
            print(f"已获取用户ID: {user_id}")
        if _post_loop(client, user_id):
            return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the interactive client against the server."""
    parser = argparse.ArgumentParser(description="Chat-room command-line client.")
    parser.add_argument("--host", default="192.168.38.121")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args(argv)
    try:
        with HttpClient(args.host, args.port) as client:
            if not client.connect():
                print("Connection failed", file=sys.stderr)
                return 1
            return _run(client)
    except EOFError:
        return 0
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1