"""HTTP handlers for user sign-up and log-in."""

from __future__ import annotations

import json
from typing import Any, Dict

from chatroom.users.user_service import UserService
from chatroom.web.context import HttpContext

_SIGN_UP_FIELDS = ("name", "email", "passwd")
_LOG_IN_FIELDS = ("email", "passwd")


def _dump(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def _text_fields(body: str, *keys: str) -> list:
    data = json.loads(body)
    if not isinstance(data, dict):
        raise TypeError("request body must be a JSON object")
    values = []
    for key in keys:
        value = data[key]
        if not isinstance(value, str):
            raise TypeError(f"{key!r} must be a string")
        values.append(value)
    return values


def _reply(context: HttpContext, code: int, message: str, data: Dict[str, Any]) -> None:
    context.set_body(_dump(data))
    context.set_status(code, message)
    context.send()


class UserController:
    """Answers user requests with JSON responses."""

    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    def handle_sign_up(self, context: HttpContext) -> bool:
        """Register the user in the request body; True on success."""
        try:
            name, email, passwd = _text_fields(context.request.body, *_SIGN_UP_FIELDS)
            user_id = self.user_service.handle_sign_up(name, email, passwd)
        except Exception:
            _reply(context, 400, "error", {"message": "用户注册失败"})
            return False
        if user_id != 0:
            _reply(context, 200, "OK", {"message": "用户注册成功", "user_id": user_id})
            return True
        _reply(context, 500, "error", {"message": "用户注册失败"})
        return False

    def handle_log_in(self, context: HttpContext) -> bool:
        """Log in with the credentials in the request body; True on success."""
        try:
            email, passwd = _text_fields(context.request.body, *_LOG_IN_FIELDS)
            user_id = self.user_service.handle_log_in(email, passwd)
        except Exception as exc:
            _reply(context, 400, "error", {"error": str(exc)})
            return False
        if user_id != 0:
            _reply(context, 200, "OK", {"message": "用户登录成功", "user_id": user_id})
            return True
        _reply(context, 500, "error", {"message": "用户登录失败"})
        return False