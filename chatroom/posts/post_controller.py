"""HTTP handlers for posts."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from chatroom.posts.post_service import PostService
from chatroom.web.context import HttpContext

_log = logging.getLogger(__name__)


def _dump(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def _load_object(body: str) -> Dict[str, Any]:
    data = json.loads(body)
    if not isinstance(data, dict):
        raise TypeError("request body must be a JSON object")
    return data


def _int_field(data: Dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key!r} must be an integer")
    return value


def _str_field(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string")
    return value


def _reply(context: HttpContext, code: int, message: str, data: Dict[str, Any]) -> None:
    context.set_body(_dump(data))
    context.set_status(code, message)
    context.send()


class PostController:
    """Answers post requests with JSON responses."""

    def __init__(self, post_service: PostService) -> None:
        self.post_service = post_service

    def handle_publish_post(self, context: HttpContext) -> bool:
        """Publish the post in the request body; True on success."""
        try:
            data = _load_object(context.request.body)
            content = _str_field(data, "content")
            user_id = _int_field(data, "user_id")
            post_id = self.post_service.handle_publish_post(content, user_id)
        except Exception as exc:
            _log.warning("publishing a post failed: %s", exc)
            _reply(context, 400, "error", {"error": str(exc)})
            return False
        if post_id != -1:
            _reply(context, 200, "OK", {"post_id": post_id, "message": "发帖成功"})
            return True
        _log.warning("publishing a post failed")
        _reply(context, 500, "error", {"message": "发帖失败，请稍后再试"})
        return False

    def handle_delete_post(self, context: HttpContext) -> bool:
        """Delete the post named in the request body; True on success."""
        try:
            data = _load_object(context.request.body)
            post_id = _int_field(data, "post_id")
            deleted = self.post_service.handle_delete_post(post_id)
        except Exception as exc:
            _log.warning("deleting a post failed: %s", exc)
            _reply(context, 400, "error", {"error": str(exc)})
            return False
        if deleted:
            _reply(context, 200, "OK", {"message": "删除贴子成功"})
            return True
        _reply(context, 500, "error", {"message": "删除贴子失败"})
        return False

    def handle_my_posts(self, context: HttpContext) -> bool:
        """List the requesting user's posts; an empty list answers 500."""
        try:
            data = _load_object(context.request.body)
            user_id = _int_field(data, "user_id")
            posts = self.post_service.handle_check_my_posts(user_id)
        except Exception as exc:
            _reply(context, 400, "error", {"error": str(exc)})
            return False
        if posts:
            _reply(
                context,
                200,
                "OK",
                {"message": "查看贴子成功", "posts": [post.to_json() for post in posts]},
            )
            return True
        _reply(context, 500, "error", {"message": "查看贴子失败"})
        return False