"""Post business rules."""

from __future__ import annotations

from typing import List, Optional

from chatroom.db.pool import DataAccessError
from chatroom.posts.post import Post
from chatroom.posts.post_dao import PostDAO
from chatroom.users.user_dao import UserDAO


class PostService:
    """Publishes, deletes and lists posts, checking that the author exists."""

    def __init__(self, post_dao: PostDAO, user_dao: Optional[UserDAO] = None) -> None:
        self.post_dao = post_dao
        self._user_dao = user_dao

    def _user_exists(self, user_id: int) -> bool:
        user_dao = self._user_dao if self._user_dao is not None else UserDAO(self.post_dao.pool)
        return user_dao.exist(user_id)

    def handle_publish_post(self, content: str, user_id: int) -> int:
        """Publish a post for an existing user; return its id or -1."""
        if not self._user_exists(user_id):
            raise DataAccessError("用户不存在")
        return self.post_dao.publish_post(Post(content=content, user_id=user_id))

    def handle_delete_post(self, post_id: int) -> bool:
        """Delete a post; True if it existed."""
        return self.post_dao.delete_post(post_id)

    def _check_posts_by_user_id(self, user_id: int) -> List[Post]:
        if not self._user_exists(user_id):
            raise DataAccessError("用户不存在")
        return self.post_dao.select_posts_by_user_id(user_id)

    def handle_check_my_posts(self, user_id: int) -> List[Post]:
        """Return the posts of an existing user, oldest first."""
        return self._check_posts_by_user_id(user_id)