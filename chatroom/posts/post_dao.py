"""Storage of posts in the database."""

from __future__ import annotations

from typing import List

from chatroom.db.pool import ConnectionPool, DataAccessError
from chatroom.posts.post import Post

_SELECT_BY_USER = (
    "SELECT post_id, content, "
    "DATE_FORMAT(create_time, '%%Y-%%m-%%d %%H:%%i:%%s') AS create_time "
    "FROM post WHERE user_id=%s"
)


class PostDAO:
    """Reads and writes the ``post`` table through a connection pool."""

    def __init__(self, pool: ConnectionPool) -> None:
        self.pool = pool

    def publish_post(self, post: Post) -> int:
        """Insert ``post`` and return its new id, or -1 if no row was written."""
        try:
            with self.pool.acquire() as connection:
                session = connection.session()
                with session.cursor() as cursor:
                    cursor.execute(
                        "insert into post (content,user_id) values(%s,%s)",
                        (post.content, post.user_id),
                    )
                    affected = cursor.rowcount
                    post_id = cursor.lastrowid
                session.commit()
        except Exception as exc:
            raise DataAccessError(f"发表帖子失败:{exc}") from exc
        return int(post_id) if affected > 0 else -1

    def delete_post(self, post_id: int) -> bool:
        """Delete the post with ``post_id``; True if a row was removed."""
        try:
            with self.pool.acquire() as connection:
                session = connection.session()
                with session.cursor() as cursor:
                    cursor.execute("delete from post where post_id=%s", (post_id,))
                    affected = cursor.rowcount
                session.commit()
        except Exception as exc:
            raise DataAccessError(f"删除帖子失败:{exc}") from exc
        return affected > 0

    def select_posts_by_user_id(self, user_id: int) -> List[Post]:
        """Return all posts of ``user_id``, oldest first."""
        try:
            with self.pool.acquire() as connection:
                with connection.session().cursor() as cursor:
                    cursor.execute(_SELECT_BY_USER, (user_id,))
                    rows = cursor.fetchall()
            posts = [
                Post(
                    content=str(content),
                    user_id=user_id,
                    post_id=int(post_id),
                    create_time=str(create_time),
                )
                for post_id, content, create_time in rows
            ]
        except Exception as exc:
            raise DataAccessError(f"查看用户帖子失败:{exc}") from exc
        posts.sort(key=lambda post: post.create_time)
        return posts