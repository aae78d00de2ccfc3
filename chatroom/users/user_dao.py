"""Storage of users in the database."""

from __future__ import annotations

from chatroom.db.pool import ConnectionPool, DataAccessError
from chatroom.users.user import User


class UserDAO:
    """Reads and writes the ``user`` table through a connection pool."""

    def __init__(self, pool: ConnectionPool) -> None:
        self.pool = pool

    def create_user(self, user: User) -> int:
        """Insert ``user``, store its new id on it and return the id."""
        try:
            with self.pool.acquire() as connection:
                session = connection.session()
                with session.cursor() as cursor:
                    cursor.execute(
                        "insert into user (name,email,passwd) values(%s,%s,%s)",
                        (user.name, user.email, user.passwd),
                    )
                    user_id = int(cursor.lastrowid)
                session.commit()
        except Exception as exc:
            raise DataAccessError(f"创建用户失败{exc}") from exc
        user.id = user_id
        return user_id

    def log_in(self, email: str, passwd: str) -> int:
        """Return the user's id if the password matches, otherwise 0.

        An unknown e-mail address raises DataAccessError.
        """
        try:
            with self.pool.acquire() as connection:
                with connection.session().cursor() as cursor:
                    cursor.execute(
                        "select id,passwd from user where email = %s", (email,)
                    )
                    row = cursor.fetchone()
            if row is None:
                raise LookupError("no user with this email")
            user_id, stored = int(row[0]), str(row[1])
        except Exception as exc:
            raise DataAccessError(f"用户登录出错:{exc}") from exc
        return user_id if passwd == stored else 0

    def exist(self, user_id: int) -> bool:
        """Tell whether a user with ``user_id`` exists."""
        try:
            with self.pool.acquire() as connection:
                with connection.session().cursor() as cursor:
                    cursor.execute("select name from user where id = %s", (user_id,))
                    rows = cursor.fetchall()
        except Exception as exc:
            raise DataAccessError(f"判断用户是否存在出错:{exc}") from exc
        return len(rows) == 1