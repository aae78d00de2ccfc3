"""User business rules: sign-up and log-in."""

from __future__ import annotations

from chatroom.db.pool import DataAccessError
from chatroom.users.user import User
from chatroom.users.user_dao import UserDAO


class UserService:
    """Signs users up and logs them in through a UserDAO."""

    def __init__(self, user_dao: UserDAO) -> None:
        self.user_dao = user_dao

    def handle_sign_up(self, name: str, email: str, passwd: str) -> int:
        """Create a user and return the new id."""
        return self.user_dao.create_user(User(name, email, passwd))

    def handle_log_in(self, email: str, passwd: str) -> int:
        """Return the user's id on a matching password, otherwise 0."""
        try:
            return self.user_dao.log_in(email, passwd)
        except Exception as exc:
            raise DataAccessError(f"登录出错{exc}") from exc