import sqlite3

import pytest

from chatroom.db.pool import ConnectionPool, DataAccessError
from chatroom.users.user import User
from chatroom.users.user_dao import UserDAO


class SqliteCursor:
    def __init__(self, db):
        self._cursor = db.cursor()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self._cursor.close()

    def execute(self, sql, args=()):
        self._cursor.execute(sql.replace("%s", "?"), tuple(args))
        return self._cursor.rowcount

    def fetchone(self):
        return self._cursor.fetchone()

    def fetchall(self):
        return self._cursor.fetchall()

    @property
    def lastrowid(self):
        return self._cursor.lastrowid


class SqliteSession:
    def __init__(self, db):
        self.db = db

    def cursor(self):
        return SqliteCursor(self.db)

    def commit(self):
        self.db.commit()

    def close(self):
        pass


def make_db(with_table=True):
    db = sqlite3.connect(":memory:", check_same_thread=False)
    if with_table:
        db.execute(
            "create table user (id integer primary key autoincrement,"
            " name text, email text unique, passwd text)"
        )
    return db


def make_pool(db):
    password = "password"
    return ConnectionPool(
        host="localhost",
        port=3306,
        user="user",
        password=password,
        database="test",
        max_size=4,
        min_size=1,
        idle_check_interval=60,
        connection_timeout=1,
        factory=lambda: SqliteSession(db),
    )


@pytest.fixture
def dao():
    pool = make_pool(make_db())
    pool.init()
    yield UserDAO(pool)
    pool.close()


def test_create_user_sets_id(dao):
    user = User("alice", "alice@example.com", "password")
    user_id = dao.create_user(user)
    assert user.id == user_id
    assert user_id > 0


def test_create_users_get_distinct_ids(dao):
    first = dao.create_user(User("alice", "alice@example.com", "password"))
    second = dao.create_user(User("bob", "bob@example.com", "password"))
    assert second > first


def test_create_user_returns_connection(dao):
    dao.create_user(User("alice", "alice@example.com", "password"))
    assert dao.pool.idle_count() == dao.pool.size()


def test_log_in_matches_password(dao):
    user_id = dao.create_user(User("alice", "alice@example.com", "password"))
    assert dao.log_in("alice@example.com", "password") == user_id


def test_log_in_wrong_password_returns_zero(dao):
    dao.create_user(User("alice", "alice@example.com", "password"))
    assert dao.log_in("alice@example.com", "secret") == 0


def test_log_in_unknown_email_raises(dao):
    with pytest.raises(DataAccessError, match="^用户登录出错:"):
        dao.log_in("nobody@example.com", "password")


def test_exist(dao):
    user_id = dao.create_user(User("alice", "alice@example.com", "password"))
    assert dao.exist(user_id) is True
    assert dao.exist(user_id + 1) is False


def test_create_user_failure_is_wrapped():
    pool = make_pool(make_db(with_table=False))
    try:
        with pytest.raises(DataAccessError, match="^创建用户失败"):
            UserDAO(pool).create_user(User("alice", "alice@example.com", "password"))
    finally:
        pool.close()


def test_exist_failure_is_wrapped():
    pool = make_pool(make_db(with_table=False))
    try:
        with pytest.raises(DataAccessError, match="^判断用户是否存在出错:"):
            UserDAO(pool).exist(1)
    finally:
        pool.close()