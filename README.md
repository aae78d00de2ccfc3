# chatroom

A small message-board server. Clients speak HTTP/1.1 with JSON bodies; the
server registers users, logs them in, and lets them publish, delete and list
their posts. Data lives in a MySQL database reached through a connection pool
(`chatroom.db.pool.ConnectionPool`, built on PyMySQL).

Under the hood it is a reactor: one main event loop accepts connections and
hands each one to a sub loop running on an I/O thread. Each sub loop checks
every 30 seconds for connections idle longer than 300 seconds and drops them.

## Installing

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Running the server

```
chatroom-server
```

Options (defaults in brackets):

- `--ip` [`192.168.38.121`] – address the HTTP server is given; it listens on
  all interfaces at `--port`, and the same address is used as the MySQL host.
- `--port` [`8080`] – HTTP port.
- `--event-loops` [`2`] – number of I/O event loops (threads).
- `--workers` [`2`] – size of the worker thread pool.
- `--mysql-port` [`33060`], `--user` [`aaa`], `--password` [`password`],
  `--database` [`test`] – database connection settings.
- `--max-connections` [`10`], `--min-connections` [`3`] – pool bounds.
- `--idle-check-interval` [`30`] – seconds between pool upkeep runs.
- `--connection-timeout` [`300`] – seconds to wait for a pooled connection.

Stop it with Ctrl-C (SIGINT) or SIGTERM; the server stops its worker threads,
event loops and database pool before exiting.

The database needs two tables, `user` (with `id`, `name`, `email`, `passwd`)
and `post` (with `post_id`, `content`, `user_id`, `create_time`).

## Endpoints

All endpoints take `POST` with a JSON body and answer with JSON.

| Path                 | Body                                    | Success reply                     |
|----------------------|-----------------------------------------|-----------------------------------|
| `/api/user/signup`   | `{"name", "email", "passwd"}`           | `{"message", "user_id"}`          |
| `/api/user/login`    | `{"email", "passwd"}`                   | `{"message", "user_id"}`          |
| `/api/post/publish`  | `{"content", "user_id"}`                | `{"message", "post_id"}`          |
| `/api/post/delete`   | `{"post_id"}`                           | `{"message"}`                     |
| `/api/post/check/my` | `{"user_id"}`                           | `{"message", "posts": [...]}`     |

A request that cannot be parsed gets `400`; an unknown method or path gets
`404`. A malformed body or a failing database operation gets `400`, with an
`error` field (sign-up answers with a `message` instead). An operation that
completes without effect – a wrong password, a post that does not exist, a
user with no posts – gets `500` with a `message`.

Example sign-up body:

```json
{"name": "alice", "email": "alice@example.com", "passwd": "password"}
```

## Interactive client

```
chatroom-client --host 127.0.0.1 --port 8080
```

The client asks whether to sign up, log in or quit, and once logged in lets
you publish posts. Its helpers can also be used from code:

```python
from chatroom.client import HttpClient, send_http_request

with HttpClient("127.0.0.1", 8080) as client:
    client.connect()
    status, reply = send_http_request(
        client, "POST", "/api/user/login",
        {"email": "alice@example.com", "passwd": "password"},
    )
    print(status, reply)
```

`build_request` and `parse_http_response` build and read the messages on
their own.

## Layout

- `chatroom.net` – sockets, buffers, event loops, connections, the TCP
  server (`TcpServer`) and an echo server (`EchoTcpServer`).
- `chatroom.web` – request parsing (`parse_request`), `HttpResponse`,
  `HttpContext` and the routing `HttpServer`.
- `chatroom.db` – the MySQL connection pool.
- `chatroom.users`, `chatroom.posts` – models, data access, services and
  controllers for users and posts.
- `chatroom.thread_pool`, `chatroom.timestamp` – a worker thread pool and
  whole-second timestamps.
- `chatroom.main_server` – wires everything together (`MainServer`).

## What it does not do

- It does not create the database or its tables; they must exist.
- There are no `GET` routes and no static files; only the five `POST`
  endpoints above are served.
- Request handlers run on the I/O threads; the worker pool is started and
  stopped but not given requests.
- There is no command for the echo server; `EchoTcpServer` is used from code.