[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chatroom"
version = "0.1.0"
description = "A small message-board server: a reactor-style TCP/HTTP server with user sign-up, log-in and posts stored in MySQL."
requires-python = ">=3.10"
keywords = ["http", "server", "reactor", "message-board", "mysql", "connection-pool"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Message Boards",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "pymysql",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
chatroom-server = "chatroom.main_server:main"
chatroom-client = "chatroom.client:main"

[tool.hatch.build.targets.wheel]
packages = ["chatroom"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
