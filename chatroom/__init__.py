"""Message-board server with user accounts and posts over HTTP."""

__version__ = "0.1.0"