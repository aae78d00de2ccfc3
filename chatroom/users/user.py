"""The user record."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

_FIELDS = ("name", "email", "passwd")


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, not {type(value).__name__}")
    return value


@dataclass
class User:
    """A registered user; ``id`` is set once the user is stored."""

    name: str
    email: str
    passwd: str
    id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Union[Mapping[str, Any], str, bytes]) -> User:
        """Build a user from a JSON object with name, email and passwd strings.

        Raises KeyError for a missing field and TypeError for one that is
        not a string.
        """
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        if not isinstance(data, Mapping):
            raise TypeError("user data must be a JSON object")
        name, email, passwd = (_text(data, key) for key in _FIELDS)
        return cls(name=name, email=email, passwd=passwd)