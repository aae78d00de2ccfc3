"""The post record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Post:
    """A post; ``post_id`` is -1 until stored, ``create_time`` is ``YYYY-MM-DD HH:MM:SS``."""

    content: str
    user_id: int
    post_id: int = -1
    create_time: str = ""

    def to_json(self) -> Dict[str, Any]:
        """Return the post as a JSON-ready dictionary."""
        return {
            "post_id": self.post_id,
            "content": self.content,
            "user_id": self.user_id,
            "create_time": self.create_time,
        }