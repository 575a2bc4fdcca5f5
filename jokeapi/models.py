"""Domain models for the joke service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Joke:
    """A single joke held by the in-memory store."""

    id: int
    content: str
    author: str
    created_at: datetime


__all__ = ["Joke"]
