"""Thread-safe in-memory storage for jokes."""

from __future__ import annotations

import random as _random
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .locking import ReadWriteLock
from .models import Joke

DEFAULT_JOKES: Tuple[Tuple[str, str], ...] = (
    ("I told my computer I needed a break, and it said: 'No problem, I'll go to sleep.'", "unknown"),
    ("Why do programmers prefer dark mode? Because light attracts bugs.", "classic"),
    ("There's no place like 127.0.0.1", "nerd"),
)


class EmptyStoreError(LookupError):
    """Raised when a random joke is requested from an empty store."""

    def __init__(self, message: str = "no jokes available") -> None:
        super().__init__(message)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JokeStore:
    """Keyed collection of jokes guarded by a reader/writer lock.

    ``list``, ``get`` and ``random`` share the lock with each other while
    ``create`` and ``delete`` hold it exclusively. Identifiers are assigned
    sequentially from 1 and are never handed out twice, even after deletion.
    """

    def __init__(
        self,
        *,
        rng: Optional[_random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._lock = ReadWriteLock()
        self._jokes: Dict[int, Joke] = {}
        self._next_id = 1
        self._rng = rng or _random.Random()
        self._clock = clock or _utcnow

    def create(self, content: str, author: Optional[str] = "") -> Joke:
        cleaned = content.strip()
        if not cleaned:
            raise ValueError("content is required")
        cleaned_author = (author or "").strip()

        with self._lock.write():
            joke = Joke(
                id=self._next_id,
                content=cleaned,
                author=cleaned_author,
                created_at=self._clock(),
            )
            self._jokes[joke.id] = joke
            self._next_id += 1
        return joke

    def list(self) -> List[Joke]:
        with self._lock.read():
            return list(self._jokes.values())

    def get(self, joke_id: int) -> Optional[Joke]:
        with self._lock.read():
            return self._jokes.get(joke_id)

    def delete(self, joke_id: int) -> bool:
        with self._lock.write():
            return self._jokes.pop(joke_id, None) is not None

    def random(self) -> Joke:
        with self._lock.read():
            keys = list(self._jokes)
            if not keys:
                raise EmptyStoreError()
            return self._jokes[keys[self._rng.randrange(len(keys))]]

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._jokes)


def seed_store(store: JokeStore, jokes: Iterable[Tuple[str, str]] = DEFAULT_JOKES) -> List[Joke]:
    """Populate ``store`` with ``(content, author)`` pairs and return the new records."""

    return [store.create(content, author) for content, author in jokes]


__all__ = ["DEFAULT_JOKES", "EmptyStoreError", "JokeStore", "seed_store"]
