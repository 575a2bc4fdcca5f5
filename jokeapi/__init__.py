"""In-memory joke collection served over HTTP."""

from __future__ import annotations

from typing import Any

from .models import Joke
from .store import DEFAULT_JOKES, EmptyStoreError, JokeStore, seed_store


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the joke API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "DEFAULT_JOKES",
    "EmptyStoreError",
    "Joke",
    "JokeStore",
    "create_app",
    "seed_store",
]
