"""Configuration management for the joke service."""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from .store import DEFAULT_JOKES

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8081
PORT_ENV = "PORT"
CONFIG_ENV = "JOKEAPI_CONFIG"


def parse_port(value: object) -> int:
    """Validate ``value`` as a TCP port number."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid port: {value!r}")
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_jokes(raw: object) -> Tuple[Tuple[str, str], ...]:
    if not isinstance(raw, list):
        raise ValueError("'jokes' must be a list of mappings with a 'content' key")

    jokes = []
    for item in raw:
        if not isinstance(item, dict) or "content" not in item:
            raise ValueError("Each joke entry must be a mapping with a 'content' key")
        content = str(item["content"]).strip()
        if not content:
            raise ValueError("Joke content must not be empty")
        author = item.get("author")
        jokes.append((content, str(author).strip() if author is not None else ""))
    return tuple(jokes)


@dataclass(frozen=True)
class ServiceConfig:
    """Settings used to build and serve the joke API."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    seed: bool = True
    jokes: Tuple[Tuple[str, str], ...] = DEFAULT_JOKES

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data."""
        unknown = set(data) - {"host", "port", "seed", "jokes"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        host = str(data.get("host") or DEFAULT_HOST).strip() or DEFAULT_HOST
        port = parse_port(data["port"]) if data.get("port") is not None else DEFAULT_PORT

        seed = data.get("seed", True)
        if not isinstance(seed, bool):
            raise ValueError("'seed' must be true or false")

        jokes = _parse_jokes(data["jokes"]) if data.get("jokes") is not None else DEFAULT_JOKES

        return ServiceConfig(host=host, port=port, seed=seed, jokes=jokes)

    def with_overrides(
        self,
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
        seed: Optional[bool] = None,
    ) -> "ServiceConfig":
        return replace(
            self,
            host=host if host else self.host,
            port=parse_port(port) if port is not None else self.port,
            seed=self.seed if seed is None else seed,
        )


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the path to the optional YAML configuration file."""
    if env_value and env_value.strip():
        return Path(env_value.strip()).expanduser().resolve(strict=False)
    candidate = (Path(__file__).resolve().parent.parent / "config" / "jokeapi.yaml").resolve(strict=False)
    return candidate if candidate.exists() else None


def load_config(
    config_path: Optional[Path] = None,
    *,
    port_env: Optional[str] = None,
) -> ServiceConfig:
    """Load settings from ``config_path`` and apply the port environment override."""
    if config_path is None:
        config = ServiceConfig()
    else:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        if not isinstance(raw, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")
        config = ServiceConfig.from_dict(raw)

    if port_env is not None and port_env.strip():
        config = replace(config, port=parse_port(port_env))
    return config


__all__ = [
    "CONFIG_ENV",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "PORT_ENV",
    "ServiceConfig",
    "load_config",
    "parse_port",
    "resolve_config_path",
]
