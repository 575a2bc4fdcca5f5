"""Command-line interface for the joke API service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

import httpx

from jokeapi.config import (
    CONFIG_ENV,
    DEFAULT_PORT,
    PORT_ENV,
    ServiceConfig,
    load_config,
    resolve_config_path,
)

logger = logging.getLogger("jokeapi.main")

_DEFAULT_SERVICE_URL = f"http://localhost:{DEFAULT_PORT}"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="In-memory joke API")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP joke service")
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Bind address for the API (default: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Port for the API (default: ${PORT_ENV} or {DEFAULT_PORT})",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a YAML configuration file (default: ${CONFIG_ENV})",
    )
    serve_parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Start with an empty store instead of the bundled jokes",
    )

    random_parser = subparsers.add_parser(
        "random", help="Print a random joke from a running service"
    )
    random_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running joke service (default: {_DEFAULT_SERVICE_URL})",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "random"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_config(args: argparse.Namespace) -> ServiceConfig:
    if args.config:
        config_path: Path | None = Path(args.config).expanduser().resolve(strict=False)
    else:
        config_path = resolve_config_path(os.getenv(CONFIG_ENV))

    try:
        config = load_config(config_path, port_env=os.getenv(PORT_ENV))
        return config.with_overrides(
            host=args.host,
            port=args.port,
            seed=False if args.no_seed else None,
        )
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def _serve(config: ServiceConfig) -> None:
    from jokeapi.service import create_app
    import uvicorn

    logger.info("Starting joke API on http://%s:%s", config.host, config.port)

    app = create_app(seed=config.seed, jokes=config.jokes)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="info",
        access_log=False,
    )


def _show_random_joke(service_url: str | None) -> None:
    base_url = service_url or _DEFAULT_SERVICE_URL
    endpoint = base_url.rstrip("/") + "/jokes/random"

    try:
        response = httpx.get(endpoint, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact joke service: {exc}")
        return

    if response.status_code == 404:
        print("The joke service has no jokes yet.")
        return
    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return

    try:
        joke = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return

    content = joke.get("content", "")
    author = joke.get("author")
    print(f"#{joke.get('id', '?')}: {content}")
    if author:
        print(f"    -- {author}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        _serve(_resolve_config(args))
    elif args.command == "random":
        _show_random_joke(args.service_url)


if __name__ == "__main__":
    main()
