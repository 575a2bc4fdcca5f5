"""FastAPI application exposing the joke store over HTTP."""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime
from http import HTTPStatus
from typing import Iterable, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .models import Joke
from .store import DEFAULT_JOKES, EmptyStoreError, JokeStore, seed_store

logger = logging.getLogger("jokeapi.service")
access_logger = logging.getLogger("jokeapi.access")

_UNLOGGED_PATHS = frozenset({"/favicon.ico"})
_JOKE_ID_PATTERN = re.compile(r"\+?[0-9]+")
_MAX_JOKE_ID = 2**63 - 1
_ERROR_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method not allowed",
}


class JokeCreateRequest(BaseModel):
    content: str = ""
    author: Optional[str] = None


class JokeResponse(BaseModel):
    id: int
    content: str
    author: Optional[str] = None
    created_at: datetime


class HealthResponse(BaseModel):
    status: str
    jokes: int


def _joke_to_response(joke: Joke) -> JokeResponse:
    return JokeResponse(
        id=joke.id,
        content=joke.content,
        author=joke.author or None,
        created_at=joke.created_at,
    )


def _parse_joke_id(raw: str) -> int:
    if not _JOKE_ID_PATTERN.fullmatch(raw):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid id")
    joke_id = int(raw)
    if joke_id <= 0 or joke_id > _MAX_JOKE_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid id")
    return joke_id


async def read_create_request(request: Request) -> JokeCreateRequest:
    """Decode the POST body as JSON whatever Content-Type the client sent."""

    body = await request.body()
    try:
        return JokeCreateRequest.model_validate_json(body)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid json") from exc


def _error_text(exc: StarletteHTTPException) -> str:
    detail = exc.detail
    if not isinstance(detail, str) or not detail:
        return _ERROR_MESSAGES.get(exc.status_code, "error")
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        return detail
    if detail == phrase:
        return _ERROR_MESSAGES.get(exc.status_code, detail)
    return detail


def install_request_logging(app: FastAPI) -> None:
    """Log method, path and latency for every request once it has been handled."""

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        start = time.perf_counter()
        try:
            return await call_next(request)
        finally:
            path = request.url.path
            if path not in _UNLOGGED_PATHS:
                elapsed_ms = (time.perf_counter() - start) * 1000
                access_logger.info("%s %s %.3fms", request.method, path, elapsed_ms)


def install_error_handlers(app: FastAPI) -> None:
    """Render HTTP errors as plain-text bodies."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        return PlainTextResponse(
            _error_text(exc),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )


def register_routes(app: FastAPI, store: JokeStore) -> None:
    """Expose the joke endpoints backed by ``store``.

    Handlers are synchronous so that each request runs on a worker thread;
    the store's reader/writer lock is the only coordination between them.
    """

    @app.get("/healthz", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok", jokes=len(store))

    @app.get("/jokes", response_model=List[JokeResponse], response_model_exclude_none=True)
    def list_jokes() -> List[JokeResponse]:
        return [_joke_to_response(joke) for joke in store.list()]

    @app.post(
        "/jokes",
        status_code=status.HTTP_201_CREATED,
        response_model=JokeResponse,
        response_model_exclude_none=True,
    )
    def create_joke(payload: JokeCreateRequest = Depends(read_create_request)) -> JokeResponse:
        try:
            joke = store.create(payload.content, payload.author)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        logger.debug("Created joke %s", joke.id)
        return _joke_to_response(joke)

    @app.get("/jokes/random", response_model=JokeResponse, response_model_exclude_none=True)
    def random_joke() -> JokeResponse:
        try:
            joke = store.random()
        except EmptyStoreError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return _joke_to_response(joke)

    @app.get("/jokes/{joke_id}", response_model=JokeResponse, response_model_exclude_none=True)
    def get_joke(joke_id: str) -> JokeResponse:
        joke = store.get(_parse_joke_id(joke_id))
        if joke is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
        return _joke_to_response(joke)

    @app.delete("/jokes/{joke_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_joke(joke_id: str) -> Response:
        if joke_id == "random":
            raise HTTPException(
                status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                detail="method not allowed",
                headers={"Allow": "GET"},
            )
        if not store.delete(_parse_joke_id(joke_id)):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
        logger.debug("Deleted joke %s", joke_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.api_route("/jokes/", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
    def bare_jokes_path() -> Response:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid path")

    # Trailing slashes resolve to the joke itself; deeper paths are rejected.
    @app.api_route(
        "/jokes/{joke_id}/{remainder:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    def nested_joke_path(request: Request, joke_id: str, remainder: str) -> Response:
        if remainder.strip("/"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid path")
        if request.method == "GET":
            joke = get_joke(joke_id)
            return JSONResponse(joke.model_dump(mode="json", exclude_none=True))
        if request.method == "DELETE":
            return delete_joke(joke_id)
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="method not allowed",
            headers={"Allow": "GET, DELETE"},
        )


def create_app(
    *,
    store: JokeStore | None = None,
    seed: bool = True,
    jokes: Iterable[Tuple[str, str]] = DEFAULT_JOKES,
) -> FastAPI:
    """Instantiate the FastAPI application serving ``store``.

    A fresh store is created when none is supplied, preloaded with ``jokes``
    unless ``seed`` is false. A supplied store is used as-is.
    """

    app_store = store
    if app_store is None:
        app_store = JokeStore()
        if seed:
            seeded = seed_store(app_store, jokes)
            logger.info("Seeded store with %d joke(s)", len(seeded))

    app = FastAPI(
        title="Joke API",
        version="0.1.0",
        description="In-memory collection of jokes with create, read, delete and random endpoints.",
        redirect_slashes=False,
    )
    app.state.store = app_store

    install_request_logging(app)
    install_error_handlers(app)
    register_routes(app, app_store)

    return app


__all__ = [
    "HealthResponse",
    "JokeCreateRequest",
    "JokeResponse",
    "create_app",
    "install_error_handlers",
    "install_request_logging",
    "read_create_request",
    "register_routes",
]
