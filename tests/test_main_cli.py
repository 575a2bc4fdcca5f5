from __future__ import annotations

import httpx
import pytest

import main
from main import _parse_args, _resolve_config, _show_random_joke


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("JOKEAPI_CONFIG", raising=False)


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_random_subcommand_available() -> None:
    args = _parse_args(["random", "--service-url", "http://jokes.local:9000"])
    assert args.command == "random"
    assert args.service_url == "http://jokes.local:9000"


def test_resolve_config_defaults_to_8081() -> None:
    config = _resolve_config(_parse_args([]))
    assert config.port == 8081
    assert config.seed is True


def test_resolve_config_reads_port_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "9091")
    assert _resolve_config(_parse_args([])).port == 9091
    assert _resolve_config(_parse_args(["--port", "9092"])).port == 9092


def test_resolve_config_no_seed_flag() -> None:
    assert _resolve_config(_parse_args(["serve", "--no-seed"])).seed is False


def test_invalid_port_environment_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "ninety")
    with pytest.raises(SystemExit):
        _resolve_config(_parse_args([]))


def test_config_file_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    config_path = tmp_path / "jokeapi.yaml"
    config_path.write_text("port: 9500\nseed: false\n", encoding="utf-8")
    monkeypatch.setenv("JOKEAPI_CONFIG", str(config_path))

    config = _resolve_config(_parse_args([]))
    assert config.port == 9500
    assert config.seed is False


def test_show_random_joke_prints_result(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    requested = []

    def fake_get(url: str, timeout: float) -> httpx.Response:
        requested.append(url)
        return httpx.Response(
            200,
            json={"id": 3, "content": "There's no place like 127.0.0.1", "author": "nerd"},
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(main.httpx, "get", fake_get)
    _show_random_joke("http://jokes.local:9000/")

    assert requested == ["http://jokes.local:9000/jokes/random"]
    output = capsys.readouterr().out
    assert "#3: There's no place like 127.0.0.1" in output
    assert "nerd" in output


def test_show_random_joke_handles_empty_service(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def fake_get(url: str, timeout: float) -> httpx.Response:
        return httpx.Response(404, text="no jokes available", request=httpx.Request("GET", url))

    monkeypatch.setattr(main.httpx, "get", fake_get)
    _show_random_joke(None)

    assert "no jokes yet" in capsys.readouterr().out


def test_show_random_joke_handles_connection_errors(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def fake_get(url: str, timeout: float) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(main.httpx, "get", fake_get)
    _show_random_joke(None)

    assert "Failed to contact joke service" in capsys.readouterr().out
