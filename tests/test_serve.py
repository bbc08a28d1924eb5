from __future__ import annotations

from app.config.settings import Settings
from scripts import serve


def _capture_run(monkeypatch, settings: Settings) -> list[tuple[tuple, dict]]:
    calls: list[tuple[tuple, dict]] = []
    monkeypatch.setattr(serve, "get_settings", lambda: settings)
    monkeypatch.setattr(serve.uvicorn, "run", lambda *a, **kw: calls.append((a, kw)))
    return calls


def test_serve_binds_configured_host_and_port(monkeypatch):
    settings = Settings(gladia_api_key="k", app_host="127.0.0.1", app_port=9001, log_level="warning")
    calls = _capture_run(monkeypatch, settings)

    serve.main([])

    assert calls == [
        (("app.main:app",), {"host": "127.0.0.1", "port": 9001, "log_level": "warning", "reload": False})
    ]


def test_serve_flags_override_settings(monkeypatch):
    calls = _capture_run(monkeypatch, Settings(gladia_api_key="k"))

    serve.main(["--host", "localhost", "--port", "8000", "--reload"])

    (_, kwargs), = calls
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 8000
    assert kwargs["reload"] is True
