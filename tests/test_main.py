"""
Tests for the process entry point
"""
import logging

import pytest

from upload_relay import main


def test_run_exits_when_config_missing(monkeypatch, caplog):
    for name in ("REPO_OWNER", "REPO_NAME", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(main.uvicorn, "run", lambda *a, **kw: pytest.fail("server must not start"))

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    assert "REPO_OWNER" in caplog.text
    assert "GITHUB_TOKEN" in caplog.text


def test_run_serves_on_configured_port(monkeypatch):
    monkeypatch.setenv("REPO_OWNER", "octo")
    monkeypatch.setenv("REPO_NAME", "gifts")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
    monkeypatch.setenv("PORT", "4321")
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))

    main.run()

    app, kwargs = calls[0]
    assert kwargs["port"] == 4321
    assert kwargs["host"] == "0.0.0.0"
    assert app.state.settings.repo_owner == "octo"
