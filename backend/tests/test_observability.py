"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import importlib
import logging

from hustle.core.context import bind_request_id, reset_request_id
from hustle.core.logging import QUIET_LOGGERS, RequestIdFilter, build_logging_config


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import hustle.core.config as core_config
    import hustle.observability.client as client_module
    import hustle.main as main_module

    importlib.reload(core_config)
    importlib.reload(client_module)
    reloaded_app = importlib.reload(main_module)

    assert hasattr(reloaded_app, "app")
    assert client_module.init_opik() is None


def test_request_id_filter_stamps_records() -> None:
    record = logging.LogRecord("hustle", logging.INFO, __file__, 1, "msg", None, None)
    token = bind_request_id("req-7")
    try:
        RequestIdFilter().filter(record)
    finally:
        reset_request_id(token)

    assert record.request_id == "req-7"

    RequestIdFilter().filter(record)
    assert record.request_id == "-"


def test_logging_config_quiets_sql_echo() -> None:
    config = build_logging_config("debug")

    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["sqlalchemy.engine"] == {"level": "WARNING"}
    assert set(config["loggers"]) == set(QUIET_LOGGERS)
    assert config["handlers"]["stderr"]["filters"] == ["request_id"]
