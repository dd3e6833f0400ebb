import json
import logging
from pathlib import Path

import pytest

from exchangerates.core.config import Settings
from exchangerates.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    request_id_ctx,
    resolve_level,
)


def test_defaults():
    s = Settings(_env_file=None)
    s.init_post_load()
    assert s.port == 8000
    assert s.dataset_source == "ecb-hist"
    assert s.cache_path == Path("data") / "eurofxref-hist.xml"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("UPDATE_ENABLED", "false")
    s = Settings(_env_file=None)
    assert s.data_dir == tmp_path
    assert s.port == 9000
    assert s.update_enabled is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"dataset_source": "ecb-weekly"},
        {"update_hour_utc": 24},
        {"update_minute_utc": 60},
        {"http_retries": -1},
    ],
)
def test_init_post_load_rejects(overrides):
    with pytest.raises(ValueError):
        Settings(_env_file=None, **overrides).init_post_load()


@pytest.mark.parametrize(
    "level, debug, expected",
    [
        ("info", False, logging.INFO),
        ("WARNING", False, logging.WARNING),
        ("bogus", False, logging.INFO),
        ("error", True, logging.DEBUG),
    ],
)
def test_resolve_level(level, debug, expected):
    assert resolve_level(level, debug) == expected


def test_json_formatter_carries_request_id():
    record = logging.LogRecord("exchangerates", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    token = request_id_ctx.set("abc123")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx.reset(token)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["request_id"] == "abc123"
    assert payload["level"] == "INFO"


def test_request_id_header_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"
