import logging
import sys
from types import SimpleNamespace

import pytest

from pr_reviewer.config.settings import Settings
from pr_reviewer.utils import logging as review_logging


@pytest.fixture
def basic_config(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    return calls


def test_setup_logging_quiets_http_loggers(basic_config, monkeypatch):
    for name in review_logging.NOISY_LOGGERS:
        monkeypatch.setattr(logging.getLogger(name), "level", logging.NOTSET)

    review_logging.setup_logging("DEBUG")

    assert basic_config[0]["level"] == logging.DEBUG
    assert basic_config[0]["stream"] is sys.stderr
    assert basic_config[0]["force"] is True
    assert logging.getLogger("pydantic_ai").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_observability_without_token(basic_config):
    app_settings = Settings(_env_file=None, logfire_token=None, log_level="WARNING")

    assert review_logging.setup_observability(app_settings) is False
    assert basic_config[0]["level"] == logging.WARNING


def test_setup_observability_instruments_pydantic_ai(basic_config, monkeypatch):
    calls = {}
    fake_logfire = SimpleNamespace(
        configure=lambda **kwargs: calls.setdefault("configure", kwargs),
        instrument_pydantic_ai=lambda: calls.setdefault("instrumented", True),
    )
    monkeypatch.setitem(sys.modules, "logfire", fake_logfire)
    app_settings = Settings(_env_file=None, logfire_token="lf-token", environment="staging")

    assert review_logging.setup_observability(app_settings) is True
    assert calls["configure"] == {
        "token": "lf-token",
        "service_name": "pr-reviewer",
        "environment": "staging",
    }
    assert calls["instrumented"] is True
