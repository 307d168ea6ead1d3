import logging

import pytest
from flask import Flask
from pythonjsonlogger.json import JsonFormatter

from feedbackme import create_app
from feedbackme.observability import init_logging


@pytest.fixture()
def prod_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("SECRET_KEY", "s3cret-for-tests")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/feedbackme")
    return monkeypatch


def test_production_requires_real_secret_key(prod_env):
    # The class-level dev default must not satisfy the check
    prod_env.delenv("SECRET_KEY", raising=False)
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app()

def test_production_requires_database_url(prod_env):
    prod_env.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        create_app()

def test_staging_requires_redis_url(prod_env):
    prod_env.setenv("APP_ENV", "staging")
    prod_env.delenv("REDIS_URL", raising=False)
    with pytest.raises(RuntimeError, match="REDIS_URL"):
        create_app()


def test_production_logging_uses_json_formatter(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        app = Flask(__name__)
        app.config["LOG_LEVEL"] = "WARNING"
        init_logging(app)
        assert root.level == logging.WARNING
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
