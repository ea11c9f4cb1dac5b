import logging

import pytest

from dbmanager.db import DEFAULT_DATABASE_URL, get_app_env, get_database_url, get_engine
from dbmanager.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    yield root_logger
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
        h.close()
    for h in handlers:
        root_logger.addHandler(h)
    root_logger.setLevel(level)


def test_test_database_url_takes_precedence(monkeypatch):
    monkeypatch.setenv("TEST_DATABASE_URL", "sqlite:///./a.db")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./b.db")
    assert get_database_url() == "sqlite:///./a.db"


def test_database_url_fallbacks(monkeypatch):
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./b.db")
    assert get_database_url() == "sqlite:///./b.db"

    monkeypatch.delenv("DATABASE_URL")
    assert get_database_url() == DEFAULT_DATABASE_URL


def test_app_env_defaults_to_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_app_env() == "development"


def test_get_engine_outside_development(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'ci.db'}", app_env="ci")
    try:
        assert engine.echo is False
        assert engine.dialect.name == "sqlite"
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        engine.dispose()


def test_get_engine_in_development(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'dev.db'}", app_env="development")
    try:
        assert engine.echo is True
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    finally:
        engine.dispose()
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def test_setup_logging_with_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "tests.log"
    setup_logging("development", str(log_file))

    logging.getLogger("dbmanager").warning("resolver ready")
    for h in restore_root_logger.handlers:
        h.flush()

    assert log_file.exists()
    assert "[WARNING] dbmanager: resolver ready" in log_file.read_text()


def test_setup_logging_quiet_console_outside_development(restore_root_logger):
    setup_logging("ci")

    assert len(restore_root_logger.handlers) == 1
    assert restore_root_logger.handlers[0].level == logging.WARNING
