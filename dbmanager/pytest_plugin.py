# dbmanager/pytest_plugin.py
import os

import pytest

from .db import get_app_env, get_engine
from .logging_config import setup_logging
from .manager import DBManager


def pytest_configure(config):
    setup_logging(get_app_env(), os.getenv("TEST_LOG_FILE"))


# -----------------------------------------
# Engine for the test database
# -----------------------------------------
@pytest.fixture(scope="session")
def db_engine():
    engine = get_engine()
    yield engine
    engine.dispose()


# -----------------------------------------
# Default values per relation
# Override this fixture in your conftest.py
# -----------------------------------------
@pytest.fixture(scope="session")
def default_relation_values():
    return {}


# -----------------------------------------
# Record resolver failing the test on error
# -----------------------------------------
@pytest.fixture
def db_manager(db_engine, default_relation_values):
    return DBManager(db_engine, pytest.fail, default_relation_values)
