import pytest
from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, create_engine, func, select

from tests.factories import default_relation_values as fake_default_values

from dbmanager.pytest_plugin import db_manager  # noqa: F401

# -----------------------------------------
# Test schema
# -----------------------------------------
metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=True),
)

audit_log = Table(
    "audit_log",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("action", String, nullable=False),
    Column("created_at", DateTime, nullable=False),
)


# -----------------------------------------
# Fresh sqlite database per test
# -----------------------------------------
@pytest.fixture
def db_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def default_relation_values():
    return fake_default_values()


@pytest.fixture
def fetch_rows(db_engine):
    def fetch(tbl):
        with db_engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(select(tbl))]

    return fetch


@pytest.fixture
def count_rows(db_engine):
    def count(tbl):
        with db_engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(tbl)).scalar_one()

    return count
