from .errors import (
    ConfigurationError,
    ExecutionError,
    FixtureError,
    QueryConstructionError,
    RollbackError,
    TransactionStartError,
)
from .manager import DBManager
from .values import (
    CURRENT_TIMESTAMP,
    RelationValues,
    RelationValuesOption,
    SqlExpression,
    set_field_value,
)

__all__ = [
    "CURRENT_TIMESTAMP",
    "ConfigurationError",
    "DBManager",
    "ExecutionError",
    "FixtureError",
    "QueryConstructionError",
    "RelationValues",
    "RelationValuesOption",
    "RollbackError",
    "SqlExpression",
    "TransactionStartError",
    "set_field_value",
]
