# dbmanager/values.py
import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict

from sqlalchemy import literal_column
from sqlalchemy.sql.elements import ColumnElement


# Field name -> value used both for the lookup and for the insert
RelationValues = Dict[str, Any]

# Deferred mutation applied to a copy of the defaults
RelationValuesOption = Callable[[RelationValues], None]


@dataclass(frozen=True)
class SqlExpression:
    """
    Raw SQL expression used as a field value, e.g. CURRENT_TIMESTAMP.

    Expression values are written on insert but skipped by the existence
    check, since they can't be compared by equality ahead of time.
    """
    sql: str

    def as_clause(self):
        return literal_column(self.sql)


CURRENT_TIMESTAMP = SqlExpression("CURRENT_TIMESTAMP")


def is_expression(value: Any) -> bool:
    return isinstance(value, (SqlExpression, ColumnElement))


def to_clause(value: Any):
    if isinstance(value, SqlExpression):
        return value.as_clause()
    return value


def set_field_value(field: str, value: Any) -> RelationValuesOption:
    """Build an option that sets (or replaces) a single field's value."""
    def option(values: RelationValues) -> None:
        values[field] = value

    return option


def copy_values(values: RelationValues) -> RelationValues:
    # SQLAlchemy clause elements are immutable, keep them shared
    return {
        k: v if is_expression(v) else copy.deepcopy(v)
        for k, v in values.items()
    }


def apply_options(values: RelationValues, *opts: RelationValuesOption) -> RelationValues:
    for opt in opts:
        opt(values)
    return values
